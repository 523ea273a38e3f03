from sqlalchemy import update

from leaguefindr.models import User
from leaguefindr.store.clients import require_service
from leaguefindr.time_utils import utcnow_naive


def create(client, user_id, email, role, email_verified=False):
    require_service(client, 'users.create')
    user = User(
        id=user_id, email=email, role=role,
        is_active=True, email_verified=email_verified, login_count=0,
    )
    client.session.add(user)
    client.commit()
    return user


def get_by_id(client, user_id):
    if not user_id:
        return None
    return client.session.get(User, user_id)


def exists(client, user_id):
    return get_by_id(client, user_id) is not None


def admin_exists(client):
    require_service(client, 'users.admin_exists')
    return client.session.query(User.id).filter(User.role == 'admin').first() is not None


def list_active_admins(client):
    require_service(client, 'users.list_active_admins')
    return (
        client.session.query(User)
        .filter(User.role == 'admin', User.is_active.is_(True))
        .order_by(User.created_at.asc())
        .all()
    )


def update_last_login(client, user_id):
    """Set last_login and bump login_count in one UPDATE."""
    now = utcnow_naive()
    result = client.session.execute(
        update(User)
        .where(User.id == user_id)
        .values(last_login=now, login_count=User.login_count + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    client.commit()
    return result.rowcount


def update_role(client, user, role):
    user.role = role
    user.updated_at = utcnow_naive()
    client.commit()
    return user
