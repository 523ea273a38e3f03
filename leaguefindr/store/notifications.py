from sqlalchemy import update

from leaguefindr.models import Notification, NotificationPreference
from leaguefindr.store.clients import require_service
from leaguefindr.time_utils import utcnow_naive

PREFERENCE_FIELDS = (
    'league_approved', 'league_rejected', 'league_submitted',
    'draft_saved', 'template_saved',
)


def get_preferences(client, user_id):
    return client.session.get(NotificationPreference, user_id)


def is_type_enabled(client, user_id, notification_type):
    """Absent rows and unknown types count as enabled."""
    if notification_type not in PREFERENCE_FIELDS:
        return True
    prefs = get_preferences(client, user_id)
    if prefs is None:
        return True
    return bool(getattr(prefs, notification_type))


def upsert_preferences(client, user_id, changes):
    prefs = get_preferences(client, user_id)
    if prefs is None:
        prefs = NotificationPreference(user_id=user_id)
        for field in PREFERENCE_FIELDS:
            setattr(prefs, field, True)
        client.session.add(prefs)
    for field, value in changes.items():
        setattr(prefs, field, bool(value))
    prefs.updated_at = utcnow_naive()
    client.commit()
    return prefs


def insert(client, user_id, notification_type, title, message,
           related_league_id=None, related_org_id=None):
    require_service(client, 'notifications.insert')
    now = utcnow_naive()
    notification = Notification(
        user_id=user_id, notification_type=notification_type,
        title=title, message=message, read=False,
        related_league_id=related_league_id,
        related_org_id=str(related_org_id) if related_org_id else None,
        created_at=now, updated_at=now,
    )
    client.session.add(notification)
    client.commit()
    return notification


def list_for_user(client, user_id, limit, offset):
    query = client.session.query(Notification).filter(Notification.user_id == user_id)
    total = query.count()
    rows = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return rows, total


def mark_read(client, notification_id, user_id):
    """Scoped to the recipient; returns the number of matched rows."""
    result = client.session.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(read=True, updated_at=utcnow_naive())
        .execution_options(synchronize_session=False)
    )
    client.commit()
    return result.rowcount


def mark_all_read(client, user_id):
    result = client.session.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True, updated_at=utcnow_naive())
        .execution_options(synchronize_session=False)
    )
    client.commit()
    return result.rowcount
