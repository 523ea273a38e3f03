from sqlalchemy import update as sa_update

from leaguefindr.models import Organization, OrgMembership
from leaguefindr.store.clients import require_service
from leaguefindr.time_utils import utcnow_naive

ADMIN_ROLES = ('owner', 'admin')


def create(client, creator_id, fields):
    """Insert the organization and link the creator as owner."""
    org = Organization(created_by=creator_id, is_deleted=False, **fields)
    client.session.add(org)
    client.session.flush()
    client.session.add(OrgMembership(
        user_id=creator_id, org_id=org.id, role_in_org='owner', is_active=True,
    ))
    client.commit()
    return org


def get_by_id(client, org_id):
    if not org_id:
        return None
    return (
        client.session.query(Organization)
        .filter(Organization.id == str(org_id), Organization.is_deleted.is_(False))
        .first()
    )


def get_membership(client, user_id, org_id):
    return (
        client.session.query(OrgMembership)
        .filter_by(user_id=user_id, org_id=str(org_id))
        .first()
    )


def user_has_access(client, user_id, org_id):
    membership = get_membership(client, user_id, org_id)
    return bool(membership and membership.is_active)


def get_user_role(client, user_id, org_id):
    membership = get_membership(client, user_id, org_id)
    if not membership or not membership.is_active:
        return None
    return membership.role_in_org


def is_admin_or_owner(client, user_id, org_id):
    return get_user_role(client, user_id, org_id) in ADMIN_ROLES


def list_for_user(client, user_id):
    rows = (
        client.session.query(Organization, OrgMembership)
        .join(OrgMembership, OrgMembership.org_id == Organization.id)
        .filter(
            OrgMembership.user_id == user_id,
            OrgMembership.is_active.is_(True),
            Organization.is_deleted.is_(False),
        )
        .order_by(Organization.created_at.desc())
        .all()
    )
    return rows


def list_all(client):
    require_service(client, 'organizations.list_all')
    return (
        client.session.query(Organization)
        .filter(Organization.is_deleted.is_(False))
        .order_by(Organization.created_at.desc())
        .all()
    )


def link_user(client, user_id, org_id, role_in_org='member'):
    """Upsert a membership, reactivating it when it already exists."""
    now = utcnow_naive()
    membership = get_membership(client, user_id, org_id)
    if membership is None:
        membership = OrgMembership(
            user_id=user_id, org_id=str(org_id),
            role_in_org=role_in_org, is_active=True,
        )
        client.session.add(membership)
    else:
        if not membership.is_active:
            membership.joined_at = now
        membership.is_active = True
        membership.role_in_org = role_in_org
        membership.updated_at = now
    client.commit()
    return membership


def list_members(client, org_id):
    return (
        client.session.query(OrgMembership)
        .filter_by(org_id=str(org_id), is_active=True)
        .order_by(OrgMembership.joined_at.asc())
        .all()
    )


def count_active_owners(client, org_id):
    return (
        client.session.query(OrgMembership)
        .filter_by(org_id=str(org_id), is_active=True, role_in_org='owner')
        .count()
    )


def remove_user(client, membership):
    membership.is_active = False
    membership.updated_at = utcnow_naive()
    client.commit()
    return membership


def update_member_role(client, membership, role_in_org):
    membership.role_in_org = role_in_org
    membership.updated_at = utcnow_naive()
    client.commit()
    return membership


def update(client, org, fields):
    for key, value in fields.items():
        setattr(org, key, value)
    org.updated_at = utcnow_naive()
    client.commit()
    return org


def soft_delete(client, org):
    """Flag the org deleted and deactivate every membership with it."""
    now = utcnow_naive()
    org.is_deleted = True
    org.deleted_at = now
    org.updated_at = now
    client.session.execute(
        sa_update(OrgMembership)
        .where(OrgMembership.org_id == org.id)
        .values(is_active=False, updated_at=now)
        .execution_options(synchronize_session='fetch')
    )
    client.commit()
    return org
