from leaguefindr.auth_utils import require_org_admin, require_org_member
from leaguefindr.errors import Conflict, Forbidden, InvalidInput, NotFound, ValidationFailed
from leaguefindr.models import ORG_ROLES
from leaguefindr.store import organizations as org_store
from leaguefindr.store import users as user_store
from leaguefindr.store.clients import rls_client, service_client

_FIELD_LIMITS = {
    'org_name': 255,
    'org_url': 500,
    'org_email': 255,
    'org_phone': 50,
    'org_address': 500,
}


def _clean_fields(payload, require_name):
    if not isinstance(payload, dict):
        raise InvalidInput('Invalid request body')
    fields = {}
    errors = []
    for key, limit in _FIELD_LIMITS.items():
        if key not in payload:
            continue
        value = payload.get(key)
        value = str(value).strip() if value is not None else None
        if value and len(value) > limit:
            errors.append(f'{key} must be at most {limit} characters')
        fields[key] = value or None
    if require_name and not fields.get('org_name'):
        errors.append('org_name is required')
    if 'org_name' in fields and not fields['org_name'] and not require_name:
        errors.append('org_name cannot be empty')
    if errors:
        raise ValidationFailed(errors)
    return fields


def _get_org_or_404(client, org_id):
    org = org_store.get_by_id(client, org_id)
    if org is None:
        raise NotFound('Organization not found')
    return org


def create_organization(subject, payload):
    fields = _clean_fields(payload, require_name=True)
    client = rls_client(subject)
    if not user_store.exists(client, subject):
        raise Forbidden('Register before creating an organization')
    return org_store.create(client, subject, fields)


def list_user_organizations(subject):
    rows = org_store.list_for_user(rls_client(subject), subject)
    return [dict(org.to_dict(), role_in_org=membership.role_in_org) for org, membership in rows]


def get_organization(subject, org_id):
    require_org_member(subject, org_id)
    return _get_org_or_404(rls_client(subject), org_id)


def join_organization(subject, org_id):
    if not org_id:
        raise ValidationFailed('orgID is required')
    client = rls_client(subject)
    org = _get_org_or_404(client, org_id)
    if not user_store.exists(client, subject):
        raise Forbidden('Register before joining an organization')
    existing = org_store.get_membership(client, subject, org.id)
    if existing is not None and existing.is_active:
        return existing
    return org_store.link_user(client, subject, org.id, 'member')


def update_organization(subject, org_id, payload):
    require_org_admin(subject, org_id)
    client = rls_client(subject)
    org = _get_org_or_404(client, org_id)
    return org_store.update(client, org, _clean_fields(payload, require_name=False))


def delete_organization(subject, org_id):
    require_org_admin(subject, org_id)
    client = rls_client(subject)
    return org_store.soft_delete(client, _get_org_or_404(client, org_id))


def list_all_organizations():
    return org_store.list_all(service_client())


def list_members(subject, org_id):
    require_org_member(subject, org_id)
    return org_store.list_members(rls_client(subject), org_id)


def leave_organization(subject, org_id):
    require_org_member(subject, org_id)
    client = rls_client(subject)
    membership = org_store.get_membership(client, subject, org_id)
    if membership.role_in_org == 'owner' and org_store.count_active_owners(client, org_id) <= 1:
        raise Conflict('The last owner cannot leave the organization')
    return org_store.remove_user(client, membership)


def change_member_role(subject, org_id, member_id, role_in_org):
    if role_in_org not in ORG_ROLES:
        raise ValidationFailed(f'role must be one of: {", ".join(ORG_ROLES)}')
    require_org_admin(subject, org_id)
    client = rls_client(subject)
    membership = org_store.get_membership(client, member_id, org_id)
    if membership is None or not membership.is_active:
        raise NotFound('Member not found')

    actor_role = org_store.get_user_role(client, subject, org_id)
    touches_owner = role_in_org == 'owner' or membership.role_in_org == 'owner'
    if touches_owner and actor_role != 'owner':
        raise Forbidden('Only an owner can grant or revoke ownership')
    if (
        membership.role_in_org == 'owner'
        and role_in_org != 'owner'
        and org_store.count_active_owners(client, org_id) <= 1
    ):
        raise Conflict('An organization must keep at least one owner')
    return org_store.update_member_role(client, membership, role_in_org)
