"""Per-organization league drafts and reusable templates.

A creator holds at most one draft per organization; saving again replaces
its body. Templates are unrestricted. Both store the form as opaque JSON.
"""
from leaguefindr.auth_utils import is_global_admin, require_org_member
from leaguefindr.errors import InvalidInput, NotFound, ValidationFailed
from leaguefindr.services import notifications
from leaguefindr.store import drafts as draft_store
from leaguefindr.store.clients import rls_client, service_client


def _form_payload(payload):
    if not isinstance(payload, dict):
        raise InvalidInput('Invalid request body')
    form_data = payload.get('data', payload.get('form_data'))
    if not isinstance(form_data, dict) or not form_data:
        raise ValidationFailed('draft data cannot be empty')
    return form_data


def _clean_name(raw_name, required):
    name = str(raw_name or '').strip()
    if required and not name:
        raise ValidationFailed('template name is required')
    if len(name) > 255:
        raise ValidationFailed('name must be at most 255 characters')
    return name or None


def _default_draft_name(form_data):
    league_name = form_data.get('league_name')
    if isinstance(league_name, str) and league_name.strip():
        return f'{league_name.strip()} Draft'
    return None


def get_draft(subject, org_id):
    require_org_member(subject, org_id)
    return draft_store.get_draft(rls_client(subject), org_id, subject)


def save_draft(subject, org_id, payload):
    require_org_member(subject, org_id)
    form_data = _form_payload(payload)
    name = _clean_name(payload.get('name'), required=False) or _default_draft_name(form_data)
    draft = draft_store.save_draft(rls_client(subject), org_id, subject, name, form_data)
    notifications.notify_after_commit(
        subject, notifications.DRAFT_SAVED, 'Draft Saved',
        f"Your draft '{draft.name or 'Untitled'}' has been saved",
        related_org_id=draft.org_id,
    )
    return draft


def _get_scoped(client, item_id, draft_type, org_id):
    item = draft_store.get_by_id(client, item_id, draft_type)
    if item is None or (org_id and item.org_id != str(org_id)):
        raise NotFound(f'{draft_type.capitalize()} not found')
    return item


def update_draft(subject, org_id, draft_id, payload):
    require_org_member(subject, org_id)
    client = rls_client(subject)
    draft = _get_scoped(client, draft_id, 'draft', org_id)
    form_data = _form_payload(payload)
    name = _clean_name(payload.get('name'), required=False)
    return draft_store.update_draft(client, draft, form_data, name)


def delete_draft(subject, org_id, draft_id):
    require_org_member(subject, org_id)
    client = rls_client(subject)
    draft_store.delete(client, _get_scoped(client, draft_id, 'draft', org_id))


def delete_own_draft(subject, org_id):
    require_org_member(subject, org_id)
    client = rls_client(subject)
    draft = draft_store.get_draft(client, org_id, subject)
    if draft is None:
        raise NotFound('Draft not found')
    draft_store.delete(client, draft)


def list_drafts(subject, org_id):
    require_org_member(subject, org_id)
    return draft_store.list_drafts(rls_client(subject), org_id)


def list_all_drafts():
    return draft_store.list_all_drafts(service_client())


def list_templates(subject, org_id):
    require_org_member(subject, org_id)
    return draft_store.list_templates(rls_client(subject), org_id)


def get_template(subject, org_id, template_id):
    require_org_member(subject, org_id)
    return _get_scoped(rls_client(subject), template_id, 'template', org_id)


def create_template(subject, org_id, payload):
    require_org_member(subject, org_id)
    form_data = _form_payload(payload)
    name = _clean_name(payload.get('name'), required=True)
    template = draft_store.create_template(rls_client(subject), org_id, subject, name, form_data)
    notifications.notify_after_commit(
        subject, notifications.TEMPLATE_SAVED, 'Template Saved',
        f"Your template '{template.name}' has been saved",
        related_org_id=template.org_id,
    )
    return template


def update_template(subject, org_id, template_id, payload):
    require_org_member(subject, org_id)
    client = rls_client(subject)
    template = _get_scoped(client, template_id, 'template', org_id)
    form_data = _form_payload(payload)
    name = _clean_name(payload.get('name'), required=True)
    return draft_store.update_template(client, template, name, form_data)


def delete_template(subject, org_id, template_id):
    """Members of the owning organization, or global admins, may delete."""
    if is_global_admin(subject):
        client = service_client()
    else:
        require_org_member(subject, org_id)
        client = rls_client(subject)
    draft_store.delete(client, _get_scoped(client, template_id, 'template', org_id))


def list_all_templates():
    return draft_store.list_all_templates(service_client())
