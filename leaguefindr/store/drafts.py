from sqlalchemy.exc import IntegrityError

from leaguefindr.models import LeagueDraft
from leaguefindr.store.clients import require_service
from leaguefindr.time_utils import utcnow_naive


def _by_type(client, draft_type):
    return client.session.query(LeagueDraft).filter(LeagueDraft.type == draft_type)


def get_draft(client, org_id, user_id):
    return (
        _by_type(client, 'draft')
        .filter(LeagueDraft.org_id == str(org_id), LeagueDraft.created_by == user_id)
        .order_by(LeagueDraft.updated_at.desc())
        .first()
    )


def get_by_id(client, draft_id, draft_type):
    draft = client.session.get(LeagueDraft, draft_id)
    if draft is None or draft.type != draft_type:
        return None
    return draft


def save_draft(client, org_id, user_id, name, form_data):
    """Upsert the single draft held by (org, creator).

    A concurrent save that inserted first trips the unique index; the row it
    wrote is then updated instead.
    """
    now = utcnow_naive()
    draft = get_draft(client, org_id, user_id)
    if draft is None:
        draft = LeagueDraft(
            org_id=str(org_id), type='draft', created_by=user_id,
            created_at=now,
        )
        client.session.add(draft)
        try:
            client.session.flush()
        except IntegrityError:
            client.rollback()
            draft = get_draft(client, org_id, user_id)
            if draft is None:
                raise
    draft.name = name
    draft.form_data = form_data
    draft.updated_at = now
    client.commit()
    return draft


def update_draft(client, draft, form_data, name=None):
    draft.form_data = form_data
    if name:
        draft.name = name
    draft.updated_at = utcnow_naive()
    client.commit()
    return draft


def list_drafts(client, org_id):
    return (
        _by_type(client, 'draft')
        .filter(LeagueDraft.org_id == str(org_id))
        .order_by(LeagueDraft.updated_at.desc())
        .all()
    )


def list_all_drafts(client):
    require_service(client, 'drafts.list_all_drafts')
    return _by_type(client, 'draft').order_by(LeagueDraft.updated_at.desc()).all()


def delete(client, draft):
    client.session.delete(draft)
    client.commit()


def list_templates(client, org_id):
    return (
        _by_type(client, 'template')
        .filter(LeagueDraft.org_id == str(org_id))
        .order_by(LeagueDraft.created_at.desc())
        .all()
    )


def list_all_templates(client):
    require_service(client, 'drafts.list_all_templates')
    return _by_type(client, 'template').order_by(LeagueDraft.created_at.desc()).all()


def create_template(client, org_id, user_id, name, form_data):
    template = LeagueDraft(org_id=str(org_id), type='template', created_by=user_id, name=name)
    template.form_data = form_data
    client.session.add(template)
    client.commit()
    return template


def update_template(client, template, name, form_data):
    template.name = name
    template.form_data = form_data
    template.updated_at = utcnow_naive()
    client.commit()
    return template
