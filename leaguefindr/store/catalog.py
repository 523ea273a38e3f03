"""Sports and venues share one set of store operations, parameterized by model."""
from sqlalchemy import func

from leaguefindr.models import Sport, Venue
from leaguefindr.time_utils import utcnow_naive


def get_all(client, model):
    return client.session.query(model).order_by(model.id.asc()).all()


def get_approved(client, model):
    return (
        client.session.query(model)
        .filter(model.status == 'approved')
        .order_by(model.name.asc())
        .all()
    )


def get_pending(client, model):
    return (
        client.session.query(model)
        .filter(model.status == 'pending')
        .order_by(model.created_at.asc())
        .all()
    )


def get_by_id(client, model, record_id):
    return client.session.get(model, record_id)


def get_sport_by_name(client, name):
    normalized = str(name or '').strip().lower()
    if not normalized:
        return None
    return (
        client.session.query(Sport)
        .filter(func.lower(Sport.name) == normalized)
        .order_by(Sport.id.asc())
        .first()
    )


def get_venue_by_address(client, address):
    normalized = str(address or '').strip().lower()
    if not normalized:
        return None
    return (
        client.session.query(Venue)
        .filter(func.lower(Venue.address) == normalized)
        .order_by(Venue.id.asc())
        .first()
    )


def create(client, record):
    client.session.add(record)
    client.commit()
    return record


def update_status(client, record, status, reason=None, commit=True):
    record.status = status
    record.rejection_reason = reason if status == 'rejected' else None
    record.updated_at = utcnow_naive()
    if commit:
        client.commit()
    return record
