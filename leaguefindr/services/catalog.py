"""Sport and venue submissions with case-insensitive de-duplication."""
from leaguefindr.errors import InvalidInput, NotFound, ValidationFailed
from leaguefindr.models import Sport, Venue
from leaguefindr.services import submissions
from leaguefindr.store import catalog as catalog_store
from leaguefindr.store.clients import rls_client, service_client


def _coerce_coordinate(payload, key, low, high, errors):
    raw = payload.get(key)
    if raw in (None, ''):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        errors.append(f'{key} must be a number')
        return None
    if value < low or value > high:
        errors.append(f'{key} must be between {low} and {high}')
    return value


def list_approved(model):
    return catalog_store.get_approved(rls_client(None), model)


def list_all(model):
    return catalog_store.get_all(service_client(), model)


def list_pending(model):
    return catalog_store.get_pending(service_client(), model)


def get_approved(model, record_id):
    record = catalog_store.get_by_id(rls_client(None), model, record_id)
    if record is None or record.status != submissions.APPROVED:
        raise NotFound(f'{model.__name__} not found')
    return record


def sport_exists(name):
    return catalog_store.get_sport_by_name(rls_client(None), name) is not None


def venue_exists(address):
    return catalog_store.get_venue_by_address(rls_client(None), address) is not None


def create_sport(subject, payload):
    """Return ``(sport, created)``; an existing name returns the stored row."""
    if not isinstance(payload, dict):
        raise InvalidInput('Invalid request body')
    name = str(payload.get('name') or '').strip()
    if not name:
        raise ValidationFailed('name is required')
    if len(name) > 255:
        raise ValidationFailed('name must be at most 255 characters')

    client = rls_client(subject)
    existing = catalog_store.get_sport_by_name(client, name)
    if existing is not None:
        return existing, False
    sport = Sport(name=name, status=submissions.initial_status(subject), created_by=subject)
    return catalog_store.create(client, sport), True


def create_venue(subject, payload):
    """Return ``(venue, created)``; an existing address returns the stored row."""
    if not isinstance(payload, dict):
        raise InvalidInput('Invalid request body')
    errors = []
    name = str(payload.get('name') or '').strip()
    address = str(payload.get('address') or '').strip()
    if not name:
        errors.append('name is required')
    elif len(name) > 255:
        errors.append('name must be at most 255 characters')
    if not address:
        errors.append('address is required')
    elif len(address) > 500:
        errors.append('address must be at most 500 characters')
    lat = _coerce_coordinate(payload, 'lat', -90, 90, errors)
    lng = _coerce_coordinate(payload, 'lng', -180, 180, errors)
    if errors:
        raise ValidationFailed(errors)

    client = rls_client(subject)
    existing = catalog_store.get_venue_by_address(client, address)
    if existing is not None:
        return existing, False
    venue = Venue(
        name=name, address=address, lat=lat, lng=lng,
        status=submissions.initial_status(subject), created_by=subject,
    )
    return catalog_store.create(client, venue), True


def _get_or_404(client, model, record_id):
    record = catalog_store.get_by_id(client, model, record_id)
    if record is None:
        raise NotFound(f'{model.__name__} not found')
    return record


def approve(model, record_id):
    client = service_client()
    record = _get_or_404(client, model, record_id)
    if submissions.should_transition(record.status, submissions.APPROVED):
        catalog_store.update_status(client, record, submissions.APPROVED)
    return record


def reject(model, record_id, raw_reason):
    reason = submissions.clean_rejection_reason(raw_reason)
    client = service_client()
    record = _get_or_404(client, model, record_id)
    return catalog_store.update_status(client, record, submissions.REJECTED, reason)
