"""League submissions: validation, creation, and admin curation."""
import math

from flask import current_app

from leaguefindr.auth_utils import require_org_member
from leaguefindr.errors import InvalidInput, NotFound, ValidationFailed
from leaguefindr.models import PRICING_STRATEGIES, SUBMISSION_STATUSES, League, Sport, Venue
from leaguefindr.services import notifications, submissions
from leaguefindr.store import catalog as catalog_store
from leaguefindr.store import leagues as league_store
from leaguefindr.store import organizations as org_store
from leaguefindr.store.clients import rls_client, service_client
from leaguefindr.time_utils import parse_date

_TEXT_LIMITS = {
    'sport_name': 255,
    'league_name': 255,
    'division': 255,
    'gender': 50,
    'season_details': 2000,
    'registration_url': 500,
    'venue_name': 255,
    'venue_address': 500,
    'organization_name': 255,
}
_REQUIRED_FIELDS = (
    'sport_name', 'division', 'registration_deadline', 'season_start_date',
    'game_occurrences', 'pricing_strategy', 'pricing_amount', 'gender',
    'registration_url', 'duration', 'minimum_team_players',
)
_DATE_FIELDS = ('registration_deadline', 'season_start_date', 'season_end_date')
_EDITABLE_COLUMNS = (
    'sport_id', 'venue_id', 'league_name', 'division', 'gender',
    'registration_deadline', 'season_start_date', 'season_end_date',
    'game_occurrences', 'pricing_strategy', 'pricing_amount', 'per_game_fee',
    'duration', 'minimum_team_players', 'season_details', 'registration_url',
)


def calculate_pricing_per_player(strategy, amount, minimum_team_players):
    """Per-team prices are split across the minimum roster, rounded up."""
    if amount is None:
        return None
    if strategy == 'per_team' and minimum_team_players and minimum_team_players > 0:
        return float(math.ceil(amount / minimum_team_players))
    return float(amount)


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip()) or value == []


def _to_number(value, key, errors, minimum=0):
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(f'{key} must be a number')
        return None
    if number < minimum:
        errors.append(f'{key} must be at least {minimum}')
    return number


def _to_positive_int(value, key, errors):
    if isinstance(value, bool):
        errors.append(f'{key} must be a whole number')
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors.append(f'{key} must be a whole number')
        return None
    if number != value and str(number) != str(value).strip():
        errors.append(f'{key} must be a whole number')
        return None
    if number < 1:
        errors.append(f'{key} must be at least 1')
    return number


def _validate_occurrences(raw, errors):
    if not isinstance(raw, list) or not raw:
        errors.append('game_occurrences must be a non-empty list')
        return []
    cleaned = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            errors.append(f'game_occurrences[{index}] must be an object')
            continue
        entry = {key: str(item.get(key) or '').strip() for key in ('day', 'startTime', 'endTime')}
        missing = [key for key, value in entry.items() if not value]
        if missing:
            errors.append(f'game_occurrences[{index}] is missing {", ".join(missing)}')
            continue
        cleaned.append(entry)
    return cleaned


def normalize_league_payload(payload, partial=False):
    """Validate a league body. Returns ``(columns, extras)``.

    ``columns`` holds model attributes; ``extras`` holds the sport/venue
    names and the organization name used for lookups and the stored form.
    """
    if not isinstance(payload, dict):
        raise InvalidInput('Invalid request body')
    errors = []
    if not partial:
        for key in _REQUIRED_FIELDS:
            if _is_blank(payload.get(key)):
                errors.append(f'{key} is required')

    columns = {}
    extras = {}
    for key, limit in _TEXT_LIMITS.items():
        if key not in payload or payload.get(key) is None:
            continue
        value = str(payload.get(key)).strip()
        if len(value) > limit:
            errors.append(f'{key} must be at most {limit} characters')
        if key in ('sport_name', 'venue_name', 'venue_address', 'organization_name'):
            extras[key] = value or None
        else:
            columns[key] = value or None

    for key in _DATE_FIELDS:
        if _is_blank(payload.get(key)):
            continue
        try:
            columns[key] = parse_date(payload[key])
        except ValueError:
            errors.append(f'{key} must be a date (YYYY-MM-DD)')

    if 'game_occurrences' in payload and payload.get('game_occurrences') is not None:
        columns['game_occurrences'] = _validate_occurrences(payload['game_occurrences'], errors)

    if not _is_blank(payload.get('pricing_strategy')):
        strategy = str(payload['pricing_strategy']).strip()
        if strategy not in PRICING_STRATEGIES:
            errors.append(f'pricing_strategy must be one of: {", ".join(PRICING_STRATEGIES)}')
        columns['pricing_strategy'] = strategy
    for key in ('pricing_amount', 'per_game_fee'):
        if not _is_blank(payload.get(key)):
            columns[key] = _to_number(payload[key], key, errors)
    for key in ('duration', 'minimum_team_players'):
        if not _is_blank(payload.get(key)):
            columns[key] = _to_positive_int(payload[key], key, errors)
    for key in ('sport_id', 'venue_id'):
        if not _is_blank(payload.get(key)):
            columns[key] = _to_positive_int(payload[key], key, errors)

    for key, low, high in (('venue_lat', -90, 90), ('venue_lng', -180, 180)):
        if _is_blank(payload.get(key)):
            continue
        value = _to_number(payload[key], key, errors, minimum=low)
        if value is not None and value > high:
            errors.append(f'{key} must be between {low} and {high}')
        extras[key] = value

    start = columns.get('season_start_date')
    end = columns.get('season_end_date')
    if start and end and end < start:
        errors.append('season_end_date must not be before season_start_date')

    if errors:
        raise ValidationFailed(errors)
    return columns, extras


def _resolve_references(client, columns, extras):
    """Link existing sport/venue rows, or record what must be created later."""
    supplemental = {}
    if columns.get('sport_id') is not None:
        if catalog_store.get_by_id(client, Sport, columns['sport_id']) is None:
            raise ValidationFailed('sport_id does not reference a sport')
    else:
        sport = catalog_store.get_sport_by_name(client, extras.get('sport_name'))
        if sport is not None:
            columns['sport_id'] = sport.id
        elif extras.get('sport_name'):
            supplemental['sport'] = {'name': extras['sport_name']}

    if columns.get('venue_id') is not None:
        if catalog_store.get_by_id(client, Venue, columns['venue_id']) is None:
            raise ValidationFailed('venue_id does not reference a venue')
    elif extras.get('venue_address'):
        venue = catalog_store.get_venue_by_address(client, extras['venue_address'])
        if venue is not None:
            columns['venue_id'] = venue.id
        else:
            supplemental['venue'] = {
                'name': extras.get('venue_name') or extras['venue_address'],
                'address': extras['venue_address'],
                'lat': extras.get('venue_lat'),
                'lng': extras.get('venue_lng'),
            }
    return supplemental or None


def _league_label(league):
    return league.league_name or ''


def create_league(subject, org_id, payload):
    if not org_id:
        raise ValidationFailed('org_id is required')
    require_org_member(subject, org_id)
    client = rls_client(subject)
    org = org_store.get_by_id(client, org_id)
    if org is None:
        raise NotFound('Organization not found')

    columns, extras = normalize_league_payload(payload)
    supplemental = _resolve_references(client, columns, extras)
    columns['pricing_per_player'] = calculate_pricing_per_player(
        columns.get('pricing_strategy'),
        columns.get('pricing_amount'),
        columns.get('minimum_team_players'),
    )

    form_data = dict(payload)
    form_data['org_id'] = org.id
    form_data['organization_name'] = extras.get('organization_name') or org.org_name

    status = submissions.initial_status(subject)
    league = League(org_id=org.id, status=status, created_by=subject, **columns)
    league.supplemental_requests = supplemental
    league.form_data = form_data

    if status == submissions.APPROVED:
        league_store.approve_with_children(service_client(), league, subject)
        notifications.notify_after_commit(
            subject, notifications.LEAGUE_APPROVED, 'League Approved',
            f"Your league '{_league_label(league)}' has been approved!",
            related_league_id=league.id, related_org_id=org.id,
        )
        return league

    league_store.create(client, league)
    current_app.logger.info(f'league {league.id} submitted by {subject} for org {org.id}')
    notifications.notify_admins_after_commit(
        notifications.LEAGUE_SUBMITTED, 'New League Submitted',
        f"A new league '{_league_label(league)}' has been submitted for approval",
        related_league_id=league.id, related_org_id=org.id,
    )
    notifications.notify_after_commit(
        subject, notifications.LEAGUE_SUBMITTED, 'League Submitted',
        f"Your league '{_league_label(league)}' has been submitted for approval",
        related_league_id=league.id, related_org_id=org.id,
    )
    return league


def list_approved():
    return league_store.get_approved(rls_client(None))


def list_approved_paginated(limit, offset):
    return league_store.get_approved_paginated(rls_client(None), limit, offset)


def get_approved(league_id):
    league = league_store.get_by_id(rls_client(None), league_id)
    if league is None or league.status != submissions.APPROVED:
        raise NotFound('League not found')
    return league


def list_for_org(subject, org_id, status=None):
    require_org_member(subject, org_id)
    client = rls_client(subject)
    if status:
        if status not in SUBMISSION_STATUSES:
            raise InvalidInput(f'invalid league status: {status}')
        return league_store.get_by_org_and_status(client, org_id, status)
    return league_store.get_by_org(client, org_id)


def list_all_paginated(limit, offset):
    return league_store.get_all_paginated(service_client(), limit, offset)


def list_pending_paginated(limit, offset):
    return league_store.get_pending_paginated(service_client(), limit, offset)


def get_any(league_id):
    league = league_store.get_by_id(service_client(), league_id)
    if league is None:
        raise NotFound('League not found')
    return league


def admin_update(league_id, payload):
    """Edit a league in any state; status is not editable here."""
    league = get_any(league_id)
    columns, extras = normalize_league_payload(payload, partial=True)
    client = service_client()
    if extras.get('sport_name') and 'sport_id' not in columns:
        sport = catalog_store.get_sport_by_name(client, extras['sport_name'])
        if sport is not None:
            columns['sport_id'] = sport.id

    fields = {key: value for key, value in columns.items() if key in _EDITABLE_COLUMNS}
    for key in ('sport_id', 'venue_id'):
        model = Sport if key == 'sport_id' else Venue
        if fields.get(key) is not None and catalog_store.get_by_id(client, model, fields[key]) is None:
            raise ValidationFailed(f'{key} does not reference a record')

    strategy = fields.get('pricing_strategy', league.pricing_strategy)
    amount = fields.get('pricing_amount', league.pricing_amount)
    minimum = fields.get('minimum_team_players', league.minimum_team_players)
    fields['pricing_per_player'] = calculate_pricing_per_player(strategy, amount, minimum)

    form_data = dict(league.form_data or {})
    form_data.update(payload)
    fields['form_data'] = form_data
    return league_store.update(client, league, fields)


def approve_league(actor_id, league_id):
    client = service_client()
    league = get_any(league_id)
    if not submissions.should_transition(league.status, submissions.APPROVED):
        return league

    league_store.approve_with_children(client, league, actor_id)
    current_app.logger.info(f'league {league.id} approved by {actor_id}')
    if league.created_by:
        notifications.notify_after_commit(
            league.created_by, notifications.LEAGUE_APPROVED, 'League Approved',
            f"Your league '{_league_label(league)}' has been approved!",
            related_league_id=league.id, related_org_id=league.org_id,
        )
    return league


def reject_league(actor_id, league_id, raw_reason):
    reason = submissions.clean_rejection_reason(raw_reason)
    client = service_client()
    league = get_any(league_id)

    league_store.update_status(client, league, submissions.REJECTED, reason)
    current_app.logger.info(f'league {league.id} rejected by {actor_id}')
    if league.created_by:
        notifications.notify_after_commit(
            league.created_by, notifications.LEAGUE_REJECTED, 'League Rejected',
            f"Your league '{_league_label(league)}' was rejected. Reason: {reason}",
            related_league_id=league.id, related_org_id=league.org_id,
        )
    return league
