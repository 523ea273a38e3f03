from leaguefindr.models import League, Sport, Venue
from leaguefindr.store import catalog
from leaguefindr.store.clients import require_service
from leaguefindr.time_utils import utcnow_naive


def _newest_first(query):
    return query.order_by(League.created_at.desc(), League.id.desc())


def _paginate(query, limit, offset):
    total = query.order_by(None).count()
    rows = _newest_first(query).limit(limit).offset(offset).all()
    return rows, total


def get_all(client):
    require_service(client, 'leagues.get_all')
    return _newest_first(client.session.query(League)).all()


def get_approved(client):
    return _newest_first(client.session.query(League).filter(League.status == 'approved')).all()


def get_approved_paginated(client, limit, offset):
    query = client.session.query(League).filter(League.status == 'approved')
    return _paginate(query, limit, offset)


def get_by_id(client, league_id):
    return client.session.get(League, league_id)


def get_by_org(client, org_id):
    return _newest_first(client.session.query(League).filter(League.org_id == str(org_id))).all()


def get_by_org_and_status(client, org_id, status):
    query = client.session.query(League).filter(
        League.org_id == str(org_id), League.status == status,
    )
    return _newest_first(query).all()


def get_pending(client):
    require_service(client, 'leagues.get_pending')
    return _newest_first(client.session.query(League).filter(League.status == 'pending')).all()


def get_pending_paginated(client, limit, offset):
    require_service(client, 'leagues.get_pending_paginated')
    query = client.session.query(League).filter(League.status == 'pending')
    return _paginate(query, limit, offset)


def get_all_paginated(client, limit, offset):
    require_service(client, 'leagues.get_all_paginated')
    return _paginate(client.session.query(League), limit, offset)


def create(client, league):
    client.session.add(league)
    client.commit()
    return league


def update_status(client, league, status, reason=None):
    league.status = status
    league.rejection_reason = reason if status == 'rejected' else None
    league.updated_at = utcnow_naive()
    client.commit()
    return league


def update(client, league, fields):
    for key, value in fields.items():
        setattr(league, key, value)
    league.updated_at = utcnow_naive()
    client.commit()
    return league


def _resolve_requested_sport(client, requested, actor_id):
    sport = catalog.get_sport_by_name(client, requested.get('name'))
    if sport is None:
        sport = Sport(name=str(requested['name']).strip(), status='approved', created_by=actor_id)
        client.session.add(sport)
        client.session.flush()
    return sport


def _resolve_requested_venue(client, requested, actor_id):
    venue = catalog.get_venue_by_address(client, requested.get('address'))
    if venue is None:
        venue = Venue(
            name=str(requested.get('name') or requested['address']).strip(),
            address=str(requested['address']).strip(),
            lat=requested.get('lat'), lng=requested.get('lng'),
            status='approved', created_by=actor_id,
        )
        client.session.add(venue)
        client.session.flush()
    return venue


def approve_with_children(client, league, actor_id):
    """Approve a league (inserting it when new) with its sport and venue in one transaction.

    Requested sports and venues from ``supplemental_requests`` are created (or
    matched) and linked; linked rows that are still pending are promoted.
    Any failure rolls the whole unit back.
    """
    require_service(client, 'leagues.approve_with_children')
    try:
        client.session.add(league)
        requested = league.supplemental_requests or {}
        if league.sport_id is None and (requested.get('sport') or {}).get('name'):
            league.sport_id = _resolve_requested_sport(client, requested['sport'], actor_id).id
        if league.venue_id is None and (requested.get('venue') or {}).get('address'):
            league.venue_id = _resolve_requested_venue(client, requested['venue'], actor_id).id

        for model, child_id in ((Sport, league.sport_id), (Venue, league.venue_id)):
            if child_id is None:
                continue
            child = client.session.get(model, child_id)
            if child is not None and child.status != 'approved':
                catalog.update_status(client, child, 'approved', commit=False)

        league.status = 'approved'
        league.rejection_reason = None
        league.updated_at = utcnow_naive()
    except Exception:
        client.rollback()
        raise
    client.commit()
    return league
