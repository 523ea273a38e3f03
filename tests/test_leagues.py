"""Tests for league submission, approval and rejection."""
import json

import pytest

from leaguefindr.app import db
from leaguefindr.errors import PersistenceFailure
from leaguefindr.models import League, Sport, Venue
from leaguefindr.services.leagues import calculate_pricing_per_player
from leaguefindr.store import leagues as league_store
from leaguefindr.store.clients import rls_client, service_client
from tests.helpers import auth, create_org, league_body, submit_league


def _ids(res):
    return [league['id'] for league in json.loads(res.data)['leagues']]


def _notifications(client, subject):
    res = client.get('/v1/notifications', headers=auth(subject))
    return json.loads(res.data)['notifications']


def test_submission_and_approval_flow(client, bus, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    assert league['status'] == 'pending'
    assert league['org_id'] == org_id
    assert league['created_by'] == regular_user

    res = client.get('/v1/leagues/admin/pending', headers=auth(admin_user))
    assert res.status_code == 200
    assert league['id'] in _ids(res)
    assert league['id'] not in _ids(client.get('/v1/leagues'))

    res = client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    assert res.status_code == 200
    assert json.loads(res.data)['league']['status'] == 'approved'

    types = [n['type'] for n in _notifications(client, regular_user)]
    assert 'league_approved' in types
    assert league['id'] in _ids(client.get('/v1/leagues'))
    assert client.get(f'/v1/leagues/{league["id"]}').status_code == 200
    assert f'notifications:user:{regular_user}' in bus.topics()


def test_submission_notifies_admins_and_creator(client, bus, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)

    admin_notes = _notifications(client, admin_user)
    assert [n['type'] for n in admin_notes] == ['league_submitted']
    assert admin_notes[0]['title'] == 'New League Submitted'
    assert admin_notes[0]['message'] == (
        "A new league 'Tuesday Night Volleyball' has been submitted for approval"
    )
    assert admin_notes[0]['related_league_id'] == league['id']

    creator_notes = _notifications(client, regular_user)
    assert [n['type'] for n in creator_notes] == ['league_submitted']
    assert bus.topics().count('notifications:admins') == 1


def test_rejection_with_reason(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id, league_name='Second League')
    res = client.put(
        f'/v1/leagues/{league["id"]}/reject', json={'rejection_reason': 'incomplete'},
        headers=auth(admin_user),
    )
    assert res.status_code == 200

    res = client.get(f'/v1/leagues/admin/{league["id"]}', headers=auth(admin_user))
    data = json.loads(res.data)['league']
    assert data['status'] == 'rejected'
    assert data['rejection_reason'] == 'incomplete'

    rejected = [n for n in _notifications(client, regular_user) if n['type'] == 'league_rejected']
    assert len(rejected) == 1
    assert rejected[0]['message'] == "Your league 'Second League' was rejected. Reason: incomplete"
    assert client.get(f'/v1/leagues/{league["id"]}').status_code == 404


def test_admin_league_is_auto_approved(client, bus, admin_user):
    org_id = create_org(client, admin_user, name='Admin Org')
    league = submit_league(client, admin_user, org_id)
    assert league['status'] == 'approved'
    assert league['sport_id'] is not None
    assert league['venue_id'] is not None

    types = [n['type'] for n in _notifications(client, admin_user)]
    assert types == ['league_approved']
    assert 'notifications:admins' not in bus.topics()


def test_approve_twice_is_noop(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    res = client.put(f'/v1/leagues/admin/{league["id"]}/approve', headers=auth(admin_user))
    assert res.status_code == 200
    assert json.loads(res.data)['league']['status'] == 'approved'

    approvals = [n for n in _notifications(client, regular_user) if n['type'] == 'league_approved']
    assert len(approvals) == 1


def test_reject_again_replaces_reason(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    for reason in ('missing dates', 'missing venue'):
        res = client.put(
            f'/v1/leagues/{league["id"]}/reject', json={'rejection_reason': reason},
            headers=auth(admin_user),
        )
        assert res.status_code == 200
    stored = db.session.get(League, league['id'])
    assert stored.status == 'rejected'
    assert stored.rejection_reason == 'missing venue'


def test_approving_rejected_league_clears_reason(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    client.put(
        f'/v1/leagues/{league["id"]}/reject', json={'rejection_reason': 'typo'},
        headers=auth(admin_user),
    )
    res = client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    data = json.loads(res.data)['league']
    assert data['status'] == 'approved'
    assert data['rejection_reason'] is None


def test_rejecting_approved_league_withdraws_it(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    res = client.put(
        f'/v1/leagues/{league["id"]}/reject', json={'rejection_reason': 'late'},
        headers=auth(admin_user),
    )
    assert res.status_code == 200
    data = json.loads(res.data)['league']
    assert data['status'] == 'rejected'
    assert data['rejection_reason'] == 'late'

    types = [n['type'] for n in _notifications(client, regular_user)]
    assert 'league_rejected' in types
    assert league['id'] not in _ids(client.get('/v1/leagues'))


def test_non_admin_cannot_curate(client, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    res = client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(regular_user))
    assert res.status_code == 403
    res = client.get('/v1/leagues/admin/pending', headers=auth(regular_user))
    assert res.status_code == 403


def test_approval_creates_requested_sport_and_venue(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    assert league['sport_id'] is None
    assert league['supplemental_requests']['sport'] == {'name': 'Volleyball'}
    assert league['supplemental_requests']['venue']['address'] == '100 Main St, Springfield'

    res = client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    data = json.loads(res.data)['league']
    sport = db.session.get(Sport, data['sport_id'])
    venue = db.session.get(Venue, data['venue_id'])
    assert sport.name == 'Volleyball' and sport.status == 'approved'
    assert venue.address == '100 Main St, Springfield' and venue.status == 'approved'


def test_approval_promotes_pending_references(client, admin_user, regular_user, org_id):
    client.post('/v1/sports', json={'name': 'Chess'}, headers=auth(regular_user))
    league = submit_league(client, regular_user, org_id, sport_name='chess')
    sport_id = league['sport_id']
    assert db.session.get(Sport, sport_id).status == 'pending'

    client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    assert db.session.get(Sport, sport_id).status == 'approved'


def test_failed_approval_rolls_back_every_row(client, monkeypatch, admin_user, regular_user, org_id):
    client.post('/v1/sports', json={'name': 'Chess'}, headers=auth(regular_user))
    client.post(
        '/v1/venues', json={'name': 'Hall', 'address': '2 Hall Rd'}, headers=auth(regular_user),
    )
    league = submit_league(client, regular_user, org_id, sport_name='Chess', venue_address='2 Hall Rd')

    from leaguefindr.store import catalog
    original = catalog.update_status

    def _fail_on_venue(client_, record, *args, **kwargs):
        if isinstance(record, Venue):
            raise RuntimeError('venue update failed')
        return original(client_, record, *args, **kwargs)

    monkeypatch.setattr(catalog, 'update_status', _fail_on_venue)
    with pytest.raises(RuntimeError):
        client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))

    assert db.session.get(League, league['id']).status == 'pending'
    assert db.session.get(Sport, league['sport_id']).status == 'pending'
    assert db.session.get(Venue, league['venue_id']).status == 'pending'
    assert not [n for n in _notifications(client, regular_user) if n['type'] == 'league_approved']


def test_public_listing_is_subset_of_admin_listing(client, admin_user, regular_user, org_id):
    first = submit_league(client, regular_user, org_id, league_name='One')
    submit_league(client, regular_user, org_id, league_name='Two')
    client.put(f'/v1/leagues/{first["id"]}/approve', headers=auth(admin_user))

    public = json.loads(client.get('/v1/leagues').data)['leagues']
    admin_res = client.get('/v1/leagues/admin/all', headers=auth(admin_user))
    admin_ids = _ids(admin_res)
    assert all(league['status'] == 'approved' for league in public)
    assert {league['id'] for league in public} <= set(admin_ids)
    assert json.loads(admin_res.data)['count'] == 2


def test_admin_pagination_bounds(client, admin_user, regular_user, org_id):
    for index in range(3):
        submit_league(client, regular_user, org_id, league_name=f'League {index}')

    res = client.get('/v1/leagues/admin/pending?limit=2&offset=0', headers=auth(admin_user))
    data = json.loads(res.data)
    assert data['count'] == 3
    assert data['limit'] == 2
    assert len(data['leagues']) == 2
    assert data['leagues'][0]['league_name'] == 'League 2'

    res = client.get('/v1/leagues/admin/pending?limit=2&offset=2', headers=auth(admin_user))
    assert len(json.loads(res.data)['leagues']) == 1

    res = client.get('/v1/leagues/admin/all?limit=0', headers=auth(admin_user))
    assert res.status_code == 400
    res = client.get('/v1/leagues/admin/all?limit=101', headers=auth(admin_user))
    assert res.status_code == 400
    res = client.get('/v1/leagues/admin/all?offset=-1', headers=auth(admin_user))
    assert res.status_code == 400


def test_create_requires_membership(client, admin_user, regular_user, org_id):
    res = client.post(
        f'/v1/leagues?org_id={org_id}', json=league_body(), headers=auth(admin_user),
    )
    assert res.status_code == 403


def test_create_requires_org_id(client, regular_user, org_id):
    res = client.post('/v1/leagues', json=league_body(), headers=auth(regular_user))
    assert res.status_code == 400


def test_create_validation_lists_missing_fields(client, regular_user, org_id):
    body = league_body(division='', pricing_strategy='per_game', registration_deadline='10/01/2026')
    del body['gender']
    res = client.post(f'/v1/leagues?org_id={org_id}', json=body, headers=auth(regular_user))
    assert res.status_code == 400
    text = res.data.decode()
    assert text.startswith('Validation failed: ')
    assert 'division is required' in text
    assert 'gender is required' in text
    assert 'pricing_strategy must be one of: per_team, per_person' in text
    assert 'registration_deadline must be a date' in text


def test_create_accepts_rfc3339_dates(client, regular_user, org_id):
    league = submit_league(
        client, regular_user, org_id,
        registration_deadline='2026-01-10T00:00:00Z',
        season_start_date='2026-01-20T08:30:00.123456789-05:00',
    )
    assert league['registration_deadline'] == '2026-01-10T00:00:00Z'
    assert league['season_start_date'] == '2026-01-20T00:00:00Z'


def test_pricing_per_player(client, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    assert league['pricing_per_player'] == 84.0

    assert calculate_pricing_per_player('per_person', 40, 6) == 40.0
    assert calculate_pricing_per_player('per_team', 300, None) == 300.0
    assert calculate_pricing_per_player('per_team', None, 6) is None


def test_form_data_keeps_organization_name(client, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    assert league['form_data']['organization_name'] == 'Downtown Rec'
    assert league['form_data']['org_id'] == org_id


def test_org_listing_with_status_filter(client, admin_user, regular_user, org_id):
    first = submit_league(client, regular_user, org_id, league_name='One')
    submit_league(client, regular_user, org_id, league_name='Two')
    client.put(f'/v1/leagues/{first["id"]}/approve', headers=auth(admin_user))

    res = client.get(f'/v1/leagues/org/{org_id}', headers=auth(regular_user))
    assert len(_ids(res)) == 2
    res = client.get(f'/v1/leagues/org/{org_id}?status=approved', headers=auth(regular_user))
    assert _ids(res) == [first['id']]
    res = client.get(f'/v1/leagues/org/{org_id}?status=archived', headers=auth(regular_user))
    assert res.status_code == 400
    res = client.get(f'/v1/leagues/org/{org_id}', headers=auth(admin_user))
    assert res.status_code == 403


def test_admin_edit_recomputes_pricing(client, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    res = client.put(
        f'/v1/leagues/admin/{league["id"]}',
        json={'pricing_amount': 600, 'division': 'Competitive'},
        headers=auth(admin_user),
    )
    assert res.status_code == 200
    data = json.loads(res.data)['league']
    assert data['division'] == 'Competitive'
    assert data['pricing_per_player'] == 100.0
    assert data['status'] == 'pending'


def test_unknown_league_is_404(client, admin_user):
    assert client.get('/v1/leagues/999').status_code == 404
    res = client.put('/v1/leagues/999/approve', headers=auth(admin_user))
    assert res.status_code == 404


def _break_notification_insert(monkeypatch):
    from leaguefindr.store import notifications as notification_store

    def _fail(*args, **kwargs):
        raise PersistenceFailure()

    monkeypatch.setattr(notification_store, 'insert', _fail)


def test_approval_survives_notification_failure(client, monkeypatch, admin_user, regular_user, org_id):
    league = submit_league(client, regular_user, org_id)
    _break_notification_insert(monkeypatch)

    res = client.put(f'/v1/leagues/{league["id"]}/approve', headers=auth(admin_user))
    assert res.status_code == 200
    assert db.session.get(League, league['id']).status == 'approved'


def test_rejection_and_submission_survive_notification_failure(
        client, monkeypatch, admin_user, regular_user, org_id):
    _break_notification_insert(monkeypatch)
    league = submit_league(client, regular_user, org_id)
    assert league['status'] == 'pending'

    res = client.put(
        f'/v1/leagues/{league["id"]}/reject', json={'rejection_reason': 'incomplete'},
        headers=auth(admin_user),
    )
    assert res.status_code == 200
    assert db.session.get(League, league['id']).rejection_reason == 'incomplete'


def test_unpaginated_store_reads(client, admin_user, regular_user, org_id):
    first = submit_league(client, regular_user, org_id, league_name='One')
    second = submit_league(client, regular_user, org_id, league_name='Two')
    client.put(f'/v1/leagues/{first["id"]}/approve', headers=auth(admin_user))

    service = service_client()
    assert [league.id for league in league_store.get_all(service)] == [second['id'], first['id']]
    assert [league.id for league in league_store.get_pending(service)] == [second['id']]
    assert [league.id for league in league_store.get_approved(service)] == [first['id']]

    with pytest.raises(TypeError):
        league_store.get_all(rls_client(regular_user))
    with pytest.raises(TypeError):
        league_store.get_pending(rls_client(regular_user))
