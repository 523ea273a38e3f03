"""Tests for sport and venue submissions and their admin curation."""
import json

from tests.helpers import auth


def _names(res, key):
    return [item['name'] for item in json.loads(res.data)[key]]


def test_admin_sport_is_auto_approved(client, admin_user):
    res = client.post('/v1/sports', json={'name': 'Tennis'}, headers=auth(admin_user))
    assert res.status_code == 201
    assert json.loads(res.data)['sport']['status'] == 'approved'

    res = client.get('/v1/sports')
    assert 'Tennis' in _names(res, 'sports')


def test_user_sport_is_pending_and_hidden(client, regular_user):
    res = client.post('/v1/sports', json={'name': 'Chess'}, headers=auth(regular_user))
    assert res.status_code == 201
    assert json.loads(res.data)['sport']['status'] == 'pending'

    assert 'Chess' not in _names(client.get('/v1/sports'), 'sports')

    res = client.get('/v1/sports/exists?name=chess')
    assert json.loads(res.data) == {'exists': True}
    res = client.get('/v1/sports/exists?name=curling')
    assert json.loads(res.data) == {'exists': False}


def test_sport_names_dedupe_case_insensitively(client, admin_user):
    first = client.post('/v1/sports', json={'name': 'Pickleball'}, headers=auth(admin_user))
    second = client.post('/v1/sports', json={'name': 'PICKLEBALL'}, headers=auth(admin_user))
    assert first.status_code == 201
    assert second.status_code == 200
    assert json.loads(first.data)['sport']['id'] == json.loads(second.data)['sport']['id']


def test_sport_requires_name(client, admin_user):
    res = client.post('/v1/sports', json={'name': '  '}, headers=auth(admin_user))
    assert res.status_code == 400
    assert res.data.decode() == 'Validation failed: name is required'


def test_sport_create_requires_auth(client):
    res = client.post('/v1/sports', json={'name': 'Tennis'})
    assert res.status_code == 401


def test_venue_addresses_dedupe_case_insensitively(client, regular_user):
    body = {'name': 'Main Gym', 'address': '100 Main St, Springfield', 'lat': 40.1, 'lng': -75.2}
    first = client.post('/v1/venues', json=body, headers=auth(regular_user))
    lowered = dict(body, address=body['address'].lower())
    second = client.post('/v1/venues', json=lowered, headers=auth(regular_user))
    assert first.status_code == 201
    assert second.status_code == 200
    assert json.loads(first.data)['venue']['id'] == json.loads(second.data)['venue']['id']

    res = client.get('/v1/venues/exists', query_string={'address': '100 MAIN ST, SPRINGFIELD'})
    assert json.loads(res.data)['exists'] is True


def test_venue_validation(client, regular_user):
    res = client.post('/v1/venues', json={'name': 'Gym', 'lat': 120}, headers=auth(regular_user))
    assert res.status_code == 400
    text = res.data.decode()
    assert 'address is required' in text
    assert 'lat must be between -90 and 90' in text


def test_admin_curates_pending_sport(client, admin_user, regular_user):
    res = client.post('/v1/sports', json={'name': 'Chess'}, headers=auth(regular_user))
    sport_id = json.loads(res.data)['sport']['id']

    res = client.get('/v1/sports/admin/pending', headers=auth(admin_user))
    assert 'Chess' in _names(res, 'sports')
    res = client.get('/v1/sports/admin/pending', headers=auth(regular_user))
    assert res.status_code == 403

    res = client.put(
        f'/v1/sports/{sport_id}/reject', json={'rejection_reason': 'duplicate'},
        headers=auth(admin_user),
    )
    assert res.status_code == 200
    sport = json.loads(res.data)['sport']
    assert sport['status'] == 'rejected'
    assert sport['rejection_reason'] == 'duplicate'

    res = client.put(f'/v1/sports/{sport_id}/approve', headers=auth(admin_user))
    sport = json.loads(res.data)['sport']
    assert sport['status'] == 'approved'
    assert sport['rejection_reason'] is None
    assert client.get(f'/v1/sports/{sport_id}').status_code == 200


def test_rejecting_approved_venue_hides_it(client, admin_user):
    res = client.post(
        '/v1/venues', json={'name': 'Arena', 'address': '1 Arena Way'}, headers=auth(admin_user),
    )
    venue_id = json.loads(res.data)['venue']['id']
    res = client.put(
        f'/v1/venues/{venue_id}/reject', json={'rejection_reason': 'closed'},
        headers=auth(admin_user),
    )
    assert res.status_code == 200
    venue = json.loads(res.data)['venue']
    assert venue['status'] == 'rejected'
    assert venue['rejection_reason'] == 'closed'
    assert client.get(f'/v1/venues/{venue_id}').status_code == 404


def test_reject_requires_reason(client, admin_user, regular_user):
    res = client.post(
        '/v1/venues', json={'name': 'Hall', 'address': '2 Hall Rd'}, headers=auth(regular_user),
    )
    venue_id = json.loads(res.data)['venue']['id']
    res = client.put(f'/v1/venues/{venue_id}/reject', json={}, headers=auth(admin_user))
    assert res.status_code == 400

    res = client.put(
        f'/v1/venues/{venue_id}/reject', json={'rejection_reason': 'x' * 501},
        headers=auth(admin_user),
    )
    assert res.status_code == 400


def test_pending_venue_detail_is_hidden(client, regular_user):
    res = client.post(
        '/v1/venues', json={'name': 'Hall', 'address': '2 Hall Rd'}, headers=auth(regular_user),
    )
    venue_id = json.loads(res.data)['venue']['id']
    assert client.get(f'/v1/venues/{venue_id}').status_code == 404


def test_admin_all_listing_includes_every_status(client, admin_user, regular_user):
    client.post('/v1/sports', json={'name': 'Tennis'}, headers=auth(admin_user))
    client.post('/v1/sports', json={'name': 'Chess'}, headers=auth(regular_user))

    public = set(_names(client.get('/v1/sports'), 'sports'))
    everything = set(_names(client.get('/v1/sports/admin/all', headers=auth(admin_user)), 'sports'))
    assert public <= everything
    assert everything == {'Tennis', 'Chess'}
