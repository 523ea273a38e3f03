"""Request helpers shared by the API tests."""


def auth(subject):
    return {'Authorization': f'Bearer token-{subject}'}


def register(client, subject, email=None):
    return client.post('/v1/auth/register', json={
        'clerkID': subject,
        'email': email or f'{subject}@example.com',
        'organizationName': 'Acme',
    })


def create_org(client, subject, name='Downtown Rec'):
    res = client.post('/v1/organizations', json={
        'org_name': name, 'org_email': 'hello@downtown.test',
    }, headers=auth(subject))
    assert res.status_code == 201
    return res.get_json()['organization']['id']


def league_body(**overrides):
    body = {
        'sport_name': 'Volleyball',
        'league_name': 'Tuesday Night Volleyball',
        'division': 'Recreational',
        'registration_deadline': '2026-01-10',
        'season_start_date': '2026-01-20',
        'season_end_date': '2026-03-31',
        'game_occurrences': [
            {'day': 'Tuesday', 'startTime': '19:00', 'endTime': '21:00'},
        ],
        'pricing_strategy': 'per_team',
        'pricing_amount': 500,
        'gender': 'coed',
        'registration_url': 'https://downtown.test/register',
        'duration': 10,
        'minimum_team_players': 6,
        'venue_name': 'Downtown Gym',
        'venue_address': '100 Main St, Springfield',
    }
    body.update(overrides)
    return body


def submit_league(client, subject, org_id, **overrides):
    res = client.post(
        f'/v1/leagues?org_id={org_id}', json=league_body(**overrides), headers=auth(subject),
    )
    assert res.status_code == 201, res.data
    return res.get_json()['league']
