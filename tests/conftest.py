import pytest

from leaguefindr.app import create_app, db
from leaguefindr.errors import Unauthorized
from tests.helpers import create_org, register


class FakeIdentityGateway:
    """Accepts ``token-<subject>`` bearer tokens and records provider calls."""

    def __init__(self):
        self.metadata_syncs = []
        self.sessions = {}
        self.emails = {}

    def authenticate(self, token):
        if not token.startswith('token-'):
            raise Unauthorized('Invalid or expired token')
        return token[len('token-'):]

    def resolve_session(self, session_id):
        if session_id not in self.sessions:
            raise Unauthorized('Invalid session')
        return self.sessions[session_id]

    def fetch_primary_email(self, subject):
        return self.emails.get(subject, '')

    def sync_metadata(self, subject, role, organization_name=None):
        self.metadata_syncs.append((subject, role, organization_name))
        return True


class RecordingBroadcastBus:
    enabled = True

    def __init__(self):
        self.messages = []

    def publish(self, topic, payload):
        self.messages.append((topic, payload))
        return True

    def topics(self):
        return [topic for topic, _ in self.messages]


@pytest.fixture
def gateway():
    return FakeIdentityGateway()


@pytest.fixture
def bus():
    return RecordingBroadcastBus()


@pytest.fixture
def app(gateway, bus):
    app = create_app('testing', identity_gateway=gateway, broadcast_bus=bus)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_user(client):
    """First registrant, which makes them the global admin."""
    res = register(client, 'u1', 'a@x')
    assert res.status_code == 201
    return 'u1'


@pytest.fixture
def regular_user(client, admin_user):
    res = register(client, 'u2')
    assert res.status_code == 201
    return 'u2'


@pytest.fixture
def org_id(client, regular_user):
    return create_org(client, regular_user)
