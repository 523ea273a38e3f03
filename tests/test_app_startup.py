"""Tests for app startup, health checks and origin handling."""
import json

import pytest

from leaguefindr.app import _parse_allowed_origins, create_app
from leaguefindr.config import ProductionConfig, TestingConfig


def test_parse_allowed_origins():
    assert _parse_allowed_origins(None) == '*'
    assert _parse_allowed_origins(' * ') == '*'
    assert _parse_allowed_origins('https://a.test, https://b.test,') == [
        'https://a.test', 'https://b.test',
    ]
    assert _parse_allowed_origins(['https://a.test', '']) == ['https://a.test']


@pytest.mark.parametrize('path', ['/', '/v1/'])
def test_health_reports_version(client, path):
    res = client.get(path)
    assert res.status_code == 200
    assert json.loads(res.data) == {
        'status': 'ok', 'version': '1.0.0', 'message': 'LeagueFindr API is running',
    }


def test_unknown_route_and_method_are_json(client):
    res = client.get('/v1/does-not-exist')
    assert res.status_code == 404
    assert 'error' in json.loads(res.data)

    res = client.delete('/v1/sports')
    assert res.status_code == 405
    assert 'error' in json.loads(res.data)


def test_cors_allows_configured_origin_only(client):
    res = client.options('/v1/leagues', headers={
        'Origin': 'http://localhost:3000',
        'Access-Control-Request-Method': 'PATCH',
    })
    assert res.headers.get('Access-Control-Allow-Origin') == 'http://localhost:3000'
    assert res.headers.get('Access-Control-Allow-Credentials') == 'true'
    assert 'PATCH' in res.headers.get('Access-Control-Allow-Methods', '')

    res = client.get('/v1/leagues', headers={'Origin': 'https://evil.test'})
    assert res.headers.get('Access-Control-Allow-Origin') is None


def test_dev_environment_allows_any_origin(monkeypatch, gateway, bus):
    monkeypatch.setattr(TestingConfig, 'ENV', 'dev')
    app = create_app('testing', identity_gateway=gateway, broadcast_bus=bus)
    res = app.test_client().get('/v1/leagues', headers={'Origin': 'https://anywhere.test'})
    assert res.headers.get('Access-Control-Allow-Origin') is not None


def test_production_requires_clerk_secret(monkeypatch):
    monkeypatch.setattr(ProductionConfig, 'CLERK_SECRET_KEY', '')
    monkeypatch.setattr(ProductionConfig, 'CORS_ALLOWED_ORIGINS', 'https://app.test')
    with pytest.raises(RuntimeError, match='CLERK_SECRET_KEY'):
        create_app('production')


def test_production_requires_explicit_origins(monkeypatch):
    monkeypatch.setattr(ProductionConfig, 'ENV', 'production')
    monkeypatch.setattr(ProductionConfig, 'CLERK_SECRET_KEY', 'sk_live_x')
    monkeypatch.setattr(ProductionConfig, 'CORS_ALLOWED_ORIGINS', '*')
    with pytest.raises(RuntimeError, match='CORS_ALLOWED_ORIGINS'):
        create_app('production')
