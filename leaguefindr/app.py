from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

from leaguefindr.config import config

db = SQLAlchemy()

API_PREFIX = '/v1'
CORS_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
CORS_HEADERS = [
    'Accept', 'Authorization', 'Content-Type', 'X-CSRF-Token', 'X-Clerk-User-ID',
]


def _parse_allowed_origins(raw_origins):
    if not raw_origins:
        return '*'

    if isinstance(raw_origins, (list, tuple, set)):
        cleaned = [origin for origin in raw_origins if origin]
        return cleaned or '*'

    raw_text = str(raw_origins).strip()
    if not raw_text or raw_text == '*':
        return '*'

    origins = [origin.strip() for origin in raw_text.split(',') if origin.strip()]
    return origins or '*'


def _allowed_origins(app):
    if str(app.config.get('ENV') or '').strip().lower() == 'dev':
        return '*'
    return _parse_allowed_origins(app.config.get('CORS_ALLOWED_ORIGINS'))


def _health():
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION'),
        'message': 'LeagueFindr API is running',
    })


def create_app(config_name='development', identity_gateway=None, broadcast_bus=None):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    allowed_origins = _allowed_origins(app)
    if str(config_name).strip().lower() == 'production':
        if not str(app.config.get('CLERK_SECRET_KEY') or '').strip():
            raise RuntimeError('CLERK_SECRET_KEY must be set in production')
        if allowed_origins == '*':
            raise RuntimeError('CORS_ALLOWED_ORIGINS must be explicitly set in production')

    db.init_app(app)
    CORS(
        app,
        resources={r'/v1/*': {'origins': allowed_origins}},
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        expose_headers=['Link'],
        supports_credentials=True,
        max_age=300,
    )

    from leaguefindr.services.broadcast import BroadcastBus
    from leaguefindr.services.clerk import ClerkGateway

    app.extensions['identity_gateway'] = identity_gateway or ClerkGateway.from_config(app.config)
    app.extensions['broadcast_bus'] = broadcast_bus or BroadcastBus.from_config(app.config)
    if not app.extensions['broadcast_bus'].enabled:
        app.logger.warning('realtime broadcasts are disabled: broadcast URL or API key missing')

    from leaguefindr.errors import register_error_handlers
    register_error_handlers(app)

    @app.after_request
    def _log_request(response):
        if app.config.get('ENV') == 'dev':
            app.logger.info(f'{request.method} {request.path} -> {response.status_code}')
        return response

    from leaguefindr.routes.auth import auth_bp
    from leaguefindr.routes.leagues import leagues_bp
    from leaguefindr.routes.notifications import notifications_bp
    from leaguefindr.routes.organizations import organizations_bp
    from leaguefindr.routes.sports import sports_bp
    from leaguefindr.routes.venues import venues_bp

    app.register_blueprint(auth_bp, url_prefix=f'{API_PREFIX}/auth')
    app.register_blueprint(organizations_bp, url_prefix=f'{API_PREFIX}/organizations')
    app.register_blueprint(sports_bp, url_prefix=f'{API_PREFIX}/sports')
    app.register_blueprint(venues_bp, url_prefix=f'{API_PREFIX}/venues')
    app.register_blueprint(leagues_bp, url_prefix=f'{API_PREFIX}/leagues')
    app.register_blueprint(notifications_bp, url_prefix=f'{API_PREFIX}/notifications')

    app.add_url_rule('/', 'health', _health)
    app.add_url_rule(f'{API_PREFIX}/', 'api_health', _health)

    with app.app_context():
        from leaguefindr import models  # noqa: F401
        db.create_all()

    return app
