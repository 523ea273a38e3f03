import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_str(name, default=''):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip()


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _normalize_database_url(raw_url):
    if not raw_url:
        return raw_url
    if raw_url.startswith('postgres://'):
        return raw_url.replace('postgres://', 'postgresql://', 1)
    return raw_url


def _engine_options(database_url, statement_timeout_ms):
    """Postgres connections get a server-side statement timeout."""
    if not database_url or not database_url.startswith('postgresql'):
        return {}
    return {
        'pool_pre_ping': True,
        'connect_args': {'options': f'-c statement_timeout={int(statement_timeout_ms)}'},
    }


class BaseConfig:
    APP_VERSION = '1.0.0'
    ENV = _env_str('ENV', 'dev')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SUPABASE_URL = _env_str('SUPABASE_URL')
    SUPABASE_ANON_KEY = _env_str('SUPABASE_ANON_KEY')
    SUPABASE_SECRET_KEY = _env_str('SUPABASE_SECRET_KEY')
    SUPABASE_JWT_SECRET = _env_str('SUPABASE_JWT_SECRET')
    SUPABASE_BROADCAST_URL = _env_str('SUPABASE_BROADCAST_URL')
    SUPABASE_API_KEY = _env_str('SUPABASE_API_KEY')
    SUPABASE_TOKEN_TTL_SECONDS = 3600

    CLERK_SECRET_KEY = _env_str('CLERK_SECRET_KEY')
    CLERK_PUBLISHABLE_KEY = _env_str('CLERK_PUBLISHABLE_KEY')
    CLERK_API_URL = _env_str('CLERK_API_URL', 'https://api.clerk.com/v1')

    CORS_ALLOWED_ORIGINS = _env_str('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')
    UPSTREAM_TIMEOUT_SECONDS = _env_int('UPSTREAM_TIMEOUT_SECONDS', 5)
    DB_STATEMENT_TIMEOUT_MS = _env_int('DB_STATEMENT_TIMEOUT_MS', 10000)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(
        os.environ.get(
            'DATABASE_URL',
            'sqlite:///' + os.path.join(basedir, '..', 'leaguefindr_dev.db')
        )
    )
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(
        SQLALCHEMY_DATABASE_URI, BaseConfig.DB_STATEMENT_TIMEOUT_MS
    )


class TestingConfig(BaseConfig):
    TESTING = True
    ENV = 'test'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SUPABASE_JWT_SECRET = 'test-supabase-jwt-secret-with-32-bytes!'
    SUPABASE_BROADCAST_URL = ''
    SUPABASE_API_KEY = ''
    CLERK_SECRET_KEY = 'sk_test_dummy'
    CORS_ALLOWED_ORIGINS = 'http://localhost:3000'


class ProductionConfig(BaseConfig):
    DEBUG = False
    ENV = _env_str('ENV', 'production')
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(os.environ.get('DATABASE_URL'))
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(
        SQLALCHEMY_DATABASE_URI, BaseConfig.DB_STATEMENT_TIMEOUT_MS
    )


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
