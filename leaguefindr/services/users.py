from datetime import UTC, datetime, timedelta

import jwt
from flask import current_app

from leaguefindr.errors import Conflict, NotFound, UpstreamFailure, ValidationFailed
from leaguefindr.models import GLOBAL_ROLES
from leaguefindr.services.clerk import get_gateway
from leaguefindr.store import users as user_store
from leaguefindr.store.clients import service_client

SUPABASE_ISSUER = 'https://supabase.io/auth/v1'
SUPABASE_AUDIENCE = 'authenticated'


def register_user(clerk_id, email, organization_name=None):
    """Create the user record. The first registrant becomes admin.

    Returns ``(user, is_admin)``.
    """
    errors = []
    if not str(clerk_id or '').strip():
        errors.append('clerkID is required')
    if not str(email or '').strip():
        errors.append('email is required')
    if errors:
        raise ValidationFailed(errors)

    client = service_client()
    if user_store.exists(client, clerk_id):
        raise Conflict('user already exists')

    role = 'user' if user_store.admin_exists(client) else 'admin'
    current_app.logger.info(f'registering {clerk_id} with role={role}')
    user = user_store.create(client, clerk_id, email.strip(), role)

    get_gateway().sync_metadata(clerk_id, role, organization_name)
    return user, role == 'admin'


def get_user(user_id):
    user = user_store.get_by_id(service_client(), user_id)
    if user is None:
        raise NotFound('User not found')
    return user


def record_login(session_id):
    if not str(session_id or '').strip():
        raise ValidationFailed('sessionID is required')
    user_id = get_gateway().resolve_session(session_id)
    client = service_client()
    if not user_store.update_last_login(client, user_id):
        raise NotFound('User not found')
    return user_store.get_by_id(client, user_id)


def update_user_role(user_id, role):
    if role not in GLOBAL_ROLES:
        raise ValidationFailed(f'role must be one of: {", ".join(GLOBAL_ROLES)}')
    client = service_client()
    user = user_store.get_by_id(client, user_id)
    if user is None:
        raise NotFound('User not found')
    user_store.update_role(client, user, role)
    get_gateway().sync_metadata(user_id, role)
    return user


def mint_supabase_token(subject):
    """Sign an HS256 token the database proxy accepts for row-level security."""
    secret = current_app.config.get('SUPABASE_JWT_SECRET')
    if not secret:
        current_app.logger.error('SUPABASE_JWT_SECRET is not configured')
        raise UpstreamFailure('Token service not configured')

    user = get_user(subject)
    email = get_gateway().fetch_primary_email(subject) or user.email
    ttl = int(current_app.config.get('SUPABASE_TOKEN_TTL_SECONDS', 3600))
    now = datetime.now(UTC)
    claims = {
        'sub': subject,
        'email': email,
        'role': user.role,
        'exp': now + timedelta(seconds=ttl),
        'iat': now,
        'iss': SUPABASE_ISSUER,
        'aud': SUPABASE_AUDIENCE,
    }
    return jwt.encode(claims, secret, algorithm='HS256'), ttl
