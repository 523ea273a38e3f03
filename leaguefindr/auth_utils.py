from functools import wraps

from flask import request

from leaguefindr.errors import Forbidden, NotFound, Unauthorized
from leaguefindr.services.clerk import get_gateway, parse_bearer_token
from leaguefindr.store import organizations as org_store
from leaguefindr.store import users as user_store
from leaguefindr.store.clients import service_client

SUBJECT_HEADER = 'X-Clerk-User-ID'
_SUBJECT_ENVIRON_KEY = 'HTTP_' + SUBJECT_HEADER.upper().replace('-', '_')


def current_subject():
    return getattr(request, 'current_user_id', None)


def require_authenticated(subject):
    if not subject:
        raise Unauthorized()
    return subject


def require_global_admin(subject):
    require_authenticated(subject)
    user = user_store.get_by_id(service_client(), subject)
    if user is None or not user.is_active or user.role != 'admin':
        raise Forbidden('Forbidden: admin access required')
    return user


def is_global_admin(subject):
    user = user_store.get_by_id(service_client(), subject)
    return bool(user and user.is_admin)


def require_org_member(subject, org_id):
    require_authenticated(subject)
    if not org_id:
        raise Forbidden('Organization access required')
    if not org_store.user_has_access(service_client(), subject, org_id):
        raise Forbidden('You do not have access to this organization')


def require_org_admin(subject, org_id):
    require_authenticated(subject)
    if not org_store.is_admin_or_owner(service_client(), subject, org_id):
        raise Forbidden('Organization admin or owner access required')


def validate_user_role(user_id, role):
    """True when the user holds ``role``. Inactive accounts are refused."""
    user = user_store.get_by_id(service_client(), user_id)
    if user is None:
        raise NotFound('User not found')
    if not user.is_active:
        raise Forbidden('user account is inactive')
    return user.role == role


def login_required(f):
    """Verify the bearer token and attach the subject to the request."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = parse_bearer_token(request.headers.get('Authorization'))
        subject = get_gateway().authenticate(token)
        request.environ[_SUBJECT_ENVIRON_KEY] = subject
        request.current_user_id = subject
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Decorator to require an authenticated, active global admin."""
    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        request.current_user = require_global_admin(current_subject())
        return f(*args, **kwargs)
    return decorated
