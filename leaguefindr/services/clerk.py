"""Identity provider gateway backed by the Clerk backend API."""
import time

import jwt
import requests
from flask import current_app

from leaguefindr.errors import Unauthorized, UpstreamFailure

# minimum gap between JWKS refetches triggered by an unknown key id
JWKS_REFRESH_SECONDS = 60


def parse_bearer_token(raw_header):
    """Return the token from ``Bearer <token>`` or raise Unauthorized."""
    header = str(raw_header or '').strip()
    if not header:
        raise Unauthorized('Missing authorization header')
    parts = header.split(' ')
    if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
        raise Unauthorized('Invalid authorization header format')
    return parts[1]


def select_primary_email(user_record):
    emails = user_record.get('email_addresses') or []
    primary_id = user_record.get('primary_email_address_id')
    for entry in emails:
        if primary_id and entry.get('id') == primary_id:
            return entry.get('email_address') or ''
    if emails:
        return emails[0].get('email_address') or ''
    return ''


class ClerkGateway:
    def __init__(self, secret_key, api_url, timeout=5):
        self.secret_key = secret_key
        self.api_url = str(api_url or '').rstrip('/')
        self.timeout = timeout
        self._jwks = {}
        self._jwks_fetched_at = None

    @classmethod
    def from_config(cls, config):
        return cls(
            secret_key=config.get('CLERK_SECRET_KEY', ''),
            api_url=config.get('CLERK_API_URL', 'https://api.clerk.com/v1'),
            timeout=config.get('UPSTREAM_TIMEOUT_SECONDS', 5),
        )

    def _headers(self):
        return {
            'Authorization': f'Bearer {self.secret_key}',
            'Content-Type': 'application/json',
        }

    def _request(self, method, path, **kwargs):
        url = f'{self.api_url}{path}'
        try:
            response = requests.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            current_app.logger.error(f'clerk {method} {path} failed: {exc}')
            raise UpstreamFailure('Identity provider unavailable') from exc
        return response

    def _signing_key(self, key_id):
        if key_id in self._jwks:
            return self._jwks[key_id]
        if self._jwks_fetched_at is not None and \
                time.monotonic() - self._jwks_fetched_at < JWKS_REFRESH_SECONDS:
            current_app.logger.warning(f'clerk jwks refetch throttled for key {key_id}')
            raise Unauthorized('Invalid or expired token')
        response = self._request('GET', '/jwks')
        if response.status_code != 200:
            current_app.logger.error(
                f'clerk jwks fetch returned {response.status_code}: {response.text}'
            )
            raise Unauthorized('Invalid or expired token')
        try:
            keys = response.json().get('keys') or []
        except ValueError as exc:
            raise Unauthorized('Invalid or expired token') from exc
        self._jwks_fetched_at = time.monotonic()
        for key_data in keys:
            kid = key_data.get('kid')
            if kid:
                self._jwks[kid] = jwt.PyJWK(key_data).key
        if key_id not in self._jwks:
            current_app.logger.error(f'clerk jwks has no key {key_id}')
            raise Unauthorized('Invalid or expired token')
        return self._jwks[key_id]

    def authenticate(self, token):
        """Verify a session token and return its subject."""
        try:
            header = jwt.get_unverified_header(token)
            key = self._signing_key(header.get('kid'))
            claims = jwt.decode(
                token, key, algorithms=['RS256'],
                options={'verify_aud': False},
            )
        except jwt.PyJWTError as exc:
            current_app.logger.warning(f'token verification failed: {exc}')
            raise Unauthorized('Invalid or expired token') from exc
        except UpstreamFailure as exc:
            current_app.logger.warning(f'token verification failed: {exc.message}')
            raise Unauthorized('Invalid or expired token') from exc
        subject = str(claims.get('sub') or '').strip()
        if not subject:
            raise Unauthorized('Invalid or expired token')
        return subject

    def resolve_session(self, session_id):
        response = self._request('GET', f'/sessions/{session_id}')
        if response.status_code != 200:
            current_app.logger.error(
                f'clerk session lookup for {session_id} returned '
                f'{response.status_code}: {response.text}'
            )
            raise Unauthorized('Invalid session')
        try:
            user_id = str(response.json().get('user_id') or '').strip()
        except ValueError as exc:
            raise UpstreamFailure('Invalid identity provider response') from exc
        if not user_id:
            current_app.logger.error(f'clerk session {session_id} has no user_id')
            raise UpstreamFailure('user_id not found in session')
        return user_id

    def fetch_user(self, subject):
        response = self._request('GET', f'/users/{subject}')
        if response.status_code != 200:
            current_app.logger.error(
                f'clerk user fetch for {subject} returned {response.status_code}: {response.text}'
            )
            raise UpstreamFailure('Unable to load user from identity provider')
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFailure('Invalid identity provider response') from exc

    def fetch_primary_email(self, subject):
        return select_primary_email(self.fetch_user(subject))

    def sync_metadata(self, subject, role, organization_name=None):
        """Mirror role metadata to the provider. Failures are only logged."""
        metadata = {'role': role}
        if organization_name:
            metadata['organizationName'] = organization_name
        try:
            response = self._request(
                'PATCH', f'/users/{subject}/metadata',
                json={'public_metadata': metadata},
            )
        except UpstreamFailure:
            return False
        if response.status_code >= 300:
            current_app.logger.error(
                f'clerk metadata sync for {subject} returned '
                f'{response.status_code}: {response.text}'
            )
            return False
        current_app.logger.info(f'synced clerk metadata for {subject} role={role}')
        return True


def get_gateway():
    return current_app.extensions['identity_gateway']
