"""Notification fan-out: durable rows first, realtime broadcast second."""
from flask import current_app

from leaguefindr.errors import InvalidInput, NotFound, ServiceError
from leaguefindr.services.broadcast import ADMIN_TOPIC, get_bus, user_topic
from leaguefindr.store import notifications as notification_store
from leaguefindr.store import users as user_store
from leaguefindr.store.clients import service_client
from leaguefindr.time_utils import format_timestamp, utcnow_naive

LEAGUE_APPROVED = 'league_approved'
LEAGUE_REJECTED = 'league_rejected'
LEAGUE_SUBMITTED = 'league_submitted'
DRAFT_SAVED = 'draft_saved'
TEMPLATE_SAVED = 'template_saved'

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def emit(recipient_id, notification_type, title, message,
         related_league_id=None, related_org_id=None):
    """Store a notification for one user and push it to their channel.

    Returns the stored row, or None when the recipient is unknown or has the
    type switched off.
    """
    client = service_client()
    if not user_store.exists(client, recipient_id):
        current_app.logger.warning(
            f'notification {notification_type} skipped: unknown recipient {recipient_id}'
        )
        return None
    if not notification_store.is_type_enabled(client, recipient_id, notification_type):
        current_app.logger.info(
            f'notification {notification_type} skipped by preference for {recipient_id}'
        )
        return None

    notification = notification_store.insert(
        client, recipient_id, notification_type, title, message,
        related_league_id=related_league_id, related_org_id=related_org_id,
    )
    get_bus().publish(user_topic(recipient_id), notification.to_broadcast_payload())
    return notification


def emit_to_admins(notification_type, title, message,
                   related_league_id=None, related_org_id=None):
    client = service_client()
    delivered = []
    for admin in user_store.list_active_admins(client):
        notification = emit(
            admin.id, notification_type, title, message,
            related_league_id=related_league_id, related_org_id=related_org_id,
        )
        if notification is not None:
            delivered.append(notification)

    get_bus().publish(ADMIN_TOPIC, {
        'type': notification_type, 'title': title, 'message': message,
        'read': False, 'relatedLeagueId': related_league_id,
        'relatedOrgId': str(related_org_id) if related_org_id else None,
        'createdAt': format_timestamp(utcnow_naive()),
    })
    return delivered


def notify_after_commit(recipient_id, notification_type, title, message,
                        related_league_id=None, related_org_id=None):
    """Like ``emit`` but for changes that are already durable.

    A failed notification is logged and does not fail the request.
    """
    try:
        return emit(
            recipient_id, notification_type, title, message,
            related_league_id=related_league_id, related_org_id=related_org_id,
        )
    except ServiceError as exc:
        current_app.logger.error(
            f'notification {notification_type} for {recipient_id} failed: {exc.message}'
        )
        return None


def notify_admins_after_commit(notification_type, title, message,
                               related_league_id=None, related_org_id=None):
    try:
        return emit_to_admins(
            notification_type, title, message,
            related_league_id=related_league_id, related_org_id=related_org_id,
        )
    except ServiceError as exc:
        current_app.logger.error(f'admin notification {notification_type} failed: {exc.message}')
        return []


def parse_pagination(raw_limit, raw_offset, default_limit=DEFAULT_LIMIT):
    try:
        limit = int(raw_limit) if raw_limit not in (None, '') else default_limit
        offset = int(raw_offset) if raw_offset not in (None, '') else 0
    except (TypeError, ValueError) as exc:
        raise InvalidInput('limit and offset must be integers') from exc
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidInput(f'limit must be between 1 and {MAX_LIMIT}')
    if offset < 0:
        raise InvalidInput('offset must be zero or greater')
    return limit, offset


def list_notifications(client, user_id, limit, offset):
    rows, total = notification_store.list_for_user(client, user_id, limit, offset)
    return {
        'notifications': [row.to_dict() for row in rows],
        'count': total,
        'limit': limit,
        'offset': offset,
    }


def mark_read(client, notification_id, user_id):
    if not notification_store.mark_read(client, notification_id, user_id):
        raise NotFound('Notification not found')


def mark_all_read(client, user_id):
    return notification_store.mark_all_read(client, user_id)


def get_preferences(client, user_id):
    prefs = notification_store.get_preferences(client, user_id)
    if prefs is None:
        data = {field: True for field in notification_store.PREFERENCE_FIELDS}
        data['user_id'] = user_id
        return data
    return prefs.to_dict()


def update_preferences(client, user_id, payload):
    if not isinstance(payload, dict):
        raise InvalidInput('Invalid request body')
    changes = {}
    for field, value in payload.items():
        if field not in notification_store.PREFERENCE_FIELDS:
            raise InvalidInput(f'Unknown preference: {field}')
        if not isinstance(value, bool):
            raise InvalidInput(f'{field} must be a boolean')
        changes[field] = value
    return notification_store.upsert_preferences(client, user_id, changes).to_dict()
