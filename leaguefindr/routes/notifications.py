from flask import Blueprint, jsonify

from leaguefindr.auth_utils import current_subject, login_required
from leaguefindr.routes.helpers import json_body, pagination_args
from leaguefindr.services import notifications as notification_service
from leaguefindr.store.clients import rls_client

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['GET'])
@notifications_bp.route('/', methods=['GET'])
@login_required
def list_notifications():
    limit, offset = pagination_args()
    subject = current_subject()
    return jsonify(notification_service.list_notifications(
        rls_client(subject), subject, limit, offset,
    ))


@notifications_bp.route('/<int:notification_id>/read', methods=['PATCH'])
@login_required
def mark_read(notification_id):
    subject = current_subject()
    notification_service.mark_read(rls_client(subject), notification_id, subject)
    return jsonify({'message': 'Notification marked as read'})


@notifications_bp.route('/read-all', methods=['PATCH'])
@login_required
def mark_all_read():
    subject = current_subject()
    updated = notification_service.mark_all_read(rls_client(subject), subject)
    return jsonify({'message': 'Notifications marked as read', 'updated': updated})


@notifications_bp.route('/preferences', methods=['GET'])
@login_required
def get_preferences():
    subject = current_subject()
    return jsonify({'preferences': notification_service.get_preferences(rls_client(subject), subject)})


@notifications_bp.route('/preferences', methods=['PUT'])
@login_required
def update_preferences():
    subject = current_subject()
    prefs = notification_service.update_preferences(rls_client(subject), subject, json_body())
    return jsonify({'preferences': prefs})
