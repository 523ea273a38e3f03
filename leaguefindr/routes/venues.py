from flask import Blueprint, jsonify, request

from leaguefindr.auth_utils import admin_required, current_subject, login_required
from leaguefindr.errors import ValidationFailed
from leaguefindr.models import Venue
from leaguefindr.routes.helpers import json_body
from leaguefindr.services import catalog as catalog_service

venues_bp = Blueprint('venues', __name__)


def _venues_payload(venues):
    return {'venues': [venue.to_dict() for venue in venues], 'count': len(venues)}


@venues_bp.route('', methods=['GET'])
@venues_bp.route('/', methods=['GET'])
def list_venues():
    return jsonify(_venues_payload(catalog_service.list_approved(Venue)))


@venues_bp.route('/exists', methods=['GET'])
def venue_exists():
    address = str(request.args.get('address') or '').strip()
    if not address:
        raise ValidationFailed('address is required')
    return jsonify({'exists': catalog_service.venue_exists(address)})


@venues_bp.route('/<int:venue_id>', methods=['GET'])
def get_venue(venue_id):
    return jsonify({'venue': catalog_service.get_approved(Venue, venue_id).to_dict()})


@venues_bp.route('', methods=['POST'])
@venues_bp.route('/', methods=['POST'])
@login_required
def create_venue():
    venue, created = catalog_service.create_venue(current_subject(), json_body())
    return jsonify({'venue': venue.to_dict()}), 201 if created else 200


@venues_bp.route('/admin/all', methods=['GET'])
@admin_required
def list_all_venues():
    return jsonify(_venues_payload(catalog_service.list_all(Venue)))


@venues_bp.route('/admin/pending', methods=['GET'])
@admin_required
def list_pending_venues():
    return jsonify(_venues_payload(catalog_service.list_pending(Venue)))


@venues_bp.route('/<int:venue_id>/approve', methods=['PUT'])
@admin_required
def approve_venue(venue_id):
    venue = catalog_service.approve(Venue, venue_id)
    return jsonify({'message': 'Venue approved', 'venue': venue.to_dict()})


@venues_bp.route('/<int:venue_id>/reject', methods=['PUT'])
@admin_required
def reject_venue(venue_id):
    data = json_body()
    venue = catalog_service.reject(Venue, venue_id, data.get('rejection_reason'))
    return jsonify({'message': 'Venue rejected', 'venue': venue.to_dict()})
