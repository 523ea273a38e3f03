from flask import Blueprint, jsonify, request

from leaguefindr.auth_utils import admin_required, current_subject, login_required
from leaguefindr.errors import ValidationFailed
from leaguefindr.models import Sport
from leaguefindr.routes.helpers import json_body
from leaguefindr.services import catalog as catalog_service

sports_bp = Blueprint('sports', __name__)


def _sports_payload(sports):
    return {'sports': [sport.to_dict() for sport in sports], 'count': len(sports)}


@sports_bp.route('', methods=['GET'])
@sports_bp.route('/', methods=['GET'])
def list_sports():
    return jsonify(_sports_payload(catalog_service.list_approved(Sport)))


@sports_bp.route('/exists', methods=['GET'])
def sport_exists():
    name = str(request.args.get('name') or '').strip()
    if not name:
        raise ValidationFailed('name is required')
    return jsonify({'exists': catalog_service.sport_exists(name)})


@sports_bp.route('/<int:sport_id>', methods=['GET'])
def get_sport(sport_id):
    return jsonify({'sport': catalog_service.get_approved(Sport, sport_id).to_dict()})


@sports_bp.route('', methods=['POST'])
@sports_bp.route('/', methods=['POST'])
@login_required
def create_sport():
    sport, created = catalog_service.create_sport(current_subject(), json_body())
    return jsonify({'sport': sport.to_dict()}), 201 if created else 200


@sports_bp.route('/admin/all', methods=['GET'])
@admin_required
def list_all_sports():
    return jsonify(_sports_payload(catalog_service.list_all(Sport)))


@sports_bp.route('/admin/pending', methods=['GET'])
@admin_required
def list_pending_sports():
    return jsonify(_sports_payload(catalog_service.list_pending(Sport)))


@sports_bp.route('/<int:sport_id>/approve', methods=['PUT'])
@admin_required
def approve_sport(sport_id):
    sport = catalog_service.approve(Sport, sport_id)
    return jsonify({'message': 'Sport approved', 'sport': sport.to_dict()})


@sports_bp.route('/<int:sport_id>/reject', methods=['PUT'])
@admin_required
def reject_sport(sport_id):
    data = json_body()
    sport = catalog_service.reject(Sport, sport_id, data.get('rejection_reason'))
    return jsonify({'message': 'Sport rejected', 'sport': sport.to_dict()})
