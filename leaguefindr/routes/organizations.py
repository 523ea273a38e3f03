from flask import Blueprint, jsonify

from leaguefindr.auth_utils import admin_required, current_subject, login_required
from leaguefindr.routes.helpers import json_body
from leaguefindr.services import organizations as org_service

organizations_bp = Blueprint('organizations', __name__)


@organizations_bp.route('', methods=['POST'])
@organizations_bp.route('/', methods=['POST'])
@login_required
def create_organization():
    org = org_service.create_organization(current_subject(), json_body())
    return jsonify({'organization': org.to_dict()}), 201


@organizations_bp.route('/user', methods=['GET'])
@login_required
def get_user_organizations():
    return jsonify({'organizations': org_service.list_user_organizations(current_subject())})


@organizations_bp.route('', methods=['GET'])
@organizations_bp.route('/', methods=['GET'])
@organizations_bp.route('/admin', methods=['GET'])
@admin_required
def list_organizations():
    orgs = org_service.list_all_organizations()
    return jsonify({'organizations': [org.to_dict() for org in orgs]})


@organizations_bp.route('/join', methods=['POST'])
@login_required
def join_organization():
    data = json_body()
    org_id = str(data.get('orgID') or data.get('org_id') or '').strip()
    membership = org_service.join_organization(current_subject(), org_id)
    return jsonify({'membership': membership.to_dict()})


@organizations_bp.route('/<org_id>', methods=['GET'])
@login_required
def get_organization(org_id):
    org = org_service.get_organization(current_subject(), org_id)
    return jsonify({'organization': org.to_dict()})


@organizations_bp.route('/<org_id>', methods=['PUT'])
@login_required
def update_organization(org_id):
    org = org_service.update_organization(current_subject(), org_id, json_body())
    return jsonify({'organization': org.to_dict()})


@organizations_bp.route('/<org_id>', methods=['DELETE'])
@login_required
def delete_organization(org_id):
    org_service.delete_organization(current_subject(), org_id)
    return jsonify({'message': 'Organization deleted'})


@organizations_bp.route('/<org_id>/members', methods=['GET'])
@login_required
def list_members(org_id):
    members = org_service.list_members(current_subject(), org_id)
    return jsonify({'members': [member.to_dict() for member in members]})


@organizations_bp.route('/<org_id>/leave', methods=['POST'])
@login_required
def leave_organization(org_id):
    org_service.leave_organization(current_subject(), org_id)
    return jsonify({'message': 'Left organization'})


@organizations_bp.route('/<org_id>/members/<member_id>/role', methods=['PATCH'])
@login_required
def change_member_role(org_id, member_id):
    data = json_body()
    membership = org_service.change_member_role(
        current_subject(), org_id, member_id, str(data.get('role') or '').strip(),
    )
    return jsonify({'membership': membership.to_dict()})
