from flask import Blueprint, jsonify

from leaguefindr.auth_utils import admin_required, current_subject, login_required
from leaguefindr.routes.helpers import json_body
from leaguefindr.services import users as user_service

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    user, is_admin = user_service.register_user(
        data.get('clerkID'), data.get('email'), data.get('organizationName'),
    )
    return jsonify({
        'message': 'User registered successfully',
        'isAdmin': is_admin,
        'user': user.to_dict(),
    }), 201


@auth_bp.route('/user/<user_id>', methods=['GET'])
def get_user(user_id):
    return jsonify(user_service.get_user(user_id).to_dict())


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    user = user_service.record_login(data.get('sessionID'))
    return jsonify({'message': 'Login recorded', 'user': user.to_dict()})


@auth_bp.route('/user/<user_id>/role', methods=['PATCH'])
@admin_required
def update_role(user_id):
    data = json_body()
    user = user_service.update_user_role(user_id, str(data.get('role') or '').strip())
    return jsonify({'message': 'Role updated', 'user': user.to_dict()})


@auth_bp.route('/supabase-token', methods=['GET'])
@login_required
def supabase_token():
    token, expires_in = user_service.mint_supabase_token(current_subject())
    return jsonify({'supabaseToken': token, 'expiresIn': expires_in})
