"""League submissions, drafts, templates and admin curation."""
from flask import Blueprint, jsonify, request

from leaguefindr.auth_utils import admin_required, current_subject, login_required
from leaguefindr.routes.helpers import json_body, org_id_arg, paginated, pagination_args
from leaguefindr.services import drafts as draft_service
from leaguefindr.services import leagues as league_service

leagues_bp = Blueprint('leagues', __name__)


def _leagues_payload(leagues):
    return {'leagues': [league.to_dict() for league in leagues], 'count': len(leagues)}


def _reject_body():
    return json_body().get('rejection_reason')


# ── Public ──────────────────────────────────────────────────────────────

@leagues_bp.route('', methods=['GET'])
@leagues_bp.route('/', methods=['GET'])
def list_leagues():
    if 'limit' in request.args or 'offset' in request.args:
        limit, offset = pagination_args()
        rows, total = league_service.list_approved_paginated(limit, offset)
        return jsonify(paginated('leagues', rows, total, limit, offset))
    return jsonify(_leagues_payload(league_service.list_approved()))


@leagues_bp.route('/<int:league_id>', methods=['GET'])
def get_league(league_id):
    return jsonify({'league': league_service.get_approved(league_id).to_dict()})


# ── Organization members ───────────────────────────────────────────────

@leagues_bp.route('', methods=['POST'])
@leagues_bp.route('/', methods=['POST'])
@login_required
def create_league():
    data = json_body()
    league = league_service.create_league(current_subject(), org_id_arg(data), data)
    return jsonify({'league': league.to_dict()}), 201


@leagues_bp.route('/org/<org_id>', methods=['GET'])
@login_required
def list_org_leagues(org_id):
    status = str(request.args.get('status') or '').strip() or None
    leagues = league_service.list_for_org(current_subject(), org_id, status)
    return jsonify(_leagues_payload(leagues))


# ── Drafts ──────────────────────────────────────────────────────────────

@leagues_bp.route('/drafts/org/<org_id>', methods=['GET'])
@login_required
def get_org_draft(org_id):
    draft = draft_service.get_draft(current_subject(), org_id)
    return jsonify({'draft': draft.to_dict() if draft else None})


@leagues_bp.route('/drafts/org/<org_id>', methods=['DELETE'])
@login_required
def delete_org_draft(org_id):
    draft_service.delete_own_draft(current_subject(), org_id)
    return jsonify({'message': 'Draft deleted'})


@leagues_bp.route('/drafts', methods=['GET'])
@login_required
def list_drafts():
    drafts = draft_service.list_drafts(current_subject(), org_id_arg())
    return jsonify({'drafts': [draft.to_dict() for draft in drafts]})


@leagues_bp.route('/drafts', methods=['POST'])
@login_required
def save_draft():
    data = json_body()
    draft = draft_service.save_draft(current_subject(), org_id_arg(data), data)
    return jsonify({'draft': draft.to_dict()})


@leagues_bp.route('/drafts/<int:draft_id>', methods=['PUT'])
@login_required
def update_draft(draft_id):
    data = json_body()
    draft = draft_service.update_draft(current_subject(), org_id_arg(data), draft_id, data)
    return jsonify({'draft': draft.to_dict()})


@leagues_bp.route('/drafts/<int:draft_id>', methods=['DELETE'])
@login_required
def delete_draft(draft_id):
    draft_service.delete_draft(current_subject(), org_id_arg(), draft_id)
    return jsonify({'message': 'Draft deleted'})


# ── Templates ───────────────────────────────────────────────────────────

@leagues_bp.route('/templates', methods=['GET'])
@login_required
def list_templates():
    templates = draft_service.list_templates(current_subject(), org_id_arg())
    return jsonify({'templates': [template.to_dict() for template in templates]})


@leagues_bp.route('/templates', methods=['POST'])
@login_required
def create_template():
    data = json_body()
    template = draft_service.create_template(current_subject(), org_id_arg(data), data)
    return jsonify({'template': template.to_dict()}), 201


@leagues_bp.route('/templates/<int:template_id>', methods=['GET'])
@login_required
def get_template(template_id):
    template = draft_service.get_template(current_subject(), org_id_arg(), template_id)
    return jsonify({'template': template.to_dict()})


@leagues_bp.route('/templates/<int:template_id>', methods=['PUT'])
@login_required
def update_template(template_id):
    data = json_body()
    template = draft_service.update_template(
        current_subject(), org_id_arg(data), template_id, data,
    )
    return jsonify({'template': template.to_dict()})


@leagues_bp.route('/templates/<int:template_id>', methods=['DELETE'])
@login_required
def delete_template(template_id):
    draft_service.delete_template(current_subject(), org_id_arg(), template_id)
    return jsonify({'message': 'Template deleted'})


# ── Global admin ────────────────────────────────────────────────────────

@leagues_bp.route('/admin/all', methods=['GET'])
@admin_required
def admin_list_all():
    limit, offset = pagination_args()
    rows, total = league_service.list_all_paginated(limit, offset)
    return jsonify(paginated('leagues', rows, total, limit, offset))


@leagues_bp.route('/admin/pending', methods=['GET'])
@admin_required
def admin_list_pending():
    limit, offset = pagination_args()
    rows, total = league_service.list_pending_paginated(limit, offset)
    return jsonify(paginated('leagues', rows, total, limit, offset))


@leagues_bp.route('/admin/drafts/all', methods=['GET'])
@admin_required
def admin_list_drafts():
    drafts = draft_service.list_all_drafts()
    return jsonify({'drafts': [draft.to_dict() for draft in drafts]})


@leagues_bp.route('/admin/templates/all', methods=['GET'])
@admin_required
def admin_list_templates():
    templates = draft_service.list_all_templates()
    return jsonify({'templates': [template.to_dict() for template in templates]})


@leagues_bp.route('/admin/<int:league_id>', methods=['GET'])
@admin_required
def admin_get_league(league_id):
    return jsonify({'league': league_service.get_any(league_id).to_dict()})


@leagues_bp.route('/admin/<int:league_id>', methods=['PUT'])
@admin_required
def admin_update_league(league_id):
    league = league_service.admin_update(league_id, json_body())
    return jsonify({'league': league.to_dict()})


@leagues_bp.route('/<int:league_id>/approve', methods=['PUT'])
@leagues_bp.route('/admin/<int:league_id>/approve', methods=['PUT'])
@admin_required
def approve_league(league_id):
    league = league_service.approve_league(current_subject(), league_id)
    return jsonify({'message': 'League approved', 'league': league.to_dict()})


@leagues_bp.route('/<int:league_id>/reject', methods=['PUT'])
@leagues_bp.route('/admin/<int:league_id>/reject', methods=['PUT'])
@admin_required
def reject_league(league_id):
    league = league_service.reject_league(current_subject(), league_id, _reject_body())
    return jsonify({'message': 'League rejected', 'league': league.to_dict()})
