import json
import uuid

from leaguefindr.app import db
from leaguefindr.time_utils import format_date, format_timestamp, utcnow_naive

SUBMISSION_STATUSES = ('pending', 'approved', 'rejected')
GLOBAL_ROLES = ('user', 'admin')
ORG_ROLES = ('owner', 'admin', 'member')
PRICING_STRATEGIES = ('per_team', 'per_person')
DRAFT_TYPES = ('draft', 'template')


def _safe_json(raw_value, fallback=None):
    if fallback is None:
        fallback = {}
    if not raw_value:
        return fallback
    try:
        return json.loads(raw_value)
    except (TypeError, ValueError):
        return fallback


def _dump_json(value):
    if value is None:
        return None
    return json.dumps(value)


def _new_uuid():
    return str(uuid.uuid4())


class User(db.Model):
    id = db.Column(db.String(255), primary_key=True)  # identity provider subject
    email = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), default='user', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    login_count = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    @property
    def is_admin(self):
        return self.is_active and self.role == 'admin'

    def to_dict(self):
        return {
            'id': self.id, 'email': self.email, 'role': self.role,
            'is_active': self.is_active, 'email_verified': self.email_verified,
            'last_login': format_timestamp(self.last_login),
            'login_count': self.login_count,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class Organization(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    org_name = db.Column(db.String(255), nullable=False)
    org_url = db.Column(db.String(500), nullable=True)
    org_email = db.Column(db.String(255), nullable=True)
    org_phone = db.Column(db.String(50), nullable=True)
    org_address = db.Column(db.String(500), nullable=True)
    created_by = db.Column(db.String(255), db.ForeignKey('user.id'), nullable=True)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'org_name': self.org_name, 'org_url': self.org_url,
            'org_email': self.org_email, 'org_phone': self.org_phone,
            'org_address': self.org_address, 'created_by': self.created_by,
            'is_deleted': self.is_deleted,
            'deleted_at': format_timestamp(self.deleted_at),
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class OrgMembership(db.Model):
    __table_args__ = (
        db.UniqueConstraint('user_id', 'org_id', name='uq_org_membership_user_org'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), db.ForeignKey('user.id'), nullable=False, index=True)
    org_id = db.Column(db.String(36), db.ForeignKey('organization.id'), nullable=False, index=True)
    role_in_org = db.Column(db.String(20), default='member', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    joined_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    organization = db.relationship('Organization', backref='memberships')

    def to_dict(self):
        return {
            'id': self.id, 'user_id': self.user_id, 'org_id': self.org_id,
            'role_in_org': self.role_in_org, 'is_active': self.is_active,
            'joined_at': format_timestamp(self.joined_at),
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class Sport(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), default='pending', nullable=False)
    rejection_reason = db.Column(db.String(500), nullable=True)
    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'status': self.status,
            'rejection_reason': self.rejection_reason,
            'created_by': self.created_by,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class Venue(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    lat = db.Column(db.Float, nullable=True)
    lng = db.Column(db.Float, nullable=True)
    status = db.Column(db.String(20), default='pending', nullable=False)
    rejection_reason = db.Column(db.String(500), nullable=True)
    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'address': self.address,
            'lat': self.lat, 'lng': self.lng, 'status': self.status,
            'rejection_reason': self.rejection_reason,
            'created_by': self.created_by,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class League(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.String(36), db.ForeignKey('organization.id'), nullable=False, index=True)
    sport_id = db.Column(db.Integer, db.ForeignKey('sport.id'), nullable=True)
    venue_id = db.Column(db.Integer, db.ForeignKey('venue.id'), nullable=True)
    league_name = db.Column(db.String(255), nullable=True)
    division = db.Column(db.String(255), nullable=True)
    gender = db.Column(db.String(50), nullable=True)
    registration_deadline = db.Column(db.Date, nullable=True)
    season_start_date = db.Column(db.Date, nullable=True)
    season_end_date = db.Column(db.Date, nullable=True)
    game_occurrences_json = db.Column(db.Text, default='[]')
    pricing_strategy = db.Column(db.String(20), nullable=True)
    pricing_amount = db.Column(db.Float, nullable=True)
    pricing_per_player = db.Column(db.Float, nullable=True)
    per_game_fee = db.Column(db.Float, nullable=True)
    duration = db.Column(db.Integer, nullable=True)  # weeks
    minimum_team_players = db.Column(db.Integer, nullable=True)
    season_details = db.Column(db.Text, nullable=True)
    registration_url = db.Column(db.String(500), nullable=True)
    supplemental_requests_json = db.Column(db.Text, nullable=True)
    form_data_json = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), default='pending', nullable=False, index=True)
    rejection_reason = db.Column(db.String(500), nullable=True)
    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    @property
    def game_occurrences(self):
        return _safe_json(self.game_occurrences_json, [])

    @game_occurrences.setter
    def game_occurrences(self, value):
        self.game_occurrences_json = _dump_json(value or [])

    @property
    def supplemental_requests(self):
        return _safe_json(self.supplemental_requests_json, None)

    @supplemental_requests.setter
    def supplemental_requests(self, value):
        self.supplemental_requests_json = _dump_json(value or None)

    @property
    def form_data(self):
        return _safe_json(self.form_data_json, None)

    @form_data.setter
    def form_data(self, value):
        self.form_data_json = _dump_json(value)

    def to_dict(self):
        return {
            'id': self.id, 'org_id': self.org_id,
            'sport_id': self.sport_id, 'venue_id': self.venue_id,
            'league_name': self.league_name, 'division': self.division,
            'gender': self.gender,
            'registration_deadline': format_date(self.registration_deadline),
            'season_start_date': format_date(self.season_start_date),
            'season_end_date': format_date(self.season_end_date),
            'game_occurrences': self.game_occurrences,
            'pricing_strategy': self.pricing_strategy,
            'pricing_amount': self.pricing_amount,
            'pricing_per_player': self.pricing_per_player,
            'per_game_fee': self.per_game_fee,
            'duration': self.duration,
            'minimum_team_players': self.minimum_team_players,
            'season_details': self.season_details,
            'registration_url': self.registration_url,
            'supplemental_requests': self.supplemental_requests,
            'form_data': self.form_data,
            'status': self.status, 'rejection_reason': self.rejection_reason,
            'created_by': self.created_by,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class LeagueDraft(db.Model):
    """Drafts and templates share a table, split by ``type``."""
    # one draft per (org, creator); templates are unrestricted
    __table_args__ = (
        db.Index(
            'uq_league_draft_org_creator', 'org_id', 'created_by', unique=True,
            sqlite_where=db.text("type = 'draft'"),
            postgresql_where=db.text("type = 'draft'"),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.String(36), db.ForeignKey('organization.id'), nullable=False, index=True)
    type = db.Column(db.String(20), default='draft', nullable=False)
    name = db.Column(db.String(255), nullable=True)
    form_data_json = db.Column(db.Text, nullable=False, default='{}')
    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    @property
    def form_data(self):
        return _safe_json(self.form_data_json, {})

    @form_data.setter
    def form_data(self, value):
        self.form_data_json = _dump_json(value or {})

    def to_dict(self):
        return {
            'id': self.id, 'org_id': self.org_id, 'type': self.type,
            'name': self.name, 'form_data': self.form_data,
            'created_by': self.created_by,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }


class Notification(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), db.ForeignKey('user.id'), nullable=False, index=True)
    notification_type = db.Column('type', db.String(50), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    read = db.Column(db.Boolean, default=False, nullable=False)
    related_league_id = db.Column(db.Integer, nullable=True)
    related_org_id = db.Column(db.String(36), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive(), index=True)
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'user_id': self.user_id,
            'type': self.notification_type, 'title': self.title,
            'message': self.message, 'read': self.read,
            'related_league_id': self.related_league_id,
            'related_org_id': self.related_org_id,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
        }

    def to_broadcast_payload(self):
        return {
            'id': self.id, 'userId': self.user_id,
            'type': self.notification_type, 'title': self.title,
            'message': self.message, 'read': self.read,
            'relatedLeagueId': self.related_league_id,
            'relatedOrgId': self.related_org_id,
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }


class NotificationPreference(db.Model):
    user_id = db.Column(db.String(255), db.ForeignKey('user.id'), primary_key=True)
    league_approved = db.Column(db.Boolean, default=True, nullable=False)
    league_rejected = db.Column(db.Boolean, default=True, nullable=False)
    league_submitted = db.Column(db.Boolean, default=True, nullable=False)
    draft_saved = db.Column(db.Boolean, default=True, nullable=False)
    template_saved = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'league_approved': self.league_approved,
            'league_rejected': self.league_rejected,
            'league_submitted': self.league_submitted,
            'draft_saved': self.draft_saved,
            'template_saved': self.template_saved,
        }
