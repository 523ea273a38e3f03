"""Approval state machine shared by leagues, sports and venues.

    pending --approve--> approved
    pending --reject---> rejected
    rejected --approve-> approved   (reason cleared)
    rejected --reject--> rejected   (reason replaced)
    approved --reject--> rejected   (reason stored)

Approving an approved record is a no-op.
"""
from leaguefindr.auth_utils import is_global_admin
from leaguefindr.errors import ValidationFailed

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'

MAX_REASON_LENGTH = 500


def initial_status(creator_id):
    return APPROVED if is_global_admin(creator_id) else PENDING


def clean_rejection_reason(raw_reason):
    reason = str(raw_reason or '').strip()
    if not reason:
        raise ValidationFailed('rejection_reason is required')
    if len(reason) > MAX_REASON_LENGTH:
        raise ValidationFailed(f'rejection_reason must be at most {MAX_REASON_LENGTH} characters')
    return reason


def should_transition(current_status, target_status):
    """Return True when the move changes state, False for a no-op."""
    if target_status == APPROVED:
        return current_status != APPROVED
    if target_status == REJECTED:
        return True
    raise ValueError(f'unknown target status {target_status!r}')
