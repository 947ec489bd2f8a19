import logging
from datetime import datetime, timedelta

from app import db
from models import (
    EmployeeProfile, EmployeeSkill, Skill, SkillProgressLog,
    SkillRatingStatus, SkillChangeType, RATING_MIN, RATING_MAX
)
from services.common import get_or_404, get_profile_for_user, lock_row
from utils.errors import (
    AuthorizationError, DuplicateError, InvalidStateError, ValidationError
)

logger = logging.getLogger(__name__)

REVIEW_ACTIONS = ('APPROVE', 'EDIT', 'REJECT')


def _validate_rating(rating, message=None):
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError(message or f"Rating must be between {RATING_MIN} and {RATING_MAX}")
    return rating


def log_skill_progress(employee_id, skill_id, previous_rating, new_rating, change_type,
                       changed_by=None, comment=None):
    """Append one audit row; changed_at is kept strictly increasing per (employee, skill)."""
    changed_at = datetime.utcnow()
    last_changed_at = db.session.execute(
        db.select(db.func.max(SkillProgressLog.changed_at)).where(
            SkillProgressLog.employee_id == employee_id,
            SkillProgressLog.skill_id == skill_id,
        )
    ).scalar()
    if last_changed_at is not None and changed_at <= last_changed_at:
        changed_at = last_changed_at + timedelta(microseconds=1)

    entry = SkillProgressLog(
        employee_id=employee_id,
        skill_id=skill_id,
        previous_rating=previous_rating,
        new_rating=new_rating,
        change_type=change_type,
        changed_by=changed_by,
        comment=comment,
        changed_at=changed_at,
    )
    db.session.add(entry)
    return entry


def submit_self_rating(employee_id, skill_id, rating):
    """Create the single rating row for (employee, skill)."""
    _validate_rating(rating)

    get_or_404(EmployeeProfile, employee_id, "Employee profile")
    get_or_404(Skill, skill_id, "Skill")

    existing = EmployeeSkill.query.filter_by(employee_id=employee_id, skill_id=skill_id).first()
    if existing:
        raise DuplicateError("Skill already rated")

    employee_skill = EmployeeSkill(
        employee_id=employee_id,
        skill_id=skill_id,
        self_rating=rating,
        status=SkillRatingStatus.PENDING,
    )
    db.session.add(employee_skill)

    log_skill_progress(employee_id, skill_id, None, rating, SkillChangeType.INITIAL_RATING)

    db.session.commit()
    logger.info("Employee %s rated skill %s at %s", employee_id, skill_id, rating)
    return employee_skill


def submit_self_rating_for_user(user_id, skill_id, rating):
    profile = get_profile_for_user(user_id)
    return submit_self_rating(profile.id, skill_id, rating)


def _owned_rating(rating_id, requesting_user_id):
    profile = get_profile_for_user(requesting_user_id)
    employee_skill = lock_row(EmployeeSkill, rating_id, "Rating")

    if employee_skill.employee_id != profile.id:
        raise AuthorizationError("Unauthorized")
    return employee_skill


def update_self_rating(rating_id, requesting_user_id, new_rating):
    """Change the self rating of a rating that has not been reviewed yet."""
    _validate_rating(new_rating)

    employee_skill = _owned_rating(rating_id, requesting_user_id)

    if employee_skill.status != SkillRatingStatus.PENDING:
        raise InvalidStateError("Cannot update reviewed rating")

    previous_rating = employee_skill.self_rating
    employee_skill.self_rating = new_rating

    log_skill_progress(
        employee_skill.employee_id, employee_skill.skill_id,
        previous_rating, new_rating, SkillChangeType.SELF_UPDATED
    )

    db.session.commit()
    logger.info("Rating %s self-updated %s -> %s", rating_id, previous_rating, new_rating)
    return employee_skill


def resubmit_rating(rating_id, requesting_user_id, new_rating):
    """Put a REJECTED rating back into review with a new self rating."""
    _validate_rating(new_rating)

    employee_skill = _owned_rating(rating_id, requesting_user_id)

    if employee_skill.status != SkillRatingStatus.REJECTED:
        raise InvalidStateError("Only rejected ratings can be resubmitted")

    previous_rating = employee_skill.self_rating
    employee_skill.self_rating = new_rating
    employee_skill.status = SkillRatingStatus.PENDING
    employee_skill.approved_rating = None
    employee_skill.reviewed_by = None
    employee_skill.reviewed_at = None
    employee_skill.review_comment = None

    log_skill_progress(
        employee_skill.employee_id, employee_skill.skill_id,
        previous_rating, new_rating, SkillChangeType.SELF_UPDATED
    )

    db.session.commit()
    logger.info("Rating %s resubmitted at %s", rating_id, new_rating)
    return employee_skill


def get_my_ratings(user_id):
    profile = get_profile_for_user(user_id)
    return (
        EmployeeSkill.query
        .filter_by(employee_id=profile.id)
        .order_by(EmployeeSkill.created_at.desc(), EmployeeSkill.id.desc())
        .all()
    )


def get_pending_ratings_for_manager(manager_user_id):
    manager = get_profile_for_user(manager_user_id, "Manager profile")
    return (
        EmployeeSkill.query
        .join(EmployeeProfile, EmployeeSkill.employee_id == EmployeeProfile.id)
        .filter(
            EmployeeProfile.manager_id == manager.id,
            EmployeeSkill.status == SkillRatingStatus.PENDING,
        )
        .order_by(EmployeeSkill.created_at.asc(), EmployeeSkill.id.asc())
        .all()
    )


def review_rating(rating_id, manager_user_id, action, approved_rating=None, comment=None):
    """Resolve a PENDING rating as the employee's direct manager."""
    action = str(action or '').upper()
    if action not in REVIEW_ACTIONS:
        raise ValidationError(f"Invalid action: {action or 'missing'}")

    employee_skill = lock_row(EmployeeSkill, rating_id, "Rating")

    if employee_skill.status != SkillRatingStatus.PENDING:
        raise InvalidStateError("Rating is not pending")

    manager = get_profile_for_user(manager_user_id, "Manager profile")

    if employee_skill.employee.manager_id != manager.id:
        raise AuthorizationError("Manager mismatch")

    self_rating = employee_skill.self_rating

    if action == 'APPROVE':
        employee_skill.status = SkillRatingStatus.APPROVED
        employee_skill.approved_rating = self_rating
        change_type, new_rating = SkillChangeType.MANAGER_APPROVED, self_rating
    elif action == 'EDIT':
        _validate_rating(approved_rating, "Valid approved rating (1-5) required for edit action")
        employee_skill.status = SkillRatingStatus.EDITED
        employee_skill.approved_rating = approved_rating
        change_type, new_rating = SkillChangeType.MANAGER_EDITED, approved_rating
    else:
        employee_skill.status = SkillRatingStatus.REJECTED
        employee_skill.approved_rating = None
        change_type, new_rating = SkillChangeType.MANAGER_REJECTED, self_rating

    employee_skill.reviewed_by = manager_user_id
    employee_skill.reviewed_at = datetime.utcnow()
    employee_skill.review_comment = comment

    log_skill_progress(
        employee_skill.employee_id, employee_skill.skill_id,
        self_rating, new_rating, change_type,
        changed_by=manager_user_id, comment=comment
    )

    db.session.commit()
    logger.info("Rating %s reviewed by user %s: %s", rating_id, manager_user_id, employee_skill.status.name)
    return employee_skill
