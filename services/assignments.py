import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from app import db
from models import (
    AssignmentRequest, AssignmentRequestStatus, Deliverable,
    EmployeeProfile, EmployeeProjectAssignment, Project, ProjectStatus
)
from services.common import get_or_404, get_profile_for_user, lock_row
from utils.errors import (
    AuthorizationError, ConflictError, InvalidStateError, ValidationError
)

logger = logging.getLogger(__name__)

REVIEW_ACTIONS = ('APPROVE', 'REJECT')
ACTIVE_ASSIGNMENT_MESSAGE = "Employee already has active assignment"


def get_active_assignment(employee_id):
    return EmployeeProjectAssignment.query.filter(
        EmployeeProjectAssignment.employee_id == employee_id,
        EmployeeProjectAssignment.released_at.is_(None),
    ).first()


def create_assignment_request(deliverable_id, employee_id, requested_by_user_id):
    deliverable = get_or_404(Deliverable, deliverable_id, "Deliverable")
    get_or_404(EmployeeProfile, employee_id, "Employee")

    if deliverable.project.status != ProjectStatus.ACTIVE:
        raise InvalidStateError("Project is not active")

    if get_active_assignment(employee_id):
        raise ConflictError(ACTIVE_ASSIGNMENT_MESSAGE)

    pending = AssignmentRequest.query.filter_by(
        employee_id=employee_id,
        deliverable_id=deliverable_id,
        status=AssignmentRequestStatus.PENDING,
    ).first()
    if pending:
        raise ConflictError("Pending request already exists")

    assignment_request = AssignmentRequest(
        project_id=deliverable.project_id,
        deliverable_id=deliverable_id,
        employee_id=employee_id,
        requested_by=requested_by_user_id,
        status=AssignmentRequestStatus.PENDING,
    )
    db.session.add(assignment_request)
    db.session.commit()

    logger.info(
        "Assignment request %s: employee %s -> deliverable %s (by user %s)",
        assignment_request.id, employee_id, deliverable_id, requested_by_user_id
    )
    return assignment_request


def get_pending_requests_for_manager(manager_user_id):
    manager = get_profile_for_user(manager_user_id, "Manager profile")
    return (
        AssignmentRequest.query
        .join(EmployeeProfile, AssignmentRequest.employee_id == EmployeeProfile.id)
        .filter(
            EmployeeProfile.manager_id == manager.id,
            AssignmentRequest.status == AssignmentRequestStatus.PENDING,
        )
        .order_by(AssignmentRequest.created_at.asc(), AssignmentRequest.id.asc())
        .all()
    )


def _approve(assignment_request):
    # Lock order: request, project, profile
    project = lock_row(Project, assignment_request.project_id, "Project")
    if project.status != ProjectStatus.ACTIVE:
        raise InvalidStateError("Project is not active")

    # Serialises approvals touching the same employee's assignment set
    lock_row(EmployeeProfile, assignment_request.employee_id, "Employee")

    if get_active_assignment(assignment_request.employee_id):
        raise ConflictError(ACTIVE_ASSIGNMENT_MESSAGE)

    assignment = EmployeeProjectAssignment(
        employee_id=assignment_request.employee_id,
        project_id=assignment_request.project_id,
        deliverable_id=assignment_request.deliverable_id,
        assigned_at=datetime.utcnow(),
    )
    db.session.add(assignment)
    assignment_request.status = AssignmentRequestStatus.APPROVED
    return assignment


def review_assignment_request(request_id, manager_user_id, action):
    action = str(action or '').upper()
    if action not in REVIEW_ACTIONS:
        raise ValidationError(f"Invalid action: {action or 'missing'}")

    assignment_request = lock_row(AssignmentRequest, request_id, "Request")

    if assignment_request.status != AssignmentRequestStatus.PENDING:
        raise InvalidStateError("Request is not pending")

    manager = get_profile_for_user(manager_user_id, "Manager profile")

    if assignment_request.employee.manager_id != manager.id:
        raise AuthorizationError("Manager mismatch")

    if action == 'APPROVE':
        _approve(assignment_request)
    else:
        assignment_request.status = AssignmentRequestStatus.REJECTED

    assignment_request.reviewed_by = manager_user_id
    assignment_request.reviewed_at = datetime.utcnow()

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(ACTIVE_ASSIGNMENT_MESSAGE)

    logger.info(
        "Assignment request %s %s by user %s",
        request_id, assignment_request.status.name, manager_user_id
    )
    return assignment_request


def get_my_assignments(user_id):
    """Split the caller's assignments into active and past, newest first."""
    profile = get_profile_for_user(user_id)
    assignments = (
        EmployeeProjectAssignment.query
        .filter_by(employee_id=profile.id)
        .order_by(EmployeeProjectAssignment.assigned_at.desc(), EmployeeProjectAssignment.id.desc())
        .all()
    )
    return {
        "active": [a for a in assignments if a.released_at is None],
        "past": [a for a in assignments if a.released_at is not None],
    }
