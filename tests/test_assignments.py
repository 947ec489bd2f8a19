from datetime import datetime
from unittest.mock import patch

import pytest

from app import db
from models import AssignmentRequestStatus, EmployeeProjectAssignment, Project, ProjectStatus
from services import assignments, projects
from services.common import lock_row as real_lock_row
from utils.errors import (
    AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
)


@pytest.fixture
def active_project(seed):
    return seed.project("Portal", status=ProjectStatus.ACTIVE)


@pytest.fixture
def deliverable(seed, active_project):
    return seed.deliverable(active_project, "Backend")


def _active_count(employee):
    return EmployeeProjectAssignment.query.filter(
        EmployeeProjectAssignment.employee_id == employee.id,
        EmployeeProjectAssignment.released_at.is_(None),
    ).count()


def test_request_for_planned_project_is_rejected(seed, org):
    planned = seed.project("Later")
    deliverable = seed.deliverable(planned, "Design")

    with pytest.raises(InvalidStateError) as exc:
        assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    assert exc.value.message == "Project is not active"


def test_request_unknown_deliverable_or_employee(org, deliverable):
    with pytest.raises(NotFoundError):
        assignments.create_assignment_request(999, org["alice"].id, org["hr"].id)
    with pytest.raises(NotFoundError):
        assignments.create_assignment_request(deliverable.id, 999, org["hr"].id)


def test_duplicate_pending_request_conflicts(org, deliverable):
    assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    with pytest.raises(ConflictError) as exc:
        assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    assert exc.value.message == "Pending request already exists"


def test_request_for_already_assigned_employee_conflicts(seed, org, deliverable):
    seed.assignment(org["alice"], deliverable)
    with pytest.raises(ConflictError) as exc:
        assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    assert exc.value.message == "Employee already has active assignment"


def test_approve_creates_assignment(org, deliverable):
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    reviewed = assignments.review_assignment_request(request.id, org["manager"].user_id, "APPROVE")

    assert reviewed.status == AssignmentRequestStatus.APPROVED
    assert reviewed.reviewed_by == org["manager"].user_id
    assert reviewed.reviewed_at is not None

    assignment = assignments.get_active_assignment(org["alice"].id)
    assert assignment is not None
    assert assignment.deliverable_id == deliverable.id
    assert assignment.project_id == deliverable.project_id


def test_reject_creates_no_assignment(org, deliverable):
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    reviewed = assignments.review_assignment_request(request.id, org["manager"].user_id, "reject")

    assert reviewed.status == AssignmentRequestStatus.REJECTED
    assert _active_count(org["alice"]) == 0


def test_review_by_other_manager_is_mismatch(seed, org, deliverable):
    other_manager = seed.profile("Other Manager", org["department"])
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)

    with pytest.raises(AuthorizationError) as exc:
        assignments.review_assignment_request(request.id, other_manager.user_id, "APPROVE")
    assert exc.value.message == "Manager mismatch"


def test_review_twice_is_invalid_state(org, deliverable):
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    assignments.review_assignment_request(request.id, org["manager"].user_id, "APPROVE")

    with pytest.raises(InvalidStateError) as exc:
        assignments.review_assignment_request(request.id, org["manager"].user_id, "APPROVE")
    assert exc.value.message == "Request is not pending"
    assert _active_count(org["alice"]) == 1


def test_review_unknown_request_and_action(org, deliverable):
    with pytest.raises(NotFoundError):
        assignments.review_assignment_request(999, org["manager"].user_id, "APPROVE")
    with pytest.raises(ValidationError):
        assignments.review_assignment_request(1, org["manager"].user_id, "MAYBE")


def test_second_approval_for_same_employee_conflicts(seed, org, active_project, deliverable):
    other = seed.deliverable(active_project, "Frontend")
    first = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    second = assignments.create_assignment_request(other.id, org["alice"].id, org["hr"].id)

    assignments.review_assignment_request(first.id, org["manager"].user_id, "APPROVE")
    with pytest.raises(ConflictError) as exc:
        assignments.review_assignment_request(second.id, org["manager"].user_id, "APPROVE")

    assert exc.value.message == "Employee already has active assignment"
    assert _active_count(org["alice"]) == 1


def test_approval_rechecks_project_status(org, active_project, deliverable):
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    projects.update_project_status(active_project.id, ProjectStatus.COMPLETED)

    with pytest.raises(InvalidStateError) as exc:
        assignments.review_assignment_request(request.id, org["manager"].user_id, "APPROVE")
    assert exc.value.message == "Project is not active"


def test_approval_reads_project_status_under_lock(org, active_project, deliverable):
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    assert deliverable.project.status == ProjectStatus.ACTIVE

    def complete_then_lock(model, row_id, label=None):
        if model is Project:
            # Another transaction completes the project before the lock is granted
            db.session.execute(
                db.text("UPDATE projects SET status = 'COMPLETED' WHERE id = :id"), {"id": row_id}
            )
        return real_lock_row(model, row_id, label)

    with patch("services.assignments.lock_row", side_effect=complete_then_lock):
        with pytest.raises(InvalidStateError) as exc:
            assignments.review_assignment_request(request.id, org["manager"].user_id, "APPROVE")

    assert exc.value.message == "Project is not active"
    assert _active_count(org["alice"]) == 0


def test_unique_index_backs_up_the_active_check(seed, org, deliverable):
    request = assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    seed.assignment(org["alice"], deliverable)

    # Simulate a concurrent approval that committed after our check ran
    with patch("services.assignments.get_active_assignment", return_value=None):
        with pytest.raises(ConflictError):
            assignments.review_assignment_request(request.id, org["manager"].user_id, "APPROVE")

    assert _active_count(org["alice"]) == 1


def test_pending_requests_for_manager(seed, org, deliverable):
    outsider = seed.profile("Outsider", org["department"])
    assignments.create_assignment_request(deliverable.id, org["alice"].id, org["hr"].id)
    assignments.create_assignment_request(deliverable.id, outsider.id, org["hr"].id)

    pending = assignments.get_pending_requests_for_manager(org["manager"].user_id)
    assert [r.employee_id for r in pending] == [org["alice"].id]


def test_get_my_assignments_splits_active_and_past(seed, org, active_project, deliverable):
    old = seed.deliverable(active_project, "Old work")
    seed.assignment(org["alice"], old, released_at=datetime.utcnow())
    seed.assignment(org["alice"], deliverable)

    result = assignments.get_my_assignments(org["alice"].user_id)
    assert [a.deliverable_id for a in result["active"]] == [deliverable.id]
    assert [a.deliverable_id for a in result["past"]] == [old.id]
