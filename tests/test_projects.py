from datetime import date

import pytest

from app import db
from models import (
    AssignmentRequest, Deliverable, DeliverableSkill, EmployeeProjectAssignment,
    Project, ProjectStatus
)
from services import assignments, projects
from utils.errors import InvalidStateError, NotFoundError, ValidationError


def test_create_project_starts_planned(app):
    project = projects.create_project("Portal", "Customer portal", date(2024, 1, 1), date(2024, 6, 30))
    assert project.status == ProjectStatus.PLANNED
    assert projects.get_project(project.id).name == "Portal"


def test_create_project_rejects_inverted_dates(app):
    with pytest.raises(ValidationError):
        projects.create_project("Portal", start_date=date(2024, 6, 1), end_date=date(2024, 1, 1))


def test_list_projects_filters_by_status(seed):
    seed.project("Planned")
    active = seed.project("Active", status=ProjectStatus.ACTIVE)

    assert [p.id for p in projects.list_projects(ProjectStatus.ACTIVE)] == [active.id]
    assert len(projects.list_projects()) == 2


def test_status_moves_forward_one_step(seed):
    project = seed.project()
    assert projects.update_project_status(project.id, "ACTIVE").status == ProjectStatus.ACTIVE
    assert projects.update_project_status(project.id, ProjectStatus.COMPLETED).status == ProjectStatus.COMPLETED


@pytest.mark.parametrize("start,target", [
    (ProjectStatus.PLANNED, ProjectStatus.COMPLETED),
    (ProjectStatus.ACTIVE, ProjectStatus.PLANNED),
    (ProjectStatus.COMPLETED, ProjectStatus.ACTIVE),
])
def test_invalid_transitions(seed, start, target):
    project = seed.project(status=start)
    with pytest.raises(InvalidStateError) as exc:
        projects.update_project_status(project.id, target)
    assert exc.value.message == "Invalid status transition"


def test_same_status_is_accepted(seed):
    project = seed.project(status=ProjectStatus.ACTIVE)
    assert projects.update_project_status(project.id, ProjectStatus.ACTIVE).status == ProjectStatus.ACTIVE


def test_unknown_status_and_project(seed):
    project = seed.project()
    with pytest.raises(ValidationError):
        projects.update_project_status(project.id, "ARCHIVED")
    with pytest.raises(NotFoundError):
        projects.update_project_status(999, ProjectStatus.ACTIVE)


def test_completing_releases_active_assignments(seed, org):
    project = seed.project(status=ProjectStatus.ACTIVE)
    other = seed.project(status=ProjectStatus.ACTIVE)
    deliverable = seed.deliverable(project)
    seed.assignment(org["alice"], deliverable)
    seed.assignment(org["bob"], seed.deliverable(other))

    projects.update_project_status(project.id, ProjectStatus.COMPLETED)

    assert assignments.get_active_assignment(org["alice"].id) is None
    assert assignments.get_active_assignment(org["bob"].id) is not None
    released = EmployeeProjectAssignment.query.filter_by(employee_id=org["alice"].id).one()
    assert released.released_at is not None


def test_delete_blocked_by_active_assignments(seed, org):
    project = seed.project(status=ProjectStatus.ACTIVE)
    seed.assignment(org["alice"], seed.deliverable(project))

    with pytest.raises(InvalidStateError) as exc:
        projects.delete_project(project.id)
    assert exc.value.message == "Cannot delete project with active assignments"


def test_delete_only_planned(seed):
    project = seed.project(status=ProjectStatus.ACTIVE)
    with pytest.raises(InvalidStateError) as exc:
        projects.delete_project(project.id)
    assert exc.value.message == "Only PLANNED projects can be deleted"


def test_delete_cascades(seed, org):
    skill = seed.skill("Python")
    project = seed.project()
    deliverable = seed.deliverable(project, skills=[(skill, 0.5)])
    db.session.add(AssignmentRequest(
        project_id=project.id,
        deliverable_id=deliverable.id,
        employee_id=org["alice"].id,
        requested_by=org["hr"].id,
    ))
    db.session.commit()

    projects.delete_project(project.id)

    assert Project.query.count() == 0
    assert Deliverable.query.count() == 0
    assert DeliverableSkill.query.count() == 0
    assert AssignmentRequest.query.count() == 0
