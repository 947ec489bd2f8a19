import logging
from datetime import datetime

from app import db
from models import Project, ProjectStatus, EmployeeProjectAssignment
from services.common import get_or_404, lock_row
from utils.errors import InvalidStateError, ValidationError

logger = logging.getLogger(__name__)


def create_project(name, description=None, start_date=None, end_date=None):
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must be on or after start date")

    project = Project(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        status=ProjectStatus.PLANNED,
    )
    db.session.add(project)
    db.session.commit()

    logger.info("Project %s created", project.id)
    return project


def list_projects(status=None):
    query = Project.query
    if status is not None:
        query = query.filter_by(status=status)
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()


def get_project(project_id):
    return get_or_404(Project, project_id, "Project")


def _coerce_status(status):
    if isinstance(status, ProjectStatus):
        return status
    try:
        return ProjectStatus[str(status).upper()]
    except KeyError:
        raise ValidationError(f"Invalid status: {status}")


def active_assignments_query(project_id):
    return EmployeeProjectAssignment.query.filter(
        EmployeeProjectAssignment.project_id == project_id,
        EmployeeProjectAssignment.released_at.is_(None),
    )


def update_project_status(project_id, new_status):
    new_status = _coerce_status(new_status)
    project = lock_row(Project, project_id, "Project")

    current_order = project.status.order
    new_order = new_status.order

    if new_order < current_order or new_order - current_order > 1:
        raise InvalidStateError("Invalid status transition")

    if new_status == ProjectStatus.COMPLETED and project.status != ProjectStatus.COMPLETED:
        released = active_assignments_query(project.id).update(
            {EmployeeProjectAssignment.released_at: datetime.utcnow()},
            synchronize_session='fetch'
        )
        logger.info("Released %s assignments of completed project %s", released, project.id)

    previous = project.status
    project.status = new_status
    db.session.commit()

    logger.info("Project %s moved %s -> %s", project.id, previous.name, new_status.name)
    return project


def delete_project(project_id):
    project = lock_row(Project, project_id, "Project")

    if active_assignments_query(project.id).count() > 0:
        raise InvalidStateError("Cannot delete project with active assignments")

    if project.status != ProjectStatus.PLANNED:
        raise InvalidStateError("Only PLANNED projects can be deleted")

    db.session.delete(project)
    db.session.commit()

    logger.info("Project %s deleted", project_id)
