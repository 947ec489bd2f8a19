import logging

from app import db
from models import (
    Deliverable, DeliverableSkill, EmployeeProjectAssignment, Project, Skill,
    WEIGHT_MIN, WEIGHT_MAX
)
from services.common import get_or_404, lock_row
from utils.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _validate_weight(weight):
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not WEIGHT_MIN <= weight <= WEIGHT_MAX:
        raise ValidationError("Weight must be between 0 and 1")
    return float(weight)


def _name_taken(project_id, name, exclude_id=None):
    query = Deliverable.query.filter_by(project_id=project_id, name=name)
    if exclude_id is not None:
        query = query.filter(Deliverable.id != exclude_id)
    return query.first() is not None


def create_deliverable(project_id, name, description=None):
    get_or_404(Project, project_id, "Project")

    if _name_taken(project_id, name):
        raise ConflictError("Deliverable with this name already exists in the project")

    deliverable = Deliverable(project_id=project_id, name=name, description=description)
    db.session.add(deliverable)
    db.session.commit()

    logger.info("Deliverable %s created in project %s", deliverable.id, project_id)
    return deliverable


def list_project_deliverables(project_id):
    get_or_404(Project, project_id, "Project")
    return (
        Deliverable.query
        .filter_by(project_id=project_id)
        .order_by(Deliverable.created_at.asc(), Deliverable.id.asc())
        .all()
    )


def get_deliverable(deliverable_id):
    return get_or_404(Deliverable, deliverable_id, "Deliverable")


def update_deliverable(deliverable_id, name=None, description=None):
    deliverable = get_deliverable(deliverable_id)

    if name and name != deliverable.name:
        if _name_taken(deliverable.project_id, name, exclude_id=deliverable.id):
            raise ConflictError("Deliverable with this name already exists in the project")
        deliverable.name = name

    if description is not None:
        deliverable.description = description

    db.session.commit()
    return deliverable


def delete_deliverable(deliverable_id):
    deliverable = get_deliverable(deliverable_id)

    # Approvals lock the project before inserting an assignment
    lock_row(Project, deliverable.project_id, "Project")
    active = EmployeeProjectAssignment.query.filter(
        EmployeeProjectAssignment.deliverable_id == deliverable.id,
        EmployeeProjectAssignment.released_at.is_(None),
    ).count()
    if active:
        raise InvalidStateError("Cannot delete deliverable with active assignments")

    db.session.delete(deliverable)
    db.session.commit()
    logger.info("Deliverable %s deleted", deliverable_id)


def add_skill_to_deliverable(deliverable_id, skill_id, weight):
    """Require a skill for a deliverable with an importance weight in [0, 1]."""
    weight = _validate_weight(weight)
    get_deliverable(deliverable_id)
    get_or_404(Skill, skill_id, "Skill")

    if DeliverableSkill.query.filter_by(deliverable_id=deliverable_id, skill_id=skill_id).first():
        raise ConflictError("Skill already added to this deliverable")

    requirement = DeliverableSkill(deliverable_id=deliverable_id, skill_id=skill_id, weight=weight)
    db.session.add(requirement)
    db.session.commit()
    return requirement


def list_deliverable_skills(deliverable_id):
    get_deliverable(deliverable_id)
    return (
        DeliverableSkill.query
        .filter_by(deliverable_id=deliverable_id)
        .order_by(DeliverableSkill.weight.desc(), DeliverableSkill.id.asc())
        .all()
    )


def _get_requirement(deliverable_id, skill_id):
    requirement = DeliverableSkill.query.filter_by(deliverable_id=deliverable_id, skill_id=skill_id).first()
    if requirement is None:
        raise NotFoundError("Skill not found for this deliverable")
    return requirement


def update_skill_weight(deliverable_id, skill_id, new_weight):
    new_weight = _validate_weight(new_weight)
    requirement = _get_requirement(deliverable_id, skill_id)
    requirement.weight = new_weight
    db.session.commit()
    return requirement


def remove_skill_from_deliverable(deliverable_id, skill_id):
    requirement = _get_requirement(deliverable_id, skill_id)
    db.session.delete(requirement)
    db.session.commit()
