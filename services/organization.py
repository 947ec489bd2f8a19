import logging

from sqlalchemy.exc import IntegrityError

from app import db
from models import Department, EmployeeProfile, Role, User
from services.common import get_or_404, get_profile_for_user
from utils.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def create_department(name):
    if Department.query.filter_by(name=name).first():
        raise ConflictError("Department already exists")

    department = Department(name=name)
    db.session.add(department)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Department already exists")

    logger.info("Department %s created", department.name)
    return department


def list_departments():
    return Department.query.order_by(Department.created_at.desc(), Department.id.desc()).all()


def create_employee_profile(user_id, fullname, department_id):
    get_or_404(User, user_id, "User")

    if EmployeeProfile.query.filter_by(user_id=user_id).first():
        raise ConflictError("Profile already exists")

    get_or_404(Department, department_id, "Department")

    profile = EmployeeProfile(user_id=user_id, fullname=fullname, department_id=department_id)
    db.session.add(profile)
    db.session.commit()

    logger.info("Profile %s created for user %s", profile.id, user_id)
    return profile


def _manager_chain(profile):
    """Yield ids walking up from profile through its managers."""
    seen = set()
    current = profile
    while current is not None and current.id not in seen:
        seen.add(current.id)
        yield current.id
        current = current.manager


def assign_manager(employee_id, manager_id):
    employee = get_or_404(EmployeeProfile, employee_id, "Employee")
    manager = get_or_404(EmployeeProfile, manager_id, "Manager")

    if employee.id == manager.id:
        raise ValidationError("Self assignment is not allowed")

    if employee.department_id != manager.department_id:
        raise ValidationError("Department mismatch")

    # The employee must not already sit above the prospective manager
    if employee.id in _manager_chain(manager):
        raise ValidationError("Manager assignment would create a reporting cycle")

    employee.manager_id = manager.id
    db.session.commit()

    logger.info("Employee %s now reports to %s", employee.id, manager.id)
    return employee


def change_user_role(employee_id, role):
    employee = get_or_404(EmployeeProfile, employee_id, "Employee")
    if not isinstance(role, Role):
        try:
            role = Role[str(role).upper()]
        except KeyError:
            raise ValidationError(f"Invalid role: {role}")

    employee.user.role = role
    db.session.commit()
    return employee


def list_employees(department_id=None, search=None):
    query = EmployeeProfile.query
    if department_id:
        query = query.filter_by(department_id=department_id)
    if search:
        query = query.filter(EmployeeProfile.fullname.ilike(f'%{search}%'))
    return query.order_by(EmployeeProfile.fullname.asc())


def get_my_team(manager_user_id):
    manager = get_profile_for_user(manager_user_id, "Manager profile")
    team = manager.team_members.order_by(EmployeeProfile.fullname.asc()).all()

    result = []
    for member in team:
        active = next((a for a in member.assignments if a.released_at is None), None)
        result.append({
            "member": member,
            "active_assignment": active,
        })
    return result
