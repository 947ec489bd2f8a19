from collections import defaultdict, namedtuple

from app import db
from models import Deliverable, DeliverableSkill, EmployeeProfile, EmployeeSkill, Project
from services.common import get_or_404
from utils.errors import NotFoundError, ValidationError

RequiredSkill = namedtuple('RequiredSkill', ['skill_id', 'skill_name', 'weight'])


def score_employee(required_skills, approved_ratings):
    """Score one employee against a deliverable's requirements.

    Args:
        required_skills: sequence of RequiredSkill
        approved_ratings: mapping of skill_id -> approved rating

    Returns:
        dict with total_skill_index, coverage_percentage, skill_matches and missing_skills
    """
    skill_matches = []
    missing_skills = []
    total_skill_index = 0.0

    for required in required_skills:
        rating = approved_ratings.get(required.skill_id)
        if rating is not None:
            contribution = required.weight * rating
            total_skill_index += contribution
        else:
            contribution = 0.0
            missing_skills.append(required.skill_name)

        skill_matches.append({
            "skill_id": required.skill_id,
            "skill_name": required.skill_name,
            "required_weight": required.weight,
            "employee_rating": rating,
            "contribution": contribution,
        })

    total = len(required_skills)
    covered = total - len(missing_skills)
    coverage_percentage = (covered / total) * 100 if total else 0.0

    return {
        "total_skill_index": total_skill_index,
        "coverage_percentage": coverage_percentage,
        "skill_matches": skill_matches,
        "missing_skills": missing_skills,
    }


def rank_employees(required_skills, employees, ratings_by_employee, top_k):
    """Score and rank a snapshot of employees; stable for equal indexes."""
    recommendations = []
    for employee in employees:
        score = score_employee(required_skills, ratings_by_employee.get(employee.id, {}))
        recommendations.append({
            "employee_id": employee.id,
            "employee_user_id": employee.user_id,
            "employee_name": employee.fullname,
            "department_name": employee.department.name if employee.department else None,
            **score,
        })

    recommendations.sort(key=lambda r: r["total_skill_index"], reverse=True)
    return recommendations[:top_k]


def _required_skills(deliverable_id, order_by_weight=False):
    query = DeliverableSkill.query.filter_by(deliverable_id=deliverable_id)
    if order_by_weight:
        query = query.order_by(DeliverableSkill.weight.desc(), DeliverableSkill.id.asc())
    else:
        query = query.order_by(DeliverableSkill.id.asc())
    return [RequiredSkill(r.skill_id, r.skill.name, r.weight) for r in query.all()]


def _approved_ratings(employee_id=None):
    """Map employee_id -> {skill_id: approved_rating} for reviewed ratings."""
    query = EmployeeSkill.query.filter(EmployeeSkill.approved_rating.isnot(None))
    if employee_id is not None:
        query = query.filter(EmployeeSkill.employee_id == employee_id)

    ratings = defaultdict(dict)
    for row in query.all():
        ratings[row.employee_id][row.skill_id] = row.approved_rating
    return ratings


def get_recommended_employees(deliverable_id, top_k=5):
    """Rank every employee in the organisation for a deliverable."""
    get_or_404(Deliverable, deliverable_id, "Deliverable")

    required_skills = _required_skills(deliverable_id)
    if not required_skills:
        raise ValidationError("Deliverable has no required skills defined")

    employees = EmployeeProfile.query.order_by(EmployeeProfile.id.asc()).all()
    return rank_employees(required_skills, employees, _approved_ratings(), top_k)


def get_employee_skill_analysis(deliverable_id, employee_id):
    deliverable = get_or_404(Deliverable, deliverable_id, "Deliverable")
    employee = db.session.get(EmployeeProfile, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    required_skills = _required_skills(deliverable_id, order_by_weight=True)
    score = score_employee(required_skills, _approved_ratings(employee.id).get(employee.id, {}))

    return {
        "employee": {
            "id": employee.id,
            "user_id": employee.user_id,
            "name": employee.fullname,
            "email": employee.user.email,
            "department": employee.department.name if employee.department else None,
        },
        "deliverable": {
            "id": deliverable.id,
            "name": deliverable.name,
            "description": deliverable.description,
        },
        "total_skill_index": score["total_skill_index"],
        "coverage_percentage": score["coverage_percentage"],
        "skill_breakdown": score["skill_matches"],
        "missing_skills": score["missing_skills"],
    }


def get_project_recommendations(project_id, top_k=5):
    """Top candidates for every deliverable of a project that has requirements."""
    project = get_or_404(Project, project_id, "Project")

    if not project.deliverables:
        raise ValidationError("Project has no deliverables. Run AI analysis first.")

    employees = EmployeeProfile.query.order_by(EmployeeProfile.id.asc()).all()
    ratings = _approved_ratings()

    deliverables = []
    for deliverable in project.deliverables:
        required_skills = _required_skills(deliverable.id)
        if not required_skills:
            continue

        deliverables.append({
            "deliverable_id": deliverable.id,
            "deliverable_name": deliverable.name,
            "deliverable_description": deliverable.description,
            "required_skills_count": len(required_skills),
            "top_recommendations": rank_employees(required_skills, employees, ratings, top_k),
        })

    return {
        "project_id": project.id,
        "project_name": project.name,
        "total_deliverables": len(project.deliverables),
        "deliverables_with_recommendations": len(deliverables),
        "deliverables": deliverables,
    }
