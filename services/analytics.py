import math

from app import db
from models import (
    AssignmentRequest, AssignmentRequestStatus, EmployeeProfile,
    EmployeeProjectAssignment, EmployeeSkill, Project, ProjectStatus,
    Skill, SkillProgressLog, SkillRatingStatus
)
from services.common import get_or_404
from utils.errors import NotFoundError

REVIEWED_STATUSES = (SkillRatingStatus.APPROVED, SkillRatingStatus.EDITED)


def _serialize_log(log):
    reviewer = None
    if log.changer is not None:
        reviewer = {
            "email": log.changer.email,
            "fullname": log.changer.profile.fullname if log.changer.profile else "Unknown",
        }
    return {
        "date": log.changed_at.isoformat(),
        "rating": log.new_rating,
        "previous_rating": log.previous_rating,
        "change_type": log.change_type.name,
        "comment": log.comment,
        "reviewed_by": reviewer,
    }


def _ordered_logs(employee_id, skill_id=None):
    query = SkillProgressLog.query.filter_by(employee_id=employee_id)
    if skill_id is not None:
        query = query.filter_by(skill_id=skill_id)
    return query.order_by(SkillProgressLog.changed_at.asc(), SkillProgressLog.id.asc()).all()


def _current_rating(employee_skill):
    if employee_skill.approved_rating is not None:
        return employee_skill.approved_rating
    return employee_skill.self_rating


def get_employee_skill_progress(employee_id):
    employee = get_or_404(EmployeeProfile, employee_id, "Employee")

    logs_by_skill = {}
    for log in _ordered_logs(employee.id):
        logs_by_skill.setdefault(log.skill_id, []).append(log)

    skills = []
    for employee_skill in EmployeeSkill.query.filter_by(employee_id=employee.id).order_by(EmployeeSkill.id).all():
        skills.append({
            "skill_id": employee_skill.skill_id,
            "skill_name": employee_skill.skill.name,
            "current_rating": _current_rating(employee_skill),
            "status": employee_skill.status.name,
            "history": [_serialize_log(log) for log in logs_by_skill.get(employee_skill.skill_id, [])],
        })

    return {
        "employee_id": employee.id,
        "fullname": employee.fullname,
        "department": employee.department.name,
        "skills": skills,
    }


def get_all_employees_overview():
    overview = []
    for employee in EmployeeProfile.query.order_by(EmployeeProfile.fullname.asc()).all():
        ratings = employee.employee_skills
        approved = [r.approved_rating for r in ratings if r.approved_rating is not None]
        average_rating = sum(approved) / len(approved) if approved else 0
        last_updated = max((r.updated_at for r in ratings if r.updated_at), default=None)

        overview.append({
            "id": employee.id,
            "fullname": employee.fullname,
            "department": employee.department.name,
            "total_skills": len(ratings),
            "approved_skills": sum(1 for r in ratings if r.status in REVIEWED_STATUSES),
            "pending_skills": sum(1 for r in ratings if r.status == SkillRatingStatus.PENDING),
            "average_rating": round(average_rating, 2),
            "last_updated": last_updated.isoformat() if last_updated else None,
        })
    return overview


def get_skill_progress_timeline(employee_id, skill_id):
    employee = get_or_404(EmployeeProfile, employee_id, "Employee")
    skill = get_or_404(Skill, skill_id, "Skill")

    current = EmployeeSkill.query.filter_by(employee_id=employee.id, skill_id=skill.id).first()
    if current is None:
        raise NotFoundError("Employee has not rated this skill")

    timeline = _ordered_logs(employee.id, skill.id)

    total_improvement = 0
    duration_days = 0
    if timeline:
        first, last = timeline[0], timeline[-1]
        baseline = first.previous_rating if first.previous_rating is not None else first.new_rating
        total_improvement = last.new_rating - baseline
        if len(timeline) > 1:
            elapsed = (last.changed_at - first.changed_at).total_seconds()
            duration_days = math.ceil(elapsed / 86400)

    return {
        "employee": {"id": employee.id, "fullname": employee.fullname},
        "skill": {"id": skill.id, "name": skill.name, "description": skill.description},
        "current_rating": _current_rating(current),
        "status": current.status.name,
        "timeline": [_serialize_log(log) for log in timeline],
        "total_improvement": total_improvement,
        "duration_days": duration_days,
    }


def get_dashboard_stats():
    project_counts = {status.name: 0 for status in ProjectStatus}
    for status, count in db.session.query(Project.status, db.func.count(Project.id)).group_by(Project.status).all():
        project_counts[status.name] = count

    return {
        "total_employees": EmployeeProfile.query.count(),
        "total_skills": Skill.query.count(),
        "projects": project_counts,
        "pending_skill_reviews": EmployeeSkill.query.filter_by(status=SkillRatingStatus.PENDING).count(),
        "pending_assignment_requests": AssignmentRequest.query.filter_by(
            status=AssignmentRequestStatus.PENDING
        ).count(),
        "active_assignments": EmployeeProjectAssignment.query.filter(
            EmployeeProjectAssignment.released_at.is_(None)
        ).count(),
    }
