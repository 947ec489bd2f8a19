from datetime import datetime, timedelta

import pytest

from app import db
from models import ProjectStatus, SkillProgressLog
from services import analytics, employee_skills
from utils.errors import NotFoundError


@pytest.fixture
def rated(seed, org):
    python = seed.skill("Python")
    sql = seed.skill("SQL")

    rating = employee_skills.submit_self_rating(org["alice"].id, python.id, 2)
    employee_skills.update_self_rating(rating.id, org["alice"].user_id, 4)
    employee_skills.review_rating(rating.id, org["manager"].user_id, "EDIT", approved_rating=3, comment="Close")
    employee_skills.submit_self_rating(org["alice"].id, sql.id, 5)

    return {"python": python, "sql": sql, "rating": rating}


def test_employee_skill_progress(org, rated):
    progress = analytics.get_employee_skill_progress(org["alice"].id)

    assert progress["fullname"] == "Alice Anders"
    assert progress["department"] == "Engineering"
    skills = {s["skill_name"]: s for s in progress["skills"]}
    assert skills["Python"]["current_rating"] == 3
    assert skills["Python"]["status"] == "EDITED"
    assert [h["change_type"] for h in skills["Python"]["history"]] == [
        "INITIAL_RATING", "SELF_UPDATED", "MANAGER_EDITED"
    ]
    assert skills["Python"]["history"][-1]["reviewed_by"]["fullname"] == "Maria Manager"
    assert skills["SQL"]["current_rating"] == 5


def test_all_employees_overview(org, rated):
    overview = {row["fullname"]: row for row in analytics.get_all_employees_overview()}

    alice = overview["Alice Anders"]
    assert alice["total_skills"] == 2
    assert alice["approved_skills"] == 1
    assert alice["pending_skills"] == 1
    assert alice["average_rating"] == 3
    assert alice["last_updated"] is not None

    assert overview["Bob Brown"]["total_skills"] == 0
    assert overview["Bob Brown"]["average_rating"] == 0


def test_skill_progress_timeline(org, rated):
    timeline = analytics.get_skill_progress_timeline(org["alice"].id, rated["python"].id)

    assert [entry["rating"] for entry in timeline["timeline"]] == [2, 4, 3]
    assert timeline["total_improvement"] == 1
    assert timeline["current_rating"] == 3
    assert timeline["status"] == "EDITED"
    # all changes happen within the test run
    assert timeline["duration_days"] in (0, 1)


def test_timeline_duration_rounds_up_to_days(org, rated):
    logs = (
        SkillProgressLog.query
        .filter_by(employee_id=org["alice"].id, skill_id=rated["python"].id)
        .order_by(SkillProgressLog.changed_at.asc())
        .all()
    )
    start = datetime(2024, 1, 1, 9, 0)
    for offset, log in zip((0, 2, 3), logs):
        log.changed_at = start + timedelta(days=offset, hours=offset)
    db.session.commit()

    timeline = analytics.get_skill_progress_timeline(org["alice"].id, rated["python"].id)
    assert timeline["duration_days"] == 4


def test_timeline_for_unrated_skill(seed, org):
    skill = seed.skill("Rust")
    with pytest.raises(NotFoundError) as exc:
        analytics.get_skill_progress_timeline(org["alice"].id, skill.id)
    assert exc.value.message == "Employee has not rated this skill"


def test_timeline_single_entry(org, rated):
    timeline = analytics.get_skill_progress_timeline(org["alice"].id, rated["sql"].id)
    assert timeline["total_improvement"] == 0
    assert timeline["duration_days"] == 0


def test_dashboard_stats(seed, org, rated):
    active = seed.project(status=ProjectStatus.ACTIVE)
    seed.project()
    seed.assignment(org["bob"], seed.deliverable(active))

    stats = analytics.get_dashboard_stats()

    assert stats["total_employees"] == 3
    assert stats["total_skills"] == 2
    assert stats["projects"] == {"PLANNED": 1, "ACTIVE": 1, "COMPLETED": 0}
    assert stats["pending_skill_reviews"] == 1
    assert stats["pending_assignment_requests"] == 0
    assert stats["active_assignments"] == 1
