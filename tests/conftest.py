import os
from datetime import datetime

import pytest

# Point the module-level app at an in-memory database before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from flask_jwt_extended import create_access_token

from app import create_app, db
from models import (
    Department, Deliverable, DeliverableSkill, EmployeeProfile,
    EmployeeProjectAssignment, EmployeeSkill, Project, ProjectStatus,
    Role, Skill, SkillRatingStatus, User
)


class Seeder:
    """Inserts rows directly, bypassing the workflows under test."""

    def __init__(self):
        self._counter = 0

    def _next(self):
        self._counter += 1
        return self._counter

    def department(self, name=None):
        department = Department(name=name or f"Department {self._next()}")
        db.session.add(department)
        db.session.commit()
        return department

    def user(self, role=Role.EMPLOYEE, email=None, password="password123"):
        user = User(email=email or f"user{self._next()}@example.com", role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    def profile(self, fullname, department, role=Role.EMPLOYEE, manager=None, email=None):
        user = self.user(role=role, email=email)
        profile = EmployeeProfile(
            user_id=user.id,
            fullname=fullname,
            department_id=department.id,
            manager_id=manager.id if manager else None,
        )
        db.session.add(profile)
        db.session.commit()
        return profile

    def skill(self, name, description=None):
        skill = Skill(name=name, description=description)
        db.session.add(skill)
        db.session.commit()
        return skill

    def project(self, name=None, status=ProjectStatus.PLANNED):
        project = Project(name=name or f"Project {self._next()}", status=status)
        db.session.add(project)
        db.session.commit()
        return project

    def deliverable(self, project, name=None, skills=()):
        deliverable = Deliverable(project_id=project.id, name=name or f"Deliverable {self._next()}")
        db.session.add(deliverable)
        db.session.flush()
        for skill, weight in skills:
            db.session.add(DeliverableSkill(deliverable_id=deliverable.id, skill_id=skill.id, weight=weight))
        db.session.commit()
        return deliverable

    def rating(self, employee, skill, self_rating, status=SkillRatingStatus.PENDING, approved_rating=None):
        rating = EmployeeSkill(
            employee_id=employee.id,
            skill_id=skill.id,
            self_rating=self_rating,
            approved_rating=approved_rating,
            status=status,
        )
        db.session.add(rating)
        db.session.commit()
        return rating

    def assignment(self, employee, deliverable, released_at=None):
        assignment = EmployeeProjectAssignment(
            employee_id=employee.id,
            project_id=deliverable.project_id,
            deliverable_id=deliverable.id,
            assigned_at=datetime.utcnow(),
            released_at=released_at,
        )
        db.session.add(assignment)
        db.session.commit()
        return assignment


@pytest.fixture
def app():
    app = create_app('config.TestConfig')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app):
    return Seeder()


@pytest.fixture
def org(seed):
    """One department with a manager, two reports, an HR user and an admin."""
    engineering = seed.department("Engineering")
    manager = seed.profile("Maria Manager", engineering, role=Role.MANAGER, email="manager@example.com")
    alice = seed.profile("Alice Anders", engineering, manager=manager, email="alice@example.com")
    bob = seed.profile("Bob Brown", engineering, manager=manager, email="bob@example.com")
    hr = seed.user(role=Role.HR, email="hr@example.com")
    admin = seed.user(role=Role.ADMIN, email="admin@example.com")
    return {
        "department": engineering,
        "manager": manager,
        "alice": alice,
        "bob": bob,
        "hr": hr,
        "admin": admin,
    }


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id))
        return {"Authorization": f"Bearer {token}"}
    return _headers
