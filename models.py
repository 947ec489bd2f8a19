import enum
from datetime import datetime
from app import db
from werkzeug.security import generate_password_hash, check_password_hash

RATING_MIN = 1
RATING_MAX = 5
WEIGHT_MIN = 0.0
WEIGHT_MAX = 1.0

# Role enum for RBAC
class Role(enum.Enum):
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"

# User model for authentication
class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.Enum(Role), default=Role.EMPLOYEE, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Link to employee profile
    profile = db.relationship('EmployeeProfile', backref='user', uselist=False, cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.email}>'

# Department model
class Department(db.Model):
    __tablename__ = 'departments'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    employees = db.relationship('EmployeeProfile', backref='department', lazy=True)

    def __repr__(self):
        return f'<Department {self.name}>'

# Employee profile, one per user; managers form a tree through manager_id
class EmployeeProfile(db.Model):
    __tablename__ = 'employee_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    fullname = db.Column(db.String(150), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=False)
    manager_id = db.Column(db.Integer, db.ForeignKey('employee_profiles.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('manager_id IS NULL OR manager_id != id', name='ck_profile_not_own_manager'),
    )

    # Relationships
    team_members = db.relationship('EmployeeProfile', backref=db.backref('manager', remote_side=[id]), lazy='dynamic')
    employee_skills = db.relationship('EmployeeSkill', backref='employee', lazy=True)
    assignments = db.relationship('EmployeeProjectAssignment', backref='employee', lazy=True)

    def __repr__(self):
        return f'<EmployeeProfile {self.fullname}>'

# Global skill catalog
class Skill(db.Model):
    __tablename__ = 'skills'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Skill {self.name}>'

# Project status enum; declaration order is the lifecycle order
class ProjectStatus(enum.Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"

    @property
    def order(self):
        return list(ProjectStatus).index(self)

# Project model
class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.Enum(ProjectStatus), default=ProjectStatus.PLANNED, nullable=False)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    deliverables = db.relationship(
        'Deliverable', backref='project', lazy=True,
        cascade='all, delete-orphan', order_by='Deliverable.id'
    )

    def __repr__(self):
        return f'<Project {self.name}>'

# Deliverable: a unit of project work with weighted skill requirements
class Deliverable(db.Model):
    __tablename__ = 'deliverables'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('project_id', 'name', name='uix_project_deliverable_name'),
    )

    # Relationships
    required_skills = db.relationship(
        'DeliverableSkill', backref='deliverable', lazy=True,
        cascade='all, delete-orphan', order_by='DeliverableSkill.id'
    )
    assignment_requests = db.relationship('AssignmentRequest', backref='deliverable', lazy=True, cascade='all, delete-orphan')
    assignments = db.relationship('EmployeeProjectAssignment', backref='deliverable', lazy=True, cascade='all, delete-orphan')

    @property
    def active_assignments(self):
        return [a for a in self.assignments if a.released_at is None]

    def __repr__(self):
        return f'<Deliverable {self.name}>'

# Importance of a skill for a deliverable
class DeliverableSkill(db.Model):
    __tablename__ = 'deliverable_skills'

    id = db.Column(db.Integer, primary_key=True)
    deliverable_id = db.Column(db.Integer, db.ForeignKey('deliverables.id'), nullable=False)
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
    weight = db.Column(db.Float, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('deliverable_id', 'skill_id', name='uix_deliverable_skill'),
        db.CheckConstraint('weight >= 0 AND weight <= 1', name='ck_deliverable_skill_weight'),
    )

    skill = db.relationship('Skill')

    def __repr__(self):
        return f'<DeliverableSkill {self.skill_id} for Deliverable {self.deliverable_id} ({self.weight})>'

# Skill rating review status
class SkillRatingStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    EDITED = "edited"
    REJECTED = "rejected"

# Employee self rating of a skill, reviewed by the employee's manager
class EmployeeSkill(db.Model):
    __tablename__ = 'employee_skills'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee_profiles.id'), nullable=False)
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
    self_rating = db.Column(db.Integer, nullable=False)
    approved_rating = db.Column(db.Integer, nullable=True)
    status = db.Column(db.Enum(SkillRatingStatus), default=SkillRatingStatus.PENDING, nullable=False)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    review_comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('employee_id', 'skill_id', name='uix_employee_skill'),
        db.CheckConstraint('self_rating >= 1 AND self_rating <= 5', name='ck_employee_skill_self_rating'),
        db.CheckConstraint(
            'approved_rating IS NULL OR (approved_rating >= 1 AND approved_rating <= 5)',
            name='ck_employee_skill_approved_rating'
        ),
    )

    skill = db.relationship('Skill')
    reviewer = db.relationship('User', foreign_keys=[reviewed_by])

    def __repr__(self):
        return f'<EmployeeSkill {self.employee_id}/{self.skill_id} {self.status.value}>'

class SkillChangeType(enum.Enum):
    INITIAL_RATING = "initial_rating"
    SELF_UPDATED = "self_updated"
    MANAGER_APPROVED = "manager_approved"
    MANAGER_EDITED = "manager_edited"
    MANAGER_REJECTED = "manager_rejected"

# Append-only audit trail of rating changes
class SkillProgressLog(db.Model):
    __tablename__ = 'skill_progress_logs'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee_profiles.id'), nullable=False)
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
    previous_rating = db.Column(db.Integer, nullable=True)
    new_rating = db.Column(db.Integer, nullable=False)
    change_type = db.Column(db.Enum(SkillChangeType), nullable=False)
    changed_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    comment = db.Column(db.Text, nullable=True)
    changed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_progress_employee_skill_changed', 'employee_id', 'skill_id', 'changed_at'),
    )

    skill = db.relationship('Skill')
    employee = db.relationship('EmployeeProfile')
    changer = db.relationship('User', foreign_keys=[changed_by])

    def __repr__(self):
        return f'<SkillProgressLog {self.employee_id}/{self.skill_id} {self.change_type.value}>'

class AssignmentRequestStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

# Staffing request raised by HR and resolved by the employee's manager
class AssignmentRequest(db.Model):
    __tablename__ = 'assignment_requests'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    deliverable_id = db.Column(db.Integer, db.ForeignKey('deliverables.id'), nullable=False)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee_profiles.id'), nullable=False)
    requested_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    status = db.Column(db.Enum(AssignmentRequestStatus), default=AssignmentRequestStatus.PENDING, nullable=False)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    project = db.relationship('Project')
    employee = db.relationship('EmployeeProfile')
    requester = db.relationship('User', foreign_keys=[requested_by])
    reviewer = db.relationship('User', foreign_keys=[reviewed_by])

    def __repr__(self):
        return f'<AssignmentRequest {self.employee_id} -> Deliverable {self.deliverable_id}>'

# Employee staffed on a deliverable; active while released_at is null
class EmployeeProjectAssignment(db.Model):
    __tablename__ = 'employee_project_assignments'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee_profiles.id'), nullable=False)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    deliverable_id = db.Column(db.Integer, db.ForeignKey('deliverables.id'), nullable=False)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    released_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        # At most one unreleased assignment per employee
        db.Index(
            'uix_active_assignment_per_employee', 'employee_id',
            unique=True,
            sqlite_where=db.text('released_at IS NULL'),
            postgresql_where=db.text('released_at IS NULL'),
        ),
    )

    project = db.relationship('Project')

    @property
    def is_active(self):
        return self.released_at is None

    def __repr__(self):
        return f'<EmployeeProjectAssignment {self.employee_id} on Project {self.project_id}>'
