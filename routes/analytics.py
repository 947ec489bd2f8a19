from flask import Blueprint
from flask_jwt_extended import jwt_required
from models import Role
from services import analytics
from utils.responses import success_response
from utils.decorators import role_required

analytics_bp = Blueprint('analytics', __name__)

ANALYTICS_ROLES = [Role.ADMIN, Role.HR, Role.MANAGER]

# Organisation-wide skill overview
@analytics_bp.route('/employees/overview', methods=['GET'])
@jwt_required()
@role_required(ANALYTICS_ROLES)
def employees_overview():
    """
    Get rating counts and average approved rating per employee
    ---
    tags:
      - Analytics
    security:
      - Bearer: []
    responses:
      200:
        description: One entry per employee
      403:
        description: Forbidden
    """
    return success_response(analytics.get_all_employees_overview())

# Skill progress of one employee
@analytics_bp.route('/employees/<int:employee_id>/skill-progress', methods=['GET'])
@jwt_required()
@role_required(ANALYTICS_ROLES)
def employee_skill_progress(employee_id):
    """
    Get current ratings and rating history of an employee
    ---
    tags:
      - Analytics
    security:
      - Bearer: []
    parameters:
      - name: employee_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Skills with history
      403:
        description: Forbidden
      404:
        description: Employee not found
    """
    return success_response(analytics.get_employee_skill_progress(employee_id))

# Timeline of one skill
@analytics_bp.route('/employees/<int:employee_id>/skills/<int:skill_id>/timeline', methods=['GET'])
@jwt_required()
@role_required(ANALYTICS_ROLES)
def skill_timeline(employee_id, skill_id):
    """
    Get the rating timeline of one employee skill
    ---
    tags:
      - Analytics
    security:
      - Bearer: []
    parameters:
      - name: employee_id
        in: path
        type: integer
        required: true
      - name: skill_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Ordered timeline with total improvement
      403:
        description: Forbidden
      404:
        description: Employee, skill or rating not found
    """
    return success_response(analytics.get_skill_progress_timeline(employee_id, skill_id))

# Dashboard counters
@analytics_bp.route('/dashboard-stats', methods=['GET'])
@jwt_required()
@role_required(ANALYTICS_ROLES)
def dashboard_stats():
    """
    Get dashboard counters
    ---
    tags:
      - Analytics
    security:
      - Bearer: []
    responses:
      200:
        description: Employees, skills, projects by status, pending reviews and active assignments
      403:
        description: Forbidden
    """
    return success_response(analytics.get_dashboard_stats())
