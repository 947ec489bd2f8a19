from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from models import Role
from services import recommendations
from utils.responses import success_response
from utils.decorators import role_required
from utils.helpers import parse_top_k

recommendations_bp = Blueprint('recommendations', __name__)

# Rank employees for a deliverable
@recommendations_bp.route('/deliverables/<int:deliverable_id>/recommendations', methods=['GET'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def deliverable_recommendations(deliverable_id):
    """
    Get the best matching employees for a deliverable
    ---
    tags:
      - Recommendations
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
      - name: topK
        in: query
        type: integer
        default: 5
        minimum: 1
        maximum: 1000
    responses:
      200:
        description: Employees ranked by skill index
      400:
        description: Invalid topK or deliverable has no required skills
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Deliverable not found
    """
    top_k = parse_top_k(request.args.get('topK'))
    return success_response(recommendations.get_recommended_employees(deliverable_id, top_k))

# Rank employees for every deliverable of a project
@recommendations_bp.route('/projects/<int:project_id>/recommendations', methods=['GET'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def project_recommendations(project_id):
    """
    Get top candidates for each deliverable of a project
    ---
    tags:
      - Recommendations
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
      - name: topK
        in: query
        type: integer
        default: 5
        minimum: 1
        maximum: 1000
    responses:
      200:
        description: Per-deliverable recommendations
      400:
        description: Invalid topK or project has no deliverables
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Project not found
    """
    top_k = parse_top_k(request.args.get('topK'))
    return success_response(recommendations.get_project_recommendations(project_id, top_k))

# One employee against one deliverable
@recommendations_bp.route('/deliverables/<int:deliverable_id>/employees/<int:employee_id>/analysis', methods=['GET'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def employee_analysis(deliverable_id, employee_id):
    """
    Get the skill breakdown of one employee against a deliverable
    ---
    tags:
      - Recommendations
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
      - name: employee_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Skill index, coverage and per-skill contribution
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Deliverable or employee not found
    """
    return success_response(recommendations.get_employee_skill_analysis(deliverable_id, employee_id))
