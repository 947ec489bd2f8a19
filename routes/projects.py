from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from models import ProjectStatus, Role
from schemas.project import (
    ProjectSchema, ProjectCreateSchema, ProjectStatusUpdateSchema,
    DeliverableSchema, DeliverableCreateSchema
)
from services import projects, deliverables, planner
from utils.responses import success_response, error_response, validation_error_response
from utils.decorators import role_required

projects_bp = Blueprint('projects', __name__)

# Get all projects
@projects_bp.route('', methods=['GET'])
@jwt_required()
def get_projects():
    """
    Get all projects
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
        enum: [PLANNED, ACTIVE, COMPLETED]
        required: false
    responses:
      200:
        description: List of projects, newest first
      400:
        description: Invalid status
      401:
        description: Unauthorized
    """
    status = request.args.get('status')
    status_enum = None
    if status:
        try:
            status_enum = ProjectStatus[status.upper()]
        except KeyError:
            return error_response(f"Invalid status: {status}", 400)

    return success_response(ProjectSchema(many=True).dump(projects.list_projects(status_enum)))

# Create project
@projects_bp.route('', methods=['POST'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def create_project():
    """
    Create a new project in PLANNED status
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          id: ProjectCreate
          required:
            - name
          properties:
            name:
              type: string
              example: "Customer Portal"
            description:
              type: string
              example: "Self-service portal for enterprise customers"
            start_date:
              type: string
              format: date
              example: "2024-01-15"
            end_date:
              type: string
              format: date
              example: "2024-06-30"
    responses:
      201:
        description: Project created
      400:
        description: Validation error
      403:
        description: Forbidden - requires HR or admin role
    """
    try:
        data = ProjectCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    project = projects.create_project(
        data['name'],
        description=data.get('description'),
        start_date=data.get('start_date'),
        end_date=data.get('end_date')
    )
    return success_response(ProjectSchema().dump(project), 201)

# Get specific project
@projects_bp.route('/<int:project_id>', methods=['GET'])
@jwt_required()
def get_project(project_id):
    """
    Get project details with its deliverables
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Project details
      404:
        description: Project not found
    """
    project = projects.get_project(project_id)
    result = ProjectSchema().dump(project)
    result['deliverables'] = DeliverableSchema(many=True, exclude=('project',)).dump(project.deliverables)
    return success_response(result)

# Move project through its lifecycle
@projects_bp.route('/<int:project_id>/status', methods=['PATCH'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def update_project_status(project_id):
    """
    Advance project status (PLANNED -> ACTIVE -> COMPLETED)
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: ProjectStatusUpdate
          required:
            - status
          properties:
            status:
              type: string
              enum: ["PLANNED", "ACTIVE", "COMPLETED"]
              example: "ACTIVE"
    responses:
      200:
        description: Status updated; completing a project releases its assignments
      400:
        description: Invalid status transition
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Project not found
    """
    try:
        data = ProjectStatusUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    project = projects.update_project_status(project_id, data['status'])
    return success_response(ProjectSchema().dump(project))

# Delete project
@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def delete_project(project_id):
    """
    Delete a PLANNED project and everything it owns
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Project deleted
      400:
        description: Project has active assignments or is not PLANNED
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Project not found
    """
    projects.delete_project(project_id)
    return success_response({"message": "Project deleted successfully"})

# AI deliverable planning
@projects_bp.route('/<int:project_id>/analyze', methods=['POST'])
@jwt_required()
@role_required([Role.HR])
def analyze_project(project_id):
    """
    Generate deliverables and skill weights for a project with the AI planner
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Deliverables created from the AI proposal
      400:
        description: No skills in catalog or planner not configured
      403:
        description: Forbidden - requires HR role
      404:
        description: Project not found
      502:
        description: AI response could not be used
    """
    return success_response(planner.analyze_project(project_id))

# Get project deliverables
@projects_bp.route('/<int:project_id>/deliverables', methods=['GET'])
@jwt_required()
def get_project_deliverables(project_id):
    """
    Get deliverables of a project
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: List of deliverables with required skills
      404:
        description: Project not found
    """
    items = deliverables.list_project_deliverables(project_id)
    return success_response(DeliverableSchema(many=True, exclude=('project',)).dump(items))

# Create deliverable
@projects_bp.route('/<int:project_id>/deliverables', methods=['POST'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def create_deliverable(project_id):
    """
    Create a deliverable in a project
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: project_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: DeliverableCreate
          required:
            - name
          properties:
            name:
              type: string
              example: "Authentication service"
            description:
              type: string
              example: "Login, SSO and token management"
    responses:
      201:
        description: Deliverable created
      400:
        description: Validation error or duplicate name
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Project not found
    """
    try:
        data = DeliverableCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    deliverable = deliverables.create_deliverable(project_id, data['name'], data.get('description'))
    return success_response(DeliverableSchema().dump(deliverable), 201)
