from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from models import Role
from schemas.employee import (
    EmployeeProfileSchema, EmployeeProfileCreateSchema,
    AssignManagerSchema, ChangeRoleSchema, DepartmentSchema
)
from schemas.assignment import AssignmentSchema
from services import organization
from services.assignments import get_my_assignments
from utils.responses import success_response, paginated_response, validation_error_response
from utils.decorators import role_required, admin_required
from utils.helpers import current_user_id
from utils.pagination import paginate

employees_bp = Blueprint('employees', __name__)
departments_bp = Blueprint('departments', __name__)

# Get all employees
@employees_bp.route('', methods=['GET'])
@jwt_required()
@role_required([Role.ADMIN, Role.HR])
def get_employees():
    """
    Get all employee profiles with pagination
    ---
    tags:
      - Employees
    security:
      - Bearer: []
    parameters:
      - name: page
        in: query
        type: integer
        default: 1
      - name: per_page
        in: query
        type: integer
        default: 20
      - name: department_id
        in: query
        type: integer
        required: false
      - name: search
        in: query
        type: string
        required: false
        description: Search by full name
    responses:
      200:
        description: List of employee profiles
      401:
        description: Unauthorized
      403:
        description: Forbidden - requires admin or HR role
    """
    query = organization.list_employees(
        department_id=request.args.get('department_id', type=int),
        search=request.args.get('search', '')
    )
    return paginated_response(paginate(query), EmployeeProfileSchema())

# Create employee profile
@employees_bp.route('', methods=['POST'])
@jwt_required()
@admin_required
def create_employee():
    """
    Create an employee profile for an existing user
    ---
    tags:
      - Employees
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          id: EmployeeProfileCreate
          required:
            - user_id
            - fullname
            - department_id
          properties:
            user_id:
              type: integer
              example: 2
            fullname:
              type: string
              example: "Jane Doe"
            department_id:
              type: integer
              example: 1
    responses:
      201:
        description: Profile created
      400:
        description: Validation error or profile already exists
      403:
        description: Forbidden - requires admin role
      404:
        description: User or department not found
    """
    try:
        data = EmployeeProfileCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    profile = organization.create_employee_profile(
        data['user_id'], data['fullname'], data['department_id']
    )
    return success_response(EmployeeProfileSchema().dump(profile), 201)

# Assign manager
@employees_bp.route('/<int:employee_id>/assign-manager', methods=['PATCH'])
@jwt_required()
@admin_required
def assign_manager(employee_id):
    """
    Assign a manager to an employee
    ---
    tags:
      - Employees
    security:
      - Bearer: []
    parameters:
      - name: employee_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: AssignManager
          required:
            - manager_id
          properties:
            manager_id:
              type: integer
              example: 3
    responses:
      200:
        description: Manager assigned
      400:
        description: Self assignment, department mismatch or reporting cycle
      403:
        description: Forbidden - requires admin role
      404:
        description: Employee or manager not found
    """
    try:
        data = AssignManagerSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    employee = organization.assign_manager(employee_id, data['manager_id'])
    return success_response(EmployeeProfileSchema().dump(employee))

# Change role
@employees_bp.route('/<int:employee_id>/role', methods=['PATCH'])
@jwt_required()
@admin_required
def change_role(employee_id):
    """
    Change the role of an employee's user account
    ---
    tags:
      - Employees
    security:
      - Bearer: []
    parameters:
      - name: employee_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: ChangeRole
          required:
            - role
          properties:
            role:
              type: string
              enum: ["ADMIN", "HR", "MANAGER", "EMPLOYEE"]
              example: "MANAGER"
    responses:
      200:
        description: Role updated
      400:
        description: Invalid role
      403:
        description: Forbidden - requires admin role
      404:
        description: Employee not found
    """
    try:
        data = ChangeRoleSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    employee = organization.change_user_role(employee_id, data['role'])
    return success_response(EmployeeProfileSchema().dump(employee))

# Manager's direct reports
@employees_bp.route('/my-team', methods=['GET'])
@jwt_required()
@role_required([Role.MANAGER])
def get_my_team():
    """
    Get the current manager's direct reports with their active assignment
    ---
    tags:
      - Employees
    security:
      - Bearer: []
    responses:
      200:
        description: Team members
      403:
        description: Forbidden - requires manager role
      404:
        description: Manager profile not found
    """
    profile_schema = EmployeeProfileSchema()
    assignment_schema = AssignmentSchema()

    team = []
    for entry in organization.get_my_team(current_user_id()):
        member = profile_schema.dump(entry['member'])
        active = entry['active_assignment']
        member['active_assignment'] = assignment_schema.dump(active) if active else None
        team.append(member)

    return success_response(team)

# Current user's assignments
@employees_bp.route('/me/assignments', methods=['GET'])
@jwt_required()
def my_assignments():
    """
    Get the current user's active and past assignments
    ---
    tags:
      - Employees
    security:
      - Bearer: []
    responses:
      200:
        description: Active and past assignments
      404:
        description: Employee profile not found
    """
    assignments = get_my_assignments(current_user_id())
    schema = AssignmentSchema(many=True)
    return success_response({
        "active": schema.dump(assignments['active']),
        "past": schema.dump(assignments['past'])
    })

# Get all departments
@departments_bp.route('', methods=['GET'])
@jwt_required()
def get_departments():
    """
    Get all departments
    ---
    tags:
      - Departments
    security:
      - Bearer: []
    responses:
      200:
        description: List of departments
      401:
        description: Unauthorized
    """
    return success_response(DepartmentSchema(many=True).dump(organization.list_departments()))

# Create department
@departments_bp.route('', methods=['POST'])
@jwt_required()
@admin_required
def create_department():
    """
    Create a department
    ---
    tags:
      - Departments
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          id: Department
          required:
            - name
          properties:
            name:
              type: string
              example: "Engineering"
    responses:
      201:
        description: Department created
      400:
        description: Validation error or department already exists
      403:
        description: Forbidden - requires admin role
    """
    try:
        data = DepartmentSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    department = organization.create_department(data['name'])
    return success_response(DepartmentSchema().dump(department), 201)
