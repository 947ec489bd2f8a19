from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from models import Role
from schemas.assignment import (
    AssignmentRequestSchema, AssignmentRequestCreateSchema, AssignmentReviewSchema
)
from services import assignments
from utils.responses import success_response, validation_error_response
from utils.decorators import role_required
from utils.helpers import current_user_id

assignments_bp = Blueprint('assignments', __name__)

# Request assignment
@assignments_bp.route('/deliverables/<int:deliverable_id>/request-assignment', methods=['POST'])
@jwt_required()
@role_required([Role.HR])
def request_assignment(deliverable_id):
    """
    Request that an employee be assigned to a deliverable
    ---
    tags:
      - Assignments
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: AssignmentRequestCreate
          required:
            - employee_id
          properties:
            employee_id:
              type: integer
              example: 4
    responses:
      201:
        description: Request created and waiting for the employee's manager
      400:
        description: Project not active, employee already assigned or request pending
      403:
        description: Forbidden - requires HR role
      404:
        description: Deliverable or employee not found
    """
    try:
        data = AssignmentRequestCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    assignment_request = assignments.create_assignment_request(
        deliverable_id, data['employee_id'], current_user_id()
    )
    return success_response(AssignmentRequestSchema().dump(assignment_request), 201)

# Pending requests for direct reports
@assignments_bp.route('/assignment-requests/pending', methods=['GET'])
@jwt_required()
@role_required([Role.MANAGER])
def pending_requests():
    """
    Get pending assignment requests for the current manager's direct reports
    ---
    tags:
      - Assignments
    security:
      - Bearer: []
    responses:
      200:
        description: Pending requests, oldest first
      403:
        description: Forbidden - requires manager role
      404:
        description: Manager profile not found
    """
    items = assignments.get_pending_requests_for_manager(current_user_id())
    return success_response(AssignmentRequestSchema(many=True).dump(items))

# Review request
@assignments_bp.route('/assignment-requests/<int:request_id>/review', methods=['PATCH'])
@jwt_required()
@role_required([Role.MANAGER])
def review_request(request_id):
    """
    Approve or reject an assignment request
    ---
    tags:
      - Assignments
    security:
      - Bearer: []
    parameters:
      - name: request_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: AssignmentReview
          required:
            - action
          properties:
            action:
              type: string
              enum: ["APPROVE", "REJECT"]
              example: "APPROVE"
    responses:
      200:
        description: Request reviewed; approval creates the assignment
      400:
        description: Request not pending, project not active or employee already assigned
      403:
        description: Not the employee's manager
      404:
        description: Request not found
    """
    try:
        data = AssignmentReviewSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    assignment_request = assignments.review_assignment_request(request_id, current_user_id(), data['action'])
    return success_response(AssignmentRequestSchema().dump(assignment_request))
