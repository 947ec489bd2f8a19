from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from models import Role
from schemas.project import (
    DeliverableSchema, DeliverableUpdateSchema, DeliverableSkillSchema,
    DeliverableSkillCreateSchema, DeliverableSkillUpdateSchema
)
from services import deliverables
from utils.responses import success_response, validation_error_response
from utils.decorators import role_required

deliverables_bp = Blueprint('deliverables', __name__)

# Get specific deliverable
@deliverables_bp.route('/deliverables/<int:deliverable_id>', methods=['GET'])
@jwt_required()
def get_deliverable(deliverable_id):
    """
    Get deliverable details
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Deliverable with required skills and active assignments
      404:
        description: Deliverable not found
    """
    return success_response(DeliverableSchema().dump(deliverables.get_deliverable(deliverable_id)))

# Update deliverable
@deliverables_bp.route('/deliverables/<int:deliverable_id>', methods=['PATCH'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def update_deliverable(deliverable_id):
    """
    Update deliverable name or description
    ---
    tags:
      - Deliverables
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
          id: DeliverableUpdate
          properties:
            name:
              type: string
            description:
              type: string
    responses:
      200:
        description: Deliverable updated
      400:
        description: Validation error or duplicate name
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Deliverable not found
    """
    try:
        data = DeliverableUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    deliverable = deliverables.update_deliverable(
        deliverable_id, name=data.get('name'), description=data.get('description')
    )
    return success_response(DeliverableSchema().dump(deliverable))

# Delete deliverable
@deliverables_bp.route('/deliverables/<int:deliverable_id>', methods=['DELETE'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def delete_deliverable(deliverable_id):
    """
    Delete a deliverable
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Deliverable deleted
      400:
        description: Deliverable has active assignments
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Deliverable not found
    """
    deliverables.delete_deliverable(deliverable_id)
    return success_response({"message": "Deliverable deleted successfully"})

# Get required skills
@deliverables_bp.route('/deliverables/<int:deliverable_id>/skills', methods=['GET'])
@jwt_required()
def get_deliverable_skills(deliverable_id):
    """
    Get required skills of a deliverable, highest weight first
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Required skills with weights
      404:
        description: Deliverable not found
    """
    requirements = deliverables.list_deliverable_skills(deliverable_id)
    return success_response(DeliverableSkillSchema(many=True).dump(requirements))

# Add required skill
@deliverables_bp.route('/deliverables/<int:deliverable_id>/skills', methods=['POST'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def add_deliverable_skill(deliverable_id):
    """
    Add a weighted skill requirement to a deliverable
    ---
    tags:
      - Deliverables
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
          id: DeliverableSkillCreate
          required:
            - skill_id
            - weight
          properties:
            skill_id:
              type: integer
              example: 1
            weight:
              type: number
              minimum: 0
              maximum: 1
              example: 0.8
    responses:
      201:
        description: Skill requirement added
      400:
        description: Weight out of range or skill already added
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Deliverable or skill not found
    """
    try:
        data = DeliverableSkillCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    requirement = deliverables.add_skill_to_deliverable(deliverable_id, data['skill_id'], data['weight'])
    return success_response(DeliverableSkillSchema().dump(requirement), 201)

# Update skill weight
@deliverables_bp.route('/deliverables/<int:deliverable_id>/skills/<int:skill_id>', methods=['PATCH'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def update_deliverable_skill(deliverable_id, skill_id):
    """
    Change the weight of a required skill
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
      - name: skill_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: DeliverableSkillUpdate
          required:
            - weight
          properties:
            weight:
              type: number
              minimum: 0
              maximum: 1
              example: 0.5
    responses:
      200:
        description: Weight updated
      400:
        description: Weight out of range
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Skill not required by this deliverable
    """
    try:
        data = DeliverableSkillUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    requirement = deliverables.update_skill_weight(deliverable_id, skill_id, data['weight'])
    return success_response(DeliverableSkillSchema().dump(requirement))

# Remove required skill
@deliverables_bp.route('/deliverables/<int:deliverable_id>/skills/<int:skill_id>', methods=['DELETE'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def remove_deliverable_skill(deliverable_id, skill_id):
    """
    Remove a required skill from a deliverable
    ---
    tags:
      - Deliverables
    security:
      - Bearer: []
    parameters:
      - name: deliverable_id
        in: path
        type: integer
        required: true
      - name: skill_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Skill requirement removed
      403:
        description: Forbidden - requires HR or admin role
      404:
        description: Skill not required by this deliverable
    """
    deliverables.remove_skill_from_deliverable(deliverable_id, skill_id)
    return success_response({"message": "Skill removed from deliverable"})
