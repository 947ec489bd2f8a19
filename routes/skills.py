from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from models import Role
from schemas.skill import SkillSchema, SkillCreateSchema
from services import skills
from utils.responses import success_response, validation_error_response
from utils.decorators import role_required

skills_bp = Blueprint('skills', __name__)

# Get skill catalog
@skills_bp.route('', methods=['GET'])
@jwt_required()
def get_skills():
    """
    Get the skill catalog
    ---
    tags:
      - Skills
    security:
      - Bearer: []
    responses:
      200:
        description: List of skills, newest first
      401:
        description: Unauthorized
    """
    return success_response(SkillSchema(many=True).dump(skills.list_skills()))

# Add skill to catalog
@skills_bp.route('', methods=['POST'])
@jwt_required()
@role_required([Role.HR, Role.ADMIN])
def create_skill():
    """
    Add a skill to the catalog
    ---
    tags:
      - Skills
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          id: SkillCreate
          required:
            - name
          properties:
            name:
              type: string
              example: "Python"
            description:
              type: string
              example: "Backend development in Python"
    responses:
      201:
        description: Skill created
      400:
        description: Validation error or skill already exists
      403:
        description: Forbidden - requires HR or admin role
    """
    try:
        data = SkillCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    skill = skills.create_skill(data['name'], data.get('description'))
    return success_response(SkillSchema().dump(skill), 201)
