from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from models import Role
from schemas.skill import (
    EmployeeSkillSchema, SelfRatingCreateSchema,
    SelfRatingUpdateSchema, RatingReviewSchema
)
from services import employee_skills
from utils.responses import success_response, validation_error_response
from utils.decorators import role_required
from utils.helpers import current_user_id

employee_skills_bp = Blueprint('employee_skills', __name__)

# Submit self rating
@employee_skills_bp.route('', methods=['POST'])
@jwt_required()
def submit_rating():
    """
    Self-rate a catalog skill
    ---
    tags:
      - Skill Ratings
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          id: SelfRatingCreate
          required:
            - skill_id
            - self_rating
          properties:
            skill_id:
              type: integer
              example: 1
            self_rating:
              type: integer
              minimum: 1
              maximum: 5
              example: 4
    responses:
      201:
        description: Rating submitted for review
      400:
        description: Rating out of range or skill already rated
      404:
        description: Employee profile or skill not found
    """
    try:
        data = SelfRatingCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    rating = employee_skills.submit_self_rating_for_user(
        current_user_id(), data['skill_id'], data['self_rating']
    )
    return success_response(EmployeeSkillSchema().dump(rating), 201)

# Update pending self rating
@employee_skills_bp.route('/<int:rating_id>', methods=['PATCH'])
@jwt_required()
def update_rating(rating_id):
    """
    Update the self rating of a pending rating
    ---
    tags:
      - Skill Ratings
    security:
      - Bearer: []
    parameters:
      - name: rating_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: SelfRatingUpdate
          required:
            - self_rating
          properties:
            self_rating:
              type: integer
              minimum: 1
              maximum: 5
              example: 3
    responses:
      200:
        description: Rating updated
      400:
        description: Rating out of range or already reviewed
      403:
        description: Rating belongs to another employee
      404:
        description: Rating not found
    """
    try:
        data = SelfRatingUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    rating = employee_skills.update_self_rating(rating_id, current_user_id(), data['self_rating'])
    return success_response(EmployeeSkillSchema().dump(rating))

# Resubmit rejected rating
@employee_skills_bp.route('/<int:rating_id>/resubmit', methods=['POST'])
@jwt_required()
def resubmit_rating(rating_id):
    """
    Resubmit a rejected rating for review
    ---
    tags:
      - Skill Ratings
    security:
      - Bearer: []
    parameters:
      - name: rating_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          $ref: '#/definitions/SelfRatingUpdate'
    responses:
      200:
        description: Rating back in review
      400:
        description: Rating out of range or not rejected
      403:
        description: Rating belongs to another employee
      404:
        description: Rating not found
    """
    try:
        data = SelfRatingUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    rating = employee_skills.resubmit_rating(rating_id, current_user_id(), data['self_rating'])
    return success_response(EmployeeSkillSchema().dump(rating))

# Current user's ratings
@employee_skills_bp.route('/my-ratings', methods=['GET'])
@jwt_required()
def my_ratings():
    """
    Get the current user's skill ratings
    ---
    tags:
      - Skill Ratings
    security:
      - Bearer: []
    responses:
      200:
        description: Ratings, newest first
      404:
        description: Employee profile not found
    """
    ratings = employee_skills.get_my_ratings(current_user_id())
    return success_response(EmployeeSkillSchema(many=True).dump(ratings))

# Pending ratings of direct reports
@employee_skills_bp.route('/pending', methods=['GET'])
@jwt_required()
@role_required([Role.MANAGER])
def pending_ratings():
    """
    Get pending ratings of the current manager's direct reports
    ---
    tags:
      - Skill Ratings
    security:
      - Bearer: []
    responses:
      200:
        description: Pending ratings, oldest first
      403:
        description: Forbidden - requires manager role
      404:
        description: Manager profile not found
    """
    ratings = employee_skills.get_pending_ratings_for_manager(current_user_id())
    return success_response(EmployeeSkillSchema(many=True).dump(ratings))

# Review rating
@employee_skills_bp.route('/<int:rating_id>/review', methods=['PATCH'])
@jwt_required()
@role_required([Role.MANAGER])
def review_rating(rating_id):
    """
    Approve, edit or reject a pending rating
    ---
    tags:
      - Skill Ratings
    security:
      - Bearer: []
    parameters:
      - name: rating_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        schema:
          id: RatingReview
          required:
            - action
          properties:
            action:
              type: string
              enum: ["APPROVE", "EDIT", "REJECT"]
              example: "EDIT"
            approved_rating:
              type: integer
              minimum: 1
              maximum: 5
              description: Required for EDIT
              example: 3
            review_comment:
              type: string
              example: "Solid, but not yet expert level"
    responses:
      200:
        description: Rating reviewed
      400:
        description: Invalid action, rating or state
      403:
        description: Not the employee's manager
      404:
        description: Rating not found
    """
    try:
        data = RatingReviewSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    rating = employee_skills.review_rating(
        rating_id,
        current_user_id(),
        data['action'],
        approved_rating=data.get('approved_rating'),
        comment=data.get('review_comment')
    )
    return success_response(EmployeeSkillSchema().dump(rating))
