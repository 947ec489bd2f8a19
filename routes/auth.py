from flask import Blueprint, request
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)
from marshmallow import ValidationError
from app import db
from models import User, Role
from schemas.auth import LoginSchema, RegisterSchema, UserSchema
from utils.decorators import get_current_user, admin_required
from utils.responses import success_response, error_response, validation_error_response

auth_bp = Blueprint('auth', __name__)

def _profile_data(user):
    profile = user.profile
    if not profile:
        return None
    return {
        "id": profile.id,
        "fullname": profile.fullname,
        "department": profile.department.name if profile.department else None,
        "manager_id": profile.manager_id
    }

# Login endpoint
@auth_bp.route('/login', methods=['POST'])
def login():
    """
    User Login
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        schema:
          id: Login
          required:
            - email
            - password
          properties:
            email:
              type: string
              description: User email
              example: "jane.doe@example.com"
            password:
              type: string
              description: User password
              example: "securepassword"
    responses:
      200:
        description: Login successful
      400:
        description: Validation error
      401:
        description: Invalid credentials
    """
    schema = LoginSchema()
    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    user = User.query.filter_by(email=data['email']).first()

    if not user or not user.check_password(data['password']):
        return error_response("Invalid email or password", 401)

    # Identity must be a string for the JWT "sub" claim
    access_token = create_access_token(identity=str(user.id))
    refresh_token = create_refresh_token(identity=str(user.id))

    return success_response({
        "access_token": access_token,
        "refresh_token": refresh_token,
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role.name,
            "profile": _profile_data(user)
        }
    })

# Register endpoint (admin only)
@auth_bp.route('/register', methods=['POST'])
@jwt_required()
@admin_required
def register():
    """
    Register new user
    ---
    tags:
      - Authentication
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          id: Register
          required:
            - email
            - password
            - role
          properties:
            email:
              type: string
              description: User email
              example: "john.smith@example.com"
            password:
              type: string
              description: User password (at least 8 characters)
              example: "securepassword"
            role:
              type: string
              description: User role
              enum: ["ADMIN", "HR", "MANAGER", "EMPLOYEE"]
              example: "EMPLOYEE"
    responses:
      201:
        description: User registered successfully
      400:
        description: Validation error or email already registered
      401:
        description: Unauthorized
      403:
        description: Forbidden - requires admin role
    """
    schema = RegisterSchema()
    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return validation_error_response(err.messages)

    # Check if user already exists
    if User.query.filter_by(email=data['email']).first():
        return error_response("Email already registered", 400)

    new_user = User(
        email=data['email'],
        role=Role[data['role'].upper()]
    )
    new_user.set_password(data['password'])

    db.session.add(new_user)
    db.session.commit()

    return success_response(UserSchema().dump(new_user), 201)

# Get current user
@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """
    Get current user information
    ---
    tags:
      - Authentication
    security:
      - Bearer: []
    responses:
      200:
        description: User information
      401:
        description: Unauthorized
      404:
        description: User not found
    """
    user = get_current_user()

    if not user:
        return error_response("User not found", 404)

    return success_response({
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role.name,
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "profile": _profile_data(user)
        }
    })

# Refresh token
@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """
    Refresh access token
    ---
    tags:
      - Authentication
    security:
      - Bearer: []
    responses:
      200:
        description: New access token
      401:
        description: Unauthorized
    """
    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)

    return success_response({
        "access_token": new_access_token
    })
