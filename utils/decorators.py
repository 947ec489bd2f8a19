from functools import wraps
from flask_jwt_extended import get_jwt_identity
from app import db
from models import User, Role
from utils.responses import error_response

def get_current_user():
    """Load the User behind the JWT identity of the current request"""
    current_user_id = get_jwt_identity()
    if current_user_id is None:
        return None
    return db.session.get(User, int(current_user_id))

def admin_required(fn):
    """Decorator to require admin role for a route"""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        current_user = get_current_user()

        if not current_user or current_user.role != Role.ADMIN:
            return error_response("Admin role required", 403)

        return fn(*args, **kwargs)
    return wrapper

def role_required(roles):
    """Decorator to require specific roles for a route

    Role gating only; relationship checks (manager-of, owner-of) are made
    by the service layer.

    Args:
        roles: A list of roles from the Role enum that are allowed to access this route
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            current_user = get_current_user()

            if not current_user or current_user.role not in roles:
                allowed_roles = ', '.join([role.value for role in roles])
                return error_response(f"Permission denied. Required roles: {allowed_roles}", 403)

            return fn(*args, **kwargs)
        return wrapper
    return decorator
