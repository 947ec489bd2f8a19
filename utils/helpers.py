from flask import current_app
from flask_jwt_extended import get_jwt_identity
from utils.errors import ValidationError

def current_user_id():
    """Return the authenticated user's id as an int"""
    return int(get_jwt_identity())

def parse_top_k(raw_value):
    """Validate the topK query parameter of the recommendation endpoints"""
    default = current_app.config.get('RECOMMENDATION_DEFAULT_TOP_K', 5)
    upper = current_app.config.get('RECOMMENDATION_MAX_TOP_K', 1000)

    if raw_value is None or raw_value == '':
        return default

    try:
        top_k = int(raw_value)
    except (TypeError, ValueError):
        raise ValidationError(f"topK must be between 1 and {upper}")

    if top_k < 1 or top_k > upper:
        raise ValidationError(f"topK must be between 1 and {upper}")

    return top_k
