from flask import jsonify

def success_response(data, status_code=200):
    """
    Format a success response

    Args:
        data: The data to return
        status_code: HTTP status code

    Returns:
        JSON response with data and success flag
    """
    response = {
        "success": True,
        "data": data
    }
    return jsonify(response), status_code

def error_response(message, status_code=400):
    """
    Format an error response

    Args:
        message: Error message or dict of field errors
        status_code: HTTP status code

    Returns:
        JSON response with error message and success flag
    """
    response = {
        "success": False,
        "error": message
    }
    return jsonify(response), status_code

def paginated_response(pagination, schema, status_code=200):
    """
    Format a paginated response

    Args:
        pagination: Pagination object returned by utils.pagination.paginate
        schema: Marshmallow schema to serialize items
        status_code: HTTP status code

    Returns:
        JSON response with paginated data
    """
    response = {
        "success": True,
        "data": {
            "items": schema.dump(pagination.items, many=True),
            "pagination": {
                "page": pagination.page,
                "per_page": pagination.per_page,
                "total": pagination.total,
                "pages": pagination.pages,
                "has_next": pagination.has_next,
                "has_prev": pagination.has_prev
            }
        }
    }

    return jsonify(response), status_code

def validation_error_response(errors, status_code=400):
    """
    Format a validation error response

    Args:
        errors: Dict of field errors from Marshmallow
        status_code: HTTP status code

    Returns:
        JSON response with field errors
    """
    response = {
        "success": False,
        "error": "Validation error",
        "errors": errors
    }
    return jsonify(response), status_code
