class DomainError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(DomainError):
    """A referenced entity does not exist."""
    status_code = 404


class ValidationError(DomainError):
    """Input outside domain constraints (rating, weight, topK ranges)."""
    status_code = 400


class InvalidStateError(DomainError):
    """Operation illegal for the entity's current lifecycle state."""
    status_code = 400


class ConflictError(DomainError):
    """Operation would violate a uniqueness or single-active invariant."""
    status_code = 400


class DuplicateError(ConflictError):
    status_code = 400


class AuthorizationError(DomainError):
    """Caller lacks the relationship (manager-of, owner-of) the operation needs."""
    status_code = 403
