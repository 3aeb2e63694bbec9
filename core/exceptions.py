# core/exceptions.py
class SchoolManagementException(Exception):
    """Base exception for all school management system errors."""
    status_code = 400

    def __init__(self, message=None, user_friendly=False, details=None, error_code=None):
        self.message = message or "An error occurred"
        self.user_friendly = user_friendly
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


class AuthenticationError(SchoolManagementException):
    """Request carries no authenticated principal."""
    status_code = 401

    def __init__(self, message=None, user_friendly=True, details=None):
        super().__init__(message or "Authentication required", user_friendly, details, "AUTH_ERROR")


class ValidationError(SchoolManagementException):
    """Malformed or missing input, raised before any state change."""
    status_code = 400

    def __init__(self, message=None, user_friendly=True, details=None):
        super().__init__(message or "Validation failed", user_friendly, details, "VALIDATION_ERROR")


class AuthorizationError(SchoolManagementException):
    """Policy engine denied the operation."""
    status_code = 404

    def __init__(self, message=None, user_friendly=False, details=None):
        super().__init__(message or "Insufficient permissions", user_friendly, details, "PERMISSION_ERROR")


class NotFoundError(SchoolManagementException):
    """Resource absent, soft-deleted or outside the caller's tenant scope."""
    status_code = 404

    def __init__(self, message=None, user_friendly=False, details=None):
        super().__init__(message or "Resource not found", user_friendly, details, "NOT_FOUND")


class ConflictError(SchoolManagementException):
    """Uniqueness violation on a live row."""
    status_code = 409

    def __init__(self, message=None, user_friendly=True, details=None):
        super().__init__(message or "Resource already exists", user_friendly, details, "CONFLICT")


class InvariantViolation(SchoolManagementException):
    """Operation would break a lifecycle invariant (deletion guards, tenant immutability)."""
    status_code = 422

    def __init__(self, message=None, user_friendly=True, details=None):
        super().__init__(message or "Operation not allowed", user_friendly, details, "INVARIANT_VIOLATION")


class SagaFailure(SchoolManagementException):
    """A multi-step write failed and was rolled back as a whole."""
    status_code = 500

    def __init__(self, message=None, user_friendly=False, details=None, step=None):
        self.step = step
        super().__init__(message or "Operation failed and was rolled back", user_friendly, details, "SAGA_FAILURE")
