"""
Custom exceptions for the application.
Each domain failure has its own type so the API layer can map it to a status code.
"""


class BaseApplicationException(Exception):
    """Base exception for all application-specific exceptions"""
    default_message = "An application error occurred"
    default_code = "APPLICATION_ERROR"
    status_code = 400

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseApplicationException):
    """Raised when validation fails"""
    default_message = "Validation failed"
    default_code = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationException):
    """Raised when a resource is not found"""
    default_message = "Resource not found"
    default_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource_type=None, resource_id=None, **kwargs):
        self.resource_type = resource_type
        self.resource_id = resource_id
        if resource_type and 'message' not in kwargs:
            kwargs['message'] = f"{resource_type} not found"
        super().__init__(**kwargs)


class AuthenticationError(BaseApplicationException):
    """Raised when credentials are missing, invalid or expired"""
    default_message = "Authentication failed"
    default_code = "UNAUTHORIZED"
    status_code = 401


class PermissionDeniedError(BaseApplicationException):
    """Raised when user doesn't have permission"""
    default_message = "Permission denied"
    default_code = "PERMISSION_DENIED"
    status_code = 403


class BusinessLogicError(BaseApplicationException):
    """Raised when business rule is violated"""
    default_message = "Business rule violation"
    default_code = "BUSINESS_RULE"
    status_code = 409


class InvalidTransitionError(BusinessLogicError):
    """Raised when a status change is not allowed from the current status"""
    default_message = "Status transition not allowed"
    default_code = "INVALID_TRANSITION"


class NotificationError(BaseApplicationException):
    """Raised when an email or SMS could not be delivered"""
    default_message = "Notification could not be sent"
    default_code = "NOTIFICATION_FAILED"
    status_code = 502
