"""
Service errors.

Services raise these; the exception handler in app.main turns them into
JSON error payloads. The message is shown to end users as-is, so write it
for them.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, error_code: str = "BAD_REQUEST", status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ServiceError):
    """Missing or malformed input."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class ConflictError(ServiceError):
    """A unique key (email, roll number, student+job) is already taken."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message=message, error_code=error_code, status_code=409)


class UnauthorizedError(ServiceError):
    def __init__(self, message: str = "Not authorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(message=message, error_code=error_code, status_code=401)


class ForbiddenError(ServiceError):
    def __init__(self, message: str, error_code: str = "FORBIDDEN"):
        super().__init__(message=message, error_code=error_code, status_code=403)


class PendingApprovalError(ForbiddenError):
    """Credentials are valid but the student has not been approved yet."""

    def __init__(self, message: str = "Your registration is pending approval. Please wait for an admin to approve it."):
        super().__init__(message=message, error_code="PENDING_APPROVAL")


class NotFoundError(ServiceError):
    def __init__(self, message: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code, status_code=404)


class InvalidCredentialsError(ServiceError):
    """Unknown email or wrong password; deliberately doesn't say which."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code="INVALID_CREDENTIALS", status_code=400)
