from fastapi import status

class AppError(Exception):
    """Base for failures surfaced to the caller as-is."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    kind: str = "app_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"

class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"

class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"

class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"

class InvalidOperation(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "invalid_operation"

class MissingParameter(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "missing_parameter"
