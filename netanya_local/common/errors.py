from fastapi import HTTPException
from starlette import status


class DirectoryError(HTTPException):
    """Base for errors that are reported to the caller as ``{success: false, error}``."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(status_code=status_code or self.default_status, detail=detail)


class ValidationError(DirectoryError):
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, field: str | None = None):
        super().__init__(f"{field}: {detail}" if field else detail)
        self.field = field


class NotFoundError(DirectoryError):
    default_status = status.HTTP_404_NOT_FOUND


class AuthorizationError(DirectoryError):
    # 401: нет сессии; 403: сессия есть, но прав нет
    default_status = status.HTTP_403_FORBIDDEN


class ConflictError(DirectoryError):
    default_status = status.HTTP_409_CONFLICT


class PersistenceError(DirectoryError):
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
