"""Application errors rendered as ``{"detail": {"code", "message"}}``."""
from fastapi import status

class BaseAppException(Exception):
    def __init__(self, code: str, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

    @property
    def detail(self) -> dict:
        return {"code": self.code, "message": self.message}

class NotFoundError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_404_NOT_FOUND)

    @classmethod
    def for_entity(cls, entity: str) -> "NotFoundError":
        """``for_entity("TaskDepartment")`` -> TASK_DEPARTMENT_NOT_FOUND."""
        code = "".join(f"_{c}" if c.isupper() and i else c for i, c in enumerate(entity)).upper()
        return cls(f"{code}_NOT_FOUND", f"{entity} not found")

class ConflictError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_409_CONFLICT)

class ValidationAppError(BaseAppException):
    def __init__(self, code: str, message: str):
        super().__init__(code, message, status.HTTP_400_BAD_REQUEST)

class UnauthorizedError(BaseAppException):
    def __init__(self, message: str = "not authenticated"):
        super().__init__("UNAUTHORIZED", message, status.HTTP_401_UNAUTHORIZED)

class ForbiddenError(BaseAppException):
    """Raised when the caller's roles do not permit the operation."""

    def __init__(self, message: str = "forbidden", code: str = "FORBIDDEN"):
        super().__init__(code, message, status.HTTP_403_FORBIDDEN)

class InternalServerError(BaseAppException):
    def __init__(self, message: str = "internal error"):
        super().__init__("INTERNAL_ERROR", message, status.HTTP_500_INTERNAL_SERVER_ERROR)
