"""
Custom Exception Classes for VisualGenie

Every application error derives from AppException so that the HTTP layer,
the storage layer and the diagram workflow report failures with one
consistent shape (code, message, status, details).
"""

from typing import Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes used in every error response"""

    # Projects (PROJ_xxx)
    PROJECT_NOT_FOUND = "PROJ_001"

    # Diagrams (DIAG_xxx)
    DIAGRAM_NOT_FOUND = "DIAG_001"

    # Validation (VAL_xxx)
    VALIDATION_ERROR = "VAL_001"
    INVALID_INPUT = "VAL_002"
    MISSING_REQUIRED_FIELD = "VAL_003"

    # Database / storage (DB_xxx)
    DATABASE_ERROR = "DB_001"
    NOT_FOUND = "DB_002"
    STORAGE_CONFIGURATION = "DB_003"

    # External services (EXT_xxx)
    EXTERNAL_SERVICE_ERROR = "EXT_001"
    RENDER_FAILED = "EXT_002"
    API_REQUEST_FAILED = "EXT_003"

    # Diagram workflow (WF_xxx)
    INVALID_TRANSITION = "WF_001"
    RENDER_IN_PROGRESS = "WF_002"

    # General (GEN_xxx)
    INTERNAL_SERVER_ERROR = "GEN_001"


class AppException(Exception):
    """
    Base exception class for all application errors.

    Attributes:
        message: Message safe to show to the user
        code: Error code (ErrorCode enum)
        status_code: HTTP status code
        details: Extra error details (optional)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception into an API response body"""
        result = {
            "error": self.code.value,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.details:
            result["details"] = self.details
        return result


# ==================== Validation Exceptions ====================

class ValidationException(AppException):
    """Generic validation error"""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, 400, details)


class InvalidInputException(ValidationException):
    """Invalid value for a single field"""

    def __init__(self, field: str, reason: str = "Invalid value"):
        super().__init__(
            f"Invalid value: {field}",
            {"field": field, "reason": reason},
        )
        self.code = ErrorCode.INVALID_INPUT


class MissingFieldException(ValidationException):
    """Required field is missing or blank"""

    def __init__(self, field: str):
        super().__init__(
            f"Required field missing: {field}",
            {"field": field},
        )
        self.code = ErrorCode.MISSING_REQUIRED_FIELD


# ==================== Not Found Exceptions ====================

class NotFoundException(AppException):
    """Resource not found"""

    def __init__(
        self,
        resource: str = "Resource",
        code: ErrorCode = ErrorCode.NOT_FOUND,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(f"{resource} not found", code, 404, details)


class ProjectNotFoundException(NotFoundException):
    """Project not found"""

    def __init__(self, project_id: Optional[int] = None):
        details = {"project_id": project_id} if project_id is not None else None
        super().__init__("Project", ErrorCode.PROJECT_NOT_FOUND, details)


class DiagramNotFoundException(NotFoundException):
    """Diagram not found"""

    def __init__(self, diagram_id: Optional[int] = None):
        details = {"diagram_id": diagram_id} if diagram_id is not None else None
        super().__init__("Diagram", ErrorCode.DIAGRAM_NOT_FOUND, details)


# ==================== Database Exceptions ====================

class DatabaseException(AppException):
    """
    Storage backend failure.

    The message is generic on purpose; driver error text stays in the logs.
    """

    def __init__(
        self,
        message: str = "Database error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorCode.DATABASE_ERROR, 500, details)


class StorageConfigurationError(AppException):
    """Storage backend cannot be constructed from the configuration"""

    def __init__(self, message: str = "Invalid storage configuration"):
        super().__init__(message, ErrorCode.STORAGE_CONFIGURATION, 500)


# ==================== External Service Exceptions ====================

class ExternalServiceException(AppException):
    """Generic external service error"""

    def __init__(
        self,
        service: str,
        message: str = "External service error",
        details: Optional[dict[str, Any]] = None,
    ):
        full_message = f"{service}: {message}"
        all_details = {"service": service}
        if details:
            all_details.update(details)
        super().__init__(full_message, ErrorCode.EXTERNAL_SERVICE_ERROR, 502, all_details)


class RenderException(ExternalServiceException):
    """Rendering service rejected the request or could not be reached"""

    def __init__(self, message: str = "Failed to generate diagram", status: Optional[int] = None):
        super().__init__("Rendering service", message, {"upstream_status": status} if status else None)
        self.code = ErrorCode.RENDER_FAILED


class ApiRequestException(ExternalServiceException):
    """Diagram API call failed for a reason other than validation or absence"""

    def __init__(self, message: str = "Request failed", status: Optional[int] = None):
        super().__init__("Diagram API", message, {"upstream_status": status} if status else None)
        self.code = ErrorCode.API_REQUEST_FAILED


# ==================== Workflow Exceptions ====================

class WorkflowException(AppException):
    """Operation not allowed in the current workflow state"""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INVALID_TRANSITION,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, 409, details)


class RenderInProgressException(WorkflowException):
    """A render call is already in flight for this workflow"""

    def __init__(self, message: str = "A render is already in progress"):
        super().__init__(message, ErrorCode.RENDER_IN_PROGRESS)
