# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Error body shape for management routes:
#   {"error": "...", "code": "...", "suggestion": "...", "details": {...}}
#
# Status taxonomy:
#   401 - missing/invalid session or API key
#   404 - unknown (or not owned) project, data source, deployment
#   400 - unsupported task/source kind, malformed upload or input
#   500 - provider failure, deployment failure, anything unexpected
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


class AppBuilderException(Exception):
    """
    Base exception for the AI App Builder API.

    All HTTP-facing exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "APP_BUILDER_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Not Found Exceptions
# =============================================================================

class ProjectNotFoundError(AppBuilderException):
    """Raised when a project doesn't exist or isn't owned by the caller."""

    def __init__(self, project_id: str):
        super().__init__(
            message="Project not found",
            code="PROJECT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the project_id is correct",
            details={"project_id": project_id}
        )


class DataSourceNotFoundError(AppBuilderException):
    """Raised when a data source doesn't exist or isn't owned by the caller."""

    def __init__(self, data_source_id: str):
        super().__init__(
            message="Data source not found",
            code="DATA_SOURCE_NOT_FOUND",
            status_code=404,
            suggestion="Check that the data source id is correct",
            details={"data_source_id": data_source_id}
        )


class DeploymentNotFoundError(AppBuilderException):
    """Raised when a deployment doesn't exist or isn't owned by the caller."""

    def __init__(self, deployment_id: str):
        super().__init__(
            message="Deployment not found",
            code="DEPLOYMENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the deployment_id is correct",
            details={"deployment_id": deployment_id}
        )


# =============================================================================
# Deployment Exceptions
# =============================================================================

class InvalidApiKeyError(AppBuilderException):
    """Raised when a bearer key doesn't match the targeted active deployment."""

    def __init__(self):
        super().__init__(
            message="Invalid API key",
            code="INVALID_API_KEY",
            status_code=401,
            suggestion="Send the key returned at deploy time as 'Authorization: Bearer <key>'",
        )


class DeploymentError(AppBuilderException):
    """Raised when creating or changing a deployment fails part-way."""

    def __init__(self, action: str, error: str):
        super().__init__(
            message=f"{action} failed: {error}",
            code="DEPLOYMENT_FAILED",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Upload / Processing Exceptions
# =============================================================================

class NoFileProvidedError(AppBuilderException):
    """Raised when a file-backed source is processed without a file."""

    def __init__(self, source_type: str):
        super().__init__(
            message="No file provided",
            code="NO_FILE_PROVIDED",
            status_code=400,
            suggestion=f"Attach the {source_type} file as the multipart 'file' field",
            details={"type": source_type}
        )


class InvalidFileTypeError(AppBuilderException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(AppBuilderException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class InvalidSourceConfigError(AppBuilderException):
    """Raised when the multipart config field isn't a JSON object."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Invalid processing config: {error}",
            code="INVALID_SOURCE_CONFIG",
            status_code=400,
            suggestion="Send 'config' as a JSON object, e.g. {\"text_column\": \"message\"}",
        )


class DataProcessingError(AppBuilderException):
    """Raised when a processor produced no usable records."""

    def __init__(self, errors: list[str]):
        super().__init__(
            message=f"Processing failed: {', '.join(errors)}",
            code="PROCESSING_FAILED",
            status_code=400,
            suggestion="Check the file format and the text column / field settings",
            details={"errors": errors[:20]}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

# HTTP status for library/service errors raised below the app layer
APPLICATION_ERROR_STATUS = {
    "MODEL_NOT_FOUND": 400,
    "UNSUPPORTED_TASK": 400,
    "INVALID_TASK_INPUT": 400,
    "UNSUPPORTED_SOURCE_TYPE": 400,
    "PROVIDER_ERROR": 500,
    "PROVIDER_NOT_CONFIGURED": 500,
}


async def app_builder_exception_handler(
    request: Request,
    exc: AppBuilderException
) -> JSONResponse:
    """
    Convert AppBuilderException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def application_error_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """Map lib/ai/ingestion errors onto the same response shape."""
    status_code = APPLICATION_ERROR_STATUS.get(exc.code, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.describe()}")

    content: dict[str, Any] = {"error": exc.message, "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "message": str(exc)
        }
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last resort: 500 with whatever message the exception carries."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) or "Unknown error",
        }
    )
