"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://tourdesk.dev/problems"
PROBLEM_MEDIA_TYPE = "application/problem+json"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for authorization errors."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_permissions: Optional[list] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if required_permissions:
            extensions["required_permissions"] = required_permissions

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        extensions = {
            "error_id": error_id,
            "timestamp": _timestamp(),
        }

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/internal-server-error",
            instance=instance,
            extensions=extensions,
        )


# Business logic exceptions

class SlotUnavailableError(ProblemDetailsException):
    """Exception when an availability slot cannot take the requested guests."""

    def __init__(
        self,
        requested: int,
        remaining: int,
        slot_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"Requested {requested} guests but only {remaining} places remain"
            if slot_id:
                detail += f" for slot {slot_id}"

        extensions = {
            "requested": requested,
            "remaining": remaining,
        }
        if slot_id:
            extensions["slot_id"] = slot_id

        super().__init__(
            status_code=409,
            title="Slot Unavailable",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/slot-unavailable",
            instance=instance,
            extensions=extensions,
        )


class PaymentConfigurationError(ProblemDetailsException):
    """Exception when the payment provider has not been configured."""

    def __init__(
        self,
        detail: str = "Payments are not configured. Please contact support.",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=503,
            title="Payments Unavailable",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/payments-unavailable",
            instance=instance,
        )


class PaymentProviderError(ProblemDetailsException):
    """Exception when the payment provider rejects a request."""

    def __init__(
        self,
        detail: str,
        provider_code: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if provider_code:
            extensions["provider_code"] = provider_code

        super().__init__(
            status_code=402,
            title="Payment Failed",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/payment-failed",
            instance=instance,
            extensions=extensions,
        )


class ExternalServiceError(ProblemDetailsException):
    """Exception when a downstream service (storage, AI) fails."""

    def __init__(
        self,
        service: str,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=502,
            title="Upstream Service Error",
            detail=detail or f"The {service} service did not complete the request",
            type_uri=f"{PROBLEM_BASE_URI}/upstream-error",
            instance=instance,
            extensions={"service": service},
        )


class ServiceUnavailableError(ProblemDetailsException):
    """Exception when an optional integration is switched off."""

    def __init__(
        self,
        service: str,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=503,
            title="Service Unavailable",
            detail=detail or f"The {service} integration is not configured",
            type_uri=f"{PROBLEM_BASE_URI}/service-unavailable",
            instance=instance,
            extensions={"service": service},
        )


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/query validation failures as a 400 problem with violations."""
    violations = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        violations.append({
            "path": ".".join(location) or "$",
            "message": error.get("msg", "Invalid value"),
        })

    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "violations": violations}
    )

    return JSONResponse(
        status_code=400,
        content={
            "type": f"{PROBLEM_BASE_URI}/validation-error",
            "title": "Validation Error",
            "status": 400,
            "detail": "The request data failed validation",
            "instance": request.url.path,
            "violations": violations,
        },
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    problem_details = {
        "type": f"{PROBLEM_BASE_URI}/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": _timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type=PROBLEM_MEDIA_TYPE,
    )
