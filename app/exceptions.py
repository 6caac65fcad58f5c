# =============================================================================
# app/exceptions.py - Exceptions and Problem Responses
# =============================================================================
# Centralized error types for the API and their translation into the
# structured problem body every error response shares:
#
#   {"status": 404, "code": "CATALOG_ITEM_NOT_FOUND", "detail": "...",
#    "suggestion": "...", "details": {...}}
#
# Request validation failures keep their 422 in the same shape. Unknown
# exceptions become a generic 500. Exception type and traceback are
# only included when running in development mode.
# =============================================================================

import traceback
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request


class PublicApiException(Exception):
    """
    Base exception for the public API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PUBLIC_API_ERROR",
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

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "status": self.status_code,
            "code": self.code,
            "detail": self.message,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Catalog Exceptions
# =============================================================================

class CatalogItemNotFoundError(PublicApiException):
    """Raised when a catalog item ID doesn't exist."""

    def __init__(self, catalog_item_id: int):
        super().__init__(
            message=f"Catalog item not found: {catalog_item_id}",
            code="CATALOG_ITEM_NOT_FOUND",
            status_code=404,
            suggestion="List items with GET /api/catalog-items to find a valid id",
            details={"catalogItemId": catalog_item_id},
        )


class DuplicateCatalogItemError(PublicApiException):
    """Raised when creating an item whose name is already taken."""

    def __init__(self, name: str):
        super().__init__(
            message=f"A catalogItem with name {name} already exists",
            code="DUPLICATE",
            status_code=409,
            suggestion="Choose a different name or update the existing item",
            details={"name": name},
        )


class CatalogReferenceNotFoundError(PublicApiException):
    """Raised when an item references a brand or type that doesn't exist."""

    def __init__(self, kind: str, reference_id: int):
        super().__init__(
            message=f"Catalog {kind} not found: {reference_id}",
            code=f"CATALOG_{kind.upper()}_NOT_FOUND",
            status_code=400,
            suggestion=f"Use an id returned by GET /api/catalog-{kind}s",
            details={f"catalog{kind.capitalize()}Id": reference_id},
        )


# =============================================================================
# Problem Responses
# =============================================================================

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"
VALIDATION_ERROR_CODE = "VALIDATION_ERROR"


def problem_details(exc: Exception, include_diagnostics: bool = False) -> tuple[int, dict[str, Any]]:
    """
    Build the status code and body for an exception.

    Args:
        exc: The exception that escaped request handling
        include_diagnostics: Add exception type, message and traceback
            (development mode only)

    Returns:
        (status_code, body)
    """
    if isinstance(exc, PublicApiException):
        status_code = exc.status_code
        body = exc.to_dict()
    else:
        status_code = 500
        body = {
            "status": status_code,
            "code": INTERNAL_ERROR_CODE,
            "detail": "An unexpected error occurred",
        }

    if include_diagnostics:
        body["exception"] = {
            "type": f"{type(exc).__module__}.{type(exc).__qualname__}",
            "message": str(exc),
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return status_code, body


def problem_response(
    status_code: int,
    code: str,
    detail: str,
    headers: dict[str, str] | None = None,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Structured response for expected failures produced by pipeline stages."""
    content = {"status": status_code, "code": code, "detail": detail}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle request validation errors.

    Keeps FastAPI's 422 status but uses the problem body, with the
    individual field errors under details.errors.
    """
    return problem_response(
        status_code=422,
        code=VALIDATION_ERROR_CODE,
        detail="Validation error",
        details={"errors": jsonable_encoder(exc.errors())},
    )
