"""
Custom exception classes for the application.

Every error raised across the service layer derives from AppError so
routes can convert it to the standard error payload.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "LEARNED_MATCH_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CATALOG ERRORS
# ===================

class CatalogItemNotFoundError(NotFoundError):
    """Catalog item id is not part of the current catalog snapshot."""

    def __init__(self, item_id: str):
        super().__init__(
            resource="Catalog item",
            identifier=item_id,
            code="CATALOG_ITEM_NOT_FOUND"
        )


class EmptyCatalogError(ValidationError):
    """Resolution requested without a catalog."""

    def __init__(self):
        super().__init__(
            code="CATALOG_EMPTY",
            message="A catalog with at least one item is required"
        )


# ===================
# LEARNED MATCH ERRORS
# ===================

class LearnedMatchNotFoundError(NotFoundError):
    """No learned match stored for this text."""

    def __init__(self, normalized_text: str):
        super().__init__(
            resource="Learned match",
            identifier=normalized_text,
            code="LEARNED_MATCH_NOT_FOUND"
        )


class LearnedMatchImportError(ValidationError):
    """Import payload was not a list or held no valid records."""

    def __init__(self):
        super().__init__(
            code="IMPORT_INVALID",
            message="Import payload must be a list with at least one valid learned match",
            details={"required_fields": ["originalText", "productId", "productDescription"]}
        )


# ===================
# RESOLUTION ERRORS
# ===================

class RemoteMatchError(ExternalServiceError):
    """
    Remote matcher call failed or returned a payload that breaks the contract.

    Fatal to the whole resolution run.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="remote_matcher",
            message=message,
            details=details
        )


class UnfilledSlotError(AppError):
    """
    A result slot was left empty after merging.

    Signals a defect in the batch/merge logic. An unmatched line is a filled
    slot with no catalog item and never raises this.
    """

    def __init__(self, positions: list[int], total: int):
        super().__init__(
            code="RESOLUTION_SLOT_UNFILLED",
            message=f"{len(positions)} of {total} order lines were not resolved",
            status_code=500,
            details={"positions": positions, "total": total}
        )
