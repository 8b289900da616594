"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Catalog
    CatalogItemNotFoundError,
    EmptyCatalogError,

    # Learned matches
    LearnedMatchNotFoundError,
    LearnedMatchImportError,

    # Resolution
    RemoteMatchError,
    UnfilledSlotError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Catalog
    "CatalogItemNotFoundError",
    "EmptyCatalogError",

    # Learned matches
    "LearnedMatchNotFoundError",
    "LearnedMatchImportError",

    # Resolution
    "RemoteMatchError",
    "UnfilledSlotError",
]
