"""
API route modules.

Each module defines routes for one area of the API.
"""

from routes.catalog import router as catalog_router
from routes.resolution import router as resolution_router
from routes.learned_matches import router as learned_matches_router

__all__ = [
    "catalog_router",
    "resolution_router",
    "learned_matches_router",
]
