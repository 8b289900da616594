"""
Business logic services.

Each service handles one part of the resolution pipeline.
"""

from services.conversion_service import (
    ConversionService,
    ConversionRule,
    ConversionResult,
    CONVERSION_RULES,
    get_conversion_service,
)
from services.learned_match_store import (
    LearnedMatchStore,
    InMemoryLearnedMatchStore,
    JsonFileLearnedMatchStore,
    SupabaseLearnedMatchStore,
    create_learned_match_store,
)
from services.learning_service import LearningService, get_learning_service
from services.matcher_service import RemoteMatcher, ClaudeMatcherService, get_matcher_service
from services.resolution_service import ResolutionService, get_resolution_service
from services.export_service import ExportService, get_export_service

__all__ = [
    "ConversionService",
    "ConversionRule",
    "ConversionResult",
    "CONVERSION_RULES",
    "get_conversion_service",
    "LearnedMatchStore",
    "InMemoryLearnedMatchStore",
    "JsonFileLearnedMatchStore",
    "SupabaseLearnedMatchStore",
    "create_learned_match_store",
    "LearningService",
    "get_learning_service",
    "RemoteMatcher",
    "ClaudeMatcherService",
    "get_matcher_service",
    "ResolutionService",
    "get_resolution_service",
    "ExportService",
    "get_export_service",
]
