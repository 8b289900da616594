"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_supabase_client: Cached Supabase client for the supabase backend
    check_connection: Storage health check
"""

from config.settings import settings, get_settings, Settings
from config.database import get_supabase_client, check_connection

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Storage
    "get_supabase_client",
    "check_connection",
]
