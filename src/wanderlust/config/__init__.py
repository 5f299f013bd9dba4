"""
Configuration settings and constants for the trip planning pipeline.
"""

from .settings import (
    GEMINI_API_KEY,
    MAPS_API_KEY,
    STORAGE_DIR,
    TRIPS_STORAGE_KEY,
    STORAGE_QUOTA_BYTES,
    SYSTEM_PROMPT,
    validate_api_keys
)

__all__ = [
    'GEMINI_API_KEY',
    'MAPS_API_KEY',
    'STORAGE_DIR',
    'TRIPS_STORAGE_KEY',
    'STORAGE_QUOTA_BYTES',
    'SYSTEM_PROMPT',
    'validate_api_keys'
]
