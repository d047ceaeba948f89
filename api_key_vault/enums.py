"""
Enums used across the api_key_vault package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class KeyEnvironment(str, enum.Enum):
    """Known deployment environments for a stored key. Other labels are accepted."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
