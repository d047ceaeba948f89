"""
Constants and enums for the API Key Vault core.

This module centralizes all magic strings and constants used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum


class QueueName(str, Enum):
    """Standard queue names used by the package."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    ENCRYPTION_KEY = "ENCRYPTION_KEY"
    ENABLE_LOGS_QUEUE = "ENABLE_LOGS_QUEUE"
    DEBUG = "DEBUG"


class AuditOperation(str, Enum):
    """Operation labels written to the audit trail."""

    DECRYPT = "decrypt"


# Shown in place of the stored secret on every read model
MASKED_KEY_VALUE = "••••••••••••••••"

TAG_COLORS = (
    "#3B82F6",  # Blue
    "#10B981",  # Green
    "#F59E0B",  # Yellow
    "#EF4444",  # Red
    "#8B5CF6",  # Purple
    "#06B6D4",  # Cyan
    "#F97316",  # Orange
    "#84CC16",  # Lime
)


class Limits:
    """Input limits."""

    MIN_SECRET_LENGTH = 8
    MIN_PASSWORD_LENGTH = 6
    MAX_NAME_LENGTH = 255
    MAX_SERVICE_LENGTH = 100
    MAX_ENVIRONMENT_LENGTH = 50
    MAX_TAG_NAME_LENGTH = 50
