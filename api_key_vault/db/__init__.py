"""
SQLAlchemy models and database configuration for the API Key Vault core.
"""

from .db_api_key_models import ApiKey, ApiKeyUsage, Tag, api_key_tags
from .db_base import TimestampMixin, UUIDMixin, utc_now
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    get_development_config,
    get_production_config,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_user_models import User

__all__ = [
    # Base definitions
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "import_all_models",
    "initialize_db",
    "close_db",
    "get_db_manager",
    "set_db_manager",
    "get_production_config",
    "get_development_config",
    # Models
    "User",
    "ApiKey",
    "ApiKeyUsage",
    "Tag",
    "api_key_tags",
]
