"""
Repositories: the storage collaborators behind the service layer.
"""

from .api_key_repository import ApiKeyRepository
from .api_key_usage_repository import ApiKeyUsageRepository
from .base_repository import BaseRepository

__all__ = ["ApiKeyRepository", "ApiKeyUsageRepository", "BaseRepository"]
