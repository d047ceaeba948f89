from .api_key_schemas import (
    ApiKeyDeleted,
    ApiKeyPatch,
    ApiKeyRead,
    AuditEntryRead,
    TagRead,
)
from .user_schemas import UserRead

__all__ = [
    "ApiKeyDeleted",
    "ApiKeyPatch",
    "ApiKeyRead",
    "AuditEntryRead",
    "TagRead",
    "UserRead",
]
