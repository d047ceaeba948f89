"""
Pydantic schemas for stored API keys.

Read models never carry the stored secret: ``key_value`` is always the mask,
whatever the source object holds.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import MASKED_KEY_VALUE


class BaseApiKeySchema(BaseModel):
    """Base schema for API key payloads."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="forbid",
    )


class TagRead(BaseModel):
    """Tag attached to a key."""

    id: str
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class ApiKeyRead(BaseModel):
    """Schema for reading a stored key. The secret is masked."""

    id: str = Field(..., description="Key ID")
    user_id: str = Field(..., description="Owner ID")
    name: str = Field(..., description="Display name")
    description: Optional[str] = Field(None, description="Optional description")
    key_value: str = Field(
        default=MASKED_KEY_VALUE, validate_default=True, description="Always masked"
    )
    service: str = Field(..., description="Service label")
    environment: str = Field(..., description="Environment label")
    is_active: bool = Field(..., description="Whether the key can be revealed")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    last_used: Optional[datetime] = Field(None, description="Last successful reveal")
    tags: List[TagRead] = Field(default_factory=list, description="Attached tags")
    usage_count: int = Field(default=0, ge=0, description="Recorded reveal attempts")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("key_value", mode="before")
    @classmethod
    def mask_key_value(cls, v):
        """Replace whatever was supplied with the mask."""
        return MASKED_KEY_VALUE


class ApiKeyPatch(BaseApiKeySchema):
    """
    Partial update for a stored key.

    Only fields explicitly set by the caller are applied; an absent field keeps
    its current value. ``description=None`` clears the description, while
    ``name``/``service``/``environment``/``is_active`` cannot be cleared.
    ``tags`` replaces the whole tag set when present.

    The secret is not part of the patch; it is supplied separately so it never
    round-trips through a serializable model.
    """

    name: Optional[str] = Field(None, description="New display name")
    description: Optional[str] = Field(None, description="New description, None clears")
    service: Optional[str] = Field(None, description="New service label")
    environment: Optional[str] = Field(None, description="New environment label")
    is_active: Optional[bool] = Field(None, description="Activate or deactivate")
    tags: Optional[List[str]] = Field(None, description="Replacement tag names")

    def provided(self) -> Dict[str, Any]:
        """Return only the fields the caller explicitly set."""
        return {field: getattr(self, field) for field in self.model_fields_set}


class ApiKeyDeleted(BaseModel):
    """Summary returned after deleting a key."""

    id: str
    name: str
    service: str

    model_config = ConfigDict(from_attributes=True)


class AuditEntryRead(BaseModel):
    """One recorded reveal attempt."""

    id: str
    api_key_id: str
    endpoint: str
    success: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
