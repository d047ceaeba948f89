"""
Pydantic schemas for user accounts.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserRead(BaseModel):
    """Public view of a user. The password hash is never exposed."""

    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
