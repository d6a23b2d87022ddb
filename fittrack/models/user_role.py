from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class UserRole(Document):
    """Authorization-role row derived from User.user_metadata; see services.entitlements."""
    user_id: Indexed(str, unique=True)
    role: str
    expiry_time: datetime | None = None
    source_version: int = 0  # User.entitlement_version this row was derived from
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "user_roles"
