from datetime import datetime
from typing import Literal

from beanie import Document, Indexed
from pydantic import BaseModel, Field

PlanRole = Literal["trial_user", "user"]


class UserMetadata(BaseModel):
    """Identity metadata; plan_role + expiry_at is the user's entitlement."""
    full_name: str = ""
    plan_role: PlanRole = "user"
    expiry_at: datetime | None = None  # naive UTC
    signup_source: str = "user"

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry_at is None:
            return False
        return self.expiry_at < (now or datetime.utcnow())


class User(Document):
    google_sub: Indexed(str, unique=True)
    email: str
    name: str = ""
    picture: str | None = None
    user_metadata: UserMetadata = Field(default_factory=UserMetadata)
    entitlement_version: int = 0  # compare-and-swap token for entitlement writes
    last_payment_id: str | None = None
    applied_payment_ids: list[str] = Field(default_factory=list)
    session_version: int = 0
    last_login_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
