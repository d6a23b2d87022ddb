from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class Profile(Document):
    user_id: Indexed(str)
    full_name: str | None = None
    avatar_url: str | None = None
    date_of_birth: str | None = None  # YYYY-MM-DD
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "profiles"


class ProfileDetails(Document):
    """Contact details plus questionnaire answers used for body-fat estimates. One row per user."""
    user_id: Indexed(str, unique=True)
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    age: int | None = None
    gender: str | None = None
    height_cm: float | None = None
    goal: str | None = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "profile_details"
