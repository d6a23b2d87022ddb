from datetime import date, datetime

from beanie import Document
from pydantic import Field


class ProgressRecord(Document):
    user_id: str
    weight_kg: float
    height_cm: float | None = None
    muscle_mass_kg: float | None = None
    bmi: float | None = None
    body_fat_percent: float | None = None
    notes: str | None = None
    record_date: str = Field(default_factory=lambda: date.today().isoformat())  # YYYY-MM-DD
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "progress_records"
        indexes = [[("user_id", 1), ("record_date", 1)]]


class ProgressPhoto(Document):
    user_id: str
    storage_key: str  # progress-photos/{user_id}/...
    taken_on: str = Field(default_factory=lambda: date.today().isoformat())
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "progress_photos"
