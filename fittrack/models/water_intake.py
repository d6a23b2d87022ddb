from datetime import date, datetime

from beanie import Document
from pydantic import Field


class WaterIntake(Document):
    user_id: str
    amount_ml: int
    log_date: str = Field(default_factory=lambda: date.today().isoformat())  # YYYY-MM-DD
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "water_intake"
        indexes = [[("user_id", 1), ("log_date", -1)]]
