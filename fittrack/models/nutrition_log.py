from datetime import date, datetime

from beanie import Document
from pydantic import Field


class NutritionLog(Document):
    user_id: str
    meal_name: str
    meal_type: str = "snack"  # breakfast | lunch | dinner | snack
    calories: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fats_g: float = 0
    log_date: str = Field(default_factory=lambda: date.today().isoformat())  # YYYY-MM-DD
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "nutrition_logs"
        indexes = [[("user_id", 1), ("log_date", -1)]]
