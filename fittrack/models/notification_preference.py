from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field

NOTIFICATION_FIELDS = (
    "workout_reminders",
    "diet_meal_reminders",
    "water_intake_alerts",
    "live_session_alerts",
    "progress_updates",
    "fitness_tips",
)


class NotificationPreference(Document):
    user_id: Indexed(str, unique=True)
    workout_reminders: bool = True
    diet_meal_reminders: bool = True
    water_intake_alerts: bool = True
    live_session_alerts: bool = True
    progress_updates: bool = True
    fitness_tips: bool = True
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "notification_preferences"
