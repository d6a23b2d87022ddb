from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class AssignedPlan(BaseModel):
    """Meal plan set by a coach; overrides the user's own requirements."""
    calories: float | None = None
    protein: float | None = None
    carbs_g: float | None = None
    fats_g: float | None = None


class NutritionRequirement(Document):
    user_id: Indexed(str, unique=True)
    calories_requirement: float | None = None
    protein_requirement: float | None = None
    carbs_requirement: float | None = None
    fats_requirement: float | None = None
    water_requirement: int | None = None  # ml
    assigned_plan: AssignedPlan | None = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "nutrition_requirements"
