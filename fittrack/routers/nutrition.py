from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from fittrack.deps import get_current_user
from fittrack.models.user import User
from fittrack.services import nutrition as nutrition_service

router = APIRouter()


class FoodLogRequest(BaseModel):
    meal_name: str
    meal_type: str = "snack"
    calories: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fats_g: float = 0
    log_date: str | None = None


class WaterRequest(BaseModel):
    amount_ml: int


class WaterGoalRequest(BaseModel):
    litres: float


@router.post("/logs")
async def add_food_log(body: FoodLogRequest, user: User = Depends(get_current_user)):
    entry = await nutrition_service.add_food_log(str(user.id), body.model_dump())
    return {"id": str(entry.id), "log_date": entry.log_date}


@router.get("/summary")
async def nutrition_summary(
    user: User = Depends(get_current_user),
    day: str | None = Query(None, description="YYYY-MM-DD, defaults to today"),
):
    """Totals, goals and percentages for one day, including water."""
    return await nutrition_service.daily_summary(str(user.id), day)


@router.post("/water")
async def add_water(body: WaterRequest, user: User = Depends(get_current_user)):
    entry = await nutrition_service.add_water(str(user.id), body.amount_ml)
    return {"id": str(entry.id), "amount_ml": entry.amount_ml}


@router.delete("/water/today")
async def reset_water(user: User = Depends(get_current_user)):
    deleted = await nutrition_service.reset_water(str(user.id))
    return {"deleted": deleted}


@router.put("/water/goal")
async def set_water_goal(body: WaterGoalRequest, user: User = Depends(get_current_user)):
    water_ml = await nutrition_service.set_water_goal(str(user.id), body.litres)
    return {"water_requirement_ml": water_ml}
