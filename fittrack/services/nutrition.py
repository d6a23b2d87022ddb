"""Nutrition and water logging; daily totals against goals."""

from datetime import date
from typing import Any, Iterable

from fittrack.core.exceptions import ValidationError
from fittrack.models.nutrition_log import NutritionLog
from fittrack.models.nutrition_requirement import NutritionRequirement
from fittrack.models.water_intake import WaterIntake

DEFAULT_GOALS = {"calories": 2200.0, "protein": 150.0, "carbs": 250.0, "fats": 75.0}
DEFAULT_WATER_GOAL_ML = 3000
MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def calculate_totals(logs: Iterable[Any]) -> dict[str, float]:
    """Sum calories and macros; missing or non-numeric values count as zero."""
    totals = {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fats": 0.0}
    for entry in logs:
        row = entry if isinstance(entry, dict) else entry.model_dump()
        totals["calories"] += _num(row.get("calories"))
        totals["protein"] += _num(row.get("protein_g"))
        totals["carbs"] += _num(row.get("carbs_g"))
        totals["fats"] += _num(row.get("fats_g"))
    return totals


def nutrition_goals(requirement: NutritionRequirement | None) -> dict[str, float]:
    """Coach-assigned plan wins, then the user's own requirement, then defaults."""
    plan = requirement.assigned_plan if requirement else None
    pairs = {
        "calories": (plan and plan.calories, requirement and requirement.calories_requirement),
        "protein": (plan and plan.protein, requirement and requirement.protein_requirement),
        "carbs": (plan and plan.carbs_g, requirement and requirement.carbs_requirement),
        "fats": (plan and plan.fats_g, requirement and requirement.fats_requirement),
    }
    return {k: float(a or b or DEFAULT_GOALS[k]) for k, (a, b) in pairs.items()}


def percent_of(value: float, goal: float) -> int:
    if goal <= 0:
        return 0
    return min(100, round(value / goal * 100))


def _day(day: str | None) -> str:
    if not day:
        return date.today().isoformat()
    try:
        return date.fromisoformat(day).isoformat()
    except ValueError as e:
        raise ValidationError("day must be YYYY-MM-DD") from e


async def add_food_log(user_id: str, data: dict[str, Any]) -> NutritionLog:
    meal_name = (data.get("meal_name") or "").strip()
    if not meal_name:
        raise ValidationError("meal_name is required")
    meal_type = data.get("meal_type") or "snack"
    if meal_type not in MEAL_TYPES:
        raise ValidationError(f"meal_type must be one of {', '.join(MEAL_TYPES)}")
    values = {k: _num(data.get(k)) for k in ("calories", "protein_g", "carbs_g", "fats_g")}
    if any(v < 0 for v in values.values()):
        raise ValidationError("Nutrient values cannot be negative")
    entry = NutritionLog(
        user_id=user_id,
        meal_name=meal_name,
        meal_type=meal_type,
        log_date=_day(data.get("log_date")),
        **values,
    )
    await entry.insert()
    return entry


async def add_water(user_id: str, amount_ml: int, day: str | None = None) -> WaterIntake:
    if amount_ml is None or amount_ml <= 0:
        raise ValidationError("amount_ml must be positive")
    entry = WaterIntake(user_id=user_id, amount_ml=int(amount_ml), log_date=_day(day))
    await entry.insert()
    return entry


async def reset_water(user_id: str, day: str | None = None) -> int:
    result = await WaterIntake.find(
        WaterIntake.user_id == user_id,
        WaterIntake.log_date == _day(day),
    ).delete()
    return result.deleted_count if result is not None else 0


async def set_water_goal(user_id: str, litres: float) -> int:
    if litres is None or litres <= 0:
        raise ValidationError("litres must be positive")
    water_ml = round(litres * 1000)
    requirement = await NutritionRequirement.find_one(NutritionRequirement.user_id == user_id)
    if requirement is None:
        requirement = NutritionRequirement(user_id=user_id, water_requirement=water_ml)
        await requirement.insert()
    else:
        requirement.water_requirement = water_ml
        await requirement.save()
    return water_ml


async def daily_summary(user_id: str, day: str | None = None) -> dict[str, Any]:
    log_date = _day(day)
    logs = await NutritionLog.find(NutritionLog.user_id == user_id, NutritionLog.log_date == log_date).to_list()
    water = await WaterIntake.find(WaterIntake.user_id == user_id, WaterIntake.log_date == log_date).to_list()
    requirement = await NutritionRequirement.find_one(NutritionRequirement.user_id == user_id)

    totals = calculate_totals(logs)
    goals = nutrition_goals(requirement)
    water_ml = sum(w.amount_ml for w in water)
    water_goal = (requirement.water_requirement if requirement else None) or DEFAULT_WATER_GOAL_ML
    return {
        "day": log_date,
        "totals": totals,
        "goals": goals,
        "percent": {k: percent_of(totals[k], goals[k]) for k in totals},
        "water": {"consumed_ml": water_ml, "goal_ml": water_goal, "percent": percent_of(water_ml, water_goal)},
        "meals": [
            {
                "id": str(e.id),
                "meal_name": e.meal_name,
                "meal_type": e.meal_type,
                "calories": e.calories,
                "protein_g": e.protein_g,
                "carbs_g": e.carbs_g,
                "fats_g": e.fats_g,
            }
            for e in logs
        ],
    }
