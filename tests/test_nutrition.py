import pytest

from fittrack.core.exceptions import ValidationError
from fittrack.models.nutrition_requirement import AssignedPlan, NutritionRequirement
from fittrack.services import nutrition as nutrition_service


def test_totals_treat_bad_values_as_zero():
    logs = [
        {"calories": "300", "protein_g": 20, "carbs_g": "x", "fats_g": None},
        {"calories": 150.5, "protein_g": "4.5", "carbs_g": 30, "fats_g": 5},
    ]
    assert nutrition_service.calculate_totals(logs) == {
        "calories": 450.5,
        "protein": 24.5,
        "carbs": 30.0,
        "fats": 5.0,
    }


def test_goals_fall_back_in_order():
    assert nutrition_service.nutrition_goals(None) == {
        "calories": 2200.0, "protein": 150.0, "carbs": 250.0, "fats": 75.0,
    }
    requirement = NutritionRequirement(
        user_id="u1",
        calories_requirement=1800,
        protein_requirement=120,
        assigned_plan=AssignedPlan(calories=2000, fats_g=60),
    )
    assert nutrition_service.nutrition_goals(requirement) == {
        "calories": 2000.0, "protein": 120.0, "carbs": 250.0, "fats": 60.0,
    }


def test_percent_is_capped():
    assert nutrition_service.percent_of(1100, 2200) == 50
    assert nutrition_service.percent_of(5000, 2200) == 100
    assert nutrition_service.percent_of(10, 0) == 0


@pytest.mark.asyncio
async def test_daily_summary(db):
    uid = "user-1"
    day = "2026-03-01"
    await nutrition_service.add_food_log(
        uid, {"meal_name": "Oats", "meal_type": "breakfast", "calories": 350, "protein_g": 12, "log_date": day}
    )
    await nutrition_service.add_food_log(uid, {"meal_name": "Dal", "meal_type": "lunch", "calories": 400, "log_date": day})
    await nutrition_service.add_food_log(uid, {"meal_name": "Late snack", "calories": 999, "log_date": "2026-03-02"})
    await nutrition_service.add_water(uid, 750, day)
    await nutrition_service.add_water(uid, 750, day)
    await nutrition_service.set_water_goal(uid, 2.5)

    summary = await nutrition_service.daily_summary(uid, day)
    assert summary["totals"]["calories"] == 750.0
    assert summary["totals"]["protein"] == 12.0
    assert summary["percent"]["calories"] == 34
    assert summary["water"] == {"consumed_ml": 1500, "goal_ml": 2500, "percent": 60}
    assert {m["meal_name"] for m in summary["meals"]} == {"Oats", "Dal"}

    assert await nutrition_service.reset_water(uid, day) == 2
    summary = await nutrition_service.daily_summary(uid, day)
    assert summary["water"]["consumed_ml"] == 0


@pytest.mark.asyncio
async def test_invalid_inputs(db):
    with pytest.raises(ValidationError):
        await nutrition_service.add_water("u1", 0)
    with pytest.raises(ValidationError):
        await nutrition_service.add_food_log("u1", {"meal_name": "  "})
    with pytest.raises(ValidationError):
        await nutrition_service.add_food_log("u1", {"meal_name": "Tea", "meal_type": "brunch"})
    with pytest.raises(ValidationError):
        await nutrition_service.daily_summary("u1", "01/03/2026")


@pytest.mark.asyncio
async def test_nutrition_endpoints(client, make_user, auth_headers):
    user = await make_user()
    headers = auth_headers(user)
    r = await client.post(
        "/v1/nutrition/logs",
        json={"meal_name": "Idli", "meal_type": "breakfast", "calories": 200, "protein_g": 6},
        headers=headers,
    )
    assert r.status_code == 200
    assert (await client.post("/v1/nutrition/water", json={"amount_ml": 300}, headers=headers)).status_code == 200
    assert (await client.put("/v1/nutrition/water/goal", json={"litres": 3.2}, headers=headers)).json() == {
        "water_requirement_ml": 3200
    }
    summary = (await client.get("/v1/nutrition/summary", headers=headers)).json()
    assert summary["totals"]["calories"] == 200.0
    assert summary["water"]["consumed_ml"] == 300
    assert summary["water"]["goal_ml"] == 3200
    assert (await client.get("/v1/nutrition/summary")).status_code == 401
