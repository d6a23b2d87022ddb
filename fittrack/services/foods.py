"""Food search proxy over the Edamam food database."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import httpx

from fittrack.core.config import Settings
from fittrack.core.exceptions import ConfigurationError, UpstreamError
from fittrack.core.logging import get_logger

log = get_logger(__name__)

# Edamam nutrient codes
KCAL = "ENERC_KCAL"
PROTEIN = "PROCNT"
CARBS = "CHOCDF"
FAT = "FAT"

WHOLE = Decimal("1")
TENTH = Decimal("0.1")


def normalize_query(query: Any) -> str:
    if not isinstance(query, str):
        return ""
    return query.strip().lower()


def _number(value: Any) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float, step: Decimal = WHOLE) -> Decimal:
    """Round .5 away from zero on the decimal text of `value` (2.5 -> 3, 0.25 -> 0.3)."""
    return Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP)


def reshape_hint(hint: dict[str, Any]) -> dict[str, Any] | None:
    """One Edamam hint -> {id, name, brand, calories, protein, carbs, fat}; None if unnamed."""
    food = hint.get("food") or {}
    name = food.get("label") or food.get("knownAs")
    if not name:
        return None
    nutrients = food.get("nutrients") or {}
    return {
        "id": food.get("foodId"),
        "name": name,
        "brand": food.get("brand") or "Whole Food",
        "calories": int(round_half_up(_number(nutrients.get(KCAL)))),
        "protein": float(round_half_up(_number(nutrients.get(PROTEIN)), TENTH)),
        "carbs": float(round_half_up(_number(nutrients.get(CARBS)), TENTH)),
        "fat": float(round_half_up(_number(nutrients.get(FAT)), TENTH)),
    }


async def _fetch(client: httpx.AsyncClient, query: str, settings: Settings) -> dict[str, Any]:
    params = {
        "app_id": settings.edamam_app_id,
        "app_key": settings.edamam_app_key,
        "ingr": query,
        "nutrition-type": "logging",
    }
    try:
        resp = await client.get(settings.edamam_base_url, params=params)
    except httpx.HTTPError as e:
        raise UpstreamError("Food provider unreachable", details={"reason": str(e)}) from e
    if resp.status_code != 200:
        raise UpstreamError(
            f"Food provider returned {resp.status_code}",
            details={"status_code": resp.status_code, "body": resp.text[:200]},
        )
    try:
        data = resp.json()
    except ValueError as e:
        raise UpstreamError("Food provider returned invalid JSON", details={"body": resp.text[:200]}) from e
    if not isinstance(data, dict):
        raise UpstreamError("Food provider returned an unexpected payload")
    return data


async def _lookup(query: str, settings: Settings, client: httpx.AsyncClient | None) -> dict[str, Any]:
    if not settings.edamam_app_id or not settings.edamam_app_key:
        raise ConfigurationError("Food search provider keys missing")
    if client is not None:
        return await _fetch(client, query, settings)
    async with httpx.AsyncClient(timeout=settings.food_search_timeout) as owned:
        return await _fetch(owned, query, settings)


async def search_foods(
    query: Any,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    Search foods by free text. Always returns {"foods": [...]}; provider or
    configuration failures are reported in the body as {"error", "details", "foods": []}.
    """
    q = normalize_query(query)
    if not q:
        return {"foods": []}

    try:
        data = await _lookup(q, settings, client)
    except ConfigurationError as e:
        log.error("food_search_not_configured", error=e.message)
        return {"error": e.message, "details": {"code": e.code}, "foods": []}
    except UpstreamError as e:
        log.warning("food_search_upstream_error", query=q, error=e.message, details=e.details)
        return {"error": e.message, "details": e.details, "foods": []}

    foods = []
    for hint in data.get("hints") or []:
        if not isinstance(hint, dict):
            continue
        item = reshape_hint(hint)
        if item is not None:
            foods.append(item)
        if len(foods) >= settings.food_search_limit:
            break
    log.info("food_search", query=q, results=len(foods))
    return {"foods": foods}
