from fastapi import APIRouter, Depends, Request

from fittrack.core.config import Settings, get_settings
from fittrack.services import foods as foods_service

router = APIRouter()


async def _read_body(request: Request) -> dict:
    """JSON object body, or {} when the body is missing, malformed or not an object."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.post("/search")
async def search_foods(request: Request, settings: Settings = Depends(get_settings)):
    """Search the nutrition database; errors come back in the body with an empty list."""
    body = await _read_body(request)
    # searchTerm: older clients
    query = body.get("query") or body.get("searchTerm")
    return await foods_service.search_foods(query, settings)
