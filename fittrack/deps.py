"""Shared FastAPI dependencies."""

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Depends, Request

from fittrack.core.config import Settings, get_settings
from fittrack.core.exceptions import UnauthorizedError
from fittrack.core.security import bearer_token, load_session_token
from fittrack.models.user import User
from fittrack.storage.base import StorageBackend, get_storage

SESSION_COOKIE_NAME = "fittrack_session"


async def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> User:
    """Dependency: resolve the caller from "Authorization: Bearer" (or the session cookie)."""
    token = bearer_token(request.headers.get("Authorization")) or request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise UnauthorizedError("Missing Authorization header")
    payload = load_session_token(token, settings)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")
    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid session")
    try:
        user = await User.get(PydanticObjectId(user_id))
    except (InvalidId, TypeError):
        raise UnauthorizedError("Invalid session")
    if not user:
        raise UnauthorizedError("Unauthorized")
    if payload.get("session_version") != user.session_version:
        raise UnauthorizedError("Session invalidated")
    return user


def get_storage_backend(settings: Settings = Depends(get_settings)) -> StorageBackend:
    return get_storage(settings)
