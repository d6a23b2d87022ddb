from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from fittrack.core.config import Settings, get_settings
from fittrack.core.security import create_session_token
from fittrack.deps import SESSION_COOKIE_NAME, get_current_user
from fittrack.models.user import User
from fittrack.services import users as user_service

router = APIRouter()


class GoogleAuthRequest(BaseModel):
    id_token: str
    trial: bool = False  # only applied when the account is created


def _user_out(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "picture": user.picture,
        "entitlement": user_service.entitlement_summary(user),
    }


@router.post("/google")
async def auth_google(body: GoogleAuthRequest, response: Response, settings: Settings = Depends(get_settings)):
    """Exchange Google ID token for a bearer token (also set as httpOnly cookie)."""
    claims = user_service.verify_google_id_token(body.id_token, settings)
    user = await user_service.upsert_user_from_google(claims, settings, trial=body.trial)
    token = create_session_token(user_service.session_payload_for_user(user), settings)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.env == "production",
        samesite="lax",
        path="/",
    )
    return {"access_token": token, "token_type": "bearer", "user": _user_out(user)}


@router.get("/me")
async def auth_me(user: User = Depends(get_current_user)):
    """Return current user and entitlement."""
    return _user_out(user)
