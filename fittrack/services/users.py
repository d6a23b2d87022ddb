from datetime import datetime

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from fittrack.core.audit import log_event
from fittrack.core.config import Settings
from fittrack.core.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from fittrack.core.logging import get_logger
from fittrack.models.profile import Profile
from fittrack.models.user import User, UserMetadata
from fittrack.services import entitlements

log = get_logger(__name__)


def verify_google_id_token(token: str, settings: Settings) -> dict:
    """Verify Google ID token; return decoded claims (sub, email, name, picture, etc.)."""
    try:
        return id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            settings.google_client_id,
        )
    except ValueError as e:
        raise UnauthorizedError(f"Invalid Google token: {e}") from e


async def upsert_user_from_google(claims: dict, settings: Settings, trial: bool = False) -> User:
    """Sign in an existing user or create one; `trial` only matters on creation."""
    google_sub = claims.get("sub")
    if not google_sub:
        raise ValidationError("Missing sub in token")
    email = claims.get("email") or ""
    name = claims.get("name") or ""
    picture = claims.get("picture")

    user = await User.find_one(User.google_sub == google_sub)
    if user:
        # $set only the profile fields; a full save could clobber a concurrent entitlement write
        await user.set(
            {
                User.email: email,
                User.name: name,
                User.picture: picture,
                User.last_login_at: datetime.utcnow(),
                User.updated_at: datetime.utcnow(),
            }
        )
        await ensure_signin_role(user)
        log.info("user_login", user_id=str(user.id), email=user.email)
        await log_event(str(user.id), "user_login", "user", str(user.id), {"email": user.email})
        return user

    user = User(
        google_sub=google_sub,
        email=email,
        name=name,
        picture=picture,
        user_metadata=UserMetadata(full_name=name),
        last_login_at=datetime.utcnow(),
    )
    await user.insert()
    if trial:
        await entitlements.start_trial(user, settings)
    else:
        await entitlements.sync_role_projection(user)
    await Profile(user_id=str(user.id), full_name=name, avatar_url=picture).insert()
    log.info("user_created", user_id=str(user.id), email=user.email, plan_role=user.user_metadata.plan_role)
    await log_event(
        str(user.id),
        "user_created",
        "user",
        str(user.id),
        {"email": user.email, "signup_source": user.user_metadata.signup_source},
    )
    return user


async def ensure_signin_role(user: User) -> None:
    """Refuse sign-in unless the role row says user or trial_user."""
    role = await entitlements.get_role(str(user.id))
    if role is None:
        # row missing (e.g. created before projections existed): derive it
        await entitlements.sync_role_projection(user)
        return
    if role.role not in entitlements.SIGNIN_ROLES:
        raise ForbiddenError("You are not authorized for this role")


def session_payload_for_user(user: User) -> dict:
    return {"user_id": str(user.id), "session_version": user.session_version}


def entitlement_summary(user: User, now: datetime | None = None) -> dict:
    at = now or datetime.utcnow()
    meta = user.user_metadata
    days_remaining = None
    if meta.expiry_at is not None:
        days_remaining = max(0, (meta.expiry_at - at).days)
    return {
        "plan_role": meta.plan_role,
        "signup_source": meta.signup_source,
        "expiry_at": meta.expiry_at.isoformat() if meta.expiry_at else None,
        "is_expired": meta.is_expired(at),
        "days_remaining": days_remaining,
    }
