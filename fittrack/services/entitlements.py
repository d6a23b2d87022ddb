"""Subscription entitlement: expiry arithmetic, atomic extension, role projection.

The user's entitlement (``user_metadata.plan_role`` + ``user_metadata.expiry_at``)
is the single source of truth. Writes go through one conditional update keyed on
``User.entitlement_version``; a concurrent writer makes the update match nothing,
and the caller re-reads and recomputes instead of overwriting. The ``user_roles``
row is only ever derived from a committed entitlement, never written on its own.
"""

from datetime import datetime, timedelta

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from fittrack.core.config import Settings
from fittrack.core.exceptions import ConflictError, UserNotFoundError
from fittrack.core.logging import get_logger
from fittrack.models.user import User, UserMetadata
from fittrack.models.user_role import UserRole

log = get_logger(__name__)

TRIAL_ROLE = "trial_user"
PAID_ROLE = "user"
SIGNIN_ROLES = (TRIAL_ROLE, PAID_ROLE)


def extension_base(metadata: UserMetadata, now: datetime) -> datetime:
    """Trial users and lapsed users start from now; active subscribers keep their remaining days."""
    if metadata.plan_role == TRIAL_ROLE:
        return now
    if metadata.expiry_at is not None and metadata.expiry_at > now:
        return metadata.expiry_at
    return now


def compute_new_expiry(metadata: UserMetadata, now: datetime, days: int) -> datetime:
    return extension_base(metadata, now) + timedelta(days=days)


async def load_user(user_id: str) -> User:
    try:
        oid = PydanticObjectId(user_id)
    except (InvalidId, TypeError) as e:
        raise UserNotFoundError(f"User not found: {user_id}") from e
    user = await User.get(oid)
    if not user:
        raise UserNotFoundError(f"User not found: {user_id}")
    return user


async def extend_for_payment(
    user_id: str,
    payment_id: str,
    settings: Settings,
    now: datetime | None = None,
) -> User:
    """
    Extend the user's paid coverage by settings.subscription_extension_days.
    Returns the user as committed. If payment_id was already applied (retry after a
    partial failure, even once later payments have landed), returns the current state
    without extending again.
    """
    days = settings.subscription_extension_days
    for attempt in range(1, settings.entitlement_max_attempts + 1):
        user = await load_user(user_id)
        if payment_id in user.applied_payment_ids or user.last_payment_id == payment_id:
            log.info("entitlement_already_applied", user_id=user_id, payment_id=payment_id)
            return user
        at = now or datetime.utcnow()
        new_expiry = compute_new_expiry(user.user_metadata, at, days)
        result = await User.get_motor_collection().update_one(
            {
                "_id": user.id,
                "entitlement_version": user.entitlement_version,
                "applied_payment_ids": {"$ne": payment_id},
            },
            {
                # dotted paths: merge into user_metadata, other keys untouched
                "$set": {
                    "user_metadata.plan_role": PAID_ROLE,
                    "user_metadata.expiry_at": new_expiry,
                    "user_metadata.signup_source": PAID_ROLE,
                    "last_payment_id": payment_id,
                    "updated_at": datetime.utcnow(),
                },
                "$addToSet": {"applied_payment_ids": payment_id},
                "$inc": {"entitlement_version": 1},
            },
        )
        if result.matched_count == 1:
            log.info(
                "entitlement_extended",
                user_id=user_id,
                payment_id=payment_id,
                previous_role=user.user_metadata.plan_role,
                previous_expiry=user.user_metadata.expiry_at.isoformat() if user.user_metadata.expiry_at else None,
                new_expiry=new_expiry.isoformat(),
                attempt=attempt,
            )
            return await load_user(user_id)
        log.warning("entitlement_version_conflict", user_id=user_id, attempt=attempt)
    raise ConflictError(
        "Entitlement changed concurrently; retry the verification",
        details={"user_id": user_id, "attempts": settings.entitlement_max_attempts},
    )


async def start_trial(user: User, settings: Settings, now: datetime | None = None) -> User:
    """Give a freshly created user a trial window and derive its role row."""
    at = now or datetime.utcnow()
    user.user_metadata.plan_role = TRIAL_ROLE
    user.user_metadata.signup_source = TRIAL_ROLE
    user.user_metadata.expiry_at = at + timedelta(days=settings.trial_days)
    user.entitlement_version += 1
    await user.save()
    await sync_role_projection(user)
    return user


async def sync_role_projection(user: User) -> None:
    """
    Derive the user_roles row from the user's committed entitlement.
    Only replaces a row derived from an older entitlement_version.
    """
    uid = str(user.id)
    try:
        await UserRole.get_motor_collection().update_one(
            {"user_id": uid, "source_version": {"$lt": user.entitlement_version}},
            {
                "$set": {
                    "role": user.user_metadata.plan_role,
                    "expiry_time": user.user_metadata.expiry_at,
                    "source_version": user.entitlement_version,
                    "updated_at": datetime.utcnow(),
                }
            },
            upsert=True,
        )
    except DuplicateKeyError:
        # a row with a newer source_version exists; the upsert collided with it
        log.debug("role_projection_newer_exists", user_id=uid, version=user.entitlement_version)


async def get_role(user_id: str) -> UserRole | None:
    return await UserRole.find_one(UserRole.user_id == user_id)
