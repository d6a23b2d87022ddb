"""Profile details and notification preferences: one row per user, upserted on user_id."""

from datetime import datetime
from typing import Any

from fittrack.core.exceptions import ValidationError
from fittrack.core.logging import get_logger
from fittrack.models.notification_preference import NOTIFICATION_FIELDS, NotificationPreference
from fittrack.models.profile import Profile, ProfileDetails
from fittrack.models.user import User

log = get_logger(__name__)

DETAIL_FIELDS = ("first_name", "last_name", "phone", "gender", "age", "height_cm", "goal")


def _details_out(details: ProfileDetails | None, profile: Profile | None) -> dict[str, Any]:
    out = {f: getattr(details, f) if details else None for f in DETAIL_FIELDS}
    out["date_of_birth"] = profile.date_of_birth if profile else None
    return out


async def get_details(user_id: str) -> dict[str, Any]:
    details = await ProfileDetails.find_one(ProfileDetails.user_id == user_id)
    profile = await Profile.find_one(Profile.user_id == user_id)
    return _details_out(details, profile)


async def update_details(user: User, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Merge `changes` into the user's profile_details row, creating it if absent.
    `date_of_birth` lands on the profiles row; a changed name is mirrored into user_metadata.
    """
    uid = str(user.id)
    unknown = set(changes) - set(DETAIL_FIELDS) - {"date_of_birth"}
    if unknown:
        raise ValidationError("Unknown profile fields", details={"fields": sorted(unknown)})
    now = datetime.utcnow()

    detail_changes = {k: v for k, v in changes.items() if k in DETAIL_FIELDS}
    if detail_changes:
        await ProfileDetails.get_motor_collection().update_one(
            {"user_id": uid},
            {"$set": {**detail_changes, "updated_at": now}},
            upsert=True,
        )
    if "date_of_birth" in changes:
        await Profile.get_motor_collection().update_one(
            {"user_id": uid},
            {"$set": {"date_of_birth": changes["date_of_birth"], "updated_at": now}},
            upsert=True,
        )
    if "first_name" in detail_changes or "last_name" in detail_changes:
        current = await get_details(uid)
        full_name = " ".join(p for p in (current["first_name"], current["last_name"]) if p)
        # dotted path keeps the entitlement fields of user_metadata untouched
        await User.get_motor_collection().update_one(
            {"_id": user.id},
            {"$set": {"user_metadata.full_name": full_name, "updated_at": now}},
        )
    log.info("profile_details_updated", user_id=uid, fields=sorted(changes))
    return await get_details(uid)


def _preferences_out(prefs: NotificationPreference | None) -> dict[str, bool]:
    if prefs is None:
        return {f: NotificationPreference.model_fields[f].default for f in NOTIFICATION_FIELDS}
    return {f: getattr(prefs, f) for f in NOTIFICATION_FIELDS}


async def get_notifications(user_id: str) -> dict[str, bool]:
    return _preferences_out(await NotificationPreference.find_one(NotificationPreference.user_id == user_id))


async def update_notifications(user_id: str, changes: dict[str, bool]) -> dict[str, bool]:
    """Toggle individual preferences; untouched ones keep their stored (or default) value."""
    unknown = set(changes) - set(NOTIFICATION_FIELDS)
    if unknown:
        raise ValidationError("Unknown notification preferences", details={"fields": sorted(unknown)})
    if changes:
        defaults = _preferences_out(None)
        await NotificationPreference.get_motor_collection().update_one(
            {"user_id": user_id},
            {
                "$set": {**changes, "updated_at": datetime.utcnow()},
                "$setOnInsert": {k: v for k, v in defaults.items() if k not in changes},
            },
            upsert=True,
        )
        log.info("notification_preferences_updated", user_id=user_id, changes=changes)
    return await get_notifications(user_id)
