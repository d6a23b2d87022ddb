import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, Field

from fittrack.core.exceptions import ValidationError
from fittrack.deps import get_current_user, get_storage_backend
from fittrack.models.profile import Profile
from fittrack.models.user import User
from fittrack.services import accounts as accounts_service
from fittrack.services import profiles as profiles_service
from fittrack.storage.base import StorageBackend

router = APIRouter()

AVATAR_TYPES = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


@router.delete("")
async def delete_account(
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage_backend),
):
    """Delete the caller's files, rows and identity. Row cleanup is best effort; see report."""
    report = await accounts_service.delete_account(user, storage)
    return {
        "success": True,
        "message": "Account deleted" if report.complete else "Account deleted; some data could not be removed",
        "report": report.as_list(),
    }


@router.put("/avatar")
async def upload_avatar(
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage_backend),
    file: UploadFile = File(...),
):
    ext = AVATAR_TYPES.get(file.content_type or "")
    if ext is None:
        raise ValidationError("Avatar must be JPEG, PNG or WebP")
    content = await file.read()
    if not content:
        raise ValidationError("Empty file")
    uid = str(user.id)
    for old in await storage.list(f"avatars/{uid}/"):
        await storage.delete(old)
    url = await storage.put(f"avatars/{uid}/{uuid.uuid4().hex}.{ext}", content, content_type=file.content_type)
    profile = await Profile.find_one(Profile.user_id == uid)
    if profile is None:
        profile = Profile(user_id=uid, full_name=user.name)
    profile.avatar_url = url
    await profile.save()
    return {"avatar_url": url}


class DetailsUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    gender: str | None = None
    age: int | None = Field(None, gt=0, lt=130)
    height_cm: float | None = Field(None, gt=0)
    goal: str | None = None
    date_of_birth: str | None = None  # YYYY-MM-DD


class NotificationsUpdate(BaseModel):
    workout_reminders: bool | None = None
    diet_meal_reminders: bool | None = None
    water_intake_alerts: bool | None = None
    live_session_alerts: bool | None = None
    progress_updates: bool | None = None
    fitness_tips: bool | None = None


@router.get("/details")
async def get_details(user: User = Depends(get_current_user)):
    return await profiles_service.get_details(str(user.id))


@router.put("/details")
async def update_details(body: DetailsUpdate, user: User = Depends(get_current_user)):
    """Upsert contact details and questionnaire answers; only fields present in the body change."""
    return await profiles_service.update_details(user, body.model_dump(exclude_unset=True))


@router.get("/notifications")
async def get_notifications(user: User = Depends(get_current_user)):
    return await profiles_service.get_notifications(str(user.id))


@router.put("/notifications")
async def update_notifications(body: NotificationsUpdate, user: User = Depends(get_current_user)):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    return await profiles_service.update_notifications(str(user.id), changes)
