from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, File, Response, UploadFile
from pydantic import BaseModel

from fittrack.core.exceptions import NotFoundError
from fittrack.deps import get_current_user, get_storage_backend
from fittrack.models.progress import ProgressPhoto
from fittrack.models.user import User
from fittrack.services import progress as progress_service
from fittrack.storage.base import StorageBackend

router = APIRouter()


class MeasurementRequest(BaseModel):
    weight_kg: float
    height_cm: float | None = None
    muscle_mass_kg: float | None = None
    notes: str | None = None
    record_date: str | None = None


@router.post("/measurements")
async def add_measurement(body: MeasurementRequest, user: User = Depends(get_current_user)):
    record = await progress_service.add_measurement(str(user.id), body.model_dump())
    return {"id": str(record.id), "bmi": record.bmi, "body_fat_percent": record.body_fat_percent}


@router.get("/summary")
async def progress_summary(user: User = Depends(get_current_user)):
    """Starting vs current measurement with BMI and body-fat change."""
    return await progress_service.progress_summary(str(user.id))


@router.post("/photos")
async def upload_photo(
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage_backend),
    file: UploadFile = File(...),
):
    content = await file.read()
    photo = await progress_service.upload_photo(str(user.id), storage, content, file.content_type)
    return {"id": str(photo.id), "taken_on": photo.taken_on}


@router.get("/photos/{photo_id}")
async def get_photo(
    photo_id: str,
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage_backend),
):
    try:
        photo = await ProgressPhoto.get(PydanticObjectId(photo_id))
    except (InvalidId, TypeError):
        photo = None
    if photo is None or photo.user_id != str(user.id):
        raise NotFoundError("Photo not found")
    try:
        content = await storage.get(photo.storage_key)
    except FileNotFoundError:
        raise NotFoundError("Photo file missing")
    ext = photo.storage_key.rsplit(".", 1)[-1]
    media_type = {"jpg": "image/jpeg", "png": "image/png", "webp": "image/webp"}.get(ext, "application/octet-stream")
    return Response(content=content, media_type=media_type)
