"""Body measurements, BMI and body-fat estimates, progress photos."""

import uuid
from datetime import date
from typing import Any

from fittrack.core.exceptions import ValidationError
from fittrack.models.profile import ProfileDetails
from fittrack.models.progress import ProgressPhoto, ProgressRecord
from fittrack.storage.base import StorageBackend

DEFAULT_AGE = 25
DEFAULT_GENDER = "male"
FEMALE = ("female", "woman")
PHOTO_TYPES = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


def bmi(weight_kg: float, height_cm: float) -> float | None:
    if not weight_kg or not height_cm or height_cm <= 0:
        return None
    metres = height_cm / 100
    return round(weight_kg / (metres * metres), 1)


def body_fat_percent(weight_kg: float, height_cm: float, age: int | None, gender: str | None) -> float | None:
    """Deurenberg estimate from BMI; never below zero."""
    if not weight_kg or not height_cm or height_cm <= 0:
        return None
    metres = height_cm / 100
    index = weight_kg / (metres * metres)
    age = age or DEFAULT_AGE
    offset = 5.4 if (gender or DEFAULT_GENDER).lower() in FEMALE else 16.2
    return max(0.0, round(1.2 * index + 0.23 * age - offset, 1))


async def add_measurement(user_id: str, data: dict[str, Any]) -> ProgressRecord:
    weight = data.get("weight_kg")
    if weight is None or weight <= 0:
        raise ValidationError("weight_kg must be positive")
    height = data.get("height_cm")
    if height is not None and height <= 0:
        raise ValidationError("height_cm must be positive")
    details = await ProfileDetails.find_one(ProfileDetails.user_id == user_id)
    if height is None and details is not None:
        height = details.height_cm
    record = ProgressRecord(
        user_id=user_id,
        weight_kg=weight,
        height_cm=height,
        muscle_mass_kg=data.get("muscle_mass_kg"),
        notes=data.get("notes"),
        bmi=bmi(weight, height) if height else None,
        body_fat_percent=body_fat_percent(
            weight, height, details.age if details else None, details.gender if details else None
        ) if height else None,
        record_date=data.get("record_date") or date.today().isoformat(),
    )
    await record.insert()
    return record


def _record_out(r: ProgressRecord) -> dict[str, Any]:
    return {
        "id": str(r.id),
        "record_date": r.record_date,
        "weight_kg": r.weight_kg,
        "height_cm": r.height_cm,
        "bmi": r.bmi,
        "body_fat_percent": r.body_fat_percent,
        "muscle_mass_kg": r.muscle_mass_kg,
    }


async def progress_summary(user_id: str) -> dict[str, Any]:
    records = (
        await ProgressRecord.find(ProgressRecord.user_id == user_id)
        .sort(+ProgressRecord.record_date, +ProgressRecord.created_at)
        .to_list()
    )
    if not records:
        return {"starting": None, "current": None, "change": None, "records": 0}
    first, last = records[0], records[-1]
    return {
        "starting": _record_out(first),
        "current": _record_out(last),
        "change": {
            "weight_kg": round(last.weight_kg - first.weight_kg, 1),
            "bmi": round(last.bmi - first.bmi, 1) if last.bmi is not None and first.bmi is not None else None,
            "body_fat_percent": (
                round(last.body_fat_percent - first.body_fat_percent, 1)
                if last.body_fat_percent is not None and first.body_fat_percent is not None
                else None
            ),
        },
        "records": len(records),
    }


async def upload_photo(user_id: str, storage: StorageBackend, body: bytes, content_type: str | None) -> ProgressPhoto:
    ext = PHOTO_TYPES.get(content_type or "")
    if ext is None:
        raise ValidationError("Photo must be JPEG, PNG or WebP")
    if not body:
        raise ValidationError("Empty file")
    key = f"progress-photos/{user_id}/{uuid.uuid4().hex}.{ext}"
    await storage.put(key, body, content_type=content_type)
    photo = ProgressPhoto(user_id=user_id, storage_key=key)
    await photo.insert()
    return photo
