import pytest

from fittrack.core.exceptions import ValidationError
from fittrack.models.profile import ProfileDetails
from fittrack.services import progress as progress_service


def test_bmi():
    assert progress_service.bmi(70, 175) == 22.9
    assert progress_service.bmi(70, 0) is None


def test_body_fat_by_gender_and_floor():
    # bmi 22.857..., age 30
    assert progress_service.body_fat_percent(70, 175, 30, "male") == 18.1
    assert progress_service.body_fat_percent(70, 175, 30, "Female") == 28.9
    # defaults: age 25, male
    assert progress_service.body_fat_percent(70, 175, None, None) == 17.0
    assert progress_service.body_fat_percent(30, 200, 18, "male") == 0.0


@pytest.mark.asyncio
async def test_summary_compares_first_and_last(db):
    uid = "user-1"
    await ProfileDetails(user_id=uid, age=30, gender="female", height_cm=160).insert()
    await progress_service.add_measurement(uid, {"weight_kg": 68, "record_date": "2026-01-01"})
    await progress_service.add_measurement(uid, {"weight_kg": 65.5, "record_date": "2026-02-01"})
    await progress_service.add_measurement(uid, {"weight_kg": 64, "record_date": "2026-03-01"})

    summary = await progress_service.progress_summary(uid)
    assert summary["records"] == 3
    assert summary["starting"]["weight_kg"] == 68
    assert summary["current"]["weight_kg"] == 64
    assert summary["starting"]["bmi"] == 26.6
    assert summary["current"]["bmi"] == 25.0
    assert summary["change"]["weight_kg"] == -4.0
    assert summary["change"]["bmi"] == -1.6


@pytest.mark.asyncio
async def test_summary_empty(db):
    assert await progress_service.progress_summary("nobody") == {
        "starting": None, "current": None, "change": None, "records": 0,
    }


@pytest.mark.asyncio
async def test_measurement_validation(db):
    with pytest.raises(ValidationError):
        await progress_service.add_measurement("u1", {"weight_kg": 0})
    with pytest.raises(ValidationError):
        await progress_service.add_measurement("u1", {"weight_kg": 70, "height_cm": -1})


@pytest.mark.asyncio
async def test_photo_upload_and_download(client, make_user, auth_headers):
    user = await make_user()
    headers = auth_headers(user)
    r = await client.post(
        "/v1/progress/photos",
        files={"file": ("front.jpg", b"\xff\xd8jpegdata", "image/jpeg")},
        headers=headers,
    )
    assert r.status_code == 200
    photo_id = r.json()["id"]

    got = await client.get(f"/v1/progress/photos/{photo_id}", headers=headers)
    assert got.status_code == 200
    assert got.content == b"\xff\xd8jpegdata"
    assert got.headers["content-type"] == "image/jpeg"

    other = await make_user()
    assert (await client.get(f"/v1/progress/photos/{photo_id}", headers=auth_headers(other))).status_code == 404

    bad = await client.post(
        "/v1/progress/photos", files={"file": ("x.gif", b"GIF89a", "image/gif")}, headers=headers
    )
    assert bad.status_code == 400
