import pytest

from fittrack.core.exceptions import ValidationError
from fittrack.models.notification_preference import NotificationPreference
from fittrack.models.profile import Profile, ProfileDetails
from fittrack.models.user import User
from fittrack.services import profiles as profiles_service

pytestmark = pytest.mark.asyncio


async def test_details_empty_before_first_save(client, make_user, auth_headers):
    user = await make_user()
    r = await client.get("/v1/account/details", headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json() == {
        "first_name": None, "last_name": None, "phone": None, "gender": None,
        "age": None, "height_cm": None, "goal": None, "date_of_birth": None,
    }


async def test_details_upsert_merges_fields(client, make_user, auth_headers):
    user = await make_user(plan_role="user")
    headers = auth_headers(user)
    r = await client.put(
        "/v1/account/details",
        json={"first_name": "Meera", "last_name": "Iyer", "phone": "+91 98450 00000", "date_of_birth": "1996-04-12"},
        headers=headers,
    )
    assert r.status_code == 200
    r = await client.put("/v1/account/details", json={"gender": "female", "age": 30}, headers=headers)
    out = r.json()
    assert out["first_name"] == "Meera"
    assert out["phone"] == "+91 98450 00000"
    assert out["gender"] == "female"
    assert out["age"] == 30
    assert out["date_of_birth"] == "1996-04-12"

    assert await ProfileDetails.find(ProfileDetails.user_id == str(user.id)).count() == 1
    fresh = await User.get(user.id)
    assert fresh.user_metadata.full_name == "Meera Iyer"
    assert fresh.user_metadata.plan_role == "user"
    assert fresh.entitlement_version == user.entitlement_version


async def test_details_reject_bad_values(client, make_user, auth_headers):
    user = await make_user()
    r = await client.put("/v1/account/details", json={"height_cm": -5}, headers=auth_headers(user))
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


async def test_details_require_auth(client):
    assert (await client.get("/v1/account/details")).status_code == 401


async def test_saved_details_feed_body_fat_estimate(client, make_user, auth_headers):
    user = await make_user()
    headers = auth_headers(user)
    await client.put(
        "/v1/account/details", json={"age": 30, "gender": "female", "height_cm": 175}, headers=headers
    )
    r = await client.post("/v1/progress/measurements", json={"weight_kg": 70}, headers=headers)
    assert r.status_code == 200
    assert r.json()["bmi"] == 22.9
    assert r.json()["body_fat_percent"] == 28.9


async def test_date_of_birth_updates_existing_profile(make_user):
    user = await make_user()
    await Profile(user_id=str(user.id), full_name=user.name).insert()
    await profiles_service.update_details(user, {"date_of_birth": "1990-01-01"})
    assert await Profile.find(Profile.user_id == str(user.id)).count() == 1
    profile = await Profile.find_one(Profile.user_id == str(user.id))
    assert profile.date_of_birth == "1990-01-01"


async def test_unknown_detail_field(make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await profiles_service.update_details(user, {"salary": 1})


async def test_notifications_default_then_toggle(client, make_user, auth_headers):
    user = await make_user()
    headers = auth_headers(user)
    r = await client.get("/v1/account/notifications", headers=headers)
    assert r.status_code == 200
    assert all(r.json().values())

    r = await client.put("/v1/account/notifications", json={"fitness_tips": False}, headers=headers)
    assert r.json()["fitness_tips"] is False
    assert r.json()["workout_reminders"] is True

    r = await client.put("/v1/account/notifications", json={"water_intake_alerts": False}, headers=headers)
    assert r.json()["fitness_tips"] is False
    assert r.json()["water_intake_alerts"] is False
    assert await NotificationPreference.find(NotificationPreference.user_id == str(user.id)).count() == 1


async def test_unknown_notification_preference(db):
    with pytest.raises(ValidationError):
        await profiles_service.update_notifications("u1", {"sms_spam": True})
