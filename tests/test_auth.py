import pytest

from fittrack.models.profile import Profile
from fittrack.models.user import User
from fittrack.models.user_role import UserRole
from fittrack.services import users as user_service

pytestmark = pytest.mark.asyncio


@pytest.fixture
def google_claims(monkeypatch):
    claims = {"sub": "google-sub-1", "email": "meera@example.com", "name": "Meera", "picture": None}

    def fake_verify(token, request, audience):
        if token != "good-token":
            raise ValueError("Wrong number of segments in token")
        return dict(claims)

    monkeypatch.setattr(user_service.id_token, "verify_oauth2_token", fake_verify)
    return claims


async def test_trial_signup_returns_bearer_token(client, google_claims, settings):
    r = await client.post("/v1/auth/google", json={"id_token": "good-token", "trial": True})
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["entitlement"]["plan_role"] == "trial_user"
    assert body["user"]["entitlement"]["days_remaining"] in (settings.trial_days - 1, settings.trial_days)

    user = await User.find_one(User.google_sub == "google-sub-1")
    role = await UserRole.find_one(UserRole.user_id == str(user.id))
    assert role.role == "trial_user"
    assert role.expiry_time == user.user_metadata.expiry_at
    assert await Profile.find(Profile.user_id == str(user.id)).count() == 1

    me = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "meera@example.com"


async def test_regular_signup_has_no_expiry(client, google_claims):
    r = await client.post("/v1/auth/google", json={"id_token": "good-token"})
    entitlement = r.json()["user"]["entitlement"]
    assert entitlement["plan_role"] == "user"
    assert entitlement["expiry_at"] is None
    assert entitlement["is_expired"] is False


async def test_second_login_does_not_restart_trial(client, google_claims):
    await client.post("/v1/auth/google", json={"id_token": "good-token", "trial": True})
    first = await User.find_one(User.google_sub == "google-sub-1")
    await client.post("/v1/auth/google", json={"id_token": "good-token", "trial": True})
    second = await User.find_one(User.google_sub == "google-sub-1")
    assert second.user_metadata.expiry_at == first.user_metadata.expiry_at
    assert second.entitlement_version == first.entitlement_version
    assert await User.count() == 1


async def test_invalid_google_token(client, google_claims):
    r = await client.post("/v1/auth/google", json={"id_token": "bad-token"})
    assert r.status_code == 401


async def test_signin_refused_for_other_roles(client, google_claims):
    await client.post("/v1/auth/google", json={"id_token": "good-token"})
    user = await User.find_one(User.google_sub == "google-sub-1")
    role = await UserRole.find_one(UserRole.user_id == str(user.id))
    role.role = "coach"
    await role.save()

    r = await client.post("/v1/auth/google", json={"id_token": "good-token"})
    assert r.status_code == 403
    assert r.json()["error"] == "You are not authorized for this role"


async def test_body_validation_is_400(client):
    r = await client.post("/v1/auth/google", json={})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"
