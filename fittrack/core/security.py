import hashlib
import hmac
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from fittrack.core.config import Settings


def get_session_serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(
        settings.secret_key,
        salt="fittrack-session",
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_session_token(payload: dict[str, Any], settings: Settings) -> str:
    return get_session_serializer(settings).dumps(payload)


def load_session_token(token: str, settings: Settings) -> dict[str, Any] | None:
    serializer = get_session_serializer(settings)
    try:
        return serializer.loads(token, max_age=settings.session_max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None


def razorpay_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of "{order_id}|{payment_id}", as Razorpay checkout signs it."""
    return hmac.new(
        secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_razorpay_payment(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    expected = razorpay_payment_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def bearer_token(authorization: str | None) -> str | None:
    """Extract the credential from an "Authorization: Bearer <token>" header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
