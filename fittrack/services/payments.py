"""Razorpay orders and checkout verification: signature check, idempotent entitlement extension."""

import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import razorpay
from razorpay.errors import BadRequestError as RazorpayBadRequest
from razorpay.errors import GatewayError as RazorpayGatewayError
from razorpay.errors import ServerError as RazorpayServerError
from pymongo.errors import DuplicateKeyError

from fittrack.core.audit import log_event
from fittrack.core.config import Settings
from fittrack.core.exceptions import ConfigurationError, GatewayError, SignatureInvalidError, ValidationError
from fittrack.core.logging import get_logger
from fittrack.core.security import verify_razorpay_payment
from fittrack.models.payment import Payment
from fittrack.services import entitlements

log = get_logger(__name__)

VERIFY_FIELDS = ("razorpay_order_id", "razorpay_payment_id", "razorpay_signature", "amount", "user_id")


def get_razorpay_client(settings: Settings) -> razorpay.Client:
    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        raise ConfigurationError("Razorpay keys missing")
    return razorpay.Client(auth=(settings.razorpay_key_id, settings.razorpay_key_secret))


def to_paise(amount: Any) -> int:
    """Major units (rupees) -> minor units; rejects missing, non-numeric and non-positive amounts."""
    if amount is None or isinstance(amount, bool):
        raise ValidationError("Amount is required")
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValidationError("Amount must be a number") from e
    if not value.is_finite() or value <= 0:
        raise ValidationError("Amount must be positive")
    paise = value * 100
    if paise != paise.to_integral_value():
        raise ValidationError("Amount has more than two decimal places")
    return int(paise)


def parse_paise(amount: Any) -> int:
    """Minor-unit amount as sent back by checkout; fractions of a paisa are rejected, never truncated."""
    if isinstance(amount, bool):
        raise ValidationError("Amount must be an integer number of paise")
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValidationError("Amount must be an integer number of paise") from e
    if not value.is_finite() or value <= 0 or value != value.to_integral_value():
        raise ValidationError("Amount must be an integer number of paise")
    return int(value)


def create_order(amount: Any, settings: Settings) -> dict:
    """Create a Razorpay order for `amount` rupees and return the gateway's order object as-is."""
    amount_paise = to_paise(amount)
    client = get_razorpay_client(settings)
    receipt = str(uuid.uuid4())
    try:
        order = client.order.create(
            {"amount": amount_paise, "currency": settings.razorpay_currency, "receipt": receipt}
        )
    except RazorpayBadRequest as e:
        log.warning("razorpay_order_rejected", amount_paise=amount_paise, error=str(e))
        raise GatewayError(str(e) or "Razorpay rejected the order") from e
    except (RazorpayServerError, RazorpayGatewayError) as e:
        log.error("razorpay_order_failed", amount_paise=amount_paise, error=str(e))
        raise GatewayError(str(e) or "Razorpay unavailable") from e
    except Exception as e:
        # requests transport failures surface from inside the SDK
        log.error("razorpay_order_failed", amount_paise=amount_paise, error=str(e))
        raise GatewayError(f"Razorpay request failed: {e}") from e
    log.info("razorpay_order_created", order_id=order.get("id"), amount_paise=amount_paise, receipt=receipt)
    return order


def _require_fields(body: dict[str, Any]) -> None:
    missing = [f for f in VERIFY_FIELDS if not body.get(f)]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})


async def verify_payment(body: dict[str, Any], settings: Settings, now: datetime | None = None) -> dict:
    """
    Verify a checkout callback and extend the payer's entitlement exactly once.

    Nothing is written unless the signature matches. A replay of an already-applied
    (order, payment) pair returns success without extending again.
    """
    _require_fields(body)
    order_id = str(body["razorpay_order_id"])
    payment_id = str(body["razorpay_payment_id"])
    signature = str(body["razorpay_signature"])
    user_id = str(body["user_id"])
    amount = parse_paise(body["amount"])

    if not settings.razorpay_key_secret:
        raise ConfigurationError("Missing Razorpay secret")
    if not verify_razorpay_payment(order_id, payment_id, signature, settings.razorpay_key_secret):
        log.warning("payment_signature_invalid", order_id=order_id, payment_id=payment_id, user_id=user_id)
        raise SignatureInvalidError()

    # fatal for unknown accounts; checked before the payment row so none is orphaned
    await entitlements.load_user(user_id)

    payment = Payment(
        user_id=user_id,
        razorpay_order_id=order_id,
        razorpay_payment_id=payment_id,
        razorpay_signature=signature,
        amount=amount,
        status="success",
    )
    try:
        await payment.insert()
    except DuplicateKeyError:
        existing = await Payment.find_one(
            Payment.razorpay_order_id == order_id,
            Payment.razorpay_payment_id == payment_id,
        )
        if existing is None:
            raise
        if existing.entitlement_applied:
            log.info("payment_already_processed", order_id=order_id, payment_id=payment_id)
            user = await entitlements.load_user(existing.user_id)
            await entitlements.sync_role_projection(user)
            return {"success": True}
        # earlier attempt stopped between the payment row and the entitlement write
        log.info("payment_resuming", order_id=order_id, payment_id=payment_id)
        payment = existing

    user = await entitlements.extend_for_payment(payment.user_id, payment_id, settings, now=now)
    payment.entitlement_applied = True
    await payment.save()
    await entitlements.sync_role_projection(user)

    log.info(
        "payment_verified",
        user_id=payment.user_id,
        order_id=order_id,
        payment_id=payment_id,
        amount=amount,
        expiry_at=user.user_metadata.expiry_at.isoformat() if user.user_metadata.expiry_at else None,
    )
    await log_event(
        payment.user_id,
        "payment_verified",
        "payment",
        payment_id,
        {"order_id": order_id, "amount": amount, "expiry_at": user.user_metadata.expiry_at},
    )
    return {"success": True}
