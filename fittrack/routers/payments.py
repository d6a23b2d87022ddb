from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fittrack.core.config import Settings, get_settings
from fittrack.services import payments as payments_service

router = APIRouter()


class CreateOrderRequest(BaseModel):
    amount: Any = None  # rupees, e.g. 499


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None
    amount: Any = None  # paise
    user_id: str | None = None


@router.post("/orders")
def create_order(body: CreateOrderRequest, settings: Settings = Depends(get_settings)):
    """Create a Razorpay order; the raw gateway order object is returned for checkout."""
    return payments_service.create_order(body.amount, settings)


@router.post("/verify")
async def verify_payment(body: VerifyPaymentRequest, settings: Settings = Depends(get_settings)):
    """Checkout success callback: verify signature, record payment, extend subscription."""
    return await payments_service.verify_payment(body.model_dump(), settings)
