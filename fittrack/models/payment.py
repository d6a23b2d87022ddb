from datetime import datetime

from beanie import Document
from pydantic import Field
from pymongo import ASCENDING, IndexModel


class Payment(Document):
    """One verified Razorpay payment; (order_id, payment_id) is the idempotency key."""
    user_id: str
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    amount: int  # paise
    status: str = "success"
    entitlement_applied: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "payments"
        indexes = [
            IndexModel(
                [("razorpay_order_id", ASCENDING), ("razorpay_payment_id", ASCENDING)],
                name="order_payment_unique",
                unique=True,
            ),
            [("user_id", 1), ("created_at", -1)],
        ]
