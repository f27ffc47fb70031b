"""Booking models for childcare reservations."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from utils.constants import MAX_NOTES_LENGTH, MAX_TEXT_FIELD_LENGTH
from utils.validation import sanitize_text, validate_email


class BookingStatus(str, Enum):
    """Booking status."""

    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class PaymentMethod(str, Enum):
    """How the customer pays for a booking."""

    CARD = "card"  # Stripe, settled client-side before submission
    PAYPAL = "paypal"  # redirect / order flow, settled by finalize

    @property
    def is_redirect(self) -> bool:
        return self is PaymentMethod.PAYPAL


# Status only ever moves forward out of Pending
_ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.PAID, BookingStatus.FAILED},
    BookingStatus.PAID: set(),
    BookingStatus.FAILED: set(),
}


class Booking(BaseModel):
    """Booking model."""

    id: Optional[str] = None
    name: str
    email: str
    children: str = ""
    price: float = Field(default=0, ge=0)
    day: str = ""
    time: str = ""
    service: str = ""
    payment_method: PaymentMethod = PaymentMethod.CARD
    payment_id: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        validate_default = True
        populate_by_name = True
        alias_generator = to_camel
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "children": "2 (ages 3 and 5)",
                "price": 50,
                "day": "Saturday",
                "time": "18:00",
                "service": "Date Night",
                "paymentMethod": "card",
                "status": "Pending",
            }
        }

    def can_transition_to(self, status: BookingStatus) -> bool:
        """Check whether moving to ``status`` respects the booking lifecycle."""
        return BookingStatus(status) in _ALLOWED_TRANSITIONS[BookingStatus(self.status)]

    @property
    def is_settled(self) -> bool:
        return self.status == BookingStatus.PAID

    def to_public(self) -> Dict[str, Any]:
        """Serialize for API responses (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


class BookingCreate(BaseModel):
    """Booking submission as sent by the booking form."""

    name: str = Field(..., min_length=1)
    email: str
    children: str = ""
    price: float = Field(default=0, ge=0, allow_inf_nan=False)
    day: str = ""
    time: str = ""
    service: str = ""
    payment_method: PaymentMethod = PaymentMethod.CARD
    payment_id: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING

    class Config:
        use_enum_values = True
        validate_default = True
        populate_by_name = True
        alias_generator = to_camel

    @field_validator("name", "children", "day", "time", "service", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return sanitize_text(str(value), max_length=MAX_TEXT_FIELD_LENGTH)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        value = value.strip()
        if not validate_email(value):
            raise ValueError(f"Invalid email address: {value}")
        return value

    @field_validator("payment_id", mode="before")
    @classmethod
    def _clean_payment_id(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = sanitize_text(str(value), max_length=MAX_NOTES_LENGTH)
        return value or None

    @model_validator(mode="after")
    def _check_status(self) -> "BookingCreate":
        if self.status == BookingStatus.FAILED:
            raise ValueError("A booking cannot be submitted as Failed")
        if self.status == BookingStatus.PAID:
            if self.payment_method == PaymentMethod.PAYPAL:
                raise ValueError("PayPal bookings are marked Paid once PayPal confirms the payment")
            if not self.payment_id:
                raise ValueError("A Paid booking requires a paymentId")
        return self

    def as_record(self, **overrides: Any) -> Dict[str, Any]:
        """Row data for the bookings table, with optional field overrides."""
        data = self.model_dump(mode="json")
        data.update(overrides)
        for key in ("status", "payment_method"):
            if isinstance(data.get(key), Enum):
                data[key] = data[key].value
        return data
