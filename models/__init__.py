"""Pydantic models for data validation and serialization."""

from .admin_config import AdminConfig
from .blog import Blog, BlogCreate
from .booking import Booking, BookingCreate, BookingStatus, PaymentMethod
from .payment import ChargeIntent, ChargeResult, ChargeStatus, RedirectCharge

__all__ = [
    "AdminConfig",
    "Blog",
    "BlogCreate",
    "Booking",
    "BookingCreate",
    "BookingStatus",
    "PaymentMethod",
    "ChargeIntent",
    "ChargeResult",
    "ChargeStatus",
    "RedirectCharge",
]
