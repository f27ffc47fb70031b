"""Payment processing with Stripe and PayPal."""

from .base import from_minor_units, to_minor_units
from .gateway import PaymentGatewayAdapter

__all__ = ["PaymentGatewayAdapter", "from_minor_units", "to_minor_units"]
