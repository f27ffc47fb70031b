"""
Shared pieces of the payment gateways: amount conversion and the two
strategy interfaces (card processor, redirect provider).
"""

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from models.payment import ChargeIntent, ChargeResult, RedirectCharge
from utils.constants import DEFAULT_CURRENCY, MINOR_UNIT_EXPONENT, ZERO_DECIMAL_CURRENCIES
from utils.validation import parse_amount, parse_currency


def currency_exponent(currency: str) -> int:
    """Number of minor-unit digits: 2 for USD, 0 for JPY."""
    return 0 if parse_currency(currency) in ZERO_DECIMAL_CURRENCIES else MINOR_UNIT_EXPONENT


def to_minor_units(amount: Any, currency: str = DEFAULT_CURRENCY) -> int:
    """
    Convert a major-unit amount (e.g. dollars) to the currency's minor units.

    Rounds half-up to the nearest minor unit; $12.50 -> 1250, $0.125 -> 13,
    ¥100 -> 100.

    Raises:
        ValidationError: If the amount is negative, not finite or not a
            number, or the currency is invalid
    """
    major = parse_amount(amount)
    scaled = major.scaleb(currency_exponent(currency))
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """Convert minor units back to a major amount (1250 -> 12.50, JPY 100 -> 100)."""
    exponent = currency_exponent(currency)
    return Decimal(int(minor)).scaleb(-exponent).quantize(Decimal(1).scaleb(-exponent))


def format_major(amount: Any, currency: str = DEFAULT_CURRENCY) -> str:
    """Major amount as PayPal expects it ("20.00", or "100" for JPY)."""
    return str(from_minor_units(to_minor_units(amount, currency), currency))


class CardGateway(ABC):
    """Card processor: the browser completes the charge with a client token."""

    provider: str

    @abstractmethod
    async def create_charge_intent(
        self,
        amount_minor: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ChargeIntent:
        ...

    @abstractmethod
    async def finalize_charge(self, reference: str) -> ChargeResult:
        ...


class RedirectGateway(ABC):
    """Redirect provider: the payer approves on the provider's side."""

    provider: str
    flow: str

    @abstractmethod
    async def create_redirect_charge(
        self,
        amount: Decimal,
        return_url: Optional[str],
        cancel_url: Optional[str],
        currency: str,
    ) -> RedirectCharge:
        ...

    @abstractmethod
    async def finalize_charge(self, reference: str, payer_id: Optional[str] = None) -> ChargeResult:
        ...
