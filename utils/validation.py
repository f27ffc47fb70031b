"""
Input validation utilities for user data and API inputs.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from utils.constants import MAX_CHARGE_AMOUNT, UNSUPPORTED_CURRENCIES
from utils.exceptions import ValidationError


def validate_email(email: str) -> bool:
    """
    Validate email address format.
    
    Args:
        email: Email address string
        
    Returns:
        True if valid format, False otherwise
    """
    if not email or not isinstance(email, str):
        return False
    
    # Basic email regex (RFC 5322 simplified)
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def parse_amount(value: Any) -> Decimal:
    """
    Parse a charge amount in major currency units.

    Args:
        value: Number or numeric string from a request body

    Returns:
        Amount as Decimal

    Raises:
        ValidationError: If the amount is missing, non-numeric, not finite,
            negative, or above the configured maximum
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Amount is required")

    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Invalid amount: {value}")

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid amount: {value}") from e

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value}")
    if amount < 0:
        raise ValidationError(f"Invalid amount: {value} must not be negative")
    if amount > MAX_CHARGE_AMOUNT:
        raise ValidationError(f"Invalid amount: {value} exceeds {MAX_CHARGE_AMOUNT}")

    return amount


def parse_currency(value: Any) -> str:
    """
    Normalise an ISO 4217 currency code ("usd" -> "USD").

    Raises:
        ValidationError: If the value is not a three-letter code, or is a
            three-decimal currency
    """
    if not isinstance(value, str) or not re.fullmatch(r"[A-Za-z]{3}", value.strip()):
        raise ValidationError(f"Invalid currency: {value!r}")

    currency = value.strip().upper()
    if currency in UNSUPPORTED_CURRENCIES:
        raise ValidationError(f"Unsupported currency: {currency}")
    return currency


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text.
    
    Args:
        text: Input text
        max_length: Optional maximum length
        
    Returns:
        Sanitized text
    """
    if not text:
        return ""
    
    # Remove control characters except newlines and tabs
    sanitized = re.sub(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]', '', str(text))
    
    sanitized = sanitized.strip()
    
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
    
    return sanitized
