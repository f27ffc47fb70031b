"""
Application-wide constants.
Centralizes magic numbers and configuration values.
"""

BRAND_NAME = "Sooo NOT The Nanny"

# Money
DEFAULT_CURRENCY = "USD"
MINOR_UNIT_EXPONENT = 2
# Currencies charged in whole units (no minor unit)
ZERO_DECIMAL_CURRENCIES = frozenset(
    {"BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA", "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF"}
)
# Three-decimal currencies are not accepted
UNSUPPORTED_CURRENCIES = frozenset({"BHD", "JOD", "KWD", "OMR", "TND"})
MAX_CHARGE_AMOUNT = 100000  # Reasonable upper limit in major units

# Validation limits
MAX_TEXT_FIELD_LENGTH = 200
MAX_NOTES_LENGTH = 1000
MAX_BLOG_TITLE_LENGTH = 200
MAX_BLOG_CONTENT_LENGTH = 50000

# HTTP
MAX_REQUEST_BODY_SIZE = 1024 * 1024  # 1MB max request body size

# PayPal REST hosts
PAYPAL_API_BASE = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}
PAYPAL_TOKEN_EXPIRY_MARGIN_SECONDS = 60
