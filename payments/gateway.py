"""
Payment gateway adapter.

Presents one charge lifecycle whichever providers are configured. The card
and redirect strategies are rebuilt from the admin config every time it is
loaded or replaced, so calls never run with stale credentials.
"""

from typing import Any, Dict, Optional

import httpx

from admin.config_store import ConfigStore
from models.admin_config import AdminConfig
from models.payment import ChargeIntent, ChargeResult, RedirectCharge
from payments.base import CardGateway, RedirectGateway, to_minor_units
from payments.paypal import PayPalClient, PayPalLegacyGateway, PayPalOrdersGateway
from payments.stripe import StripeGateway
from utils.constants import DEFAULT_CURRENCY
from utils.exceptions import ProviderUnconfigured
from utils.logging_config import setup_logging
from utils.validation import parse_amount, parse_currency

logger = setup_logging(name=__name__, log_file="payments.log")

_REDIRECT_FLOWS = {
    "orders": PayPalOrdersGateway,
    "legacy": PayPalLegacyGateway,
}


class PaymentGatewayAdapter:
    """Uniform create/finalize contract over Stripe and PayPal."""

    def __init__(
        self,
        config_store: ConfigStore,
        *,
        paypal_mode: str = "sandbox",
        paypal_flow: str = "orders",
        http_client: Optional[httpx.AsyncClient] = None,
        http_timeout: float = 30.0,
    ):
        if paypal_flow not in _REDIRECT_FLOWS:
            raise ValueError(f"Unknown PayPal flow: {paypal_flow}")

        self._paypal_mode = paypal_mode
        self._paypal_flow = paypal_flow
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=http_timeout)
        self._card: Optional[CardGateway] = None
        self._redirect: Optional[RedirectGateway] = None
        config_store.subscribe(self._rebuild)

    @property
    def redirect_flow(self) -> str:
        return self._paypal_flow

    def _rebuild(self, config: AdminConfig) -> None:
        self._card = StripeGateway(config.stripe_secret_key) if config.stripe_configured else None

        if config.paypal_configured:
            client = PayPalClient(
                config.paypal_client_id,
                config.paypal_secret,
                self._http,
                mode=self._paypal_mode,
            )
            self._redirect = _REDIRECT_FLOWS[self._paypal_flow](client)
        else:
            self._redirect = None

        logger.info(
            f"Payment gateways rebuilt: card={'stripe' if self._card else 'off'}, "
            f"redirect={f'paypal-{self._paypal_flow}' if self._redirect else 'off'}"
        )

    async def create_charge_intent(
        self,
        amount: Any,
        currency: str = DEFAULT_CURRENCY,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ChargeIntent:
        """
        Create a card charge intent for ``amount`` major units.

        Raises:
            ProviderUnconfigured: If no Stripe secret key is configured
            ValidationError: If the amount is negative or not a finite number,
                or the currency is not a supported ISO code
            ProviderError: If Stripe fails
        """
        card = self._card
        if card is None:
            raise ProviderUnconfigured("Stripe")

        currency = parse_currency(currency)
        amount_minor = to_minor_units(amount, currency)
        return await card.create_charge_intent(amount_minor, currency, metadata)

    async def finalize_card_charge(self, reference: str) -> ChargeResult:
        """
        Look up a card charge the browser has confirmed with Stripe.js.

        Raises:
            ProviderUnconfigured: If no Stripe secret key is configured
            ProviderError: If Stripe fails or does not know ``reference``
        """
        card = self._card
        if card is None:
            raise ProviderUnconfigured("Stripe")

        return await card.finalize_charge(reference)

    async def create_redirect_charge(
        self,
        amount: Any,
        return_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
        currency: str = DEFAULT_CURRENCY,
    ) -> RedirectCharge:
        """
        Create a PayPal charge: an approval URL (legacy) or an order id (orders).

        Raises:
            ProviderUnconfigured: If PayPal credentials are absent
            ValidationError: If the amount or currency is invalid
            ProviderError: If PayPal fails
        """
        redirect = self._redirect
        if redirect is None:
            raise ProviderUnconfigured("PayPal")

        return await redirect.create_redirect_charge(
            parse_amount(amount), return_url, cancel_url, parse_currency(currency)
        )

    async def finalize_charge(self, reference: str, payer_id: Optional[str] = None) -> ChargeResult:
        """
        Capture (orders) or execute (legacy) a PayPal charge.

        Capture attempts are not deduplicated here; the booking orchestrator
        guards against repeats.
        """
        redirect = self._redirect
        if redirect is None:
            raise ProviderUnconfigured("PayPal")

        return await redirect.finalize_charge(reference, payer_id=payer_id)

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()
