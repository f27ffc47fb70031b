"""
Stripe card gateway.
"""

import asyncio
from typing import Dict, Optional

import stripe

from models.payment import ChargeIntent, ChargeResult, ChargeStatus
from payments.base import CardGateway
from utils.exceptions import ProviderError
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="payments.log")

# Terminal-success state of a PaymentIntent
_SUCCEEDED = "succeeded"


def _stripe_message(error: stripe.StripeError) -> str:
    return error.user_message or str(error)


class StripeGateway(CardGateway):
    """
    Creates and checks PaymentIntents with the secret key from the admin config.

    The key is passed per request instead of being set on the ``stripe``
    module, so replacing the config never leaves a stale global key behind.
    """

    provider = "Stripe"

    def __init__(self, secret_key: str):
        self._secret_key = secret_key

    async def create_charge_intent(
        self,
        amount_minor: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ChargeIntent:
        """
        Create a PaymentIntent.

        Uses a worker thread because the Stripe SDK is synchronous.

        Args:
            amount_minor: Amount in the smallest currency unit (cents)
            currency: ISO currency code
            metadata: Optional metadata stored on the intent

        Returns:
            ChargeIntent with the client secret for Stripe.js

        Raises:
            ProviderError: If Stripe rejects the request or cannot be reached
        """
        try:
            payment_intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount_minor,
                currency=currency.lower(),
                metadata=metadata or {},
                automatic_payment_methods={"enabled": True},
                api_key=self._secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating payment intent for {amount_minor} {currency}: {e}")
            raise ProviderError(self.provider, _stripe_message(e), e.http_status) from e

        logger.info(f"Created payment intent {payment_intent.id} for {amount_minor} {currency}")
        return ChargeIntent(
            client_secret=payment_intent.client_secret,
            intent_id=payment_intent.id,
        )

    async def finalize_charge(self, reference: str) -> ChargeResult:
        """Check whether a PaymentIntent has succeeded."""
        try:
            payment_intent = await asyncio.to_thread(
                stripe.PaymentIntent.retrieve,
                reference,
                api_key=self._secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error retrieving payment intent {reference}: {e}")
            raise ProviderError(self.provider, _stripe_message(e), e.http_status) from e

        status = (
            ChargeStatus.COMPLETED
            if payment_intent.status == _SUCCEEDED
            else ChargeStatus.INCOMPLETE
        )
        logger.info(f"Payment intent {reference} is {payment_intent.status}")
        return ChargeResult(
            status=status,
            reference=reference,
            provider_payload={"status": payment_intent.status},
        )
