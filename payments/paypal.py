"""
PayPal gateways over the REST API.

Two flows are supported:

- orders (``/v2/checkout/orders``): create an order, the buyer approves it
  with the PayPal JS SDK, then the server captures it;
- legacy (``/v1/payments/payment``): create a payment, redirect the buyer to
  the approval URL, then execute it with the payer id PayPal appends to the
  return URL.
"""

import re
import time
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from models.payment import ChargeResult, ChargeStatus, RedirectCharge
from payments.base import RedirectGateway, format_major
from utils.constants import PAYPAL_API_BASE, PAYPAL_TOKEN_EXPIRY_MARGIN_SECONDS
from utils.exceptions import ProviderError, ValidationError
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="payments.log")

PROVIDER = "PayPal"

# PayPal ids are alphanumeric with dashes; anything else never reaches a URL path
_REFERENCE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Client errors that mean "PayPal refused this payment" rather than a broken call
_REFUSAL_STATUSES = {400, 404, 409, 422}


def _validate_reference(reference: str) -> str:
    if not reference or not _REFERENCE_PATTERN.match(reference):
        raise ValidationError(f"Invalid PayPal reference: {reference!r}")
    return reference


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {"message": response.text}
    return data if isinstance(data, dict) else {"data": data}


def _error_message(response: httpx.Response) -> str:
    """Best human-readable message PayPal put in an error response."""
    data = _json_body(response)
    return (
        data.get("message")
        or data.get("error_description")
        or data.get("name")
        or data.get("error")
        or f"PayPal request failed with status {response.status_code}"
    )


class PayPalClient:
    """Authenticated PayPal REST client with a cached OAuth2 token."""

    def __init__(
        self,
        client_id: str,
        secret: str,
        http: httpx.AsyncClient,
        mode: str = "sandbox",
    ):
        self._client_id = client_id
        self._secret = secret
        self._http = http
        self.base_url = PAYPAL_API_BASE[mode]
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    async def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            response = await self._http.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self._client_id, self._secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error requesting PayPal access token: {e}")
            raise ProviderError(PROVIDER, str(e)) from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"PayPal token request failed ({response.status_code}): {message}")
            raise ProviderError(PROVIDER, message, response.status_code)

        data = response.json()
        self._token = data["access_token"]
        expires_in = int(data.get("expires_in", 0))
        self._token_expires_at = (
            time.monotonic() + max(expires_in - PAYPAL_TOKEN_EXPIRY_MARGIN_SECONDS, 0)
        )
        return self._token

    async def post(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        """
        POST JSON to a PayPal endpoint.

        Returns the response whatever its status; callers decide what an
        error status means for them.

        Raises:
            ProviderError: On transport failures or token errors
        """
        token = await self._access_token()
        try:
            return await self._http.post(
                f"{self.base_url}{path}",
                json=body,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "Prefer": "return=representation",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling PayPal {path}: {e}")
            raise ProviderError(PROVIDER, str(e)) from e


class _PayPalGateway(RedirectGateway):
    provider = PROVIDER

    def __init__(self, client: PayPalClient):
        self._client = client

    def _finalize_result(
        self, reference: str, response: httpx.Response, completed: bool
    ) -> ChargeResult:
        return ChargeResult(
            status=ChargeStatus.COMPLETED if completed else ChargeStatus.INCOMPLETE,
            reference=reference,
            provider_payload=_json_body(response),
        )

    def _raise_unless_refusal(self, response: httpx.Response, action: str) -> None:
        if response.is_error and response.status_code not in _REFUSAL_STATUSES:
            message = _error_message(response)
            logger.error(f"PayPal {action} failed ({response.status_code}): {message}")
            raise ProviderError(PROVIDER, message, response.status_code)


class PayPalOrdersGateway(_PayPalGateway):
    """Orders v2: create returns an order id, finalize captures it."""

    flow = "orders"

    async def create_redirect_charge(
        self,
        amount: Decimal,
        return_url: Optional[str],
        cancel_url: Optional[str],
        currency: str,
    ) -> RedirectCharge:
        body: Dict[str, Any] = {
            "intent": "CAPTURE",
            "purchase_units": [
                {"amount": {"currency_code": currency.upper(), "value": format_major(amount, currency)}}
            ],
        }
        if return_url and cancel_url:
            body["application_context"] = {"return_url": return_url, "cancel_url": cancel_url}

        response = await self._client.post("/v2/checkout/orders", body)
        if response.is_error:
            message = _error_message(response)
            logger.error(f"PayPal order creation failed ({response.status_code}): {message}")
            raise ProviderError(PROVIDER, message, response.status_code)

        order_id = response.json()["id"]
        logger.info(f"Created PayPal order {order_id} for {format_major(amount, currency)} {currency}")
        return RedirectCharge(order_id=order_id)

    async def finalize_charge(self, reference: str, payer_id: Optional[str] = None) -> ChargeResult:
        """
        Capture an approved order.

        Completed only if the order is COMPLETED and every capture listed in
        the response is COMPLETED too (a declined capture can sit inside an
        otherwise finished order).
        """
        order_id = _validate_reference(reference)
        response = await self._client.post(f"/v2/checkout/orders/{order_id}/capture", {})
        self._raise_unless_refusal(response, f"capture of order {order_id}")

        data = _json_body(response)
        captures = [
            capture
            for unit in data.get("purchase_units", [])
            for capture in unit.get("payments", {}).get("captures", [])
        ]
        completed = (
            not response.is_error
            and data.get("status") == "COMPLETED"
            and all(capture.get("status") == "COMPLETED" for capture in captures)
        )

        logger.info(
            f"Capture of PayPal order {order_id}: http={response.status_code}, "
            f"status={data.get('status') or data.get('name')}"
        )
        return self._finalize_result(order_id, response, completed)


class PayPalLegacyGateway(_PayPalGateway):
    """Payments v1: create returns an approval URL, finalize executes the payment."""

    flow = "legacy"

    async def create_redirect_charge(
        self,
        amount: Decimal,
        return_url: Optional[str],
        cancel_url: Optional[str],
        currency: str,
    ) -> RedirectCharge:
        if not return_url or not cancel_url:
            raise ValidationError("PayPal redirect payments need return and cancel URLs")

        body = {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {"return_url": return_url, "cancel_url": cancel_url},
            "transactions": [
                {"amount": {"total": format_major(amount, currency), "currency": currency.upper()}}
            ],
        }

        response = await self._client.post("/v1/payments/payment", body)
        if response.is_error:
            message = _error_message(response)
            logger.error(f"PayPal payment creation failed ({response.status_code}): {message}")
            raise ProviderError(PROVIDER, message, response.status_code)

        data = response.json()
        for link in data.get("links", []):
            if link.get("rel") == "approval_url":
                logger.info(f"Created PayPal payment {data.get('id')}")
                return RedirectCharge(redirect_url=link["href"], payment_id=data.get("id"))

        raise ProviderError(PROVIDER, "PayPal response did not include an approval URL")

    async def finalize_charge(self, reference: str, payer_id: Optional[str] = None) -> ChargeResult:
        """Execute an approved payment with the payer id from the return URL."""
        payment_id = _validate_reference(reference)
        if not payer_id:
            raise ValidationError("PayerID is required to execute a PayPal payment")

        response = await self._client.post(
            f"/v1/payments/payment/{payment_id}/execute", {"payer_id": payer_id}
        )
        self._raise_unless_refusal(response, f"execution of payment {payment_id}")

        data = _json_body(response)
        completed = not response.is_error and data.get("state") == "approved"

        logger.info(
            f"Execution of PayPal payment {payment_id}: http={response.status_code}, "
            f"state={data.get('state') or data.get('name')}"
        )
        return self._finalize_result(payment_id, response, completed)
