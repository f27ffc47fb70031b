"""Provider-neutral payment value objects."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class ChargeStatus(str, Enum):
    """Outcome of a finalize call."""

    COMPLETED = "Completed"
    INCOMPLETE = "Incomplete"


class ChargeIntent(BaseModel):
    """Card charge intent handed to the browser."""

    client_secret: str
    intent_id: str


class RedirectCharge(BaseModel):
    """
    Redirect-provider charge.

    Legacy flow sets ``redirect_url`` (plus the provider ``payment_id``);
    order flow sets ``order_id``.
    """

    redirect_url: Optional[str] = None
    payment_id: Optional[str] = None
    order_id: Optional[str] = None

    @model_validator(mode="after")
    def _one_shape(self) -> "RedirectCharge":
        if bool(self.redirect_url) == bool(self.order_id):
            raise ValueError("RedirectCharge needs exactly one of redirect_url or order_id")
        return self

    def to_public(self) -> Dict[str, Any]:
        if self.order_id:
            return {"orderID": self.order_id}
        return {"forwardLink": self.redirect_url, "paymentId": self.payment_id}


class ChargeResult(BaseModel):
    """Result of finalizing a charge with the provider."""

    status: ChargeStatus
    reference: str
    provider_payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.status == ChargeStatus.COMPLETED
