"""Admin-editable configuration: provider credentials and notification addresses."""

from typing import Any, Dict

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

# Fields that must never be shown back in full
SECRET_FIELDS = ("paypal_secret", "stripe_secret_key", "gmail_app_pass")


def mask_secret(value: str) -> str:
    """Keep only the last four characters of a secret."""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


class AdminConfig(BaseModel):
    """
    Singleton config record.

    Instances are frozen: the config store swaps whole objects rather than
    mutating fields, so readers always see one consistent snapshot.
    """

    paypal_client_id: str = ""
    paypal_secret: str = ""
    stripe_secret_key: str = ""
    stripe_publishable_key: str = ""
    admin_email: str = ""
    gmail_user: str = ""
    gmail_app_pass: str = ""

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel
        extra = "ignore"

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def paypal_configured(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_secret)

    @property
    def mail_configured(self) -> bool:
        return bool(self.gmail_user and self.gmail_app_pass and self.admin_email)

    def to_record(self) -> Dict[str, Any]:
        """Row data for the admin_config table."""
        return self.model_dump()

    def to_public(self) -> Dict[str, Any]:
        """camelCase view with secrets masked."""
        data = self.model_dump()
        for field in SECRET_FIELDS:
            data[field] = mask_secret(data[field])
        return {to_camel(key): value for key, value in data.items()}
