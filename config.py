"""
Configuration module for the childcare booking backend.
Loads environment variables and provides typed configuration.

Provider credentials normally live in the admin-editable config record
(see ``admin.config_store``); the values here are only the process-level
settings plus optional fallback credentials used when no record exists yet.
"""

from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.admin_config import AdminConfig

# Load .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Shared secret for admin-only endpoints
    admin_password: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"  # development, staging, production
    public_base_url: Optional[str] = (
        None  # Used to build PayPal return URLs (e.g., https://example.com)
    )
    log_level: str = "INFO"

    # PayPal
    paypal_mode: Literal["sandbox", "live"] = "sandbox"
    paypal_flow: Literal["orders", "legacy"] = "orders"

    # Outbound mail
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465

    # Outbound HTTP (PayPal REST)
    http_timeout: float = 30.0

    # Fallback provider credentials, only used if no stored config exists
    paypal_client_id: str = ""
    paypal_secret: str = ""
    stripe_secret_key: str = ""
    stripe_publishable_key: str = ""
    admin_email: str = ""
    gmail_user: str = ""
    gmail_app_pass: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def fallback_admin_config(self) -> AdminConfig:
        """Build the admin config used before anything has been saved."""
        return AdminConfig(
            paypal_client_id=self.paypal_client_id,
            paypal_secret=self.paypal_secret,
            stripe_secret_key=self.stripe_secret_key,
            stripe_publishable_key=self.stripe_publishable_key,
            admin_email=self.admin_email,
            gmail_user=self.gmail_user,
            gmail_app_pass=self.gmail_app_pass,
        )

    def validate_all_required(self) -> None:
        """
        Validate that all required settings are present.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        required_fields = [
            "supabase_url",
            "supabase_key",
            "admin_password",
        ]

        missing = []
        for field in required_fields:
            value = getattr(self, field, None)

            if not value:
                missing.append(field)
                continue

            # Check for placeholder values
            if str(value).lower().startswith("your_"):
                missing.append(field)

        if missing:
            raise ValueError(
                f"Missing or invalid required configuration: "
                f"{', '.join(missing)}. "
                f"Please check your .env file and ensure all required "
                f"values are set."
            )


# Global settings instance
settings = Settings()
