"""
SMTP mail transport (Gmail with an app password by default).
"""

from email.message import EmailMessage

import aiosmtplib

from models.admin_config import AdminConfig
from utils.exceptions import NotificationError
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="notifications.log")

# Implicit TLS port; anything else upgrades with STARTTLS
_SMTPS_PORT = 465


class SmtpMailer:
    """Sends one HTML message per call, no retries."""

    def __init__(self, username: str, password: str, host: str = "smtp.gmail.com", port: int = _SMTPS_PORT):
        self.username = username
        self._password = password
        self.host = host
        self.port = port

    @classmethod
    def from_config(cls, config: AdminConfig, host: str = "smtp.gmail.com", port: int = _SMTPS_PORT) -> "SmtpMailer":
        return cls(config.gmail_user, config.gmail_app_pass, host=host, port=port)

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Send an HTML email from the configured account.

        Raises:
            NotificationError: If the SMTP exchange fails
        """
        message = EmailMessage()
        message["From"] = self.username
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable email client.")
        message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self._password,
                use_tls=self.port == _SMTPS_PORT,
                start_tls=self.port != _SMTPS_PORT,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send '{subject}' to {to}: {e}") from e
