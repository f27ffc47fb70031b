"""
Notification dispatcher.

Sends the customer confirmation and the operator alert for a settled
booking. Delivery is best-effort: each send has its own error boundary,
failures are logged, and nothing is raised to the caller.
"""

import asyncio
from typing import Callable, Optional

from admin.config_store import ConfigStore
from models.admin_config import AdminConfig
from models.booking import Booking
from notifications import templates
from notifications.mailer import SmtpMailer
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="notifications.log")

MailerFactory = Callable[[AdminConfig], SmtpMailer]


class NotificationDispatcher:
    """Two emails per booking, rebuilt transport on every config change."""

    def __init__(self, config_store: ConfigStore, mailer_factory: Optional[MailerFactory] = None):
        self._config_store = config_store
        self._mailer_factory = mailer_factory or SmtpMailer.from_config
        self._mailer: Optional[SmtpMailer] = None
        config_store.subscribe(self._rebuild)

    def _rebuild(self, config: AdminConfig) -> None:
        self._mailer = self._mailer_factory(config) if config.mail_configured else None

    async def notify(self, booking: Booking) -> None:
        """
        Email the customer, then the operator.

        Both sends run as separate tasks, started customer first, and are
        awaited before returning so the request that triggered them finishes
        after delivery has been attempted.
        """
        config = self._config_store.get()
        mailer = self._mailer
        if mailer is None or not config.mail_configured:
            logger.debug(f"Mail not configured, skipping notifications for booking {booking.id}")
            return

        customer_subject, customer_html = templates.customer_confirmation(booking)
        operator_subject, operator_html = templates.operator_alert(booking)

        tasks = [
            asyncio.create_task(
                self._send(mailer, "customer", booking.email, customer_subject, customer_html, booking)
            ),
            asyncio.create_task(
                self._send(mailer, "operator", config.admin_email, operator_subject, operator_html, booking)
            ),
        ]
        await asyncio.gather(*tasks)

    async def _send(
        self,
        mailer: SmtpMailer,
        kind: str,
        to: str,
        subject: str,
        html: str,
        booking: Booking,
    ) -> bool:
        logger.info(f"Sending {kind} email for booking {booking.id} to {to}")
        try:
            await mailer.send(to, subject, html)
        except Exception as e:
            logger.error(f"{kind.capitalize()} email failed for booking {booking.id}: {e}", exc_info=True)
            return False

        logger.info(f"{kind.capitalize()} email sent for booking {booking.id}")
        return True
