"""Booking confirmation emails."""

from .dispatcher import NotificationDispatcher
from .mailer import SmtpMailer

__all__ = ["NotificationDispatcher", "SmtpMailer"]
