"""HTML bodies for the customer confirmation and the operator alert."""

from html import escape
from typing import Tuple

from models.booking import Booking
from utils.constants import BRAND_NAME


def _price(booking: Booking) -> str:
    return f"${booking.price:.2f}"


def customer_confirmation(booking: Booking) -> Tuple[str, str]:
    """Subject and HTML body sent to the customer."""
    subject = f"Booking Confirmed - {booking.service}"
    html = f"""
      <h2>Booking Confirmed!</h2>
      <p><strong>Name:</strong> {escape(booking.name)}</p>
      <p><strong>Service:</strong> {escape(booking.service)}</p>
      <p><strong>Price:</strong> {_price(booking)}</p>
      <p><strong>Date:</strong> {escape(booking.day)} at {escape(booking.time)}</p>
      <p>Thank you for choosing {BRAND_NAME}!</p>
    """
    return subject, html


def operator_alert(booking: Booking) -> Tuple[str, str]:
    """Subject and HTML body sent to the operator address."""
    subject = f"NEW BOOKING: {booking.service}"
    html = f"""
      <h2>New Booking!</h2>
      <p><strong>Customer:</strong> {escape(booking.name)}</p>
      <p><strong>Email:</strong> {escape(booking.email)}</p>
      <p><strong>Service:</strong> {escape(booking.service)}</p>
      <p><strong>Kids:</strong> {escape(booking.children)}</p>
      <p><strong>Price:</strong> {_price(booking)}</p>
      <p><strong>Date:</strong> {escape(booking.day)} | <strong>Time:</strong> {escape(booking.time)}</p>
      <p><strong>Payment:</strong> {escape(str(booking.payment_method).upper())}</p>
      <p><strong>Status:</strong> {escape(str(booking.status))}</p>
    """
    return subject, html
