"""Booking submission and payment confirmation."""

from .orchestrator import BookingOrchestrator

__all__ = ["BookingOrchestrator"]
