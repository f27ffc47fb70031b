"""
Pytest configuration and shared fixtures.
"""

import uuid
from datetime import timedelta
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from admin.config_store import ConfigStore
from config import Settings
from models.admin_config import AdminConfig
from models.blog import Blog, BlogCreate
from models.booking import Booking, BookingStatus
from utils.datetime_utils import utc_now

ADMIN_PASSWORD = "s3cret-admin"


class InMemoryStore:
    """Stand-in for SupabaseClient with the same async interface."""

    def __init__(self):
        self.bookings: Dict[str, Booking] = {}
        self.blogs: Dict[str, Blog] = {}
        self.admin_config: Optional[AdminConfig] = None
        self._clock = utc_now()

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    async def create_booking(self, data: dict) -> Booking:
        booking = Booking(id=uuid.uuid4().hex, created_at=self._tick(), **data)
        self.bookings[booking.id] = booking
        return booking

    async def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.bookings.get(booking_id)

    async def get_booking_by_payment_id(self, payment_id: str) -> Optional[Booking]:
        matches = [b for b in self.bookings.values() if b.payment_id == payment_id]
        return max(matches, key=lambda b: b.created_at) if matches else None

    async def get_all_bookings(self, limit: int = 500) -> List[Booking]:
        return sorted(self.bookings.values(), key=lambda b: b.created_at, reverse=True)[:limit]

    async def transition_booking(self, booking_id, status, payment_id=None) -> Optional[Booking]:
        booking = self.bookings.get(booking_id)
        if booking is None or booking.status != BookingStatus.PENDING:
            return None
        update = {"status": BookingStatus(status).value}
        if payment_id:
            update["payment_id"] = payment_id
        booking = booking.model_copy(update=update)
        self.bookings[booking_id] = booking
        return booking

    async def delete_booking(self, booking_id: str) -> bool:
        return self.bookings.pop(booking_id, None) is not None

    async def create_blog(self, blog_data: BlogCreate) -> Blog:
        blog = Blog(id=uuid.uuid4().hex, created_at=self._tick(), **blog_data.model_dump())
        self.blogs[blog.id] = blog
        return blog

    async def get_all_blogs(self) -> List[Blog]:
        return sorted(self.blogs.values(), key=lambda b: b.created_at, reverse=True)

    async def delete_blog(self, blog_id: str) -> bool:
        return self.blogs.pop(blog_id, None) is not None

    async def get_admin_config(self) -> Optional[AdminConfig]:
        return self.admin_config

    async def replace_admin_config(self, config: AdminConfig) -> AdminConfig:
        self.admin_config = config
        return config


@pytest.fixture
def store():
    """Empty in-memory persistence."""
    return InMemoryStore()


@pytest.fixture
def full_config():
    """Admin config with every provider configured."""
    return AdminConfig(
        paypal_client_id="pp_client",
        paypal_secret="pp_secret",
        stripe_secret_key="sk_test_123",
        stripe_publishable_key="pk_test_123",
        admin_email="owner@nanny.test",
        gmail_user="bookings@nanny.test",
        gmail_app_pass="app-pass",
    )


@pytest.fixture
def test_settings():
    """Settings for tests, independent of the environment."""
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_key="test_key",
        admin_password=ADMIN_PASSWORD,
        environment="test",
        public_base_url="https://nanny.test",
        paypal_mode="sandbox",
        paypal_flow="orders",
        paypal_client_id="",
        paypal_secret="",
        stripe_secret_key="",
        stripe_publishable_key="",
        admin_email="",
        gmail_user="",
        gmail_app_pass="",
    )


@pytest.fixture
def config_store(store, full_config):
    """Config store holding ``full_config`` as its current snapshot."""
    store.admin_config = full_config
    config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD)
    config_store._swap(full_config)
    return config_store


@pytest.fixture
def mailer():
    """Mail transport double; ``mailer.send`` records every attempt."""
    mock_mailer = MagicMock()
    mock_mailer.send = AsyncMock(return_value=None)
    return mock_mailer


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = MagicMock()
    mock_table = MagicMock()
    mock_client.table.return_value = mock_table
    return mock_client, mock_table
