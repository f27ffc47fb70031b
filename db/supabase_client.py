"""
Supabase database client with CRUD operations.
Handles all database interactions for bookings, blog posts and the
admin config singleton.

Expected tables (SQL):
----------------------
CREATE TABLE bookings (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    name text NOT NULL,
    email text NOT NULL,
    children text DEFAULT '',
    price numeric(10, 2) DEFAULT 0,
    day text DEFAULT '',
    time text DEFAULT '',
    service text DEFAULT '',
    payment_method text NOT NULL DEFAULT 'card',
    payment_id text,
    status text NOT NULL DEFAULT 'Pending',
    created_at timestamptz NOT NULL DEFAULT now()
);
CREATE INDEX bookings_payment_id_idx ON bookings (payment_id);

CREATE TABLE blogs (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    title text NOT NULL,
    content text DEFAULT '',
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE admin_config (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    paypal_client_id text DEFAULT '',
    paypal_secret text DEFAULT '',
    stripe_secret_key text DEFAULT '',
    stripe_publishable_key text DEFAULT '',
    admin_email text DEFAULT '',
    gmail_user text DEFAULT '',
    gmail_app_pass text DEFAULT ''
);

The client uses the service key, so access is expected to go through this
backend only.
"""

import asyncio
import uuid
from typing import Any, List, Optional

from supabase import Client as SupabaseClientType
from supabase import create_client

from config import settings
from models.admin_config import AdminConfig
from models.blog import Blog, BlogCreate
from models.booking import Booking, BookingStatus
from utils.datetime_utils import parse_row_timestamps
from utils.exceptions import DatabaseError
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="db.log")

BOOKINGS_TABLE = "bookings"
BLOGS_TABLE = "blogs"
ADMIN_CONFIG_TABLE = "admin_config"

# PostgREST refuses an unfiltered DELETE; this matches every uuid row
_NIL_UUID = "00000000-0000-0000-0000-000000000000"


def _is_uuid(value: str) -> bool:
    """Row ids are uuid columns; anything else would fail the cast in Postgres."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class SupabaseClient:
    """
    Supabase database client wrapper.

    The supabase-py client is synchronous, so every query runs in a worker
    thread to keep the event loop free while the request is in flight.
    """

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        self.client: SupabaseClientType = create_client(
            url or settings.supabase_url, key or settings.supabase_key
        )

    async def _execute(self, query) -> Any:
        """Run a built query off the event loop and return the response."""
        return await asyncio.to_thread(query.execute)

    # ========== Booking Operations ==========

    async def create_booking(self, data: dict) -> Booking:
        """Insert a booking row built by ``BookingCreate.as_record``."""
        try:
            response = await self._execute(self.client.table(BOOKINGS_TABLE).insert(data))

            if not response.data:
                raise ValueError("Failed to create booking: no data returned")

            booking = self._parse_booking(response.data[0])
            logger.info(
                f"Created booking {booking.id} ({booking.payment_method}, {booking.status})"
            )
            return booking
        except Exception as e:
            raise DatabaseError(f"Failed to create booking: {e}") from e

    async def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        """Get booking by ID."""
        if not _is_uuid(booking_id):
            return None

        try:
            response = await self._execute(
                self.client.table(BOOKINGS_TABLE).select("*").eq("id", booking_id)
            )

            if response.data:
                return self._parse_booking(response.data[0])
            return None
        except Exception as e:
            raise DatabaseError(f"Failed to get booking: {e}") from e

    async def get_booking_by_payment_id(self, payment_id: str) -> Optional[Booking]:
        """Get the most recent booking carrying a provider payment reference."""
        try:
            response = await self._execute(
                self.client.table(BOOKINGS_TABLE)
                .select("*")
                .eq("payment_id", payment_id)
                .order("created_at", desc=True)
                .limit(1)
            )

            if response.data:
                return self._parse_booking(response.data[0])
            return None
        except Exception as e:
            raise DatabaseError(f"Failed to get booking by payment id: {e}") from e

    async def get_all_bookings(self, limit: int = 500) -> List[Booking]:
        """Get all bookings, newest first."""
        try:
            response = await self._execute(
                self.client.table(BOOKINGS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .limit(limit)
            )

            return [self._parse_booking(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get bookings: {e}") from e

    async def transition_booking(
        self,
        booking_id: str,
        status: BookingStatus,
        payment_id: Optional[str] = None,
    ) -> Optional[Booking]:
        """
        Move a Pending booking to ``status``.

        The update is conditional on the row still being Pending, so of two
        concurrent transitions only one gets a row back.

        Returns:
            Updated booking, or None if the booking was not Pending (or gone)
        """
        update_data = {"status": BookingStatus(status).value}
        if payment_id:
            update_data["payment_id"] = payment_id

        try:
            response = await self._execute(
                self.client.table(BOOKINGS_TABLE)
                .update(update_data)
                .eq("id", booking_id)
                .eq("status", BookingStatus.PENDING.value)
            )

            if not response.data:
                return None

            booking = self._parse_booking(response.data[0])
            logger.info(f"Booking {booking_id} moved to {booking.status}")
            return booking
        except Exception as e:
            raise DatabaseError(f"Failed to update booking status: {e}") from e

    async def delete_booking(self, booking_id: str) -> bool:
        """
        Delete a booking (admin operation).

        Returns:
            True if a row was deleted, False otherwise
        """
        if not _is_uuid(booking_id):
            return False

        try:
            response = await self._execute(
                self.client.table(BOOKINGS_TABLE).delete().eq("id", booking_id)
            )
            return len(response.data) > 0
        except Exception as e:
            raise DatabaseError(f"Failed to delete booking: {e}") from e

    # ========== Blog Operations ==========

    async def create_blog(self, blog_data: BlogCreate) -> Blog:
        """Create a new blog post."""
        try:
            response = await self._execute(
                self.client.table(BLOGS_TABLE).insert(blog_data.model_dump())
            )

            if not response.data:
                raise ValueError("Failed to create blog: no data returned")

            return Blog(**parse_row_timestamps(response.data[0]))
        except Exception as e:
            raise DatabaseError(f"Failed to create blog: {e}") from e

    async def get_all_blogs(self) -> List[Blog]:
        """Get all blog posts, newest first."""
        try:
            response = await self._execute(
                self.client.table(BLOGS_TABLE).select("*").order("created_at", desc=True)
            )
            return [Blog(**parse_row_timestamps(item)) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get blogs: {e}") from e

    async def delete_blog(self, blog_id: str) -> bool:
        """Delete a blog post (admin operation)."""
        if not _is_uuid(blog_id):
            return False

        try:
            response = await self._execute(
                self.client.table(BLOGS_TABLE).delete().eq("id", blog_id)
            )
            return len(response.data) > 0
        except Exception as e:
            raise DatabaseError(f"Failed to delete blog: {e}") from e

    # ========== Admin Config Operations ==========

    async def get_admin_config(self) -> Optional[AdminConfig]:
        """Load the stored admin config, if one has been saved."""
        try:
            response = await self._execute(
                self.client.table(ADMIN_CONFIG_TABLE).select("*").limit(1)
            )

            if response.data:
                return AdminConfig(**response.data[0])
            return None
        except Exception as e:
            raise DatabaseError(f"Failed to load admin config: {e}") from e

    async def replace_admin_config(self, config: AdminConfig) -> AdminConfig:
        """Delete every stored config row and insert ``config`` in their place."""
        try:
            await self._execute(
                self.client.table(ADMIN_CONFIG_TABLE).delete().neq("id", _NIL_UUID)
            )
            response = await self._execute(
                self.client.table(ADMIN_CONFIG_TABLE).insert(config.to_record())
            )

            if not response.data:
                raise ValueError("Failed to save admin config: no data returned")

            return AdminConfig(**response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to replace admin config: {e}") from e

    # ========== Helper Methods ==========

    def _parse_booking(self, item: dict) -> Booking:
        """
        Parse booking data from database response.

        Args:
            item: Raw booking data from database

        Returns:
            Parsed Booking object
        """
        return Booking(**parse_row_timestamps(item))


# Global database client instance
_db_client: Optional[SupabaseClient] = None


def get_db_client() -> SupabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = SupabaseClient()
    return _db_client
