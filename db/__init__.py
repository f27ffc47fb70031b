"""Supabase persistence for bookings, blog posts and the admin config."""

from .supabase_client import SupabaseClient, get_db_client

__all__ = ["SupabaseClient", "get_db_client"]
