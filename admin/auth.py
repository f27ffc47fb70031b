"""Shared-secret check for admin-only operations."""

import hmac
from typing import Optional

from utils.exceptions import Unauthorized
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="admin.log")


def require_admin(provided: Optional[str], expected: str) -> None:
    """
    Check the admin password sent with a request.

    An empty configured password never matches, so admin operations stay
    closed until ADMIN_PASSWORD is set.

    Raises:
        Unauthorized: If the password is missing or does not match
    """
    if not expected or not provided:
        logger.warning("Admin request rejected: missing password")
        raise Unauthorized("Unauthorized")

    if not hmac.compare_digest(str(provided).encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Admin request rejected: password mismatch")
        raise Unauthorized("Unauthorized")
