"""
Main entry point for the childcare booking backend.
"""

import sys

from aiohttp import web

from config import settings
from db import get_db_client
from server import create_app
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_level=settings.log_level, log_file="server.log")


def main() -> None:
    """Validate configuration and serve the API until interrupted."""
    try:
        settings.validate_all_required()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    app = create_app(settings, get_db_client())

    logger.info(
        f"Starting booking server on {settings.host}:{settings.port} "
        f"(environment={settings.environment}, paypal={settings.paypal_mode}/{settings.paypal_flow})"
    )
    web.run_app(app, host=settings.host, port=settings.port, print=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
