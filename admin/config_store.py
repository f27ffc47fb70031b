"""
Admin config store.

Single source of truth for provider credentials and notification
addresses. The persisted singleton is loaded once at startup into an
in-memory snapshot; every admin write replaces both the stored row and the
snapshot, then tells subscribers (payment gateways, mail transport) to
rebuild whatever they derived from the old credentials.
"""

from typing import Callable, List, Optional

from admin.auth import require_admin
from models.admin_config import AdminConfig
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="admin.log")

ConfigListener = Callable[[AdminConfig], None]


class ConfigStore:
    """In-memory, versioned view of the admin config backed by the database."""

    def __init__(
        self,
        db,
        admin_password: str,
        fallback: Optional[AdminConfig] = None,
    ):
        """
        Args:
            db: Persistence with ``get_admin_config``/``replace_admin_config``
            admin_password: Shared secret required by ``replace``
            fallback: Config used when nothing has been stored yet
        """
        self._db = db
        self._admin_password = admin_password
        self._fallback = fallback or AdminConfig()
        self._config = AdminConfig()
        self._version = 0
        self._listeners: List[ConfigListener] = []

    @property
    def version(self) -> int:
        """Incremented on every load or replace."""
        return self._version

    def get(self) -> AdminConfig:
        """Current snapshot; all fields empty until ``load`` runs."""
        return self._config

    def public_view(self) -> dict:
        return self._config.to_public()

    def subscribe(self, listener: ConfigListener) -> None:
        """Register a callback and hand it the current snapshot immediately."""
        self._listeners.append(listener)
        listener(self._config)

    async def load(self) -> AdminConfig:
        """Read the stored config, falling back to env-supplied credentials."""
        stored = await self._db.get_admin_config()
        if stored is None:
            logger.info("No stored admin config, using environment fallback")
            self._swap(self._fallback)
        else:
            logger.info("Loaded admin config from database")
            self._swap(stored)
        return self._config

    async def replace(self, new_config: AdminConfig, auth_token: Optional[str]) -> AdminConfig:
        """
        Replace the stored config and the cached snapshot.

        Raises:
            Unauthorized: If ``auth_token`` does not match the admin password
        """
        require_admin(auth_token, self._admin_password)

        saved = await self._db.replace_admin_config(new_config)
        self._swap(saved)
        logger.info(
            f"Admin config replaced (version {self._version}): "
            f"stripe={saved.stripe_configured}, paypal={saved.paypal_configured}, "
            f"mail={saved.mail_configured}"
        )
        return saved

    def _swap(self, config: AdminConfig) -> None:
        self._config = config
        self._version += 1
        for listener in self._listeners:
            listener(config)
