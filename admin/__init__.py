"""Admin secret checks and the admin-editable configuration store."""

from .auth import require_admin
from .config_store import ConfigStore

__all__ = ["ConfigStore", "require_admin"]
