"""
Unit tests for the admin config store and admin password check.
"""

from unittest.mock import MagicMock

import pytest

from admin.auth import require_admin
from admin.config_store import ConfigStore
from models.admin_config import AdminConfig
from tests.conftest import ADMIN_PASSWORD
from utils.exceptions import Unauthorized


class TestRequireAdmin:
    """Test the shared-secret check."""

    def test_matching_password(self):
        require_admin("pw", "pw")

    @pytest.mark.parametrize("provided", ["wrong", "", None, "PW"])
    def test_mismatch_raises(self, provided):
        with pytest.raises(Unauthorized):
            require_admin(provided, "pw")

    def test_empty_configured_password_never_matches(self):
        with pytest.raises(Unauthorized):
            require_admin("", "")


class TestConfigStore:
    """Test loading, replacing and observing the admin config."""

    def test_defaults_to_empty_before_load(self, store):
        config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD)

        assert config_store.get() == AdminConfig()
        assert config_store.version == 0

    @pytest.mark.asyncio
    async def test_load_uses_stored_config(self, store, full_config):
        store.admin_config = full_config
        config_store = ConfigStore(
            store, admin_password=ADMIN_PASSWORD, fallback=AdminConfig(admin_email="env@x.com")
        )

        loaded = await config_store.load()

        assert loaded == full_config
        assert config_store.get() is loaded
        assert config_store.version == 1

    @pytest.mark.asyncio
    async def test_load_falls_back_to_environment(self, store):
        fallback = AdminConfig(stripe_secret_key="sk_env")
        config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD, fallback=fallback)

        await config_store.load()

        assert config_store.get().stripe_secret_key == "sk_env"

    @pytest.mark.asyncio
    async def test_replace_persists_and_swaps(self, store, full_config):
        config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD)
        await config_store.load()

        await config_store.replace(full_config, ADMIN_PASSWORD)

        assert store.admin_config == full_config
        assert config_store.get() == full_config
        assert config_store.version == 2

    @pytest.mark.asyncio
    async def test_replace_with_wrong_password_changes_nothing(self, store, full_config):
        store.admin_config = full_config
        config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD)
        await config_store.load()

        with pytest.raises(Unauthorized):
            await config_store.replace(AdminConfig(), "nope")

        assert store.admin_config == full_config
        assert config_store.get() == full_config
        assert config_store.version == 1

    @pytest.mark.asyncio
    async def test_listeners_see_every_snapshot(self, store, full_config):
        config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD)
        listener = MagicMock()

        config_store.subscribe(listener)
        await config_store.load()
        await config_store.replace(full_config, ADMIN_PASSWORD)

        seen = [call.args[0] for call in listener.call_args_list]
        assert seen == [AdminConfig(), AdminConfig(), full_config]

    @pytest.mark.asyncio
    async def test_public_view_is_masked(self, config_store):
        data = config_store.public_view()

        assert data["adminEmail"] == "owner@nanny.test"
        assert data["gmailAppPass"] != "app-pass"
