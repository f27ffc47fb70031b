"""
Unit tests for the notification dispatcher and mail templates.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from admin.config_store import ConfigStore
from models.admin_config import AdminConfig
from models.booking import Booking
from notifications import templates
from notifications.dispatcher import NotificationDispatcher
from tests.conftest import ADMIN_PASSWORD
from utils.exceptions import NotificationError


@pytest.fixture
def booking():
    return Booking(
        id="b-1",
        name="Jane Doe",
        email="jane@example.com",
        children="2",
        price=50,
        day="Saturday",
        time="18:00",
        service="Date Night",
        status="Paid",
    )


def make_dispatcher(config_store, mailer):
    factory = MagicMock(return_value=mailer)
    return NotificationDispatcher(config_store, mailer_factory=factory), factory


class TestNotify:
    """Test delivery of the two booking emails."""

    @pytest.mark.asyncio
    async def test_customer_then_operator(self, config_store, mailer, booking):
        dispatcher, _ = make_dispatcher(config_store, mailer)

        await dispatcher.notify(booking)

        recipients = [call.args[0] for call in mailer.send.await_args_list]
        assert recipients == ["jane@example.com", "owner@nanny.test"]
        subjects = [call.args[1] for call in mailer.send.await_args_list]
        assert subjects == ["Booking Confirmed - Date Night", "NEW BOOKING: Date Night"]

    @pytest.mark.asyncio
    async def test_customer_failure_does_not_stop_operator(self, config_store, booking):
        mailer = MagicMock()
        mailer.send = AsyncMock(side_effect=[NotificationError("mailbox unavailable"), None])
        dispatcher, _ = make_dispatcher(config_store, mailer)

        await dispatcher.notify(booking)

        assert mailer.send.await_count == 2
        assert mailer.send.await_args_list[1].args[0] == "owner@nanny.test"

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_contained(self, config_store, booking):
        mailer = MagicMock()
        mailer.send = AsyncMock(side_effect=RuntimeError("socket closed"))
        dispatcher, _ = make_dispatcher(config_store, mailer)

        await dispatcher.notify(booking)

        assert mailer.send.await_count == 2

    @pytest.mark.asyncio
    async def test_skipped_without_mail_config(self, store, mailer, booking):
        config_store = ConfigStore(store, admin_password=ADMIN_PASSWORD)
        config_store._swap(AdminConfig(stripe_secret_key="sk_test_1"))
        dispatcher, factory = make_dispatcher(config_store, mailer)

        await dispatcher.notify(booking)

        factory.assert_not_called()
        mailer.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_rebuilt_on_config_change(self, config_store, booking):
        first, second = MagicMock(), MagicMock()
        first.send, second.send = AsyncMock(), AsyncMock()
        factory = MagicMock(side_effect=[first, second])
        dispatcher = NotificationDispatcher(config_store, mailer_factory=factory)

        new_config = config_store.get().model_copy(update={"admin_email": "new-owner@nanny.test"})
        await config_store.replace(new_config, ADMIN_PASSWORD)
        await dispatcher.notify(booking)

        first.send.assert_not_awaited()
        assert second.send.await_args_list[1].args[0] == "new-owner@nanny.test"
        assert factory.call_args.args[0].admin_email == "new-owner@nanny.test"


class TestTemplates:
    """Test the email bodies."""

    def test_customer_confirmation(self, booking):
        subject, html = templates.customer_confirmation(booking)

        assert subject == "Booking Confirmed - Date Night"
        assert "Jane Doe" in html
        assert "$50.00" in html
        assert "Saturday at 18:00" in html

    @pytest.mark.parametrize("price,shown", [(1500000, "$1500000.00"), (12.5, "$12.50"), (0, "$0.00")])
    def test_price_is_shown_in_dollars_and_cents(self, booking, price, shown):
        booking = booking.model_copy(update={"price": price})

        _, html = templates.operator_alert(booking)

        assert shown in html
        assert "e+" not in html

    def test_operator_alert_lists_contact(self, booking):
        subject, html = templates.operator_alert(booking)

        assert subject == "NEW BOOKING: Date Night"
        assert "jane@example.com" in html

    def test_values_are_escaped(self, booking):
        booking = booking.model_copy(update={"name": "<script>alert(1)</script>"})

        _, html = templates.customer_confirmation(booking)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
