"""
Unit tests for booking, blog, admin config and payment models.
"""

import pytest
from pydantic import ValidationError

from models.admin_config import AdminConfig, mask_secret
from models.blog import BlogCreate
from models.booking import Booking, BookingCreate, BookingStatus, PaymentMethod
from models.payment import ChargeResult, ChargeStatus, RedirectCharge


def test_booking_status_enum():
    """Statuses keep the capitalised values stored by the site."""
    assert BookingStatus.PENDING.value == "Pending"
    assert BookingStatus.PAID.value == "Paid"
    assert BookingStatus.FAILED.value == "Failed"


def test_payment_method_redirect_flag():
    assert PaymentMethod.PAYPAL.is_redirect
    assert not PaymentMethod.CARD.is_redirect


class TestBookingCreate:
    """Test booking form validation."""

    def test_accepts_camel_case_form(self):
        booking = BookingCreate.model_validate(
            {
                "name": "A",
                "email": "a@x.com",
                "price": 50,
                "paymentMethod": "card",
                "paymentId": "pi_123",
                "status": "Paid",
            }
        )

        assert booking.payment_method == "card"
        assert booking.payment_id == "pi_123"
        assert booking.status == BookingStatus.PAID

    def test_defaults(self):
        booking = BookingCreate(name="A", email="a@x.com")

        assert booking.status == BookingStatus.PENDING
        assert booking.payment_method == PaymentMethod.CARD
        assert booking.children == ""

    def test_rejects_bad_email(self):
        with pytest.raises(ValidationError, match="Invalid email"):
            BookingCreate(name="A", email="not-an-email")

    def test_rejects_negative_price(self):
        with pytest.raises(ValidationError):
            BookingCreate(name="A", email="a@x.com", price=-1)

    def test_rejects_infinite_price(self):
        with pytest.raises(ValidationError):
            BookingCreate(name="A", email="a@x.com", price=float("inf"))

    def test_paid_requires_payment_id(self):
        with pytest.raises(ValidationError, match="paymentId"):
            BookingCreate(name="A", email="a@x.com", status="Paid")

    def test_paypal_cannot_be_submitted_paid(self):
        with pytest.raises(ValidationError, match="PayPal"):
            BookingCreate(
                name="A",
                email="a@x.com",
                payment_method="paypal",
                payment_id="PAY-1",
                status="Paid",
            )

    def test_cannot_be_submitted_failed(self):
        with pytest.raises(ValidationError):
            BookingCreate(name="A", email="a@x.com", status="Failed")

    def test_text_fields_are_sanitised(self):
        booking = BookingCreate(name="  Jane\x00 ", email="a@x.com", service=None)

        assert booking.name == "Jane"
        assert booking.service == ""

    def test_as_record_applies_overrides(self):
        booking = BookingCreate(name="A", email="a@x.com", price=20)

        record = booking.as_record(status="Paid", payment_id="ORDER-1")

        assert record["status"] == "Paid"
        assert record["payment_id"] == "ORDER-1"
        assert record["payment_method"] == "card"
        assert record["price"] == 20


class TestBooking:
    """Test booking lifecycle helpers."""

    def test_pending_can_move_forward_only(self):
        booking = Booking(name="A", email="a@x.com")

        assert booking.can_transition_to(BookingStatus.PAID)
        assert booking.can_transition_to(BookingStatus.FAILED)
        assert not booking.can_transition_to(BookingStatus.PENDING)

    def test_terminal_states_never_move(self):
        paid = Booking(name="A", email="a@x.com", status="Paid", payment_id="p")
        failed = Booking(name="A", email="a@x.com", status="Failed")

        for status in BookingStatus:
            assert not paid.can_transition_to(status)
            assert not failed.can_transition_to(status)

    def test_to_public_uses_camel_case(self):
        booking = Booking(id="b1", name="A", email="a@x.com", payment_id="p", status="Paid")

        data = booking.to_public()

        assert data["paymentId"] == "p"
        assert data["paymentMethod"] == "card"
        assert data["status"] == "Paid"
        assert "createdAt" in data


class TestAdminConfig:
    """Test admin config flags and masking."""

    def test_empty_config_has_nothing_configured(self):
        config = AdminConfig()

        assert not config.stripe_configured
        assert not config.paypal_configured
        assert not config.mail_configured

    def test_paypal_needs_both_credentials(self):
        assert not AdminConfig(paypal_client_id="id").paypal_configured
        assert AdminConfig(paypal_client_id="id", paypal_secret="s").paypal_configured

    def test_mail_needs_operator_address(self):
        config = AdminConfig(gmail_user="u@x.com", gmail_app_pass="p")
        assert not config.mail_configured

    def test_parses_camel_case_and_ignores_password(self, full_config):
        config = AdminConfig.model_validate(
            {"stripeSecretKey": "sk_live_abc", "adminEmail": "o@x.com", "password": "pw"}
        )

        assert config.stripe_secret_key == "sk_live_abc"
        assert config.admin_email == "o@x.com"

    def test_public_view_masks_secrets(self, full_config):
        data = full_config.to_public()

        assert data["paypalClientId"] == "pp_client"
        assert data["stripePublishableKey"] == "pk_test_123"
        assert data["stripeSecretKey"] == "*******_123"
        assert data["paypalSecret"].endswith("cret")
        assert "pp_secret" not in data.values()
        assert "app-pass" not in data.values()

    def test_mask_secret_short_values(self):
        assert mask_secret("") == ""
        assert mask_secret("abc") == "***"

    def test_config_is_frozen(self, full_config):
        with pytest.raises(ValidationError):
            full_config.admin_email = "other@x.com"


class TestPaymentModels:
    """Test payment value objects."""

    def test_redirect_charge_requires_one_shape(self):
        with pytest.raises(ValidationError):
            RedirectCharge()
        with pytest.raises(ValidationError):
            RedirectCharge(redirect_url="https://paypal", order_id="O-1")

    def test_redirect_charge_public_shapes(self):
        legacy = RedirectCharge(redirect_url="https://paypal/approve", payment_id="PAY-1")
        orders = RedirectCharge(order_id="O-1")

        assert legacy.to_public() == {"forwardLink": "https://paypal/approve", "paymentId": "PAY-1"}
        assert orders.to_public() == {"orderID": "O-1"}

    def test_charge_result_completed(self):
        assert ChargeResult(status=ChargeStatus.COMPLETED, reference="r").completed
        assert not ChargeResult(status=ChargeStatus.INCOMPLETE, reference="r").completed


def test_blog_create_trims_title():
    blog = BlogCreate(title="  Summer camp  ", content="Hello")

    assert blog.title == "Summer camp"
