"""
Booking confirmation orchestrator.

Ties a payment outcome to booking persistence and the confirmation
emails. Persistence and notification happen together, once, and only
after the provider has reported a completed charge.

Card bookings are settled in the browser before they are submitted; a card
booking sent as Paid is checked against Stripe, then ``submit`` notifies
straight away. PayPal bookings go through ``confirm``:

    Pending (stored or not yet stored)
        --finalize Completed-->  Paid   (persist, then notify)
        --finalize anything else-->  Failed if stored, nothing created otherwise
"""

from typing import Optional, Set

from models.booking import Booking, BookingCreate, BookingStatus, PaymentMethod
from notifications.dispatcher import NotificationDispatcher
from payments.gateway import PaymentGatewayAdapter
from utils.exceptions import ConfirmationInProgress, IncompleteCharge, ValidationError
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="bookings.log")


class BookingOrchestrator:
    """Drives bookings from submission to a settled or failed state."""

    def __init__(
        self,
        db,
        gateway: PaymentGatewayAdapter,
        dispatcher: NotificationDispatcher,
    ):
        self._db = db
        self._gateway = gateway
        self._dispatcher = dispatcher
        # References with a finalize call in flight in this process
        self._in_flight: Set[str] = set()

    async def submit(self, booking_data: BookingCreate) -> Booking:
        """
        Store a booking from the booking form.

        Non-redirect bookings are notified immediately, keeping the status
        the caller submitted. A card booking submitted as Paid must name a
        succeeded Stripe PaymentIntent. PayPal bookings are stored Pending
        and wait for ``confirm``.

        Raises:
            IncompleteCharge: If the named PaymentIntent has not succeeded
            ProviderUnconfigured: If a Paid card booking arrives without Stripe configured
        """
        method = PaymentMethod(booking_data.payment_method)
        status = BookingStatus.PENDING if method.is_redirect else BookingStatus(booking_data.status)

        if status == BookingStatus.PAID:
            result = await self._gateway.finalize_card_charge(booking_data.payment_id)
            if not result.completed:
                provider_status = result.provider_payload.get("status")
                logger.warning(f"Card booking rejected: {booking_data.payment_id} is {provider_status}")
                raise IncompleteCharge(booking_data.payment_id, provider_status)

        booking = await self._db.create_booking(booking_data.as_record(status=status.value))
        logger.info(f"Booking {booking.id} submitted ({method.value}, {booking.status})")

        if not method.is_redirect:
            await self._dispatcher.notify(booking)

        return booking

    async def confirm(
        self,
        reference: str,
        pending: Optional[BookingCreate] = None,
        payer_id: Optional[str] = None,
        require_booking: bool = False,
    ) -> Optional[Booking]:
        """
        Finalize a PayPal charge and settle the matching booking.

        Args:
            reference: PayPal order id (orders flow) or payment id (legacy flow)
            pending: Booking fields to store if no booking carries ``reference`` yet
            payer_id: PayerID from the legacy return URL
            require_booking: Refuse to finalize when there is neither a stored
                booking nor ``pending`` data to persist

        Returns:
            The Paid booking, or None if the payment completed but there was
            no booking to settle

        Raises:
            ConfirmationInProgress: If ``reference`` is already being confirmed
            IncompleteCharge: If PayPal did not report a completed charge
            ValidationError: If ``require_booking`` is set and there is nothing to persist
            ProviderError: If PayPal could not be reached; nothing is changed
        """
        if reference in self._in_flight:
            logger.warning(f"Confirmation of {reference} already in progress")
            raise ConfirmationInProgress(reference)

        self._in_flight.add(reference)
        try:
            return await self._confirm(reference, pending, payer_id, require_booking)
        finally:
            self._in_flight.discard(reference)

    async def _confirm(
        self,
        reference: str,
        pending: Optional[BookingCreate],
        payer_id: Optional[str],
        require_booking: bool,
    ) -> Optional[Booking]:
        existing = await self._db.get_booking_by_payment_id(reference)

        if existing is not None and existing.is_settled:
            logger.info(f"Booking {existing.id} already paid with {reference}, nothing to do")
            return existing
        if existing is not None and not existing.can_transition_to(BookingStatus.PAID):
            raise IncompleteCharge(reference, existing.status)
        if existing is None and pending is None and require_booking:
            logger.warning(f"Refusing to finalize {reference}: no booking to store")
            raise ValidationError(f"Booking details are required to capture {reference}")

        result = await self._gateway.finalize_charge(reference, payer_id=payer_id)

        if not result.completed:
            payload = result.provider_payload
            provider_status = payload.get("status") or payload.get("state") or payload.get("name")
            logger.warning(f"Payment {reference} not completed: {provider_status}")
            if existing is not None:
                await self._db.transition_booking(existing.id, BookingStatus.FAILED)
            raise IncompleteCharge(reference, provider_status)

        if existing is not None:
            booking = await self._db.transition_booking(
                existing.id, BookingStatus.PAID, payment_id=reference
            )
            if booking is None:
                # Settled by someone else between our read and the update
                logger.info(f"Booking {existing.id} was settled concurrently, skipping notifications")
                return await self._db.get_booking_by_id(existing.id)
        elif pending is not None:
            booking = await self._db.create_booking(
                pending.as_record(
                    status=BookingStatus.PAID.value,
                    payment_method=PaymentMethod.PAYPAL.value,
                    payment_id=reference,
                )
            )
        else:
            logger.error(f"Payment {reference} completed but no booking exists for it")
            return None

        logger.info(f"Booking {booking.id} paid with {reference}")
        await self._dispatcher.notify(booking)
        return booking
