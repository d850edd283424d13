"""
Booking Service: payment reconciliation workflow.

Phase 1 asks the payment provider for an authorization bound to a
{hotel, user} pair. Phase 2 re-reads that authorization from the provider
(never from the client), checks it belongs to the same hotel and user and
has succeeded, and only then appends the booking. The confirmation email
goes out after the booking is committed; failing to send it never undoes
the booking.
"""

from flask import render_template

from holistay.errors import (
    AuthorizationNotFound,
    ContextMismatch,
    IntentIncomplete,
    PaymentNotSucceeded,
)
from holistay.logger import get_logger
from holistay.payments import from_minor_units, to_minor_units
from holistay.services.hotel_service import append_booking, get_hotel

logger = get_logger("bookings")

CURRENCY_SYMBOLS = {"gbp": "£", "usd": "$", "eur": "€", "inr": "₹"}


class BookingWorkflow:

    def __init__(self, payment_provider, mailer, currency="gbp"):
        self.payment_provider = payment_provider
        self.mailer = mailer
        self.currency = currency

    def create_authorization(self, hotel_id, number_of_nights, user_id):
        """
        Phase 1. Returns the payment intent id, the client secret the
        frontend needs to complete payment, and the total cost.
        """
        hotel = get_hotel(hotel_id)
        total_cost = hotel.price_per_night * number_of_nights

        authorization = self.payment_provider.create_authorization(
            amount=to_minor_units(total_cost),
            currency=self.currency,
            metadata={"hotel_id": str(hotel_id), "user_id": str(user_id)},
        )
        if not authorization.client_secret:
            raise IntentIncomplete()

        logger.info(
            f"Payment intent {authorization.id} created for hotel {hotel_id}, "
            f"user {user_id}, {number_of_nights} night(s), total {total_cost}"
        )
        return {
            "payment_intent_id": authorization.id,
            "client_secret": str(authorization.client_secret),
            "total_cost": float(total_cost),
        }

    def confirm_booking(self, hotel_id, payment_intent_id, user_id, details):
        """Phase 2. Returns the appended Booking."""
        authorization = self.payment_provider.fetch_authorization(payment_intent_id)
        if authorization is None:
            raise AuthorizationNotFound()

        metadata = authorization.metadata or {}
        if metadata.get("hotel_id") != str(hotel_id) or metadata.get("user_id") != str(user_id):
            logger.warning(
                f"Payment intent {payment_intent_id} replayed against hotel {hotel_id} "
                f"by user {user_id}; issued for {metadata}"
            )
            raise ContextMismatch()

        if authorization.status != "succeeded":
            raise PaymentNotSucceeded(authorization.status)

        booking = append_booking(
            hotel_id=hotel_id,
            user_id=user_id,
            payment_intent_id=payment_intent_id,
            details=details,
            total_cost=from_minor_units(authorization.amount),
        )

        self._send_confirmation(booking)
        return booking

    def _send_confirmation(self, booking):
        try:
            html = render_template(
                "emails/booking_confirmation.html",
                booking=booking,
                hotel=booking.hotel,
                currency_symbol=CURRENCY_SYMBOLS.get(self.currency, ""),
            )
            self.mailer.send(to=booking.email, subject="Booking Confirmation", html=html)
        except Exception:
            # The booking is already committed
            logger.exception(f"Booking {booking.booking_id} saved but confirmation email failed")
