"""
Payment provider boundary.

The booking workflow talks to a ``PaymentProvider``; ``StripePaymentProvider``
backs it with Stripe PaymentIntents. The provider is the only authority on
an authorization's status, so nothing here caches or mutates it.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

import stripe

from holistay.errors import AuthorizationNotFound, ProviderRejected, ProviderUnavailable
from holistay.logger import get_logger

logger = get_logger("payments")

METADATA_KEYS = ("hotel_id", "user_id")


@dataclass
class PaymentAuthorization:
    id: str
    status: str
    amount: int
    currency: str
    client_secret: str | None = None
    metadata: dict = field(default_factory=dict)


def to_minor_units(amount):
    """Convert a major-unit amount (e.g. pounds) to an integer of minor units."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount):
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))


class PaymentProvider:
    def create_authorization(self, amount, currency, metadata):
        """Mint an authorization for ``amount`` minor units. Returns a PaymentAuthorization."""
        raise NotImplementedError

    def fetch_authorization(self, authorization_id):
        """Return the provider's current view of an authorization."""
        raise NotImplementedError


class StripePaymentProvider(PaymentProvider):

    def __init__(self, api_key):
        self.api_key = api_key

    def create_authorization(self, amount, currency, metadata):
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            raise self._translate(e) from e
        return self._to_authorization(intent)

    def fetch_authorization(self, authorization_id):
        try:
            intent = stripe.PaymentIntent.retrieve(authorization_id, api_key=self.api_key)
        except stripe.InvalidRequestError as e:
            if e.code == "resource_missing":
                raise AuthorizationNotFound() from e
            raise self._translate(e) from e
        except stripe.StripeError as e:
            raise self._translate(e) from e
        return self._to_authorization(intent)

    @staticmethod
    def _translate(error):
        # Transient failures are retryable by the caller; everything else is a rejection
        if isinstance(error, (stripe.APIConnectionError, stripe.RateLimitError, stripe.APIError)):
            logger.error(f"Stripe unavailable: {error}")
            return ProviderUnavailable()
        logger.error(f"Stripe rejected request: {error}")
        return ProviderRejected(getattr(error, "user_message", None) or ProviderRejected.message)

    @staticmethod
    def _to_authorization(intent):
        metadata = getattr(intent, "metadata", None)
        return PaymentAuthorization(
            id=intent.id,
            status=intent.status,
            amount=intent.amount,
            currency=intent.currency,
            client_secret=getattr(intent, "client_secret", None),
            metadata={key: getattr(metadata, key, None) for key in METADATA_KEYS} if metadata else {},
        )
