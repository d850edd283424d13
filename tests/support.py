import unittest
import uuid
from decimal import Decimal

from flask_jwt_extended import create_access_token

from holistay.app import create_app
from holistay.errors import AuthorizationNotFound, EmailDeliveryError, ProviderUnavailable
from holistay.extensions import db
from holistay.models import Hotel, HotelFacility, User
from holistay.payments import PaymentAuthorization, PaymentProvider

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
    "LOG_LEVEL": "WARNING",
    "LOG_FILE": None,
    "PAYMENT_CURRENCY": "gbp",
}


class FakePaymentProvider(PaymentProvider):
    """In-memory stand-in for Stripe PaymentIntents."""

    def __init__(self):
        self.intents = {}
        self.omit_client_secret = False
        self.unavailable = False

    def create_authorization(self, amount, currency, metadata):
        if self.unavailable:
            raise ProviderUnavailable()
        intent_id = f"pi_{uuid.uuid4().hex[:16]}"
        authorization = PaymentAuthorization(
            id=intent_id,
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            client_secret=None if self.omit_client_secret else f"{intent_id}_secret_test",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = authorization
        return authorization

    def fetch_authorization(self, authorization_id):
        if self.unavailable:
            raise ProviderUnavailable()
        if authorization_id not in self.intents:
            raise AuthorizationNotFound()
        return self.intents[authorization_id]

    def set_status(self, authorization_id, status):
        self.intents[authorization_id].status = status


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise EmailDeliveryError("SMTP error: connection refused")
        self.sent.append({"to": to, "subject": subject, "html": html})


class HoliStayTestCase(unittest.TestCase):

    def setUp(self):
        self.provider = FakePaymentProvider()
        self.mailer = RecordingMailer()
        self.app = create_app(TEST_CONFIG, payment_provider=self.provider, mailer=self.mailer)
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()
        self.client = self.app.test_client()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    # --- fixtures -------------------------------------------------------

    def create_user(self, email=None, verified=True, password="password123", **fields):
        user = User(
            email=email or f"user_{uuid.uuid4().hex[:8]}@example.com",
            first_name=fields.pop("first_name", "Ada"),
            last_name=fields.pop("last_name", "Lovelace"),
            is_verified=verified,
            **fields,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    def create_hotel(self, facilities=(), **fields):
        defaults = {
            "name": "Sea View",
            "city": "Brighton",
            "country": "United Kingdom",
            "description": "By the pier",
            "type": "Boutique",
            "adult_count": 2,
            "child_count": 1,
            "price_per_night": Decimal("100.00"),
            "star_rating": 4,
            "image_urls": [],
        }
        defaults.update(fields)
        hotel = Hotel(**defaults)
        hotel.facilities = [HotelFacility(name=name) for name in facilities]
        db.session.add(hotel)
        db.session.commit()
        return hotel

    def token_for(self, user):
        return create_access_token(identity=str(user.user_id))

    def auth_headers(self, user):
        return {"Authorization": f"Bearer {self.token_for(user)}"}

    def booking_payload(self, payment_intent_id, **overrides):
        payload = {
            "payment_intent_id": payment_intent_id,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "adult_count": 2,
            "child_count": 0,
            "check_in": "2026-11-01",
            "check_out": "2026-11-04",
        }
        payload.update(overrides)
        return payload
