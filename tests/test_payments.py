import smtplib
import unittest
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import stripe

from holistay.errors import (
    AuthorizationNotFound,
    EmailDeliveryError,
    ProviderRejected,
    ProviderUnavailable,
)
from holistay.mailer import ConsoleMailer, SmtpMailer, create_mailer
from holistay.payments import StripePaymentProvider, from_minor_units, to_minor_units


def fake_intent(**overrides):
    fields = {
        "id": "pi_123",
        "status": "succeeded",
        "amount": 30000,
        "currency": "gbp",
        "client_secret": "pi_123_secret_abc",
        "metadata": SimpleNamespace(hotel_id="hotel-1", user_id="user-1"),
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestMinorUnits(unittest.TestCase):

    def test_conversion(self):
        self.assertEqual(to_minor_units(300), 30000)
        self.assertEqual(to_minor_units(Decimal("19.99")), 1999)
        self.assertEqual(from_minor_units(30000), Decimal("300.00"))


class TestStripePaymentProvider(unittest.TestCase):

    def setUp(self):
        self.provider = StripePaymentProvider(api_key="sk_test_123")

    @mock.patch("holistay.payments.stripe.PaymentIntent.create")
    def test_create_authorization(self, create):
        create.return_value = fake_intent(status="requires_payment_method")

        authorization = self.provider.create_authorization(
            amount=30000, currency="gbp", metadata={"hotel_id": "hotel-1", "user_id": "user-1"}
        )

        create.assert_called_once_with(
            amount=30000,
            currency="gbp",
            metadata={"hotel_id": "hotel-1", "user_id": "user-1"},
            api_key="sk_test_123",
        )
        self.assertEqual(authorization.id, "pi_123")
        self.assertEqual(authorization.client_secret, "pi_123_secret_abc")
        self.assertEqual(authorization.metadata, {"hotel_id": "hotel-1", "user_id": "user-1"})

    @mock.patch("holistay.payments.stripe.PaymentIntent.retrieve")
    def test_fetch_authorization(self, retrieve):
        retrieve.return_value = fake_intent()

        authorization = self.provider.fetch_authorization("pi_123")

        retrieve.assert_called_once_with("pi_123", api_key="sk_test_123")
        self.assertEqual(authorization.status, "succeeded")
        self.assertEqual(authorization.amount, 30000)

    @mock.patch("holistay.payments.stripe.PaymentIntent.retrieve")
    def test_missing_intent(self, retrieve):
        retrieve.side_effect = stripe.InvalidRequestError(
            "No such payment_intent: 'pi_nope'", "intent", code="resource_missing"
        )
        with self.assertRaises(AuthorizationNotFound):
            self.provider.fetch_authorization("pi_nope")

    @mock.patch("holistay.payments.stripe.PaymentIntent.create")
    def test_connection_error_is_unavailable(self, create):
        create.side_effect = stripe.APIConnectionError("Network down")
        with self.assertRaises(ProviderUnavailable):
            self.provider.create_authorization(amount=100, currency="gbp", metadata={})

    @mock.patch("holistay.payments.stripe.PaymentIntent.create")
    def test_bad_request_is_rejected(self, create):
        create.side_effect = stripe.InvalidRequestError("Amount must be at least 30 pence", "amount")
        with self.assertRaises(ProviderRejected):
            self.provider.create_authorization(amount=1, currency="gbp", metadata={})


class TestMailer(unittest.TestCase):

    def test_smtp_without_credentials(self):
        mailer = SmtpMailer("smtp.example.com", 587, "", "", "")
        with self.assertRaises(EmailDeliveryError):
            mailer.send("a@example.com", "Hi", "<p>Hi</p>")

    @mock.patch("holistay.mailer.smtplib.SMTP")
    def test_smtp_failure_raises(self, smtp):
        smtp.return_value.__enter__.return_value.sendmail.side_effect = smtplib.SMTPException("boom")
        mailer = SmtpMailer("smtp.example.com", 587, "user", "pass", "from@example.com")
        with self.assertRaises(EmailDeliveryError):
            mailer.send("a@example.com", "Hi", "<p>Hi</p>")

    @mock.patch("holistay.mailer.smtplib.SMTP")
    def test_smtp_send(self, smtp):
        server = smtp.return_value.__enter__.return_value
        mailer = SmtpMailer("smtp.example.com", 587, "user", "pass", "from@example.com")

        mailer.send("a@example.com", "Hi", "<p>Hi</p>")

        server.starttls.assert_called_once()
        server.login.assert_called_once_with("user", "pass")
        self.assertEqual(server.sendmail.call_args[0][:2], ("from@example.com", "a@example.com"))

    def test_backend_selection(self):
        self.assertIsInstance(create_mailer({"MAIL_BACKEND": "console"}), ConsoleMailer)
        smtp_config = {
            "MAIL_BACKEND": "smtp", "SMTP_HOST": "h", "SMTP_PORT": 25,
            "SMTP_USER": "u", "SMTP_PASSWORD": "p", "MAIL_FROM": "f@example.com",
        }
        self.assertIsInstance(create_mailer(smtp_config), SmtpMailer)
