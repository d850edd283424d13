"""
Domain errors.

Every error carries a stable machine-readable ``error_code`` and a
human-readable message. The app factory renders them as
``{"success": false, "error_code": ..., "message": ...}``.
"""


class HoliStayError(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"
    message = "Something went wrong"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self):
        payload = {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


# --- Identity boundary --------------------------------------------------

class Unauthenticated(HoliStayError):
    status_code = 401
    error_code = "UNAUTHENTICATED"
    message = "Authentication required"


class InvalidCredential(HoliStayError):
    status_code = 401
    error_code = "INVALID_CREDENTIAL"
    message = "Invalid token"


class InvalidLogin(HoliStayError):
    status_code = 401
    error_code = "INVALID_LOGIN"
    message = "Invalid email or password"


class EmailNotVerified(HoliStayError):
    status_code = 403
    error_code = "EMAIL_NOT_VERIFIED"
    message = "Email address has not been verified"


class ValidationFailed(HoliStayError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    message = "Invalid request body"


# --- OTP state machine --------------------------------------------------

class DuplicateIdentity(HoliStayError):
    status_code = 409
    error_code = "DUPLICATE_IDENTITY"
    message = "User already exists"


class IdentityNotFound(HoliStayError):
    status_code = 404
    error_code = "USER_NOT_FOUND"
    message = "User not found"


class AlreadyVerified(HoliStayError):
    status_code = 409
    error_code = "ALREADY_VERIFIED"
    message = "Email already verified"


class NoChallengeIssued(HoliStayError):
    status_code = 400
    error_code = "NO_CHALLENGE_ISSUED"
    message = "OTP not generated for this user"


class CodeMismatch(HoliStayError):
    status_code = 400
    error_code = "CODE_MISMATCH"
    message = "Invalid OTP"


class ChallengeExpired(HoliStayError):
    status_code = 400
    error_code = "CHALLENGE_EXPIRED"
    message = "OTP expired"


# --- Booking / payment reconciliation -----------------------------------

class HotelNotFound(HoliStayError):
    status_code = 404
    error_code = "HOTEL_NOT_FOUND"
    message = "Hotel not found"


class AuthorizationNotFound(HoliStayError):
    status_code = 404
    error_code = "AUTHORIZATION_NOT_FOUND"
    message = "Payment intent not found"


class ContextMismatch(HoliStayError):
    status_code = 400
    error_code = "CONTEXT_MISMATCH"
    message = "Payment intent mismatch"


class PaymentNotSucceeded(HoliStayError):
    status_code = 402
    error_code = "PAYMENT_NOT_SUCCEEDED"
    message = "Payment intent not succeeded"

    def __init__(self, status):
        super().__init__(f"Payment intent not succeeded. Status: {status}", details={"status": status})
        self.status = status


class BookingAlreadyConfirmed(HoliStayError):
    status_code = 409
    error_code = "BOOKING_ALREADY_CONFIRMED"
    message = "A booking already exists for this payment intent"


class IntentIncomplete(HoliStayError):
    status_code = 502
    error_code = "INTENT_INCOMPLETE"
    message = "Error creating payment intent"


# --- Infrastructure -----------------------------------------------------

class ProviderUnavailable(HoliStayError):
    status_code = 503
    error_code = "PROVIDER_UNAVAILABLE"
    message = "Payment provider unavailable"


class ProviderRejected(HoliStayError):
    status_code = 502
    error_code = "PROVIDER_REJECTED"
    message = "Payment provider rejected the request"


class EmailDeliveryError(HoliStayError):
    status_code = 502
    error_code = "EMAIL_DELIVERY_FAILED"
    message = "Failed to send email"
