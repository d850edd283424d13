"""
Request bodies, validated once at the HTTP boundary so the services
below only ever see typed data.
"""

from datetime import date
from typing import List, Literal, Optional

from flask import request
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from holistay.errors import ValidationFailed

EMAIL_REGEX = r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$'

# bcrypt refuses longer secrets
PASSWORD_MAX_BYTES = 72


def check_password_length(value):
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class RequestSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterRequest(RequestSchema):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_REGEX, max_length=255)
    password: str = Field(min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_length(value)


class LoginRequest(RequestSchema):
    email: str = Field(pattern=EMAIL_REGEX)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_length(value)


class VerifyEmailRequest(RequestSchema):
    email: str = Field(pattern=EMAIL_REGEX)
    # Compared verbatim against the stored code
    otp: str = Field(min_length=1)


class ResendOtpRequest(RequestSchema):
    email: str = Field(pattern=EMAIL_REGEX)


class PaymentIntentRequest(RequestSchema):
    number_of_nights: int = Field(ge=1)


class BookingRequest(RequestSchema):
    payment_intent_id: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_REGEX)
    adult_count: int = Field(ge=1)
    child_count: int = Field(default=0, ge=0)
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class HotelSearchQuery(RequestSchema):
    destination: Optional[str] = None
    adult_count: Optional[int] = Field(default=None, ge=0)
    child_count: Optional[int] = Field(default=None, ge=0)
    facilities: List[str] = []
    types: List[str] = []
    stars: List[int] = []
    max_price: Optional[float] = Field(default=None, ge=0)
    sort_option: Optional[Literal["starRating", "pricePerNightAsc", "pricePerNightDesc"]] = None
    page: int = Field(default=1, ge=1)


def _format_errors(error):
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]) or "body",
            "message": err["msg"],
        }
        for err in error.errors()
    ]


def validate(schema, data):
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(details=_format_errors(e)) from e


def parse_body(schema):
    """Validate the current request's JSON body against ``schema``."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return validate(schema, data)


def parse_search_args(args):
    data = {
        key: args.get(key)
        for key in ("destination", "adult_count", "child_count", "max_price", "sort_option", "page")
        if args.get(key) not in (None, "")
    }
    for key in ("facilities", "types", "stars"):
        values = [v for v in args.getlist(key) if v]
        if values:
            data[key] = values
    return validate(HotelSearchQuery, data)
