"""
OTP Service: email ownership verification.

An identity moves Unregistered -> PendingVerification -> Verified. While
pending it holds at most one challenge (otp + otp_expiry on the users row);
issuing a new one overwrites the old. A successful verify flips
is_verified and clears the challenge in the same UPDATE so a used code can
never be replayed.
"""

import secrets
from datetime import datetime, timedelta, timezone

from flask import render_template
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from holistay.errors import (
    AlreadyVerified,
    ChallengeExpired,
    CodeMismatch,
    DuplicateIdentity,
    IdentityNotFound,
    NoChallengeIssued,
)
from holistay.extensions import db
from holistay.logger import get_logger
from holistay.models.user import User

logger = get_logger("otp")

OTP_TTL = timedelta(minutes=10)


def utcnow():
    return datetime.now(timezone.utc)


def _as_utc(value):
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_otp_code():
    # 100000-999999 inclusive, so codes never start with 0
    return str(100000 + secrets.randbelow(900000))


def find_user_by_email(email):
    return User.query.filter_by(email=email).first()


def register_identity(first_name, last_name, email, password, now=None):
    """
    Create an unverified identity with a fresh challenge.
    Returns (user, code).
    """
    if find_user_by_email(email):
        raise DuplicateIdentity()

    code = generate_otp_code()
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        is_verified=False,
        otp=code,
        otp_expiry=(now or utcnow()) + OTP_TTL,
    )
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError as e:
        # Concurrent registration with the same email
        db.session.rollback()
        raise DuplicateIdentity() from e

    logger.info(f"Registered user {user.user_id}; verification challenge issued")
    return user, code


def issue_challenge(user_id, now=None):
    """Overwrite any existing challenge for an unverified user. Returns the new code."""
    code = generate_otp_code()
    result = db.session.execute(
        update(User)
        .where(User.user_id == user_id, User.is_verified.is_(False))
        .values(otp=code, otp_expiry=(now or utcnow()) + OTP_TTL)
    )
    if result.rowcount == 0:
        db.session.rollback()
        raise AlreadyVerified("Email is already verified")
    db.session.commit()

    logger.info(f"Verification challenge issued for user {user_id}")
    return code


def resend_challenge(email, now=None):
    user = find_user_by_email(email)
    if not user:
        raise IdentityNotFound()
    if user.is_verified:
        raise AlreadyVerified("Email is already verified")

    code = issue_challenge(user.user_id, now=now)
    db.session.refresh(user)
    return user, code


def verify_challenge(email, code, now=None):
    now = now or utcnow()

    user = find_user_by_email(email)
    if not user:
        raise IdentityNotFound()
    if user.is_verified:
        raise AlreadyVerified()
    if not user.otp or not user.otp_expiry:
        raise NoChallengeIssued()
    if user.otp != code:
        raise CodeMismatch()
    if now >= _as_utc(user.otp_expiry):
        raise ChallengeExpired()

    # Guarded on the code we just checked: a concurrent reissue or verify
    # leaves this matching nothing.
    result = db.session.execute(
        update(User)
        .where(User.user_id == user.user_id, User.otp == code, User.is_verified.is_(False))
        .values(is_verified=True, otp=None, otp_expiry=None)
    )
    if result.rowcount == 0:
        db.session.rollback()
        raise CodeMismatch()
    db.session.commit()
    db.session.refresh(user)

    logger.info(f"Email verified for user {user.user_id}")
    return user


def send_verification_email(mailer, user, code, resend=False):
    subject = "Resend OTP - Verify your email" if resend else "Verify your email"
    html = render_template(
        "emails/verify_email.html",
        first_name=user.first_name,
        code=code,
        ttl_minutes=int(OTP_TTL.total_seconds() // 60),
    )
    mailer.send(to=user.email, subject=subject, html=html)
