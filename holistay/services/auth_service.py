import uuid

from flask_jwt_extended import create_access_token

from holistay.errors import EmailNotVerified, InvalidCredential, InvalidLogin
from holistay.extensions import db
from holistay.models.user import User


def authenticate_user(email, password):
    user = User.query.filter_by(email=email).first()
    if user and user.check_password(password):
        return user
    raise InvalidLogin()


def issue_access_token(user):
    # Lifetime comes from JWT_ACCESS_TOKEN_EXPIRES
    return create_access_token(identity=str(user.user_id))


def require_verified_user(user_id):
    """Load the identity behind a verified token and refuse unverified accounts."""
    user = db.session.get(User, _as_uuid(user_id))
    if not user:
        raise InvalidCredential("Unknown identity")
    if not user.is_verified:
        raise EmailNotVerified()
    return user


def get_user(user_id):
    user = db.session.get(User, _as_uuid(user_id))
    if not user:
        raise InvalidCredential("Unknown identity")
    return user


def _as_uuid(user_id):
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        raise InvalidCredential("Invalid token")
