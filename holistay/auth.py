"""
Identity token verification.

A bearer credential may arrive in the ``auth_token`` cookie or in an
``Authorization: Bearer <token>`` header. Sources are tried in a fixed
order (cookie first) and the first one present is the one verified.
"""

from functools import wraps

import jwt as pyjwt
from flask import current_app, g, request
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from holistay.errors import InvalidCredential, Unauthenticated
from holistay.extensions import BLOCKLIST


class CookieCredentialSource:
    def __init__(self, cookie_name):
        self.cookie_name = cookie_name

    def __call__(self, req):
        return req.cookies.get(self.cookie_name) or None


class BearerHeaderCredentialSource:
    def __init__(self, header_name="Authorization"):
        self.header_name = header_name

    def __call__(self, req):
        header = req.headers.get(self.header_name, "")
        parts = header.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
        return None


class TokenVerifier:

    def __init__(self, sources):
        self.sources = tuple(sources)

    @classmethod
    def from_config(cls, config):
        return cls([
            CookieCredentialSource(config["JWT_ACCESS_COOKIE_NAME"]),
            BearerHeaderCredentialSource(config.get("JWT_HEADER_NAME", "Authorization")),
        ])

    def extract(self, req):
        for source in self.sources:
            credential = source(req)
            if credential:
                return credential
        return None

    def decode(self, raw_credential):
        """
        Decode ``raw_credential`` and return its claims. Raises
        InvalidCredential with a reason for expired, badly signed, malformed
        or revoked tokens.
        """
        try:
            claims = decode_token(raw_credential)
        except pyjwt.ExpiredSignatureError:
            raise InvalidCredential("Token expired")
        except pyjwt.InvalidSignatureError:
            raise InvalidCredential("Invalid token signature")
        except pyjwt.DecodeError:
            raise InvalidCredential("Malformed token")
        except (pyjwt.InvalidTokenError, JWTExtendedException):
            raise InvalidCredential("Invalid token")

        if claims.get("type") != "access":
            raise InvalidCredential("Invalid token type")
        if claims.get("jti") in BLOCKLIST:
            raise InvalidCredential("Token has been revoked")
        return claims

    def verify(self, raw_credential):
        """Return the user id ``raw_credential`` was issued for."""
        claims = self.decode(raw_credential)
        identity = claims.get(current_app.config.get("JWT_IDENTITY_CLAIM", "sub"))
        if not identity:
            raise InvalidCredential("Invalid token")
        return identity

    def revoke(self, raw_credential):
        BLOCKLIST.add(self.decode(raw_credential)["jti"])

    def authenticate(self, req):
        raw_credential = self.extract(req)
        if raw_credential is None:
            raise Unauthenticated(
                "Authentication required",
                details="No token provided in cookies or Authorization header",
            )
        return self.verify(raw_credential)


def get_token_verifier():
    return current_app.extensions["token_verifier"]


def token_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.user_id = get_token_verifier().authenticate(request)
        return fn(*args, **kwargs)
    return wrapper


def current_user_id():
    return g.user_id
