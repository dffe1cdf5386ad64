"""Signed session tokens and session cookies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import jwt

from app.config import get_settings
from app.errors import ConfigurationError, InvalidSessionError
from app.models.user import Role

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
LEGACY_COOKIE = "auth-token"
LEGACY_COOKIE_VALUE = "authenticated"
SESSION_TTL = timedelta(days=7)
JWT_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "email", "role", "iat", "nbf", "exp"]


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated caller carried by a session token."""

    subject_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


LEGACY_ADMIN = Identity(
    subject_id="legacy-admin", email="admin@admin.com", role=Role.ADMIN
)


class SessionAuthority:
    """Issue and verify HS256 session tokens.

    Parameters
    ----------
    secret : bytes
        HMAC signing key.
    ttl : timedelta, default=SESSION_TTL
        Token lifetime.
    """

    def __init__(self, secret: bytes, ttl: timedelta = SESSION_TTL) -> None:
        if not secret:
            raise ConfigurationError("Session signing secret is empty")
        self._secret = secret
        self.ttl = ttl

    def issue(self, identity: Identity, *, issued_at: datetime | None = None) -> str:
        """Sign a session token for an already authenticated identity.

        Parameters
        ----------
        identity : Identity
            Caller whose password has already been verified.
        issued_at : datetime | None, default=None
            Issue time. Defaults to now.

        Returns
        -------
        str
            Compact signed token.
        """
        iat = int((issued_at or datetime.now(timezone.utc)).timestamp())
        claims: dict[str, Any] = {
            "sub": identity.subject_id,
            "email": identity.email,
            "role": identity.role.value,
            "iat": iat,
            "nbf": iat,
            "exp": iat + int(self.ttl.total_seconds()),
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> Identity:
        """Verify a token and return the identity it carries.

        Parameters
        ----------
        token : str
            Token from the session cookie.

        Returns
        -------
        Identity
            Embedded subject, email and role.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
                leeway=0,
            )
        except jwt.PyJWTError as exc:
            raise InvalidSessionError("Invalid or expired session token") from exc

        try:
            role = Role(claims["role"])
        except ValueError as exc:
            raise InvalidSessionError("Session token carries unknown role") from exc
        subject_id, email = claims["sub"], claims["email"]
        if not isinstance(subject_id, str) or not isinstance(email, str):
            raise InvalidSessionError("Session token has malformed claims")
        return Identity(subject_id=subject_id, email=email, role=role)


@lru_cache(maxsize=1)
def session_authority() -> SessionAuthority:
    """Return the cached session authority bound to settings.

    Returns
    -------
    SessionAuthority
        Authority signing with the configured secret.
    """
    settings = get_settings()
    if settings.jwt_secret is not None and settings.jwt_secret.get_secret_value():
        secret = settings.jwt_secret.get_secret_value()
    elif (
        settings.encryption_key is not None
        and settings.encryption_key.get_secret_value()
    ):
        logger.warning(
            "SURVEY_DESK_JWT_SECRET is not set; signing sessions with the "
            "encryption key"
        )
        secret = settings.encryption_key.get_secret_value()
    else:
        raise ConfigurationError(
            "SURVEY_DESK_JWT_SECRET or SURVEY_DESK_ENCRYPTION_KEY is required"
        )
    return SessionAuthority(secret.encode("utf-8"))


def session_cookie_kwargs(token: str) -> dict[str, Any]:
    return {
        "key": SESSION_COOKIE,
        "value": token,
        "max_age": int(SESSION_TTL.total_seconds()),
        "httponly": True,
        "secure": get_settings().cookie_secure,
        "samesite": "lax",
        "path": "/",
    }


def clear_session_cookie_kwargs() -> dict[str, Any]:
    return {**session_cookie_kwargs(""), "max_age": 0}


def legacy_cookie_kwargs(value: str = LEGACY_COOKIE_VALUE) -> dict[str, Any]:
    return {
        **session_cookie_kwargs(value),
        "key": LEGACY_COOKIE,
        "max_age": 0 if not value else int(SESSION_TTL.total_seconds()),
    }
