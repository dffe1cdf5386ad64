"""Authentication dependencies."""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status

from app.config import get_settings
from app.errors import Forbidden, InvalidSessionError
from app.services.session import (
    LEGACY_ADMIN,
    LEGACY_COOKIE,
    LEGACY_COOKIE_VALUE,
    SESSION_COOKIE,
    Identity,
    session_authority,
)

logger = logging.getLogger(__name__)


def resolve_current_user(request: Request) -> Identity | None:
    """Resolve the caller from request cookies.

    The signed ``session`` cookie wins whenever it is present. The unsigned
    legacy ``auth-token`` cookie is consulted only when no session cookie was
    sent and ``legacy_auth_enabled`` is on.

    Parameters
    ----------
    request : Request
        Incoming request.

    Returns
    -------
    Identity | None
        Authenticated identity, or ``None`` for anonymous callers.
    """
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        try:
            return session_authority().verify(token)
        except InvalidSessionError:
            logger.debug("Rejected session cookie on %s", request.url.path)
            return None

    if request.cookies.get(LEGACY_COOKIE) == LEGACY_COOKIE_VALUE:
        if get_settings().legacy_auth_enabled:
            logger.warning(
                "Deprecated auth-token cookie accepted on %s; granting %s",
                request.url.path,
                LEGACY_ADMIN.email,
            )
            return LEGACY_ADMIN
        logger.info("Ignoring legacy auth-token cookie; legacy auth is disabled")
    return None


async def require_user(
    identity: Identity | None = Depends(resolve_current_user),
) -> Identity:
    """Require an authenticated caller.

    Parameters
    ----------
    identity : Identity | None
        Resolved caller.

    Returns
    -------
    Identity
        Authenticated caller.
    """
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return identity


async def require_admin(identity: Identity = Depends(require_user)) -> Identity:
    """Require an authenticated administrator.

    Parameters
    ----------
    identity : Identity
        Authenticated caller.

    Returns
    -------
    Identity
        Authenticated administrator.
    """
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
