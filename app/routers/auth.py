"""Login, logout, and session probe routes."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models.user import User
from app.routers.dependencies import commit_session
from app.schemas.auth import AuthCheckResponse, LoginRequest, LoginResponse, SessionUser
from app.schemas.common import MessageResponse
from app.services.audit import log_event
from app.services.auth import resolve_current_user
from app.services.session import (
    Identity,
    clear_session_cookie_kwargs,
    legacy_cookie_kwargs,
    session_authority,
    session_cookie_kwargs,
)
from app.services.users import authenticate, identity_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """Verify credentials and set the session cookie."""
    user = await authenticate(session, email=payload.email, password=payload.password)
    if user is None:
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    identity = identity_for(user)
    token = session_authority().issue(identity)
    await log_event(
        session,
        actor=identity,
        action="user_logged_in",
        resource_type="user",
        resource_id=identity.subject_id,
    )
    await commit_session(session)
    response.set_cookie(**session_cookie_kwargs(token))
    return LoginResponse(user=_session_user(identity, user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Expire the session cookies.

    Issued tokens stay valid until their expiry; only the browser copy is
    dropped.
    """
    response.set_cookie(**clear_session_cookie_kwargs())
    response.set_cookie(**legacy_cookie_kwargs(""))
    return MessageResponse(message="Logged out")


@router.get("/check", response_model=AuthCheckResponse)
async def check(
    identity: Identity | None = Depends(resolve_current_user),
    session: AsyncSession = Depends(get_session),
) -> AuthCheckResponse:
    """Report whether the caller holds a valid session."""
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    user = await _load_user(session, identity)
    return AuthCheckResponse(authenticated=True, user=_session_user(identity, user))


async def _load_user(session: AsyncSession, identity: Identity) -> User | None:
    try:
        user_id = UUID(identity.subject_id)
    except ValueError:
        return None
    return await session.get(User, user_id)


def _session_user(identity: Identity, user: User | None) -> SessionUser:
    return SessionUser(
        id=identity.subject_id,
        email=identity.email,
        name=user.name if user is not None else None,
        role=identity.role,
    )
