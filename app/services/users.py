"""User lookup, login, and first-run seeding."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role, User
from app.services.security import hash_password, verify_password
from app.services.session import Identity

logger = logging.getLogger(__name__)


def identity_for(user: User) -> Identity:
    """Build the session identity for a user row.

    Parameters
    ----------
    user : User
        Persisted user.

    Returns
    -------
    Identity
        Subject, email and role to sign into a token.
    """
    return Identity(subject_id=str(user.id), email=user.email, role=user.role)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Return a user by email.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    email : str
        Login email, compared case-insensitively.

    Returns
    -------
    User | None
        Matching user.
    """
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def authenticate(
    session: AsyncSession, *, email: str, password: str
) -> User | None:
    """Check a login attempt.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    email : str
        Submitted email.
    password : str
        Submitted plaintext password.

    Returns
    -------
    User | None
        The user when the password matches, otherwise ``None``.
    """
    user = await get_user_by_email(session, email)
    if user is None:
        # Same hashing cost as a known email.
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def ensure_initial_admin(
    session: AsyncSession, *, email: str, password: str | None
) -> User | None:
    """Create the first administrator when no users exist.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    email : str
        Administrator email.
    password : str | None
        Administrator password. Seeding is skipped when unset.

    Returns
    -------
    User | None
        Created administrator, or ``None`` when nothing was seeded.
    """
    if not password:
        return None
    count = await session.scalar(select(func.count()).select_from(User))
    if count:
        return None
    admin = User(
        email=email,
        name="Administrator",
        password_hash=hash_password(password),
        role=Role.ADMIN,
    )
    session.add(admin)
    await session.commit()
    logger.info("Created initial administrator %s", email)
    return admin


_DUMMY_HASH = hash_password("survey-desk-timing-equalizer")
