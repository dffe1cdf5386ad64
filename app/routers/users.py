"""Admin user-management routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models.user import User
from app.routers.dependencies import commit_session
from app.schemas.common import MessageResponse
from app.schemas.updates import Cleared, SetTo, field_update
from app.schemas.users import UserCreateRequest, UserResponse, UserUpdateRequest
from app.services.audit import log_event
from app.services.auth import require_admin
from app.services.security import hash_password
from app.services.session import Identity
from app.services.vault import delete_credentials, move_credentials

router = APIRouter(prefix="/api/users", tags=["users"])


async def _get_user_or_404(session: AsyncSession, user_id: UUID) -> User:
    """Return a user or raise 404.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    user_id : UUID
        User identifier.

    Returns
    -------
    User
        Matching user row.
    """
    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def _ensure_email_available(
    session: AsyncSession, *, email: str, exclude_id: UUID | None = None
) -> None:
    """Ensure no other user already has an email.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    email : str
        Requested email.
    exclude_id : UUID | None, default=None
        User being updated, allowed to keep its own email.

    Returns
    -------
    None
        Raises on conflict.
    """
    query = select(User.id).where(func.lower(User.email) == email.strip().lower())
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await session.execute(query)
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[UserResponse]:
    """List users, newest first."""
    result = await session.execute(
        select(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [UserResponse.model_validate(row) for row in result.scalars().all()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreateRequest,
    admin: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Create a user."""
    await _ensure_email_available(session, email=payload.email)
    user = User(
        email=payload.email.strip(),
        name=payload.name,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    session.add(user)
    await session.flush()
    await log_event(
        session,
        actor=admin,
        action="user_created",
        resource_type="user",
        resource_id=str(user.id),
        metadata={"email": user.email, "role": user.role.value},
    )
    await commit_session(session)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    _: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Return one user."""
    return UserResponse.model_validate(await _get_user_or_404(session, user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    payload: UserUpdateRequest,
    admin: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Apply a partial update to a user.

    Role changes take effect at the user's next login; tokens already issued
    keep the role they were signed with.
    """
    user = await _get_user_or_404(session, user_id)
    changed: list[str] = []

    email = field_update(payload, "email", clearable=False)
    if isinstance(email, SetTo):
        await _ensure_email_available(session, email=email.value, exclude_id=user.id)
        await move_credentials(
            session, old_email=user.email, new_email=email.value.strip()
        )
        user.email = email.value.strip()
        changed.append("email")

    name = field_update(payload, "name")
    if isinstance(name, SetTo):
        user.name = name.value
        changed.append("name")
    elif isinstance(name, Cleared):
        user.name = None
        changed.append("name")

    role = field_update(payload, "role", clearable=False)
    if isinstance(role, SetTo):
        user.role = role.value
        changed.append("role")

    password = field_update(payload, "password", clearable=False)
    if isinstance(password, SetTo):
        user.password_hash = hash_password(password.value)
        changed.append("password")

    await session.flush()
    await log_event(
        session,
        actor=admin,
        action="user_updated",
        resource_type="user",
        resource_id=str(user.id),
        metadata={"fields": ",".join(changed)},
    )
    await commit_session(session)
    await session.refresh(user)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    admin: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete a user other than the caller."""
    if admin.subject_id == str(user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )
    user = await _get_user_or_404(session, user_id)
    await delete_credentials(session, user.email)
    await session.delete(user)
    await log_event(
        session,
        actor=admin,
        action="user_deleted",
        resource_type="user",
        resource_id=str(user_id),
        metadata={"email": user.email},
    )
    await commit_session(session)
    return MessageResponse(message="User deleted successfully")
