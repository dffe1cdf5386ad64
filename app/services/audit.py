"""Audit logging service."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.services.session import Identity


async def log_event(
    session: AsyncSession,
    *,
    actor: Identity,
    action: str,
    resource_type: str,
    resource_id: str,
    metadata: dict[str, str | int | float | None] | None = None,
) -> AuditLog:
    """Persist an audit event.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    actor : Identity
        Caller that performed the action.
    action : str
        Event action.
    resource_type : str
        Kind of resource touched.
    resource_id : str
        String resource identifier.
    metadata : dict[str, str | int | float | None] | None, default=None
        Additional event metadata. Never include secrets.

    Returns
    -------
    AuditLog
        Persisted audit record.
    """
    event = AuditLog(
        actor_email=actor.email,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        event_metadata=metadata or {},
    )
    session.add(event)
    await session.flush()
    return event
