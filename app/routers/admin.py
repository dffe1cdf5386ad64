"""Admin audit routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models.audit import AuditLog
from app.schemas.admin import AuditResponse
from app.services.auth import require_admin
from app.services.session import Identity

router = APIRouter(prefix="/api/audit", tags=["admin"])


@router.get("", response_model=list[AuditResponse])
async def list_audit_events(
    _: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    action: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[AuditResponse]:
    """List audit events, newest first."""
    query = select(AuditLog)
    if action is not None:
        query = query.where(AuditLog.action == action)
    result = await session.execute(
        query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [AuditResponse.model_validate(row) for row in result.scalars().all()]
