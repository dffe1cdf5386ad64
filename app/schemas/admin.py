"""Admin-facing schemas."""

from datetime import datetime
from uuid import UUID

from app.schemas.common import APIModel


class AuditResponse(APIModel):
    """Audit log event."""

    id: UUID
    actor_email: str
    action: str
    resource_type: str
    resource_id: str
    event_metadata: dict[str, str | int | float | None]
    timestamp: datetime
