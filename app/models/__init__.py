"""ORM models."""

from app.models.audit import AuditLog
from app.models.credential import ApiCredential, Integration
from app.models.user import Role, User

__all__ = [
    "ApiCredential",
    "AuditLog",
    "Integration",
    "Role",
    "User",
]
