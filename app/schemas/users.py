"""User-management schemas."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import Field, StringConstraints

from app.models.user import Role
from app.schemas.common import APIModel

EmailText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=3, max_length=320)
]


class UserCreateRequest(APIModel):
    """Create a console user."""

    email: EmailText
    password: str = Field(min_length=1)
    name: str | None = Field(default=None, max_length=255)
    role: Role = Role.USER


class UserUpdateRequest(APIModel):
    """Partial user update; omitted fields are left untouched."""

    email: EmailText | None = None
    name: str | None = Field(default=None, max_length=255)
    role: Role | None = None
    password: str | None = None


class UserResponse(APIModel):
    """User metadata without the password hash."""

    id: UUID
    email: str
    name: str | None
    role: Role
    created_at: datetime
    updated_at: datetime
