"""Login and session schemas."""

from pydantic import Field

from app.models.user import Role
from app.schemas.common import APIModel


class LoginRequest(APIModel):
    """Email and password login."""

    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1)


class SessionUser(APIModel):
    """Identity exposed to the browser."""

    id: str
    email: str
    name: str | None = None
    role: Role


class LoginResponse(APIModel):
    """Successful login payload."""

    success: bool = True
    message: str = "Login successful"
    user: SessionUser


class AuthCheckResponse(APIModel):
    """Session probe payload."""

    authenticated: bool
    user: SessionUser | None = None
