"""Seed console users through the admin API."""

from __future__ import annotations

import os
from dataclasses import dataclass

import anyio
import httpx


@dataclass(frozen=True, slots=True)
class UserSeed:
    """User seed definition.

    Attributes
    ----------
    email : str
        Login email.
    name : str
        Display name.
    role : str
        ``ADMIN`` or ``USER``.
    password_env_var : str
        Environment variable holding the user's password.
    """

    email: str
    name: str
    role: str
    password_env_var: str


USERS: tuple[UserSeed, ...] = (
    UserSeed(
        email="admin@admin.de",
        name="Administrator",
        role="ADMIN",
        password_env_var="SEED_ADMIN_PASSWORD",
    ),
    UserSeed(
        email="user@user.de",
        name="Test User",
        role="USER",
        password_env_var="SEED_USER_PASSWORD",
    ),
)


async def login(client: httpx.AsyncClient, *, email: str, password: str) -> None:
    """Log in and keep the session cookie on the client.

    Parameters
    ----------
    client : httpx.AsyncClient
        API client; its cookie jar receives the session.
    email : str
        Administrator email.
    password : str
        Administrator password.

    Returns
    -------
    None
        Raises if the login is rejected.
    """
    response = await client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )
    response.raise_for_status()


async def ensure_user(client: httpx.AsyncClient, user: UserSeed, password: str) -> bool:
    """Create a user unless the email is already taken.

    Parameters
    ----------
    client : httpx.AsyncClient
        Authenticated admin API client.
    user : UserSeed
        User definition.
    password : str
        Initial password.

    Returns
    -------
    bool
        Whether a new user was created.
    """
    response = await client.post(
        "/api/users",
        json={
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "password": password,
        },
    )
    if response.status_code == 409:
        return False
    response.raise_for_status()
    return True


async def main() -> None:
    """Seed users from environment variables.

    Returns
    -------
    None
        Seeds configured users and prints a short summary.
    """
    base_url = os.environ.get("SURVEY_DESK_BASE_URL", "http://127.0.0.1:8000")
    admin_email = os.environ.get("SURVEY_DESK_ADMIN_EMAIL", "admin@admin.com")
    admin_password = os.environ.get("SURVEY_DESK_ADMIN_PASSWORD")
    if not admin_password:
        raise SystemExit("SURVEY_DESK_ADMIN_PASSWORD is required")

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        await login(client, email=admin_email, password=admin_password)
        for user in USERS:
            password = os.environ.get(user.password_env_var)
            if not password:
                continue
            created = await ensure_user(client, user, password)
            print(f"{'created' if created else 'exists '} {user.email} ({user.role})")


if __name__ == "__main__":
    anyio.run(main)
