"""Pytest fixtures."""

import base64
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings
from app.database import create_schema, get_session
from app.main import app
from app.models.user import Role, User
from app.services.forms import FormCache
from app.services.security import hash_password
from app.services.session import session_authority
from app.services.vault import _vault

TEST_ENCRYPTION_KEY = base64.b64encode(bytes(range(32))).decode("ascii")
TEST_JWT_SECRET = "test-session-signing-secret-0123456789abcdef"

ADMIN_EMAIL = "admin@admin.com"
ADMIN_PASSWORD = "admin123"
USER_EMAIL = "user@user.de"
USER_PASSWORD = "user123"


def _clear_caches() -> None:
    get_settings.cache_clear()
    _vault.cache_clear()
    session_authority.cache_clear()


def set_cookie_value(response: httpx.Response, name: str) -> str:
    """Return the value a response sets for a cookie.

    Parameters
    ----------
    response : httpx.Response
        Response carrying ``Set-Cookie`` headers.
    name : str
        Cookie name.

    Returns
    -------
    str
        Raw cookie value.
    """
    for header in response.headers.get_list("set-cookie"):
        key, _, rest = header.partition("=")
        if key == name:
            return rest.split(";", 1)[0]
    raise AssertionError(f"Response did not set cookie {name!r}")


@pytest.fixture(autouse=True)
def _configure_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset cached settings and point to test key material.

    Parameters
    ----------
    monkeypatch : pytest.MonkeyPatch
        Environment monkeypatch helper.

    Yields
    ------
    None
        Applies environment overrides for each test.
    """
    _clear_caches()
    monkeypatch.setenv("SURVEY_DESK_ENVIRONMENT", "test")
    monkeypatch.setenv("SURVEY_DESK_ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
    monkeypatch.setenv("SURVEY_DESK_JWT_SECRET", TEST_JWT_SECRET)
    for name in (
        "SURVEY_DESK_LEGACY_AUTH_ENABLED",
        "SURVEY_DESK_TALLY_API_KEY",
        "SURVEY_DESK_OPENAI_API_KEY",
        "SURVEY_DESK_INITIAL_ADMIN_PASSWORD",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    _clear_caches()


@pytest.fixture()
def cookie_value() -> Callable[[httpx.Response, str], str]:
    """Return the ``Set-Cookie`` parsing helper."""
    return set_cookie_value


@pytest.fixture()
def reset_caches() -> Callable[[], None]:
    """Return a helper that drops cached settings, vault and authority.

    Returns
    -------
    Callable[[], None]
        Call after changing environment variables inside a test.
    """
    return _clear_caches


@pytest.fixture()
async def session_factory(
    tmp_path: Path,
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Create a SQLite-backed session factory.

    Parameters
    ----------
    tmp_path : Path
        Temporary directory for test database.

    Yields
    ------
    async_sessionmaker[AsyncSession]
        Factory bound to a fresh schema.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", future=True
    )
    await create_schema(engine)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture()
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Create a test HTTP client backed by SQLite.

    Parameters
    ----------
    session_factory : async_sessionmaker[AsyncSession]
        Test database session factory.

    Yields
    ------
    AsyncClient
        Configured test client.
    """

    async def _override_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    app.state.form_cache = FormCache(ttl_seconds=300)
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://testserver",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[User]]:
    """Return a helper that inserts a user directly.

    Parameters
    ----------
    session_factory : async_sessionmaker[AsyncSession]
        Test database session factory.

    Returns
    -------
    Callable[..., Awaitable[User]]
        ``await make_user(email, password, role=..., name=...)``.
    """

    async def _make_user(
        email: str,
        password: str,
        *,
        role: Role = Role.USER,
        name: str | None = None,
    ) -> User:
        async with session_factory() as session:
            user = User(
                email=email,
                name=name,
                password_hash=hash_password(password),
                role=role,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest.fixture()
async def admin_user(make_user: Callable[..., Awaitable[User]]) -> User:
    """Insert the default administrator."""
    return await make_user(
        ADMIN_EMAIL, ADMIN_PASSWORD, role=Role.ADMIN, name="Administrator"
    )


@pytest.fixture()
async def regular_user(make_user: Callable[..., Awaitable[User]]) -> User:
    """Insert a non-admin user."""
    return await make_user(USER_EMAIL, USER_PASSWORD, name="Test User")


@pytest.fixture()
def login(client: AsyncClient) -> Callable[[str, str], Awaitable[dict[str, str]]]:
    """Return a helper that logs in and yields request headers.

    Parameters
    ----------
    client : AsyncClient
        Test HTTP client.

    Returns
    -------
    Callable[[str, str], Awaitable[dict[str, str]]]
        ``await login(email, password)`` returning a ``Cookie`` header.
    """

    async def _login(email: str, password: str) -> dict[str, str]:
        response = await client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Cookie": f"session={set_cookie_value(response, 'session')}"}

    return _login
