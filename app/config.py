"""Runtime configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Attributes
    ----------
    app_name : str
        Human-readable application name.
    environment : {"development", "test", "production"}
        Deployment environment. Cookies are marked secure in production only.
    database_url : str
        SQLAlchemy database URL.
    encryption_key : SecretStr | None
        Base64 text decoding to the 32-byte credential encryption key.
    jwt_secret : SecretStr | None
        Session signing secret. Falls back to ``encryption_key`` when unset.
    legacy_auth_enabled : bool
        Whether the unsigned ``auth-token`` cookie is still honoured.
    initial_admin_email : str
        Email of the administrator created on first startup.
    initial_admin_password : SecretStr | None
        Password for the first administrator. No seeding when unset.
    tally_api_key : SecretStr | None
        Server-wide forms provider key used when a user has none stored.
    openai_api_key : SecretStr | None
        Server-wide LLM provider key used when a user has none stored.
    tally_api_base : str
        Forms provider base URL.
    form_cache_ttl_seconds : int
        Lifetime of cached provider form listings.
    log_level : str
        Root log level for the application loggers.
    """

    model_config = SettingsConfigDict(env_prefix="SURVEY_DESK_", extra="ignore")

    app_name: str = "Survey Desk"
    environment: Literal["development", "test", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./survey_desk.db"
    encryption_key: SecretStr | None = None
    jwt_secret: SecretStr | None = None
    legacy_auth_enabled: bool = False
    initial_admin_email: str = "admin@admin.com"
    initial_admin_password: SecretStr | None = None
    tally_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    tally_api_base: str = "https://api.tally.so"
    form_cache_ttl_seconds: int = Field(default=300, ge=0)
    log_level: str = "INFO"

    @property
    def cookie_secure(self) -> bool:
        """Return whether session cookies carry the ``Secure`` flag.

        Returns
        -------
        bool
            ``True`` in production.
        """
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings.

    Returns
    -------
    Settings
        Cached settings instance.
    """
    return Settings()
