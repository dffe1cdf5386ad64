"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

import app.models  # noqa: F401
from app.config import get_settings
from app.database import SessionLocal, create_schema, engine
from app.errors import (
    ConfigurationError,
    Forbidden,
    MissingCredentialError,
    ProviderError,
)
from app.logging_config import configure_logging
from app.routers.admin import router as admin_router
from app.routers.auth import router as auth_router
from app.routers.forms import router as forms_router
from app.routers.settings import router as settings_router
from app.routers.users import router as users_router
from app.services.forms import FormCache
from app.services.users import ensure_initial_admin

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Configure logging, create the schema, and seed the first admin.

    Yields
    ------
    None
        Runs the application lifespan.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    if settings.encryption_key is None:
        logger.error(
            "SURVEY_DESK_ENCRYPTION_KEY is not set; API key storage will fail"
        )
    await create_schema(engine)
    async with SessionLocal() as session:
        await ensure_initial_admin(
            session,
            email=settings.initial_admin_email,
            password=(
                settings.initial_admin_password.get_secret_value()
                if settings.initial_admin_password
                else None
            ),
        )
    application.state.form_cache = FormCache(settings.form_cache_ttl_seconds)
    yield
    application.state.form_cache.clear()


async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server configuration error"},
    )


async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    _ = exc
    logger.info("Forbidden: non-admin caller on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Admin access required"},
    )


async def missing_credential_handler(
    request: Request, exc: MissingCredentialError
) -> JSONResponse:
    _ = request
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "integration": exc.integration},
    )


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    logger.warning(
        "Forms provider error on %s: %s (status %s)",
        request.url.path,
        exc,
        exc.status_code,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Forms provider request failed"},
    )


app = FastAPI(title="Survey Desk", lifespan=lifespan)
app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(Forbidden, forbidden_handler)
app.add_exception_handler(MissingCredentialError, missing_credential_handler)
app.add_exception_handler(ProviderError, provider_error_handler)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(settings_router)
app.include_router(forms_router)
app.include_router(admin_router)
