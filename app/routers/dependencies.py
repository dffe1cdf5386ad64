"""Shared router helpers."""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.integrations.tally import TallyClient
from app.services.forms import FormCache, TallyClientFactory


async def commit_session(session: AsyncSession) -> None:
    """Commit the current transaction.

    Parameters
    ----------
    session : AsyncSession
        Active database session.

    Returns
    -------
    None
        Commits current transaction.
    """
    await session.commit()


def get_form_cache(request: Request) -> FormCache:
    """Return the application-wide form listing cache.

    Parameters
    ----------
    request : Request
        Incoming request.

    Returns
    -------
    FormCache
        Cache created in the application lifespan.
    """
    return request.app.state.form_cache


def get_tally_client_factory() -> TallyClientFactory:
    """Return a factory building Tally clients from settings.

    Returns
    -------
    TallyClientFactory
        Callable mapping an API key to a client.
    """
    base_url = get_settings().tally_api_base

    def factory(api_key: str) -> TallyClient:
        return TallyClient(api_key=api_key, base_url=base_url)

    return factory
