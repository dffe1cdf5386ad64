"""Provider credential resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import DecryptionError, MissingCredentialError
from app.models.credential import Integration
from app.services.session import Identity
from app.services.vault import decrypt_secret, get_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedCredential:
    """Provider key chosen for an outbound call."""

    value: str
    source: Literal["user", "server"]

    def __repr__(self) -> str:
        return f"ResolvedCredential(value='***', source={self.source!r})"


def _server_key(integration: Integration) -> SecretStr | None:
    settings = get_settings()
    if integration is Integration.TALLY:
        return settings.tally_api_key
    return settings.openai_api_key


async def resolve_provider_key(
    session: AsyncSession, identity: Identity, integration: Integration
) -> ResolvedCredential:
    """Choose the key to use when calling a provider for a caller.

    The caller's own stored key wins. A stored key that cannot be decrypted
    is skipped, and the server-wide key from settings is used instead.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    identity : Identity
        Authenticated caller.
    integration : Integration
        Provider being called.

    Returns
    -------
    ResolvedCredential
        Plaintext key and where it came from.
    """
    credentials = await get_credentials(session, identity.email)
    encrypted = credentials.get_secret(integration) if credentials else None
    if encrypted is not None:
        try:
            return ResolvedCredential(value=decrypt_secret(encrypted), source="user")
        except DecryptionError:
            logger.warning(
                "Stored %s key for %s is unreadable; trying server key",
                integration.value,
                identity.email,
            )

    server_key = _server_key(integration)
    if server_key is not None and server_key.get_secret_value():
        return ResolvedCredential(value=server_key.get_secret_value(), source="server")
    raise MissingCredentialError(integration.value)
