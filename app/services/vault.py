"""Stored credential operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.crypto.vault import CredentialVault, EncryptedSecret
from app.errors import DecryptionError
from app.models.credential import ApiCredential, Integration
from app.schemas.updates import Cleared, FieldUpdate, SetTo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SecretStatus:
    """Displayable state of one stored secret."""

    present: bool
    last4: str | None = None


@lru_cache(maxsize=1)
def _vault() -> CredentialVault:
    """Return the cached vault instance.

    Returns
    -------
    CredentialVault
        Vault bound to the current settings.
    """
    key = get_settings().encryption_key
    return CredentialVault.from_encoded(key.get_secret_value() if key else None)


def encrypt_secret(plaintext: str) -> EncryptedSecret:
    """Encrypt a provider key with the configured vault.

    Parameters
    ----------
    plaintext : str
        Raw provider API key.

    Returns
    -------
    EncryptedSecret
        Value to persist.
    """
    return _vault().encrypt(plaintext)


def decrypt_secret(encrypted: EncryptedSecret) -> str:
    """Decrypt a stored provider key.

    Parameters
    ----------
    encrypted : EncryptedSecret
        Stored value.

    Returns
    -------
    str
        Raw provider API key.
    """
    return _vault().decrypt(encrypted)


def describe_secret(
    encrypted: EncryptedSecret | None, *, integration: Integration
) -> SecretStatus:
    """Summarize a stored secret without exposing it.

    A secret that fails to decrypt is reported as absent.

    Parameters
    ----------
    encrypted : EncryptedSecret | None
        Stored value, if any.
    integration : Integration
        Integration the value belongs to, for logging.

    Returns
    -------
    SecretStatus
        Presence flag and the last four characters.
    """
    if encrypted is None:
        return SecretStatus(present=False)
    try:
        plaintext = decrypt_secret(encrypted)
    except DecryptionError:
        logger.warning("Stored %s API key could not be decrypted", integration.value)
        return SecretStatus(present=False)
    return SecretStatus(present=True, last4=plaintext[-4:])


async def get_credentials(
    session: AsyncSession, user_email: str
) -> ApiCredential | None:
    """Load the credential row for a user.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    user_email : str
        Owner email.

    Returns
    -------
    ApiCredential | None
        Stored row if the user ever saved a key.
    """
    result = await session.execute(
        select(ApiCredential).where(ApiCredential.user_email == user_email)
    )
    return result.scalar_one_or_none()


async def apply_credential_updates(
    session: AsyncSession,
    *,
    user_email: str,
    updates: dict[Integration, FieldUpdate[str]],
) -> ApiCredential:
    """Encrypt, store, or clear provider keys for a user.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    user_email : str
        Owner email.
    updates : dict[Integration, FieldUpdate[str]]
        Requested change per integration.

    Returns
    -------
    ApiCredential
        Upserted credential row.
    """
    credentials = await get_credentials(session, user_email)
    if credentials is None:
        credentials = ApiCredential(user_email=user_email)
        session.add(credentials)
    for integration, update in updates.items():
        if isinstance(update, SetTo):
            credentials.set_secret(integration, encrypt_secret(update.value))
        elif isinstance(update, Cleared):
            credentials.set_secret(integration, None)
    await session.flush()
    return credentials


async def delete_credentials(session: AsyncSession, user_email: str) -> None:
    """Remove a user's stored keys.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    user_email : str
        Owner email.

    Returns
    -------
    None
        Deletes the row if one exists.
    """
    await session.execute(
        delete(ApiCredential).where(ApiCredential.user_email == user_email)
    )


async def move_credentials(
    session: AsyncSession, *, old_email: str, new_email: str
) -> None:
    """Re-key a user's stored keys after an email change.

    Any row already held under ``new_email`` belongs to no user and is dropped.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    old_email : str
        Email the keys are stored under.
    new_email : str
        Email the keys move to.

    Returns
    -------
    None
        Updates the row in place.
    """
    if old_email == new_email:
        return
    await delete_credentials(session, new_email)
    await session.execute(
        update(ApiCredential)
        .where(ApiCredential.user_email == old_email)
        .values(user_email=new_email)
    )
