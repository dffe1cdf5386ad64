"""Form listings through the forms provider."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.integrations.tally import TallyClient
from app.models.credential import Integration
from app.schemas.forms import FormListResponse, FormSummary
from app.services.credentials import resolve_provider_key
from app.services.security import fingerprint
from app.services.session import Identity

TallyClientFactory = Callable[[str], TallyClient]


@dataclass(slots=True)
class _CacheEntry:
    stored_at: float
    forms: list[FormSummary]


class FormCache:
    """Bounded TTL cache of provider form listings.

    Entries are keyed by a credential fingerprint so callers that resolve to
    different provider keys never share results.

    Parameters
    ----------
    ttl_seconds : float
        Entry lifetime. ``0`` disables caching.
    max_entries : int, default=256
        Capacity; the oldest entry is evicted first.
    clock : Callable[[], float], default=time.monotonic
        Time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> list[FormSummary] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return list(entry.forms)

    def set(self, key: str, forms: list[FormSummary]) -> None:
        if self.ttl_seconds <= 0:
            return
        self._entries.pop(key, None)
        self._entries[key] = _CacheEntry(stored_at=self._clock(), forms=list(forms))
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()


async def list_forms(
    session: AsyncSession,
    *,
    identity: Identity,
    cache: FormCache,
    client_factory: TallyClientFactory,
) -> FormListResponse:
    """List provider forms with the caller's resolved Tally key.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    identity : Identity
        Authenticated caller.
    cache : FormCache
        Shared listing cache.
    client_factory : TallyClientFactory
        Builds a provider client for a key.

    Returns
    -------
    FormListResponse
        Forms, credential source, and whether they came from the cache.
    """
    credential = await resolve_provider_key(session, identity, Integration.TALLY)
    cache_key = fingerprint(credential.value)
    cached = cache.get(cache_key)
    if cached is not None:
        return FormListResponse(
            forms=cached, credential_source=credential.source, cached=True
        )

    async with client_factory(credential.value) as client:
        forms = await client.list_forms()
    cache.set(cache_key, forms)
    return FormListResponse(forms=forms, credential_source=credential.source)
