"""Async client for the Tally forms API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import anyio
import httpx

from app.errors import (
    ProviderAuthError,
    ProviderError,
    ProviderNotFoundError,
    ProviderRateLimitError,
)
from app.schemas.forms import FormSummary

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.tally.so"
PUBLIC_FORM_URL = "https://tally.so/r/{form_id}"


class TallyClient:
    """Client for the parts of the Tally API the console uses.

    Parameters
    ----------
    api_key : str
        Tally bearer key.
    base_url : str, default=DEFAULT_BASE_URL
        Tally API base URL.
    timeout : float, default=10.0
        Request timeout in seconds.
    max_retries : int, default=2
        Number of retries for transient errors.
    transport : httpx.AsyncBaseTransport | None, default=None
        Optional transport for tests.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        max_retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client.

        Returns
        -------
        None
            Releases HTTP resources.
        """
        await self._client.aclose()

    async def list_forms(self) -> list[FormSummary]:
        """List the account's forms.

        Returns
        -------
        list[FormSummary]
            Forms in the console's listing shape.
        """
        response = await self._request("GET", "/forms")
        try:
            data = response.json()
            if isinstance(data, dict):
                data = data.get("items", data.get("forms"))
            return [_form_summary(item) for item in data or []]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderError(
                "Tally returned an unexpected payload",
                status_code=response.status_code,
            ) from exc

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an HTTP request with light retry logic.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            Relative request path.
        **kwargs : Any
            Additional request arguments.

        Returns
        -------
        httpx.Response
            Successful response.
        """
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                response = await self._client.request(method, path, **kwargs)
            except httpx.HTTPError as exc:
                if attempt < self.max_retries:
                    await anyio.sleep(0.1 * (attempt + 1))
                    continue
                raise ProviderError(f"Tally request failed: {exc}") from exc

            if response.status_code < 400:
                return response
            if _is_transient_response(response) and attempt < self.max_retries:
                logger.info(
                    "Tally %s %s returned %s; retrying",
                    method,
                    path,
                    response.status_code,
                )
                await anyio.sleep(0.1 * (attempt + 1))
                continue
            raise _exception_for_response(response)
        raise ProviderError("Tally request failed")

    async def __aenter__(self) -> "TallyClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        _ = (exc_type, exc_value, traceback)
        await self.aclose()


def _form_summary(item: dict[str, Any]) -> FormSummary:
    form_id = str(item["id"])
    published = item.get("published")
    if published is None:
        published = str(item.get("status", "")).upper() == "PUBLISHED"
    return FormSummary(
        id=form_id,
        title=item.get("title") or item.get("name") or "Untitled Form",
        description=item.get("description") or "",
        status="published" if published else "draft",
        url=PUBLIC_FORM_URL.format(form_id=form_id),
        created_at=_parse_datetime(item.get("createdAt")),
        updated_at=_parse_datetime(item.get("updatedAt")),
        responses=item.get("submissionCount", item.get("numberOfSubmissions")) or 0,
        views=item.get("viewCount") or 0,
    )


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _is_transient_response(response: httpx.Response) -> bool:
    return response.status_code in {429, 502, 503, 504}


def _exception_for_response(response: httpx.Response) -> ProviderError:
    """Map an error response to a typed provider exception.

    Parameters
    ----------
    response : httpx.Response
        HTTP response.

    Returns
    -------
    ProviderError
        Typed provider error.
    """
    message = f"Tally request failed with status {response.status_code}"
    if response.status_code in {401, 403}:
        return ProviderAuthError(message, status_code=response.status_code)
    if response.status_code == 404:
        return ProviderNotFoundError(message, status_code=response.status_code)
    if response.status_code == 429:
        return ProviderRateLimitError(message, status_code=response.status_code)
    return ProviderError(message, status_code=response.status_code)
