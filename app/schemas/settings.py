"""Account settings schemas."""

from app.schemas.common import APIModel


class ApiKeysUpdateRequest(APIModel):
    """Per-integration key changes.

    Omit a field to keep the stored key, send ``null`` or ``""`` to clear it.
    """

    tally_api_key: str | None = None
    openai_api_key: str | None = None


class KeyStatus(APIModel):
    """Masked view of one stored key."""

    present: bool
    last4: str | None = None


class ApiKeysResponse(APIModel):
    """Masked view of all stored keys."""

    tally: KeyStatus
    openai: KeyStatus
