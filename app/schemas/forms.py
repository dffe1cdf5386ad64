"""Forms provider schemas."""

from datetime import datetime

from app.schemas.common import APIModel


class FormSummary(APIModel):
    """Provider form mapped to the console's listing shape."""

    id: str
    title: str
    description: str = ""
    status: str
    url: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    responses: int = 0
    views: int = 0


class FormListResponse(APIModel):
    """Form listing with the credential source that fetched it."""

    forms: list[FormSummary]
    credential_source: str
    cached: bool = False
