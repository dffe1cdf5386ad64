"""Common schema primitives."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base API model with camelCase wire names and attribute validation."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(APIModel):
    """Simple message response."""

    success: bool = True
    message: str
    timestamp: datetime | None = None
