"""Tagged partial updates.

A request body field is either absent (leave the stored value alone),
explicitly emptied with ``null`` or ``""`` (clear it), or carries a new value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Unchanged:
    """Field was not sent."""


@dataclass(frozen=True, slots=True)
class Cleared:
    """Field was sent empty."""


@dataclass(frozen=True, slots=True)
class SetTo(Generic[T]):
    """Field was sent with a value."""

    value: T


FieldUpdate = Union[Unchanged, SetTo[T], Cleared]

UNCHANGED = Unchanged()
CLEARED = Cleared()


def field_update(
    payload: BaseModel, name: str, *, clearable: bool = True
) -> FieldUpdate[Any]:
    """Classify one field of a partial-update payload.

    Parameters
    ----------
    payload : BaseModel
        Parsed request body.
    name : str
        Field name on the model, not its alias.
    clearable : bool, default=True
        Whether an empty value clears the field. When ``False`` an empty value
        leaves it unchanged.

    Returns
    -------
    FieldUpdate[Any]
        ``Unchanged``, ``Cleared`` or ``SetTo(value)``.
    """
    if name not in payload.model_fields_set:
        return UNCHANGED
    value = getattr(payload, name)
    if value is None or value == "":
        return CLEARED if clearable else UNCHANGED
    return SetTo(value)
