"""Lookup criteria for account queries."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

from exceptions import ValidationError
from models.account import PERSISTABLE_FIELDS


@dataclass(frozen=True)
class ById:
    """Match the account with the given id."""

    id: int

    def filters(self) -> Dict[str, Any]:
        return {"id": self.id}


@dataclass(frozen=True)
class ByName:
    """Match the account with the given name."""

    name: str

    def filters(self) -> Dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class ByFields:
    """Match accounts equal on every listed field.

    Unknown fields are dropped. With no fields left every account matches.
    Values are compared with ``=``, so a None value matches no account.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)

    def filters(self) -> Dict[str, Any]:
        return {k: v for k, v in self.fields.items() if k in PERSISTABLE_FIELDS}


Criteria = Union[ById, ByName, ByFields]


def criteria_for(value: Any) -> Criteria:
    """Pick criteria from a plain value: int -> id, str -> name, mapping -> fields.

    Raises:
        ValidationError: If the value has no matching criteria.
    """
    if isinstance(value, (ById, ByName, ByFields)):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"Unsupported account criteria: {value!r}")
    if isinstance(value, int):
        return ById(value)
    if isinstance(value, str):
        return ByName(value)
    if isinstance(value, Mapping):
        return ByFields(dict(value))
    raise ValidationError(f"Unsupported account criteria: {value!r}")
