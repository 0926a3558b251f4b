"""Base entity model, weak references and status decoding helpers."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaValidationError

from admin_console.exceptions import ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
M = TypeVar("M", bound="Entity")

EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Treat naive timestamps from the upstream API as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_status(enum_cls: type[E], value: Any) -> E:
    """Map a raw status string onto its vocabulary.

    Raises ValidationError when the value is outside the vocabulary.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown {enum_cls.__name__} value: {value!r}") from None


def decode_status(enum_cls: type[E], value: Any, record_id: Any = None) -> E | None:
    """Decode a status field, degrading unknown values to the UNKNOWN member.

    Missing values stay None so callers can tell "absent" from "unrecognized".
    """
    if value is None or value == "":
        return None
    try:
        return parse_status(enum_cls, value)
    except ValidationError as e:
        logger.warning(f"Record {record_id}: {e.message}; treating as unknown")
        return enum_cls["UNKNOWN"]


class Entity(BaseModel):
    """Fields shared by every record read from the marketplace API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None or value == "":
            raise ValueError("record has no id")
        return str(value)

    @field_validator("created_at", mode="after")
    @classmethod
    def _aware_created_at(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value)

    @property
    def sort_timestamp(self) -> datetime:
        """Creation time, with undated records sorting as the oldest."""
        return self.created_at or EPOCH


class PartyRef(BaseModel):
    """Weak reference to another record: id plus a denormalized display name.

    Never implies ownership; deleting the referenced record does not touch
    the referring one.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str | None = None
    role: str | None = Field(default=None, validation_alias=AliasChoices("type", "role"))
    phone: str | None = None

    @classmethod
    def from_raw(cls, value: Any) -> "PartyRef | None":
        """Accept either a bare id string or an embedded object."""
        if value is None or value == "":
            return None
        if isinstance(value, PartyRef):
            return value
        if isinstance(value, dict):
            return cls.model_validate(value)
        return cls(id=str(value))


def decode_records(model_cls: type[M], items: Iterable[Any]) -> list[M]:
    """Decode a list payload, skipping records that cannot be decoded at all."""
    records = []
    for raw in items or []:
        try:
            records.append(model_cls.model_validate(raw))
        except SchemaValidationError as e:
            logger.warning(f"Skipping undecodable {model_cls.__name__} record: {e.error_count()} error(s)")
    return records
