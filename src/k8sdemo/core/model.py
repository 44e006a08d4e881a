"""DataItem model and its fixed cache serialization contract.

Cached values carry no type metadata: a single DataItem is stored as the
orjson encoding of its fields, the collection view as an array of the same
objects. Decoding always goes through the DataItem schema.
"""

from __future__ import annotations

import time

import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def now_millis() -> int:
    """Current wall clock time as epoch milliseconds."""
    return int(time.time() * 1000)


class DataItem(BaseModel):
    """The cached domain entity, owned by the persistent store."""

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: str | None = Field(default=None, max_length=36)
    name: str = Field(max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    timestamp: int = Field(default_factory=now_millis)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


class DataItemUpdate(BaseModel):
    """Mutable fields accepted by an update."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(max_length=255)
    description: str | None = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


_item_list = TypeAdapter(list[DataItem])


def encode_item(item: DataItem) -> bytes:
    return orjson.dumps(item.model_dump())


def decode_item(payload: bytes) -> DataItem:
    return DataItem.model_validate(orjson.loads(payload))


def encode_items(items: list[DataItem]) -> bytes:
    return orjson.dumps([item.model_dump() for item in items])


def decode_items(payload: bytes) -> list[DataItem]:
    return _item_list.validate_python(orjson.loads(payload))
