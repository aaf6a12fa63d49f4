"""Translate dataclass entities to store documents and back."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Mapping, Tuple, Type, TypeVar

from ..errors import ValidationError
from ..store.base import DocumentMeta

T = TypeVar("T")

_META_KEY = "arango"
SYSTEM_ATTRIBUTES = ("_id", "_key", "_rev", "_from", "_to")


def key_field() -> Any:
    """Declare a field that receives the store-assigned ``_key``."""

    return field(default=None, metadata={_META_KEY: "_key"})


def id_field() -> Any:
    """Declare a field that receives the store-assigned ``_id``."""

    return field(default=None, metadata={_META_KEY: "_id"})


def rev_field() -> Any:
    """Declare a field that echoes the ``_rev`` returned by the last operation."""

    return field(default=None, metadata={_META_KEY: "_rev"})


def from_field() -> Any:
    """Declare the ``_from`` endpoint of an edge entity."""

    return field(default=None, metadata={_META_KEY: "_from"})


def to_field() -> Any:
    """Declare the ``_to`` endpoint of an edge entity."""

    return field(default=None, metadata={_META_KEY: "_to"})


@dataclass
class EntityCodec(Generic[T]):
    """Encode and decode one dataclass type.

    System fields are declared with :func:`key_field`, :func:`id_field`,
    :func:`rev_field`, :func:`from_field` and :func:`to_field`; every other
    dataclass field is a business field stored under its own name.
    """

    entity_type: Type[T]
    business_fields: Tuple[str, ...] = field(init=False)
    system_fields: Dict[str, str] = field(init=False)

    def __post_init__(self) -> None:
        if not dataclasses.is_dataclass(self.entity_type) or not isinstance(self.entity_type, type):
            raise ValidationError(f"{self.entity_type!r} is not a dataclass type")
        business = []
        system: Dict[str, str] = {}
        for item in dataclasses.fields(self.entity_type):
            attribute = item.metadata.get(_META_KEY)
            if attribute is None:
                business.append(item.name)
            else:
                system[attribute] = item.name
        self.business_fields = tuple(business)
        self.system_fields = system

    def check(self, entity: Any) -> T:
        """Return ``entity`` if it is an instance of the bound type."""

        if not isinstance(entity, self.entity_type):
            raise ValidationError(
                f"Expected {self.entity_type.__name__}, got {type(entity).__name__}"
            )
        return entity

    def encode(self, entity: T, *, include_endpoints: bool = True) -> dict[str, Any]:
        """Return the document body for ``entity`` (business fields and endpoints)."""

        self.check(entity)
        body = {name: getattr(entity, name) for name in self.business_fields}
        if include_endpoints:
            for attribute in ("_from", "_to"):
                value = self.system_value(entity, attribute)
                if value is not None:
                    body[attribute] = value
        return body

    def build(self, data: Mapping[str, Any]) -> T:
        """Instantiate the entity from ``data``, defaulting every missing field."""

        unknown = set(data) - set(self.business_fields)
        if unknown:
            raise ValidationError(
                f"Unknown fields for {self.entity_type.__name__}: {sorted(unknown)}"
            )
        try:
            return self.entity_type(**dict(data))
        except TypeError as exc:
            raise ValidationError(f"Cannot build {self.entity_type.__name__}: {exc}") from exc

    def check_patch(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Validate a sparse update mapping against the business fields."""

        if not isinstance(patch, Mapping):
            raise ValidationError(f"Patch must be a mapping, got {type(patch).__name__}")
        unknown = set(patch) - set(self.business_fields)
        if unknown:
            raise ValidationError(
                f"Unknown fields for {self.entity_type.__name__}: {sorted(unknown)}"
            )
        return dict(patch)

    def decode(self, document: Mapping[str, Any]) -> T:
        """Build an entity from a stored document, ignoring unknown attributes."""

        values = {name: document[name] for name in self.business_fields if name in document}
        try:
            entity = self.entity_type(**values)
        except TypeError as exc:
            raise ValidationError(
                f"Stored document does not fit {self.entity_type.__name__}: {exc}",
                key=document.get("_key"),
            ) from exc
        for attribute in SYSTEM_ATTRIBUTES:
            if attribute in document:
                self.set_system_value(entity, attribute, document[attribute])
        return entity

    def system_value(self, entity: T, attribute: str) -> Any:
        name = self.system_fields.get(attribute)
        return getattr(entity, name) if name else None

    def set_system_value(self, entity: T, attribute: str, value: Any) -> None:
        name = self.system_fields.get(attribute)
        if name:
            object.__setattr__(entity, name, value)

    def apply_meta(self, entity: T, meta: DocumentMeta) -> None:
        """Echo store-assigned identity onto ``entity``."""

        self.set_system_value(entity, "_id", meta.id)
        self.set_system_value(entity, "_key", meta.key)
        self.set_system_value(entity, "_rev", meta.rev)


__all__ = [
    "EntityCodec",
    "SYSTEM_ATTRIBUTES",
    "from_field",
    "id_field",
    "key_field",
    "rev_field",
    "to_field",
]
