"""Map application entity types to collection names."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Union

from ..errors import ConfigurationError

EntityRef = Union[type, str]
NamingConvention = Callable[[type], str]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def class_name(entity_type: type) -> str:
    """Use the class name verbatim, e.g. ``Person`` -> ``Person``."""

    return entity_type.__name__


def snake_case(entity_type: type) -> str:
    """Use the snake-cased class name, e.g. ``HostGroup`` -> ``host_group``."""

    return _CAMEL_BOUNDARY.sub("_", entity_type.__name__).lower()


CONVENTIONS: Mapping[str, NamingConvention] = {
    "class_name": class_name,
    "snake_case": snake_case,
}


def convention_by_name(name: str | None) -> Optional[NamingConvention]:
    """Return the naming convention registered under ``name``."""

    if not name:
        return None
    try:
        return CONVENTIONS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown collection naming convention {name!r}; expected one of {sorted(CONVENTIONS)}"
        ) from None


@dataclass
class CollectionNameResolver:
    """Resolve entity types to stable collection names.

    Lookup order is the explicit ``mapping``, then a ``__collection__`` class
    attribute, then ``convention``.  Resolved names are memoised so a type
    keeps its name for the lifetime of the resolver.  Plain strings are
    treated as collection names already.
    """

    mapping: Dict[type, str] = field(default_factory=dict)
    convention: Optional[NamingConvention] = None
    _resolved: Dict[type, str] = field(default_factory=dict, init=False, repr=False)

    def register(self, entity_type: type, name: str) -> None:
        """Bind ``entity_type`` to collection ``name``."""

        if not name:
            raise ConfigurationError("Collection name must not be empty", entity_type=entity_type.__name__)
        current = self._resolved.get(entity_type)
        if current is not None and current != name:
            raise ConfigurationError(
                f"{entity_type.__name__} already resolved to collection {current!r}",
                entity_type=entity_type.__name__,
                collection=name,
            )
        self.mapping[entity_type] = name

    def resolve(self, entity: EntityRef) -> str:
        """Return the collection name for ``entity``."""

        if isinstance(entity, str):
            if not entity:
                raise ConfigurationError("Collection name must not be empty")
            return entity
        cached = self._resolved.get(entity)
        if cached is not None:
            return cached
        name = self._lookup(entity)
        self._resolved[entity] = name
        return name

    def _lookup(self, entity_type: type) -> str:
        if entity_type in self.mapping:
            return self.mapping[entity_type]
        explicit = entity_type.__dict__.get("__collection__")
        if explicit:
            return str(explicit)
        if self.convention is not None:
            return self.convention(entity_type)
        raise ConfigurationError(
            f"No collection name configured for {entity_type.__name__}",
            entity_type=entity_type.__name__,
        )


__all__ = [
    "CONVENTIONS",
    "CollectionNameResolver",
    "EntityRef",
    "class_name",
    "convention_by_name",
    "snake_case",
]
