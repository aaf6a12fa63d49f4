"""Edge definitions and the orphan-aware set that groups them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Sequence, Tuple

from ..errors import ConflictError, NotFoundError, ValidationError


def _ordered_unique(names: Iterable[str]) -> Tuple[str, ...]:
    """Return ``names`` without duplicates, keeping first-seen order."""

    if isinstance(names, str):
        raise ValidationError(f"Expected a sequence of collection names, got the string {names!r}")
    seen: dict[str, None] = {}
    for name in names:
        if not isinstance(name, str) or not name:
            raise ValidationError(f"Invalid collection name: {name!r}")
        seen.setdefault(name, None)
    return tuple(seen)


@dataclass(frozen=True)
class EdgeDefinition:
    """Declare which vertex collections an edge collection may connect."""

    collection: str
    from_collections: Tuple[str, ...] = ()
    to_collections: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.collection, str) or not self.collection:
            raise ValidationError(f"Invalid edge collection name: {self.collection!r}")
        object.__setattr__(self, "from_collections", _ordered_unique(self.from_collections))
        object.__setattr__(self, "to_collections", _ordered_unique(self.to_collections))

    def vertex_collections(self) -> Tuple[str, ...]:
        """Return every endpoint collection, ``from`` side first."""

        return _ordered_unique((*self.from_collections, *self.to_collections))

    def to_payload(self) -> dict[str, Any]:
        """Return the ``{collection, from, to}`` payload."""

        return {
            "collection": self.collection,
            "from": list(self.from_collections),
            "to": list(self.to_collections),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EdgeDefinition":
        """Build a definition from its ``{collection, from, to}`` payload."""

        try:
            return cls(
                collection=payload["collection"],
                from_collections=tuple(payload.get("from", ())),
                to_collections=tuple(payload.get("to", ())),
            )
        except KeyError as exc:
            raise ValidationError(f"Edge definition payload is missing {exc}") from exc


@dataclass(frozen=True)
class EdgeDefinitionSet:
    """Immutable view of a graph's edge definitions and orphan collections.

    Every operation returns a new set, so a caller can compute the next state
    and commit it only once the store has accepted the change.  A vertex
    collection is either referenced by some definition or an orphan, never
    both.
    """

    definitions: Tuple[EdgeDefinition, ...] = ()
    orphans: Tuple[str, ...] = ()
    _index: Mapping[str, EdgeDefinition] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, EdgeDefinition] = {}
        for definition in self.definitions:
            if definition.collection in index:
                raise ConflictError(
                    "Edge collection is used by more than one edge definition",
                    collection=definition.collection,
                )
            index[definition.collection] = definition
        object.__setattr__(self, "_index", index)
        referenced = self._referenced()
        object.__setattr__(
            self, "orphans", tuple(name for name in _ordered_unique(self.orphans) if name not in referenced)
        )

    def __iter__(self) -> Iterator[EdgeDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def __contains__(self, collection: object) -> bool:
        return collection in self._index

    def _referenced(self) -> set[str]:
        names: set[str] = set()
        for definition in self.definitions:
            names.update(definition.vertex_collections())
        return names

    def list(self) -> list[str]:
        """Return edge collection names in insertion order."""

        return [definition.collection for definition in self.definitions]

    def get(self, collection: str) -> EdgeDefinition:
        """Return the definition of edge ``collection``."""

        try:
            return self._index[collection]
        except KeyError:
            raise NotFoundError("Edge definition not found", collection=collection) from None

    def vertex_collections(self) -> list[str]:
        """Return every vertex collection of the graph, sorted by name."""

        return sorted(self._referenced() | set(self.orphans))

    def _rebuilt(self, definitions: Sequence[EdgeDefinition], orphans: Iterable[str]) -> "EdgeDefinitionSet":
        # Collections dropped from every definition stay in the graph as orphans.
        before = self._referenced()
        candidate = EdgeDefinitionSet(tuple(definitions), tuple(orphans))
        released = sorted(before - candidate._referenced())
        return EdgeDefinitionSet(candidate.definitions, (*candidate.orphans, *released))

    def add(self, definition: EdgeDefinition) -> "EdgeDefinitionSet":
        """Return a set with ``definition`` appended; its collection must be new."""

        if definition.collection in self._index:
            raise ConflictError("Edge definition already exists", collection=definition.collection)
        return self._rebuilt((*self.definitions, definition), self.orphans)

    def extend(
        self, collection: str, from_additions: Iterable[str] = (), to_additions: Iterable[str] = ()
    ) -> "EdgeDefinitionSet":
        """Return a set where ``collection`` also accepts the given endpoint collections."""

        current = self.get(collection)
        extended = EdgeDefinition(
            collection,
            (*current.from_collections, *_ordered_unique(from_additions)),
            (*current.to_collections, *_ordered_unique(to_additions)),
        )
        return self._replaced(extended)

    def edit(self, collection: str, new_from: Iterable[str], new_to: Iterable[str]) -> "EdgeDefinitionSet":
        """Return a set where ``collection`` connects exactly ``new_from`` to ``new_to``."""

        self.get(collection)
        return self._replaced(EdgeDefinition(collection, tuple(new_from), tuple(new_to)))

    def _replaced(self, definition: EdgeDefinition) -> "EdgeDefinitionSet":
        definitions = [
            definition if existing.collection == definition.collection else existing
            for existing in self.definitions
        ]
        return self._rebuilt(definitions, self.orphans)

    def delete(self, collection: str) -> "EdgeDefinitionSet":
        """Return a set without ``collection``; released vertex collections become orphans."""

        self.get(collection)
        definitions = [d for d in self.definitions if d.collection != collection]
        return self._rebuilt(definitions, self.orphans)

    def add_vertex_collection(self, name: str) -> "EdgeDefinitionSet":
        """Return a set with ``name`` as a vertex collection, an orphan if unreferenced."""

        (name,) = _ordered_unique((name,))
        if name in self._referenced() or name in self.orphans:
            return self
        return EdgeDefinitionSet(self.definitions, (*self.orphans, name))

    def remove_vertex_collection(self, name: str) -> "EdgeDefinitionSet":
        """Return a set without the orphan ``name``."""

        users = [d.collection for d in self.definitions if name in d.vertex_collections()]
        if users:
            raise ConflictError(
                "Vertex collection is still referenced by edge definitions",
                collection=name,
                edge_definitions=users,
            )
        if name not in self.orphans:
            raise NotFoundError("Vertex collection is not part of the graph", collection=name)
        return EdgeDefinitionSet(self.definitions, tuple(o for o in self.orphans if o != name))

    def to_payload(self) -> dict[str, Any]:
        """Return the ``edgeDefinitions`` and ``orphanCollections`` payload."""

        return {
            "edgeDefinitions": [definition.to_payload() for definition in self.definitions],
            "orphanCollections": list(self.orphans),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EdgeDefinitionSet":
        """Build a set from a graph payload as returned by the store."""

        return cls(
            tuple(EdgeDefinition.from_payload(item) for item in payload.get("edgeDefinitions", ())),
            tuple(payload.get("orphanCollections", ())),
        )


__all__ = ["EdgeDefinition", "EdgeDefinitionSet"]
