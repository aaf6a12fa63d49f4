"""Lifecycle and schema management for one named graph."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from ..errors import InvalidStateError
from ..store.base import DocumentGraphStore
from .definitions import EdgeDefinition, EdgeDefinitionSet

LOGGER = logging.getLogger(__name__)


class GraphState(str, Enum):
    """Client-side lifecycle of a graph handle."""

    UNBOUND = "unbound"
    CREATED = "created"
    DROPPED = "dropped"


@dataclass(frozen=True)
class GraphInfo:
    """Store-assigned identity of a graph plus its definitions at that time."""

    id: str
    key: str
    rev: str
    definitions: EdgeDefinitionSet = field(default_factory=EdgeDefinitionSet)

    @property
    def edge_definitions(self) -> tuple[EdgeDefinition, ...]:
        return self.definitions.definitions

    @property
    def orphan_collections(self) -> tuple[str, ...]:
        return self.definitions.orphans

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GraphInfo":
        return cls(
            id=payload["_id"],
            key=payload["_key"],
            rev=payload["_rev"],
            definitions=EdgeDefinitionSet.from_payload(payload),
        )


def list_graphs(store: DocumentGraphStore) -> list[str]:
    """Return the keys of every graph known to ``store``."""

    return [item.get("_key") or item["name"] for item in store.list_graphs()]


@dataclass
class GraphMetadataManager:
    """Create, inspect, edit and drop one named graph.

    The manager mirrors the graph's :class:`EdgeDefinitionSet`.  The mirror is
    replaced only with what the store returns from a successful call, so a
    rejected mutation leaves it untouched.  Once dropped, every call raises
    :class:`InvalidStateError` without contacting the store.
    """

    name: str
    store: DocumentGraphStore
    state: GraphState = GraphState.UNBOUND
    definitions: EdgeDefinitionSet = field(default_factory=EdgeDefinitionSet)

    def ensure_usable(self) -> None:
        if self.state is GraphState.DROPPED:
            raise InvalidStateError("Graph handle has been dropped", graph=self.name)

    def _commit(self, payload: Mapping[str, Any]) -> GraphInfo:
        info = GraphInfo.from_payload(payload)
        self.definitions = info.definitions
        self.state = GraphState.CREATED
        return info

    def create(
        self, edge_definitions: Iterable[EdgeDefinition], orphan_collections: Sequence[str] = ()
    ) -> GraphInfo:
        self.ensure_usable()
        if self.state is GraphState.CREATED:
            raise InvalidStateError("Graph handle already created its graph", graph=self.name)
        requested = EdgeDefinitionSet(tuple(edge_definitions), tuple(orphan_collections))
        payload = requested.to_payload()
        info = self._commit(
            self.store.create_graph(self.name, payload["edgeDefinitions"], payload["orphanCollections"])
        )
        LOGGER.info("Created graph %s with edge definitions %s", self.name, info.definitions.list())
        return info

    def drop(self) -> bool:
        self.ensure_usable()
        dropped = self.store.drop_graph(self.name)
        self.state = GraphState.DROPPED
        self.definitions = EdgeDefinitionSet()
        LOGGER.info("Dropped graph %s (existed=%s)", self.name, dropped)
        return dropped

    def info(self) -> GraphInfo:
        self.ensure_usable()
        return GraphInfo.from_payload(self.store.get_graph(self.name))

    def refresh(self) -> GraphInfo:
        """Reload the mirrored definitions from the store."""

        self.ensure_usable()
        return self._commit(self.store.get_graph(self.name))

    def list_edge_definitions(self) -> list[str]:
        self.ensure_usable()
        return self.definitions.list()

    def list_vertex_collections(self) -> list[str]:
        self.ensure_usable()
        return self.definitions.vertex_collections()

    def orphan_collections(self) -> list[str]:
        self.ensure_usable()
        return list(self.definitions.orphans)

    def add_edge_definition(self, definition: EdgeDefinition) -> GraphInfo:
        self.ensure_usable()
        info = self._commit(self.store.add_edge_definition(self.name, definition.to_payload()))
        LOGGER.info("Added edge definition %s to graph %s", definition.collection, self.name)
        return info

    def extend_edge_definition(
        self, collection: str, from_additions: Iterable[str] = (), to_additions: Iterable[str] = ()
    ) -> GraphInfo:
        self.ensure_usable()
        info = self._commit(
            self.store.extend_edge_definition(self.name, collection, list(from_additions), list(to_additions))
        )
        LOGGER.info("Extended edge definition %s of graph %s", collection, self.name)
        return info

    def edit_edge_definition(
        self, collection: str, new_from: Iterable[str], new_to: Iterable[str]
    ) -> GraphInfo:
        self.ensure_usable()
        info = self._commit(
            self.store.replace_edge_definition(self.name, collection, list(new_from), list(new_to))
        )
        LOGGER.info("Edited edge definition %s of graph %s", collection, self.name)
        return info

    def delete_edge_definition(self, collection: str) -> GraphInfo:
        self.ensure_usable()
        info = self._commit(self.store.remove_edge_definition(self.name, collection))
        LOGGER.info("Deleted edge definition %s from graph %s", collection, self.name)
        return info

    def add_vertex_collection(self, collection: str) -> GraphInfo:
        self.ensure_usable()
        info = self._commit(self.store.add_vertex_collection(self.name, collection))
        LOGGER.info("Added vertex collection %s to graph %s", collection, self.name)
        return info

    def remove_vertex_collection(self, collection: str) -> GraphInfo:
        self.ensure_usable()
        info = self._commit(self.store.remove_vertex_collection(self.name, collection))
        LOGGER.info("Removed vertex collection %s from graph %s", collection, self.name)
        return info


__all__ = ["GraphInfo", "GraphMetadataManager", "GraphState", "list_graphs"]
