"""Protocol implemented by document/graph store backends."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence


class DocumentKind(str, Enum):
    """Kind of record addressed inside a named graph."""

    VERTEX = "vertex"
    EDGE = "edge"


@dataclass(frozen=True)
class DocumentMeta:
    """Store-assigned identity of a record after a successful operation."""

    id: str
    key: str
    rev: str

    ok = True

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DocumentMeta":
        return cls(id=payload["_id"], key=payload["_key"], rev=payload["_rev"])

    def unwrap(self) -> "DocumentMeta":
        return self


class DocumentGraphStore(Protocol):
    """Operations the graph client consumes from the backing store.

    Graph payloads carry ``_id``, ``_key``, ``_rev``, ``name``,
    ``edgeDefinitions`` and ``orphanCollections``.  Document mutations return
    ``_id``, ``_key`` and the post-mutation ``_rev``.  Implementations raise
    the errors of :mod:`arangograph.errors`; a revision mismatch is always a
    :class:`~arangograph.errors.PreconditionFailedError`, never a not-found.
    """

    def create_graph(
        self,
        name: str,
        edge_definitions: Sequence[Mapping[str, Any]],
        orphan_collections: Sequence[str] = (),
    ) -> dict: ...

    def drop_graph(self, name: str) -> bool: ...

    def get_graph(self, name: str) -> dict: ...

    def list_graphs(self) -> list[dict]: ...

    def add_edge_definition(self, graph: str, definition: Mapping[str, Any]) -> dict: ...

    def extend_edge_definition(
        self, graph: str, collection: str, from_collections: Sequence[str], to_collections: Sequence[str]
    ) -> dict: ...

    def replace_edge_definition(
        self, graph: str, collection: str, from_collections: Sequence[str], to_collections: Sequence[str]
    ) -> dict: ...

    def remove_edge_definition(self, graph: str, collection: str) -> dict: ...

    def add_vertex_collection(self, graph: str, collection: str) -> dict: ...

    def remove_vertex_collection(self, graph: str, collection: str) -> dict: ...

    def get_document(
        self, graph: str, kind: DocumentKind, collection: str, key: str, *, if_match: str | None = None
    ) -> dict | None: ...

    def document_info(self, collection: str, key: str) -> dict | None:
        """Return ``_id``, ``_key`` and ``_rev`` of any stored record, graph or not."""
        ...

    def insert_document(
        self, graph: str, kind: DocumentKind, collection: str, body: Mapping[str, Any]
    ) -> dict: ...

    def replace_document(
        self,
        graph: str,
        kind: DocumentKind,
        collection: str,
        key: str,
        body: Mapping[str, Any],
        *,
        if_match: str | None = None,
    ) -> dict: ...

    def update_document(
        self,
        graph: str,
        kind: DocumentKind,
        collection: str,
        key: str,
        patch: Mapping[str, Any],
        *,
        if_match: str | None = None,
    ) -> dict: ...

    def remove_document(
        self, graph: str, kind: DocumentKind, collection: str, key: str, *, if_match: str | None = None
    ) -> bool: ...
