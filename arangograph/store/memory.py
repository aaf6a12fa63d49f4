"""In-memory NetworkX based document/graph store.

The store keeps every vertex document as a node and every edge document as
an edge of one :class:`networkx.MultiDiGraph`, keyed by document id.  Graph
metadata is held as :class:`~arangograph.graph.definitions.EdgeDefinitionSet`
values, so each metadata mutation is computed in full before it replaces the
previous state.
"""
from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence

import networkx as nx

from ..errors import ConflictError, NotFoundError, PreconditionFailedError, ValidationError
from ..graph.definitions import EdgeDefinition, EdgeDefinitionSet
from ..graph.ids import document_id, graph_id, new_key, new_rev, split_document_id
from .base import DocumentKind

LOGGER = logging.getLogger(__name__)


@dataclass
class _GraphRecord:
    name: str
    rev: str
    definitions: EdgeDefinitionSet

    def to_payload(self) -> dict[str, Any]:
        return {
            "_id": graph_id(self.name),
            "_key": self.name,
            "_rev": self.rev,
            "name": self.name,
            **self.definitions.to_payload(),
        }


@dataclass
class InMemoryStore:
    """Process-local implementation of the document/graph store protocol."""

    graph: nx.MultiDiGraph = field(default_factory=nx.MultiDiGraph)
    graphs: Dict[str, _GraphRecord] = field(default_factory=dict)
    _edge_index: Dict[str, tuple[str, str]] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # ------------------------------------------------------------------
    # Graph metadata
    # ------------------------------------------------------------------

    def create_graph(
        self,
        name: str,
        edge_definitions: Sequence[Mapping[str, Any]],
        orphan_collections: Sequence[str] = (),
    ) -> dict:
        if not name:
            raise ValidationError("Graph name must not be empty")
        definitions = EdgeDefinitionSet.from_payload(
            {"edgeDefinitions": list(edge_definitions), "orphanCollections": list(orphan_collections)}
        )
        with self._lock:
            if name in self.graphs:
                raise ConflictError("Graph already exists", graph=name)
            record = _GraphRecord(name=name, rev=new_rev(), definitions=definitions)
            self.graphs[name] = record
            return record.to_payload()

    def drop_graph(self, name: str) -> bool:
        with self._lock:
            return self.graphs.pop(name, None) is not None

    def get_graph(self, name: str) -> dict:
        with self._lock:
            return self._graph(name).to_payload()

    def list_graphs(self) -> list[dict]:
        with self._lock:
            return [record.to_payload() for record in self.graphs.values()]

    def add_edge_definition(self, graph: str, definition: Mapping[str, Any]) -> dict:
        edge = EdgeDefinition.from_payload(definition)
        return self._mutate_definitions(graph, lambda current: current.add(edge))

    def extend_edge_definition(
        self, graph: str, collection: str, from_collections: Sequence[str], to_collections: Sequence[str]
    ) -> dict:
        return self._mutate_definitions(
            graph, lambda current: current.extend(collection, from_collections, to_collections)
        )

    def replace_edge_definition(
        self, graph: str, collection: str, from_collections: Sequence[str], to_collections: Sequence[str]
    ) -> dict:
        return self._mutate_definitions(
            graph, lambda current: current.edit(collection, from_collections, to_collections)
        )

    def remove_edge_definition(self, graph: str, collection: str) -> dict:
        return self._mutate_definitions(graph, lambda current: current.delete(collection))

    def add_vertex_collection(self, graph: str, collection: str) -> dict:
        return self._mutate_definitions(graph, lambda current: current.add_vertex_collection(collection))

    def remove_vertex_collection(self, graph: str, collection: str) -> dict:
        return self._mutate_definitions(graph, lambda current: current.remove_vertex_collection(collection))

    def _graph(self, name: str) -> _GraphRecord:
        record = self.graphs.get(name)
        if record is None:
            raise NotFoundError("Graph not found", graph=name)
        return record

    def _mutate_definitions(self, graph: str, change) -> dict:
        with self._lock:
            record = self._graph(graph)
            updated = change(record.definitions)
            if updated is not record.definitions:
                record.definitions = updated
                record.rev = new_rev()
            return record.to_payload()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _check_collection(self, record: _GraphRecord, kind: DocumentKind, collection: str) -> None:
        if kind is DocumentKind.EDGE:
            known = collection in record.definitions
        else:
            known = collection in record.definitions.vertex_collections()
        if not known:
            raise NotFoundError(
                f"{kind.value} collection not part of graph", graph=record.name, collection=collection
            )

    def _check_endpoints(self, record: _GraphRecord, collection: str, body: Mapping[str, Any]) -> None:
        definition = record.definitions.get(collection)
        for attribute, allowed in (("_from", definition.from_collections), ("_to", definition.to_collections)):
            value = body.get(attribute)
            if not value:
                raise ValidationError(f"Edge is missing {attribute}", collection=collection)
            try:
                endpoint_collection, _ = split_document_id(value)
            except (TypeError, ValueError) as exc:
                raise ValidationError(str(exc), collection=collection) from exc
            if endpoint_collection not in allowed:
                raise ValidationError(
                    f"{attribute} collection {endpoint_collection!r} not allowed by edge definition",
                    collection=collection,
                )

    def _lookup(self, kind: DocumentKind, doc_id: str) -> dict | None:
        if kind is DocumentKind.VERTEX:
            if doc_id not in self.graph:
                return None
            return self.graph.nodes[doc_id].get("document")
        endpoints = self._edge_index.get(doc_id)
        if endpoints is None:
            return None
        return self.graph.edges[endpoints[0], endpoints[1], doc_id]["document"]

    def _current(
        self, kind: DocumentKind, collection: str, key: str, if_match: str | None, *, required: bool
    ) -> dict | None:
        document = self._lookup(kind, document_id(collection, key))
        if document is None:
            if required:
                raise NotFoundError("Document not found", collection=collection, key=key)
            return None
        if if_match is not None and document["_rev"] != if_match:
            raise PreconditionFailedError(
                "revision precondition failed",
                collection=collection,
                key=key,
                expected_rev=if_match,
                actual_rev=document["_rev"],
            )
        return document

    def _store(self, kind: DocumentKind, document: dict) -> None:
        doc_id = document["_id"]
        if kind is DocumentKind.VERTEX:
            self.graph.add_node(doc_id, document=document)
            return
        previous = self._edge_index.pop(doc_id, None)
        if previous is not None:
            self.graph.remove_edge(previous[0], previous[1], key=doc_id)
        self.graph.add_edge(document["_from"], document["_to"], key=doc_id, document=document)
        self._edge_index[doc_id] = (document["_from"], document["_to"])
        if previous is not None:
            self._prune(*previous)

    def _prune(self, *nodes: str) -> None:
        """Drop endpoint nodes that hold no vertex document and no edges."""

        for node in nodes:
            if node in self.graph and "document" not in self.graph.nodes[node] and self.graph.degree(node) == 0:
                self.graph.remove_node(node)

    @staticmethod
    def _meta(document: Mapping[str, Any]) -> dict:
        return {"_id": document["_id"], "_key": document["_key"], "_rev": document["_rev"]}

    @staticmethod
    def _user_fields(body: Mapping[str, Any]) -> dict:
        return {k: copy.deepcopy(v) for k, v in body.items() if k not in ("_id", "_key", "_rev")}

    def get_document(
        self, graph: str, kind: DocumentKind, collection: str, key: str, *, if_match: str | None = None
    ) -> dict | None:
        with self._lock:
            self._check_collection(self._graph(graph), kind, collection)
            document = self._current(kind, collection, key, if_match, required=False)
            return copy.deepcopy(document)

    def document_info(self, collection: str, key: str) -> dict | None:
        with self._lock:
            doc_id = document_id(collection, key)
            for kind in DocumentKind:
                document = self._lookup(kind, doc_id)
                if document is not None:
                    return self._meta(document)
            return None

    def insert_document(
        self, graph: str, kind: DocumentKind, collection: str, body: Mapping[str, Any]
    ) -> dict:
        with self._lock:
            record = self._graph(graph)
            self._check_collection(record, kind, collection)
            if kind is DocumentKind.EDGE:
                self._check_endpoints(record, collection, body)
            key = body.get("_key") or new_key()
            doc_id = document_id(collection, key)
            if self._lookup(kind, doc_id) is not None:
                raise ConflictError("Unique constraint violated", collection=collection, key=key)
            document = {**self._user_fields(body), "_id": doc_id, "_key": key, "_rev": new_rev()}
            self._store(kind, document)
            LOGGER.debug("Inserted %s %s", kind.value, doc_id)
            return self._meta(document)

    def replace_document(
        self,
        graph: str,
        kind: DocumentKind,
        collection: str,
        key: str,
        body: Mapping[str, Any],
        *,
        if_match: str | None = None,
    ) -> dict:
        with self._lock:
            record = self._graph(graph)
            self._check_collection(record, kind, collection)
            current = self._current(kind, collection, key, if_match, required=True)
            document = self._user_fields(body)
            if kind is DocumentKind.EDGE:
                self._check_endpoints(record, collection, document)
            document.update(_id=current["_id"], _key=key, _rev=new_rev())
            self._store(kind, document)
            return self._meta(document)

    def update_document(
        self,
        graph: str,
        kind: DocumentKind,
        collection: str,
        key: str,
        patch: Mapping[str, Any],
        *,
        if_match: str | None = None,
    ) -> dict:
        with self._lock:
            record = self._graph(graph)
            self._check_collection(record, kind, collection)
            current = self._current(kind, collection, key, if_match, required=True)
            document = {**current, **self._user_fields(patch), "_rev": new_rev()}
            if kind is DocumentKind.EDGE:
                self._check_endpoints(record, collection, document)
            self._store(kind, document)
            return self._meta(document)

    def remove_document(
        self, graph: str, kind: DocumentKind, collection: str, key: str, *, if_match: str | None = None
    ) -> bool:
        with self._lock:
            self._check_collection(self._graph(graph), kind, collection)
            current = self._current(kind, collection, key, if_match, required=True)
            doc_id = current["_id"]
            if kind is DocumentKind.VERTEX:
                # Incident edges go with the vertex, as on the server.
                incident = list(self.graph.in_edges(doc_id, keys=True))
                incident += list(self.graph.out_edges(doc_id, keys=True))
                for _, _, edge_id in incident:
                    self._edge_index.pop(edge_id, None)
                self.graph.remove_node(doc_id)
                self._prune(*(node for source, target, _ in incident for node in (source, target)))
            else:
                source, target = self._edge_index.pop(doc_id)
                self.graph.remove_edge(source, target, key=doc_id)
                self._prune(source, target)
            LOGGER.debug("Removed %s %s", kind.value, doc_id)
            return True


__all__ = ["InMemoryStore"]
