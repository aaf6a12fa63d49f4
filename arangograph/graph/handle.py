"""Public API surface: databases, graph handles and edge definition handles."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from ..config import StoreSettings
from ..errors import ValidationError
from ..store.base import DocumentGraphStore, DocumentKind, DocumentMeta
from .definitions import EdgeDefinition
from .entities import RevisionGuardedEntityStore, WriteResult
from .ids import split_document_id
from .metadata import GraphInfo, GraphMetadataManager, GraphState, list_graphs
from .naming import CollectionNameResolver, EntityRef, convention_by_name

T = TypeVar("T")

DefinitionSpec = Union[EdgeDefinition, Tuple[EntityRef, Sequence[EntityRef], Sequence[EntityRef]]]


@dataclass
class Database:
    """Entry point binding a store to a collection name resolver."""

    store: DocumentGraphStore
    resolver: CollectionNameResolver = field(default_factory=CollectionNameResolver)

    @classmethod
    def from_env(cls) -> "Database":
        """Connect to the HTTP store configured by ``ARANGO_*`` variables."""

        from ..store.http import HttpStore

        settings = StoreSettings.from_env()
        resolver = CollectionNameResolver(convention=convention_by_name(settings.collection_naming))
        return cls(store=HttpStore(settings=settings), resolver=resolver)

    def graph(self, name: str) -> "Graph":
        """Return an unbound handle for graph ``name``."""

        return Graph(self, name)

    def list_graphs(self) -> list[str]:
        return list_graphs(self.store)

    def document_info(self, doc_id: str) -> Optional[DocumentMeta]:
        """Return the identity of the record stored under ``doc_id``, or ``None``."""

        try:
            collection, key = split_document_id(doc_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc
        payload = self.store.document_info(collection, key)
        return None if payload is None else DocumentMeta.from_payload(payload)

    def resolve(self, entity: EntityRef) -> str:
        return self.resolver.resolve(entity)


class EdgeDefinitionHandle:
    """Facade over one edge definition of a graph."""

    __slots__ = ("graph", "collection")

    def __init__(self, graph: "Graph", collection: str) -> None:
        self.graph = graph
        self.collection = collection

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"{self.__class__.__name__}(graph={self.graph.name!r}, collection={self.collection!r})"

    def add(self, from_: Iterable[EntityRef], to: Iterable[EntityRef]) -> GraphInfo:
        return self.graph.add_edge_definition(self.collection, from_, to)

    def extend(self, from_: Iterable[EntityRef] = (), to: Iterable[EntityRef] = ()) -> GraphInfo:
        return self.graph.extend_edge_definition(self.collection, from_, to)

    def edit(self, from_: Iterable[EntityRef], to: Iterable[EntityRef]) -> GraphInfo:
        return self.graph.edit_edge_definition(self.collection, from_, to)

    def delete(self) -> GraphInfo:
        return self.graph.delete_edge_definition(self.collection)


class Graph:
    """Handle combining metadata management and typed document access.

    Any entity argument may be a registered type or a collection name.
    """

    def __init__(self, database: Database, name: str) -> None:
        self.database = database
        self.name = name
        self.metadata = GraphMetadataManager(name=name, store=database.store)
        self._entity_stores: Dict[Tuple[DocumentKind, type], RevisionGuardedEntityStore[Any]] = {}

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"{self.__class__.__name__}(name={self.name!r}, state={self.state.value!r})"

    @property
    def state(self) -> GraphState:
        return self.metadata.state

    def _names(self, entities: Iterable[EntityRef]) -> list[str]:
        return [self.database.resolve(entity) for entity in entities]

    def _definition(self, spec: DefinitionSpec) -> EdgeDefinition:
        if isinstance(spec, EdgeDefinition):
            return spec
        edge, from_, to = spec
        return EdgeDefinition(self.database.resolve(edge), tuple(self._names(from_)), tuple(self._names(to)))

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def create(self, edge_definitions: Iterable[DefinitionSpec], orphans: Iterable[EntityRef] = ()) -> GraphInfo:
        definitions = [self._definition(spec) for spec in edge_definitions]
        return self.metadata.create(definitions, self._names(orphans))

    def drop(self) -> bool:
        return self.metadata.drop()

    def info(self) -> GraphInfo:
        return self.metadata.info()

    def refresh(self) -> GraphInfo:
        return self.metadata.refresh()

    def list_edge_definitions(self) -> list[str]:
        return self.metadata.list_edge_definitions()

    def edge(self, edge: EntityRef) -> EdgeDefinitionHandle:
        self.metadata.ensure_usable()
        return EdgeDefinitionHandle(self, self.database.resolve(edge))

    def add_edge_definition(
        self, edge: EntityRef, from_: Iterable[EntityRef], to: Iterable[EntityRef]
    ) -> GraphInfo:
        return self.metadata.add_edge_definition(self._definition((edge, list(from_), list(to))))

    def extend_edge_definition(
        self, edge: EntityRef, from_: Iterable[EntityRef] = (), to: Iterable[EntityRef] = ()
    ) -> GraphInfo:
        return self.metadata.extend_edge_definition(self.database.resolve(edge), self._names(from_), self._names(to))

    def edit_edge_definition(
        self, edge: EntityRef, from_: Iterable[EntityRef], to: Iterable[EntityRef]
    ) -> GraphInfo:
        return self.metadata.edit_edge_definition(self.database.resolve(edge), self._names(from_), self._names(to))

    def delete_edge_definition(self, edge: EntityRef) -> GraphInfo:
        return self.metadata.delete_edge_definition(self.database.resolve(edge))

    def add_vertex_collection(self, vertex: EntityRef) -> GraphInfo:
        return self.metadata.add_vertex_collection(self.database.resolve(vertex))

    def remove_vertex_collection(self, vertex: EntityRef) -> GraphInfo:
        return self.metadata.remove_vertex_collection(self.database.resolve(vertex))

    def list_vertex_collections(self) -> list[str]:
        return self.metadata.list_vertex_collections()

    def orphan_collections(self) -> list[str]:
        return self.metadata.orphan_collections()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _entities(self, kind: DocumentKind, entity_type: Type[T]) -> RevisionGuardedEntityStore[T]:
        self.metadata.ensure_usable()
        cache_key = (kind, entity_type)
        entity_store = self._entity_stores.get(cache_key)
        if entity_store is None:
            entity_store = RevisionGuardedEntityStore(
                graph=self.name,
                collection=self.database.resolve(entity_type),
                entity_type=entity_type,
                store=self.database.store,
                kind=kind,
                guard=self.metadata.ensure_usable,
            )
            self._entity_stores[cache_key] = entity_store
        return entity_store

    def vertices(self, entity_type: Type[T]) -> RevisionGuardedEntityStore[T]:
        return self._entities(DocumentKind.VERTEX, entity_type)

    def edges(self, entity_type: Type[T]) -> RevisionGuardedEntityStore[T]:
        return self._entities(DocumentKind.EDGE, entity_type)

    def insert_vertex(self, entity: Any) -> DocumentMeta:
        return self.vertices(type(entity)).insert(entity)

    def get_vertex(self, entity_type: Type[T], key: str, if_match_rev: Optional[str] = None):
        return self.vertices(entity_type).get(key, if_match_rev)

    def replace_vertex(self, entity: Any, if_match_rev: Optional[str] = None) -> WriteResult:
        return self.vertices(type(entity)).replace(entity, if_match_rev)

    def replace_vertex_by_id(
        self, entity_type: Type[T], key: str, data: Mapping[str, Any], if_match_rev: Optional[str] = None
    ) -> WriteResult:
        return self.vertices(entity_type).replace_by_id(key, data, if_match_rev)

    def update_vertex(self, entity: Any, if_match_rev: Optional[str] = None) -> WriteResult:
        return self.vertices(type(entity)).update(entity, if_match_rev)

    def update_vertex_by_id(
        self, entity_type: Type[T], key: str, patch: Mapping[str, Any], if_match_rev: Optional[str] = None
    ) -> WriteResult:
        return self.vertices(entity_type).update_by_id(key, patch, if_match_rev)

    def remove_vertex(self, entity: Any, if_match_rev: Optional[str] = None):
        return self.vertices(type(entity)).remove(entity, if_match_rev)

    def remove_vertex_by_id(self, entity_type: Type[T], key: str, if_match_rev: Optional[str] = None):
        return self.vertices(entity_type).remove_by_id(key, if_match_rev)

    def insert_edge(self, entity: Any, from_vertex: Any = None, to_vertex: Any = None) -> DocumentMeta:
        return self.edges(type(entity)).insert(entity, from_vertex=from_vertex, to_vertex=to_vertex)

    def get_edge(self, entity_type: Type[T], key: str, if_match_rev: Optional[str] = None):
        return self.edges(entity_type).get(key, if_match_rev)

    def replace_edge(self, entity: Any, if_match_rev: Optional[str] = None) -> WriteResult:
        return self.edges(type(entity)).replace(entity, if_match_rev)

    def replace_edge_by_id(
        self,
        entity_type: Type[T],
        key: str,
        data: Mapping[str, Any],
        if_match_rev: Optional[str] = None,
        from_vertex: Any = None,
        to_vertex: Any = None,
    ) -> WriteResult:
        return self.edges(entity_type).replace_by_id(
            key, data, if_match_rev, from_vertex=from_vertex, to_vertex=to_vertex
        )

    def update_edge(self, entity: Any, if_match_rev: Optional[str] = None) -> WriteResult:
        return self.edges(type(entity)).update(entity, if_match_rev)

    def update_edge_by_id(
        self, entity_type: Type[T], key: str, patch: Mapping[str, Any], if_match_rev: Optional[str] = None
    ) -> WriteResult:
        return self.edges(entity_type).update_by_id(key, patch, if_match_rev)

    def remove_edge(self, entity: Any, if_match_rev: Optional[str] = None):
        return self.edges(type(entity)).remove(entity, if_match_rev)

    def remove_edge_by_id(self, entity_type: Type[T], key: str, if_match_rev: Optional[str] = None):
        return self.edges(entity_type).remove_by_id(key, if_match_rev)


__all__ = ["Database", "DefinitionSpec", "EdgeDefinitionHandle", "Graph"]
