"""Graph subpackage containing schema, naming and document helpers."""

from .codec import EntityCodec, from_field, id_field, key_field, rev_field, to_field
from .definitions import EdgeDefinition, EdgeDefinitionSet
from .entities import RevisionGuardedEntityStore
from .handle import Database, EdgeDefinitionHandle, Graph
from .metadata import GraphInfo, GraphMetadataManager, GraphState
from .naming import CollectionNameResolver

__all__ = [
    "CollectionNameResolver",
    "Database",
    "EdgeDefinition",
    "EdgeDefinitionHandle",
    "EdgeDefinitionSet",
    "EntityCodec",
    "Graph",
    "GraphInfo",
    "GraphMetadataManager",
    "GraphState",
    "RevisionGuardedEntityStore",
    "from_field",
    "id_field",
    "key_field",
    "rev_field",
    "to_field",
]
