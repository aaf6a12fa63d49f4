"""arangograph package initialization.

This module exposes the entry points used by applications to describe named
graphs and to read and write their vertices and edges.
"""

from .errors import (
    ConfigurationError,
    ConflictError,
    ErrorKind,
    GraphClientError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailed,
    PreconditionFailedError,
    TransportError,
    ValidationError,
)
from .graph import (
    CollectionNameResolver,
    Database,
    EdgeDefinition,
    Graph,
    GraphInfo,
    GraphState,
    from_field,
    id_field,
    key_field,
    rev_field,
    to_field,
)
from .store import DocumentMeta, HttpStore, InMemoryStore

__all__ = [
    "CollectionNameResolver",
    "ConfigurationError",
    "ConflictError",
    "Database",
    "DocumentMeta",
    "EdgeDefinition",
    "ErrorKind",
    "Graph",
    "GraphClientError",
    "GraphInfo",
    "GraphState",
    "HttpStore",
    "InMemoryStore",
    "InvalidStateError",
    "NotFoundError",
    "PreconditionFailed",
    "PreconditionFailedError",
    "TransportError",
    "ValidationError",
    "from_field",
    "id_field",
    "key_field",
    "rev_field",
    "to_field",
]
