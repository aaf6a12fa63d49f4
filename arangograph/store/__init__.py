"""Store backends consumed by the graph client."""

from .base import DocumentGraphStore, DocumentKind, DocumentMeta
from .http import HttpStore
from .memory import InMemoryStore

__all__ = [
    "DocumentGraphStore",
    "DocumentKind",
    "DocumentMeta",
    "HttpStore",
    "InMemoryStore",
]
