"""Utility helpers for generating store-side identifiers and revisions."""
from __future__ import annotations

import itertools
import uuid

_KEY_COUNTER = itertools.count(1)


def new_key() -> str:
    """Return a fresh numeric document key, unique for the process."""

    return str(next(_KEY_COUNTER))


def new_rev() -> str:
    """Return an opaque revision token that is never handed out twice."""

    return f"_{uuid.uuid4().hex[:16]}"


def document_id(collection: str, key: str) -> str:
    """Return the global ``collection/key`` identifier of a document."""

    return f"{collection}/{key}"


def split_document_id(document: str) -> tuple[str, str]:
    """Split a ``collection/key`` identifier into its two parts."""

    collection, sep, key = document.partition("/")
    if not sep or not collection or not key:
        raise ValueError(f"Invalid document identifier: {document!r}")
    return collection, key


def graph_id(name: str) -> str:
    """Return the identifier the store assigns to graph ``name``."""

    return document_id("_graphs", name)
