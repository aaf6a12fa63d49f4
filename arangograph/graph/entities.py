"""Typed vertex and edge CRUD guarded by revision preconditions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, Optional, Type, TypeVar, Union

from ..errors import NotFoundError, PreconditionFailed, PreconditionFailedError, ValidationError
from ..store.base import DocumentGraphStore, DocumentKind, DocumentMeta
from .codec import EntityCodec

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

WriteResult = Union[DocumentMeta, PreconditionFailed]
Endpoint = Union[str, DocumentMeta, Any]


@dataclass
class RevisionGuardedEntityStore(Generic[T]):
    """CRUD for one entity type stored in one collection of a named graph.

    Every call is a single store request.  A revision mismatch is returned as
    a :class:`PreconditionFailed` value rather than raised; absent records
    read as ``None``.  The ``_rev`` echoed onto entities is never used as an
    implicit precondition, callers pass ``if_match_rev`` explicitly.
    """

    graph: str
    collection: str
    entity_type: Type[T]
    store: DocumentGraphStore
    kind: DocumentKind = DocumentKind.VERTEX
    guard: Optional[Callable[[], None]] = None
    codec: EntityCodec[T] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.codec = EntityCodec(self.entity_type)

    def _check_state(self) -> None:
        if self.guard is not None:
            self.guard()

    def _guarded(self, key: str, if_match_rev: str | None, call: Callable[[], R]) -> Union[R, PreconditionFailed]:
        try:
            return call()
        except PreconditionFailedError as exc:
            failure = PreconditionFailed(
                collection=self.collection,
                key=key,
                expected_rev=exc.expected_rev or if_match_rev,
                actual_rev=exc.actual_rev,
            )
            LOGGER.info(
                "Precondition failed on %s/%s: expected %s, found %s",
                self.collection,
                key,
                failure.expected_rev,
                failure.actual_rev,
            )
            return failure

    def _key_of(self, entity: T) -> str:
        self._check_state()
        self.codec.check(entity)
        key = self.codec.system_value(entity, "_key")
        if not key:
            raise ValidationError(
                f"{self.entity_type.__name__} has no key; insert or fetch it first",
                collection=self.collection,
            )
        return key

    @staticmethod
    def _endpoint_id(endpoint: Endpoint) -> str:
        if isinstance(endpoint, str):
            return endpoint
        if isinstance(endpoint, DocumentMeta):
            return endpoint.id
        try:
            endpoint_id = EntityCodec(type(endpoint)).system_value(endpoint, "_id")
        except ValidationError:
            endpoint_id = None
        if not endpoint_id:
            raise ValidationError(f"Cannot use {endpoint!r} as an edge endpoint")
        return endpoint_id

    def insert(
        self, entity: T, *, from_vertex: Endpoint | None = None, to_vertex: Endpoint | None = None
    ) -> DocumentMeta:
        """Create a new record from ``entity`` and echo its identity back onto it."""

        self._check_state()
        self.codec.check(entity)
        if self.kind is DocumentKind.EDGE:
            if from_vertex is not None:
                self.codec.set_system_value(entity, "_from", self._endpoint_id(from_vertex))
            if to_vertex is not None:
                self.codec.set_system_value(entity, "_to", self._endpoint_id(to_vertex))
        body = self.codec.encode(entity)
        if self.kind is DocumentKind.EDGE and not (body.get("_from") and body.get("_to")):
            raise ValidationError("Edges need both _from and _to", collection=self.collection)
        meta = DocumentMeta.from_payload(
            self.store.insert_document(self.graph, self.kind, self.collection, body)
        )
        self.codec.apply_meta(entity, meta)
        LOGGER.debug("Inserted %s", meta.id)
        return meta

    def get(self, key: str, if_match_rev: str | None = None) -> Union[T, None, PreconditionFailed]:
        """Return the record stored under ``key`` or ``None`` when it does not exist."""

        self._check_state()
        document = self._guarded(
            key,
            if_match_rev,
            lambda: self.store.get_document(self.graph, self.kind, self.collection, key, if_match=if_match_rev),
        )
        if document is None or isinstance(document, PreconditionFailed):
            return document
        return self.codec.decode(document)

    def replace(self, entity: T, if_match_rev: str | None = None) -> WriteResult:
        """Replace every business field of the stored record with ``entity``'s."""

        key = self._key_of(entity)
        result = self._replace(key, self.codec.encode(entity), if_match_rev)
        if isinstance(result, DocumentMeta):
            self.codec.apply_meta(entity, result)
        return result

    def replace_by_id(
        self,
        key: str,
        data: Mapping[str, Any],
        if_match_rev: str | None = None,
        *,
        from_vertex: Endpoint | None = None,
        to_vertex: Endpoint | None = None,
    ) -> WriteResult:
        """Replace the record with ``data``; fields not given revert to their defaults.

        Edges keep their stored endpoints unless ``from_vertex`` or ``to_vertex``
        is given.
        """

        self._check_state()
        entity = self.codec.build(data)
        if self.kind is DocumentKind.EDGE:
            if from_vertex is not None:
                self.codec.set_system_value(entity, "_from", self._endpoint_id(from_vertex))
            if to_vertex is not None:
                self.codec.set_system_value(entity, "_to", self._endpoint_id(to_vertex))
        return self._replace(key, self.codec.encode(entity), if_match_rev)

    def _with_endpoints(self, key: str, body: dict[str, Any]) -> dict[str, Any]:
        # Stores replace edges as a whole, so missing endpoints are read back first.
        if self.kind is not DocumentKind.EDGE or (body.get("_from") and body.get("_to")):
            return body
        current = self.store.get_document(self.graph, self.kind, self.collection, key)
        if current is None:
            raise NotFoundError("Document not found", collection=self.collection, key=key)
        return {"_from": current["_from"], "_to": current["_to"], **body}

    def _replace(self, key: str, body: dict[str, Any], if_match_rev: str | None) -> WriteResult:
        self._check_state()
        body = self._with_endpoints(key, body)
        return self._guarded(
            key,
            if_match_rev,
            lambda: DocumentMeta.from_payload(
                self.store.replace_document(
                    self.graph, self.kind, self.collection, key, body, if_match=if_match_rev
                )
            ),
        )

    def update(self, entity: T, if_match_rev: str | None = None) -> WriteResult:
        """Merge all business fields of ``entity`` into the stored record."""

        key = self._key_of(entity)
        result = self._update(key, self.codec.encode(entity), if_match_rev)
        if isinstance(result, DocumentMeta):
            self.codec.apply_meta(entity, result)
        return result

    def update_by_id(self, key: str, patch: Mapping[str, Any], if_match_rev: str | None = None) -> WriteResult:
        """Merge the sparse ``patch`` into the record; other fields stay untouched."""

        return self._update(key, self.codec.check_patch(patch), if_match_rev)

    def _update(self, key: str, patch: dict[str, Any], if_match_rev: str | None) -> WriteResult:
        self._check_state()
        return self._guarded(
            key,
            if_match_rev,
            lambda: DocumentMeta.from_payload(
                self.store.update_document(
                    self.graph, self.kind, self.collection, key, patch, if_match=if_match_rev
                )
            ),
        )

    def remove(self, entity: T, if_match_rev: str | None = None) -> Optional[PreconditionFailed]:
        return self.remove_by_id(self._key_of(entity), if_match_rev)

    def remove_by_id(self, key: str, if_match_rev: str | None = None) -> Optional[PreconditionFailed]:
        """Delete the record; ``None`` on success."""

        self._check_state()
        result = self._guarded(
            key,
            if_match_rev,
            lambda: self.store.remove_document(self.graph, self.kind, self.collection, key, if_match=if_match_rev),
        )
        if isinstance(result, PreconditionFailed):
            return result
        LOGGER.debug("Removed %s/%s", self.collection, key)
        return None


__all__ = ["RevisionGuardedEntityStore", "WriteResult"]
