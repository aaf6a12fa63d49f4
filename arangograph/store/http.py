"""Document/graph store speaking the ArangoDB ``gharial`` REST API over httpx."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence
from urllib.parse import quote

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import StoreSettings
from ..errors import (
    ConflictError,
    GraphClientError,
    NotFoundError,
    PreconditionFailedError,
    TransportError,
    ValidationError,
)
from .base import DocumentKind

LOGGER = logging.getLogger(__name__)

# Server error numbers that signal a collection still in use.
_CONFLICT_ERROR_NUMS = frozenset({1920, 1921, 1928})

_DOCUMENT_NOT_FOUND = frozenset({1202})
_COLLECTION_NOT_FOUND = frozenset({1203})
_GRAPH_NOT_FOUND = frozenset({1924})

_STATUS_ERRORS: Mapping[int, type[GraphClientError]] = {
    400: ValidationError,
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
}


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_num(response: httpx.Response) -> int | None:
    return _error_body(response).get("errorNum")


def classify_response(
    response: httpx.Response, *, collection: str | None = None, key: str | None = None, if_match: str | None = None
) -> GraphClientError:
    """Translate an error response into the client's error taxonomy."""

    body = _error_body(response)
    error_num = body.get("errorNum")
    message = body.get("errorMessage") or response.reason_phrase or "store request failed"
    if error_num in _CONFLICT_ERROR_NUMS:
        error_cls: type[GraphClientError] = ConflictError
    else:
        error_cls = _STATUS_ERRORS.get(response.status_code, TransportError)
    details: dict[str, Any] = {
        "status": response.status_code,
        "error_num": error_num,
        "collection": collection,
        "key": key,
    }
    if error_cls is PreconditionFailedError:
        details["expected_rev"] = if_match
        details["actual_rev"] = body.get("_rev")
    return error_cls(message, **details)


@dataclass
class HttpStore:
    """HTTP implementation of the document/graph store protocol.

    Only failures to establish a connection are retried; once a request may
    have reached the server its outcome is reported as-is.
    """

    settings: StoreSettings = field(default_factory=StoreSettings.from_env)
    client: httpx.Client | None = None

    def __post_init__(self) -> None:
        self._owns_client = self.client is None
        if self.client is None:
            self.client = httpx.Client(
                base_url=f"{self.settings.url}/_db/{_segment(self.settings.database)}/_api",
                auth=(self.settings.username, self.settings.password),
                timeout=self.settings.timeout,
            )

    def close(self) -> None:
        if self._owns_client and self.client is not None:
            self.client.close()

    def __enter__(self) -> "HttpStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.settings.connect_retries),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(httpx.ConnectError),
            before_sleep=before_sleep_log(LOGGER, logging.WARNING),
            reraise=True,
        )
        LOGGER.debug("%s %s", method, path)
        try:
            return retrying(self.client.request, method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        if_match: str | None = None,
        params: Mapping[str, str] | None = None,
        collection: str | None = None,
        key: str | None = None,
        missing: frozenset[int] = frozenset(),
    ) -> dict | None:
        headers = {"If-Match": if_match} if if_match is not None else None
        response = self._send(method, path, json=json, headers=headers, params=params)
        if missing and response.status_code == 404 and _error_num(response) in missing | {None}:
            return None
        if response.is_error:
            raise classify_response(response, collection=collection, key=key, if_match=if_match)
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"{method} {path} returned a non-JSON body") from exc

    @staticmethod
    def _graph_path(graph: str, *parts: str) -> str:
        return "/".join(["/gharial", _segment(graph), *(_segment(part) for part in parts)])

    # ------------------------------------------------------------------
    # Graph metadata
    # ------------------------------------------------------------------

    def create_graph(
        self,
        name: str,
        edge_definitions: Sequence[Mapping[str, Any]],
        orphan_collections: Sequence[str] = (),
    ) -> dict:
        payload = {
            "name": name,
            "edgeDefinitions": list(edge_definitions),
            "orphanCollections": list(orphan_collections),
        }
        return self._request("POST", "/gharial", json=payload)["graph"]

    def drop_graph(self, name: str) -> bool:
        body = self._request("DELETE", self._graph_path(name), missing=_GRAPH_NOT_FOUND)
        if body is None:
            return False
        return bool(body.get("removed", True))

    def get_graph(self, name: str) -> dict:
        return self._request("GET", self._graph_path(name))["graph"]

    def list_graphs(self) -> list[dict]:
        return list(self._request("GET", "/gharial")["graphs"])

    def add_edge_definition(self, graph: str, definition: Mapping[str, Any]) -> dict:
        return self._request(
            "POST", self._graph_path(graph, "edge"), json=dict(definition), collection=definition.get("collection")
        )["graph"]

    def extend_edge_definition(
        self, graph: str, collection: str, from_collections: Sequence[str], to_collections: Sequence[str]
    ) -> dict:
        payload = {"collection": collection, "from": list(from_collections), "to": list(to_collections)}
        return self._request(
            "PATCH", self._graph_path(graph, "edge", collection), json=payload, collection=collection
        )["graph"]

    def replace_edge_definition(
        self, graph: str, collection: str, from_collections: Sequence[str], to_collections: Sequence[str]
    ) -> dict:
        payload = {"collection": collection, "from": list(from_collections), "to": list(to_collections)}
        return self._request(
            "PUT", self._graph_path(graph, "edge", collection), json=payload, collection=collection
        )["graph"]

    def remove_edge_definition(self, graph: str, collection: str) -> dict:
        return self._request("DELETE", self._graph_path(graph, "edge", collection), collection=collection)["graph"]

    def add_vertex_collection(self, graph: str, collection: str) -> dict:
        return self._request(
            "POST", self._graph_path(graph, "vertex"), json={"collection": collection}, collection=collection
        )["graph"]

    def remove_vertex_collection(self, graph: str, collection: str) -> dict:
        return self._request(
            "DELETE", self._graph_path(graph, "vertex", collection), collection=collection
        )["graph"]

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def get_document(
        self, graph: str, kind: DocumentKind, collection: str, key: str, *, if_match: str | None = None
    ) -> dict | None:
        body = self._request(
            "GET",
            self._graph_path(graph, kind.value, collection, key),
            if_match=if_match,
            collection=collection,
            key=key,
            missing=_DOCUMENT_NOT_FOUND,
        )
        return None if body is None else body[kind.value]

    def document_info(self, collection: str, key: str) -> dict | None:
        body = self._request(
            "GET",
            f"/document/{_segment(collection)}/{_segment(key)}",
            collection=collection,
            key=key,
            missing=_DOCUMENT_NOT_FOUND | _COLLECTION_NOT_FOUND,
        )
        if body is None:
            return None
        return {"_id": body["_id"], "_key": body["_key"], "_rev": body["_rev"]}

    def insert_document(
        self, graph: str, kind: DocumentKind, collection: str, body: Mapping[str, Any]
    ) -> dict:
        return self._request(
            "POST", self._graph_path(graph, kind.value, collection), json=dict(body), collection=collection
        )[kind.value]

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
        return self._request(
            "PUT",
            self._graph_path(graph, kind.value, collection, key),
            json=dict(body),
            if_match=if_match,
            collection=collection,
            key=key,
        )[kind.value]

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
        return self._request(
            "PATCH",
            self._graph_path(graph, kind.value, collection, key),
            json=dict(patch),
            if_match=if_match,
            params={"keepNull": "true"},
            collection=collection,
            key=key,
        )[kind.value]

    def remove_document(
        self, graph: str, kind: DocumentKind, collection: str, key: str, *, if_match: str | None = None
    ) -> bool:
        body = self._request(
            "DELETE",
            self._graph_path(graph, kind.value, collection, key),
            if_match=if_match,
            collection=collection,
            key=key,
        )
        return bool(body.get("removed", True))


__all__ = ["HttpStore", "classify_response"]
