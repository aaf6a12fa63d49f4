"""Error taxonomy shared by the graph client and its stores."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine readable classification carried by every client error."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PRECONDITION_FAILED = "precondition_failed"
    INVALID_STATE = "invalid_state"
    TRANSPORT = "transport"


class GraphClientError(Exception):
    """Base class for all errors raised by :mod:`arangograph`."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = {k: v for k, v in details.items() if v is not None}

    @property
    def collection(self) -> str | None:
        return self.details.get("collection")

    @property
    def key(self) -> str | None:
        return self.details.get("key")

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{name}={value!r}" for name, value in sorted(self.details.items()))
        return f"{self.message} ({context})"


class ConfigurationError(GraphClientError):
    """Local misconfiguration, e.g. an entity type without a collection name."""

    kind = ErrorKind.CONFIGURATION


class ValidationError(GraphClientError):
    """Malformed entity or request, detected locally or reported by the store."""

    kind = ErrorKind.VALIDATION


class NotFoundError(GraphClientError):
    """Graph, edge definition, collection or record is absent."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(GraphClientError):
    """Duplicate graph name or a collection that is still referenced."""

    kind = ErrorKind.CONFLICT


class PreconditionFailedError(GraphClientError):
    """The stored revision differs from the caller's expected revision."""

    kind = ErrorKind.PRECONDITION_FAILED

    @property
    def expected_rev(self) -> str | None:
        return self.details.get("expected_rev")

    @property
    def actual_rev(self) -> str | None:
        return self.details.get("actual_rev")


class InvalidStateError(GraphClientError):
    """Operation issued on a graph handle that no longer allows it."""

    kind = ErrorKind.INVALID_STATE


class TransportError(GraphClientError):
    """Opaque transport or store failure, timeouts included."""

    kind = ErrorKind.TRANSPORT


@dataclass(frozen=True)
class PreconditionFailed:
    """Tagged result returned instead of raising on a revision mismatch.

    Callers can branch on ``result.ok`` or match on the type; ``unwrap``
    converts the value into :class:`PreconditionFailedError` for code that
    prefers exceptions.
    """

    collection: str
    key: str
    expected_rev: str | None
    actual_rev: str | None = None

    ok = False
    kind = ErrorKind.PRECONDITION_FAILED

    def unwrap(self) -> Any:
        raise PreconditionFailedError(
            "revision precondition failed",
            collection=self.collection,
            key=self.key,
            expected_rev=self.expected_rev,
            actual_rev=self.actual_rev,
        )


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "ErrorKind",
    "GraphClientError",
    "InvalidStateError",
    "NotFoundError",
    "PreconditionFailed",
    "PreconditionFailedError",
    "TransportError",
    "ValidationError",
]
