"""Tests for :mod:`arangograph.errors`."""

from __future__ import annotations

import pytest

from arangograph import errors


@pytest.mark.parametrize(
    "error_cls, kind",
    [
        (errors.ConfigurationError, errors.ErrorKind.CONFIGURATION),
        (errors.ValidationError, errors.ErrorKind.VALIDATION),
        (errors.NotFoundError, errors.ErrorKind.NOT_FOUND),
        (errors.ConflictError, errors.ErrorKind.CONFLICT),
        (errors.PreconditionFailedError, errors.ErrorKind.PRECONDITION_FAILED),
        (errors.InvalidStateError, errors.ErrorKind.INVALID_STATE),
        (errors.TransportError, errors.ErrorKind.TRANSPORT),
    ],
)
def test_every_error_carries_its_kind(error_cls, kind):
    error = error_cls("boom")

    assert isinstance(error, errors.GraphClientError)
    assert error.kind is kind


def test_details_are_rendered_and_none_values_dropped():
    error = errors.NotFoundError("Document not found", collection="Person", key="42", graph=None)

    assert error.collection == "Person"
    assert error.key == "42"
    assert "graph" not in error.details
    assert str(error) == "Document not found (collection='Person', key='42')"


def test_message_without_details():
    assert str(errors.ConflictError("Graph already exists")) == "Graph already exists"


def test_precondition_failed_value_unwraps_into_error():
    failure = errors.PreconditionFailed(collection="Person", key="1", expected_rev="_a", actual_rev="_b")

    assert failure.ok is False
    assert failure.kind is errors.ErrorKind.PRECONDITION_FAILED
    with pytest.raises(errors.PreconditionFailedError) as excinfo:
        failure.unwrap()
    assert (excinfo.value.expected_rev, excinfo.value.actual_rev) == ("_a", "_b")
    assert excinfo.value.collection == "Person"
