"""Tests for :mod:`arangograph.graph.metadata`."""

from __future__ import annotations

from unittest import mock

import pytest

from arangograph.errors import ConflictError, InvalidStateError, NotFoundError
from arangograph.graph.definitions import EdgeDefinition
from arangograph.graph.metadata import GraphMetadataManager, GraphState, list_graphs
from arangograph.store.memory import InMemoryStore

FOLLOW = EdgeDefinition("Follow", ("Person",), ("Person",))


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def manager(store: InMemoryStore) -> GraphMetadataManager:
    manager = GraphMetadataManager(name="SocialGraph", store=store)
    manager.create([FOLLOW])
    return manager


def test_create_moves_to_created_and_returns_identity(store: InMemoryStore):
    manager = GraphMetadataManager(name="SocialGraph", store=store)
    assert manager.state is GraphState.UNBOUND

    info = manager.create([FOLLOW])

    assert manager.state is GraphState.CREATED
    assert info.id == "_graphs/SocialGraph"
    assert info.key == "SocialGraph"
    assert info.rev
    assert info.edge_definitions == (FOLLOW,)


def test_create_existing_graph_conflicts(manager: GraphMetadataManager, store: InMemoryStore):
    other = GraphMetadataManager(name="SocialGraph", store=store)
    with pytest.raises(ConflictError):
        other.create([FOLLOW])
    assert other.state is GraphState.UNBOUND
    with pytest.raises(InvalidStateError):
        manager.create([FOLLOW])


def test_info_does_not_change_state(store: InMemoryStore, manager: GraphMetadataManager):
    unbound = GraphMetadataManager(name="SocialGraph", store=store)
    info = unbound.info()
    assert unbound.state is GraphState.UNBOUND
    assert info.key == manager.info().key

    with pytest.raises(NotFoundError):
        GraphMetadataManager(name="Missing", store=store).info()


def test_refresh_binds_an_existing_graph(store: InMemoryStore, manager: GraphMetadataManager):
    other = GraphMetadataManager(name="SocialGraph", store=store)
    other.refresh()
    assert other.state is GraphState.CREATED
    assert other.list_edge_definitions() == ["Follow"]


def test_edge_definition_operations_update_the_mirror(manager: GraphMetadataManager):
    manager.add_edge_definition(EdgeDefinition("Relation", ("Host",), ("Host",)))
    assert manager.list_edge_definitions() == ["Follow", "Relation"]

    info = manager.extend_edge_definition("Follow", ["Host"], [])
    assert info.definitions.get("Follow").from_collections == ("Person", "Host")

    manager.edit_edge_definition("Relation", ["Person"], ["Person"])
    assert manager.definitions.get("Relation").from_collections == ("Person",)

    info = manager.delete_edge_definition("Follow")
    assert manager.list_edge_definitions() == ["Relation"]
    assert info.orphan_collections == ("Host",)


def test_rejected_mutation_leaves_mirror_unchanged(manager: GraphMetadataManager):
    before = manager.definitions
    with pytest.raises(NotFoundError):
        manager.extend_edge_definition("Relation", ["Host"], ["Host"])
    assert manager.definitions is before


def test_vertex_collection_membership(manager: GraphMetadataManager):
    manager.add_vertex_collection("Host")
    assert manager.orphan_collections() == ["Host"]
    assert manager.list_vertex_collections() == ["Host", "Person"]

    manager.remove_vertex_collection("Host")
    assert manager.orphan_collections() == []

    with pytest.raises(ConflictError):
        manager.remove_vertex_collection("Person")


def test_drop_is_terminal_and_skips_the_store(manager: GraphMetadataManager, store: InMemoryStore):
    assert manager.drop() is True
    assert manager.state is GraphState.DROPPED

    spy = mock.Mock(wraps=store)
    manager.store = spy
    for call in (
        manager.info,
        manager.drop,
        manager.refresh,
        manager.list_edge_definitions,
        lambda: manager.add_vertex_collection("Host"),
        lambda: manager.extend_edge_definition("Follow", ["Host"], []),
        lambda: manager.create([FOLLOW]),
    ):
        with pytest.raises(InvalidStateError):
            call()
    assert spy.method_calls == []


def test_drop_of_missing_graph_returns_false(store: InMemoryStore):
    manager = GraphMetadataManager(name="Missing", store=store)
    assert manager.drop() is False
    assert manager.state is GraphState.DROPPED


def test_list_graphs(store: InMemoryStore, manager: GraphMetadataManager):
    GraphMetadataManager(name="Other", store=store).create([])
    assert list_graphs(store) == ["SocialGraph", "Other"]
