"""Tests for :mod:`arangograph.graph.handle`."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from arangograph import (
    CollectionNameResolver,
    Database,
    DocumentMeta,
    InMemoryStore,
    InvalidStateError,
    NotFoundError,
    PreconditionFailed,
    ValidationError,
    from_field,
    id_field,
    key_field,
    rev_field,
    to_field,
)
from arangograph.graph.metadata import GraphState
from arangograph.graph.naming import class_name


@dataclass
class Person:
    name: str | None = None
    age: int = 0
    key: str | None = key_field()
    id: str | None = id_field()
    rev: str | None = rev_field()


@dataclass
class Host:
    address: str = ""
    key: str | None = key_field()


@dataclass
class Follow:
    source: str | None = from_field()
    target: str | None = to_field()
    key: str | None = key_field()


@pytest.fixture()
def db() -> Database:
    return Database(store=InMemoryStore(), resolver=CollectionNameResolver(convention=class_name))


@pytest.fixture()
def graph(db: Database):
    graph = db.graph("SocialGraph")
    graph.create([(Follow, [Person], [Person])])
    return graph


def test_create_returns_identity_and_definitions(db: Database):
    graph = db.graph("SocialGraph")
    assert graph.state is GraphState.UNBOUND

    result = graph.create([(Follow, [Person], [Person])])

    assert result.id and result.rev
    assert len(result.edge_definitions) == 1
    assert graph.state is GraphState.CREATED


def test_info_matches_created_graph(db: Database):
    graph = db.graph("SocialGraph")
    created = graph.create([(Follow, [Person], [Person])])
    info = graph.info()
    assert (info.key, info.id) == (created.key, created.id)


def test_list_graphs(db: Database, graph):
    assert db.list_graphs() == [graph.name]


def test_list_edge_definitions(db: Database, graph):
    assert graph.list_edge_definitions() == [db.resolve(Follow)]


def test_edge_handle_extends_and_edits(db: Database, graph):
    result = graph.edge(Follow).extend([Host], [Host])
    assert result.definitions.get("Follow").to_collections == ("Person", "Host")

    result = graph.edge("Relation").add([Host], [Host])
    assert len(result.edge_definitions) == 2

    result = graph.edge(Follow).edit([Host], [Host])
    assert result.edge_definitions[0].from_collections == (db.resolve(Host),)

    with pytest.raises(NotFoundError):
        graph.edge("Missing").extend([Host], [Host])


def test_delete_edge_definition(graph):
    result = graph.delete_edge_definition(Follow)
    assert len(result.edge_definitions) == 0
    assert graph.orphan_collections() == ["Person"]


def test_vertex_collections(db: Database, graph):
    result = graph.add_vertex_collection(Host)
    assert len(result.orphan_collections) == 1
    assert sorted(graph.list_vertex_collections()) == sorted([db.resolve(Host), db.resolve(Person)])

    result = graph.remove_vertex_collection(Host)
    assert len(result.orphan_collections) == 0


def test_person_scenario(graph):
    inserted = graph.insert_vertex(Person(age=21, name="raoof hojat"))
    assert inserted.key

    fetched = graph.get_vertex(Person, inserted.key)
    assert fetched.age == 21

    graph.replace_vertex_by_id(Person, inserted.key, {"age": 22})
    replaced = graph.get_vertex(Person, inserted.key)
    assert replaced.name is None
    assert replaced.age == 22

    fresh = graph.insert_vertex(Person(age=21, name="raoof hojat"))
    graph.update_vertex_by_id(Person, fresh.key, {"age": 22})
    updated = graph.get_vertex(Person, fresh.key)
    assert updated.name == "raoof hojat"
    assert updated.age == 22


def test_vertex_preconditions(graph):
    person = Person(age=21, name="raoof hojat")
    inserted = graph.insert_vertex(person)
    person.age = 33

    assert isinstance(graph.replace_vertex(person, if_match_rev=f"{inserted.rev}0"), PreconditionFailed)
    assert isinstance(graph.update_vertex(person, if_match_rev=f"{inserted.rev}0"), PreconditionFailed)
    assert isinstance(graph.remove_vertex(person, if_match_rev=f"{inserted.rev}0"), PreconditionFailed)
    assert isinstance(graph.get_vertex(Person, inserted.key, f"{inserted.rev}0"), PreconditionFailed)

    assert isinstance(graph.update_vertex(person, if_match_rev=inserted.rev), DocumentMeta)
    assert graph.get_vertex(Person, inserted.key).age == 33
    assert graph.remove_vertex_by_id(Person, inserted.key) is None
    assert graph.get_vertex(Person, inserted.key) is None


def test_edge_documents(graph):
    a = Person(name="a")
    b = Person(name="b")
    graph.insert_vertex(a)
    graph.insert_vertex(b)

    meta = graph.insert_edge(Follow(), from_vertex=a, to_vertex=b)
    follow = graph.get_edge(Follow, meta.key)
    assert (follow.source, follow.target) == (a.id, b.id)

    graph.replace_edge_by_id(Follow, meta.key, {})
    assert graph.get_edge(Follow, meta.key).source == a.id
    assert graph.remove_edge_by_id(Follow, meta.key) is None
    assert graph.get_edge(Follow, meta.key) is None


def test_dropped_graph_rejects_everything(graph):
    assert graph.drop() is True
    assert graph.state is GraphState.DROPPED

    for call in (
        graph.info,
        graph.list_edge_definitions,
        graph.list_vertex_collections,
        lambda: graph.add_vertex_collection(Host),
        lambda: graph.remove_vertex_collection(Host),
        lambda: graph.edge(Follow),
        lambda: graph.delete_edge_definition(Follow),
        lambda: graph.insert_vertex(Person()),
        lambda: graph.get_vertex(Person, "1"),
    ):
        with pytest.raises(InvalidStateError):
            call()


def test_entity_stores_obtained_before_drop_are_guarded(graph):
    people = graph.vertices(Person)
    meta = people.insert(Person(age=1))
    graph.drop()
    with pytest.raises(InvalidStateError):
        people.get(meta.key)


def test_independent_handles_share_the_store(db: Database, graph):
    other = db.graph("SocialGraph")
    meta = graph.insert_vertex(Person(age=5))
    assert other.get_vertex(Person, meta.key).age == 5
    other.refresh()
    assert other.list_edge_definitions() == ["Follow"]


def test_from_env_builds_http_database(monkeypatch):
    monkeypatch.setenv("ARANGO_URL", "http://db.example:8529/")
    monkeypatch.setenv("ARANGO_DATABASE", "social")
    monkeypatch.setenv("ARANGO_COLLECTION_NAMING", "snake_case")

    db = Database.from_env()
    try:
        assert str(db.store.client.base_url) == "http://db.example:8529/_db/social/_api/"
        assert db.resolve(Person) == "person"
    finally:
        db.store.close()


def test_document_info_by_id(db: Database, graph):
    meta = graph.insert_vertex(Person(age=21))

    assert db.document_info(meta.id) == meta
    assert db.document_info("Person/none") is None
    with pytest.raises(ValidationError):
        db.document_info("Person")


def test_replace_edge_by_id_can_repoint_endpoints(graph):
    a = Person(name="a")
    b = Person(name="b")
    graph.insert_vertex(a)
    graph.insert_vertex(b)
    meta = graph.insert_edge(Follow(), from_vertex=a, to_vertex=b)

    graph.replace_edge_by_id(Follow, meta.key, {}, from_vertex=b, to_vertex=a)

    follow = graph.get_edge(Follow, meta.key)
    assert (follow.source, follow.target) == (b.id, a.id)
