"""
Copy tests against a live Neo4j Enterprise server.

Set GRAPH_DB_COPY_TEST_URI (and optionally GRAPH_DB_COPY_TEST_USER and
GRAPH_DB_COPY_TEST_PASSWORD) to run them. Two databases, ``sourcedb`` and
``targetdb``, are created and emptied on the server.
"""

import os

import neo4j
import pytest

from graph_db_copy import (
    BoltAdministrator,
    BoltReader,
    BoltWriter,
    CopyOptions,
    SourceStateGuard,
    transfer,
)
from graph_db_copy.database.adapters.bolt import SYSTEM_DATABASE

TEST_URI = os.getenv("GRAPH_DB_COPY_TEST_URI")
SOURCE_DB = "sourcedb"
TARGET_DB = "targetdb"

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not TEST_URI, reason="GRAPH_DB_COPY_TEST_URI is not set"),
]


@pytest.fixture(scope="module")
def driver():
    auth = (
        os.getenv("GRAPH_DB_COPY_TEST_USER", "neo4j"),
        os.getenv("GRAPH_DB_COPY_TEST_PASSWORD", "password"),
    )
    with neo4j.GraphDatabase.driver(TEST_URI, auth=auth) as driver:
        with driver.session(database=SYSTEM_DATABASE) as session:
            for database in (SOURCE_DB, TARGET_DB):
                session.run(f"CREATE DATABASE {database} IF NOT EXISTS WAIT").consume()
        yield driver


@pytest.fixture(autouse=True)
def empty_databases(driver):
    for database in (SOURCE_DB, TARGET_DB):
        driver.execute_query("MATCH (n) DETACH DELETE n", database_=database)
    yield


def run(driver, query, database=SOURCE_DB, **params):
    records, _, _ = driver.execute_query(query, params, database_=database)
    return records


def copy(driver, options=CopyOptions.DEFAULT, guard=None):
    return transfer(
        BoltReader(driver, SOURCE_DB),
        BoltWriter(driver, TARGET_DB),
        options,
        guard=guard,
    )


def test_copy_single_node(driver):
    run(driver, "CREATE (:NodeOne {prop: 123})")

    copy(driver)

    records = run(
        driver, "MATCH (n) RETURN labels(n) AS labels, n.prop AS prop", TARGET_DB
    )
    assert [dict(r) for r in records] == [{"labels": ["NodeOne"], "prop": 123}]


def test_copy_single_relationship(driver):
    run(driver, "CREATE (:NodeOne)-[:TO]->(:NodeTwo)")

    assert copy(driver) == 1

    records = run(
        driver, "MATCH p = (:NodeOne)-[:TO]->(:NodeTwo) RETURN count(p) AS c", TARGET_DB
    )
    assert records[0]["c"] == 1
    assert run(driver, "MATCH (n) RETURN count(n) AS c", TARGET_DB)[0]["c"] == 2


def test_copy_excludes_node_property(driver):
    run(driver, "CREATE (:NodeOne {prop1: 1, prop2: 2, prop3: 3})")

    copy(driver, CopyOptions(exclude_node_properties={"prop2"}))

    records = run(driver, "MATCH (n) RETURN properties(n) AS props", TARGET_DB)
    assert records[0]["props"] == {"prop1": 1, "prop3": 3}


def test_copy_nodes_and_relationship(driver):
    run(
        driver,
        "CREATE (:Person {name: 'Ada'})-[:KNOWS {since: 1843}]->"
        "(:Person {name: 'Charles'})",
    )

    assert copy(driver) == 1

    records = run(
        driver,
        "MATCH (a:Person)-[r:KNOWS]->(b:Person) "
        "RETURN a.name AS a, r.since AS since, b.name AS b",
        database=TARGET_DB,
    )
    assert [dict(r) for r in records] == [{"a": "Ada", "since": 1843, "b": "Charles"}]


def test_copy_preserves_multiple_labels_and_excludes_properties(driver):
    run(
        driver,
        "CREATE (:Person:Admin:`Odd Label` {name: 'Ada', password: 'x'})"
        "-[:`HAS ROLE` {granted: true, token: 't'}]->(:Role {name: 'root'})",
    )
    options = CopyOptions(
        exclude_node_properties={"password"}, exclude_relationship_properties={"token"}
    )

    copy(driver, options)

    records = run(
        driver,
        "MATCH (a)-[r]->(b) RETURN labels(a) AS labels, properties(a) AS props, "
        "type(r) AS type, properties(r) AS rel_props",
        database=TARGET_DB,
    )
    assert len(records) == 1
    record = records[0]
    assert sorted(record["labels"]) == ["Admin", "Odd Label", "Person"]
    assert record["props"] == {"name": "Ada"}
    assert record["type"] == "HAS ROLE"
    assert record["rel_props"] == {"granted": True}


def test_copy_many_batches(driver):
    run(
        driver,
        "UNWIND range(0, 2499) AS i CREATE (:Item {i: i})",
    )
    run(
        driver,
        "MATCH (a:Item), (b:Item) WHERE b.i = a.i + 1 CREATE (a)-[:NEXT]->(b)",
    )

    written = copy(driver, CopyOptions(batch_size=100, writer_concurrency=4))

    assert written == 2499
    counts = run(
        driver,
        "MATCH (a:Item)-[:NEXT]->(b:Item) WHERE b.i = a.i + 1 RETURN count(*) AS c",
        database=TARGET_DB,
    )
    assert counts[0]["c"] == 2499


def test_copy_empty_database(driver):
    assert copy(driver) == 0
    assert run(driver, "MATCH (n) RETURN count(n) AS c", TARGET_DB)[0]["c"] == 0


def test_locking_restores_read_write(driver):
    run(driver, "CREATE (:Person {name: 'Ada'})")
    administrator = BoltAdministrator(driver)
    guard = SourceStateGuard.locking(administrator, SOURCE_DB)

    copy(driver, guard=guard)

    assert administrator.database_info(SOURCE_DB).is_read_write
    assert guard.was_mutated_by_guard is False
