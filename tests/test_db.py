import sqlite3

import pytest

from atreus.db import Database, Transaction


@pytest.fixture
def db():
    database = Database(":memory:")
    database.session().execute("CREATE TABLE items (name TEXT)")
    yield database
    database.close()


def names(db):
    return [row["name"] for row in db.session().execute("SELECT name FROM items ORDER BY name")]


def test_action_commits_and_returns_result(db):
    result = db.action(lambda conn: conn.execute("INSERT INTO items VALUES ('a')").rowcount)
    assert result == 1
    assert names(db) == ["a"]
    assert not db.in_transaction


def test_action_rolls_back_on_error(db):
    def failing(conn):
        conn.execute("INSERT INTO items VALUES ('a')")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        db.action(failing)
    assert names(db) == []
    assert not db.in_transaction


def test_manual_begin_and_rollback(db):
    db.begin()
    db.session().execute("INSERT INTO items VALUES ('x')")
    assert db.in_transaction
    db.rollback()
    assert names(db) == []


def test_manual_begin_and_commit(db):
    db.begin()
    db.session().execute("INSERT INTO items VALUES ('y')")
    db.commit()
    assert names(db) == ["y"]


def test_nested_transaction_rolls_back_only_inner(db):
    with db.transaction() as conn:
        conn.execute("INSERT INTO items VALUES ('outer')")
        with pytest.raises(ValueError):
            with db.transaction() as inner:
                inner.execute("INSERT INTO items VALUES ('inner')")
                raise ValueError("inner failure")
    assert names(db) == ["outer"]


def test_transaction_object_commits(db):
    tran = Transaction(db)
    result = tran.action(
        lambda database: database.session().execute("INSERT INTO items VALUES ('t')").rowcount
    )
    assert result == 1
    assert names(db) == ["t"]


def test_transaction_object_rolls_back(db):
    tran = Transaction(db)

    def failing(database):
        database.session().execute("INSERT INTO items VALUES ('t')")
        raise KeyError("missing")

    with pytest.raises(KeyError):
        tran.action(failing)
    assert names(db) == []


def test_close_makes_connection_unusable():
    database = Database()
    conn = database.session()
    database.close()
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")


def test_context_manager_closes(tmp_path):
    path = str(tmp_path / "data.db")
    with Database(path) as database:
        database.session().execute("CREATE TABLE t (v INTEGER)")
        database.action(lambda conn: conn.execute("INSERT INTO t VALUES (3)"))
    with Database(path) as reopened:
        rows = reopened.session().execute("SELECT v FROM t").fetchall()
    assert [row["v"] for row in rows] == [3]