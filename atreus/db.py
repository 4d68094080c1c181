"""A small SQLite connection wrapper with transaction helpers."""

from __future__ import annotations

import itertools
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

T = TypeVar("T")


class Database:
    """An SQLite database whose transactions are driven explicitly."""

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._savepoints = itertools.count(1)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    def session(self) -> sqlite3.Connection:
        """Return the connection for running statements."""
        return self._conn

    def begin(self) -> None:
        self._conn.execute("BEGIN")

    def commit(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("COMMIT")

    def rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the block in a transaction, or a savepoint when one is open."""
        if self._conn.in_transaction:
            name = f"sp_{next(self._savepoints)}"
            self._conn.execute(f"SAVEPOINT {name}")
            try:
                yield self._conn
            except BaseException:
                self._conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
                self._conn.execute(f"RELEASE SAVEPOINT {name}")
                raise
            self._conn.execute(f"RELEASE SAVEPOINT {name}")
            return
        self.begin()
        try:
            yield self._conn
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def action(self, func: Callable[[sqlite3.Connection], T]) -> T:
        """Call ``func`` inside a transaction and return its result."""
        with self.transaction() as conn:
            return func(conn)

    def close(self) -> None:
        self._conn.close()


class Transaction:
    """Runs callables against a database, committing or rolling back."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def action(self, func: Callable[[Database], T]) -> T:
        with self._database.transaction():
            return func(self._database)