"""SQL storage for users."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable

from atreus.db import Database
from atreus.user.biz import User, UserInfo

USER_TABLE_NAME = "users"

_UINT32_MASK = 0xFFFFFFFF

_COLUMNS = {
    "username": "username",
    "password": "password",
    "name": "name",
    "follow_count": "follow_count",
    "follower_count": "follower_count",
    "avatar": "avatar_url",
    "background_image": "background_image_url",
    "signature": "signature",
    "total_favorited": "total_favorited",
    "work_count": "work_count",
    "favorite_count": "favorite_count",
}

_INFO_COLUMNS = {
    "name": "name",
    "avatar": "avatar_url",
    "background_image": "background_image_url",
    "signature": "signature",
}

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {USER_TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL,
    password TEXT NOT NULL,
    name TEXT NOT NULL,
    follow_count INTEGER NOT NULL DEFAULT 0,
    follower_count INTEGER NOT NULL DEFAULT 0,
    avatar_url TEXT NOT NULL DEFAULT '',
    background_image_url TEXT NOT NULL DEFAULT '',
    signature TEXT NOT NULL DEFAULT '',
    total_favorited INTEGER NOT NULL DEFAULT 0,
    work_count INTEGER NOT NULL DEFAULT 0,
    favorite_count INTEGER NOT NULL DEFAULT 0,
    deleted_at TEXT
)
"""

_SELECT = (
    "SELECT id, "
    + ", ".join(_COLUMNS.values())
    + f" FROM {USER_TABLE_NAME} WHERE deleted_at IS NULL"
)


def new_database(source: str) -> Database:
    """Open the database that holds the user table."""
    return Database(source)


def calculate_valid_uint32(src: int, mod: int) -> int:
    """Apply a signed change to an unsigned 32-bit counter, stopping at zero."""
    if mod < 0:
        decrease = -mod
        return 0 if src < decrease else src - decrease
    return (src + mod) & _UINT32_MASK


def _row_to_user(row: sqlite3.Row) -> User:
    values = {field: row[column] for field, column in _COLUMNS.items()}
    return User(id=row["id"], **values)


class SqlUserRepo:
    """A user repository kept in an SQL table."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._db.session().execute(_SCHEMA)

    def save(self, user: User) -> User:
        """Insert ``user``, or update it when its id is already stored."""
        values = [getattr(user, field) for field in _COLUMNS]
        with self._db.transaction() as conn:
            if user.id:
                assignments = ", ".join(f"{column} = ?" for column in _COLUMNS.values())
                cursor = conn.execute(
                    f"UPDATE {USER_TABLE_NAME} SET {assignments} WHERE id = ?",
                    [*values, user.id],
                )
                if cursor.rowcount:
                    return user
                columns = ", ".join(["id", *_COLUMNS.values()])
                marks = ", ".join("?" * (len(_COLUMNS) + 1))
                conn.execute(
                    f"INSERT INTO {USER_TABLE_NAME} ({columns}) VALUES ({marks})",
                    [user.id, *values],
                )
                return user
            columns = ", ".join(_COLUMNS.values())
            marks = ", ".join("?" * len(_COLUMNS))
            cursor = conn.execute(
                f"INSERT INTO {USER_TABLE_NAME} ({columns}) VALUES ({marks})", values
            )
            user.id = cursor.lastrowid
        return user

    def _find_one(self, where: str, param: object) -> User:
        row = self._db.session().execute(f"{_SELECT} AND {where} LIMIT 1", (param,)).fetchone()
        return _row_to_user(row) if row is not None else User()

    def find_by_id(self, user_id: int) -> User:
        """Return the user with ``user_id``, or an empty user."""
        return self._find_one("id = ?", user_id)

    def find_by_ids(self, user_ids: Iterable[int]) -> list[User]:
        ids = list(user_ids)
        if not ids:
            return []
        marks = ", ".join("?" * len(ids))
        rows = self._db.session().execute(
            f"{_SELECT} AND id IN ({marks}) ORDER BY id", ids
        )
        return [_row_to_user(row) for row in rows]

    def find_by_username(self, username: str) -> User:
        """Return the user called ``username``, or an empty user."""
        return self._find_one("username = ?", username)

    def update_info(self, info: UserInfo) -> None:
        """Reject the change: the editable fields carry no user to apply them to."""
        changes = {
            column: value
            for field, column in _INFO_COLUMNS.items()
            if (value := getattr(info, field, ""))
        }
        if not changes:
            raise ValueError("no user information to update")
        raise LookupError(
            "cannot update " + ", ".join(changes) + ": the request names no user"
        )

    def _update_counter(self, user_id: int, field: str, change: int) -> None:
        user = self.find_by_id(user_id)
        value = calculate_valid_uint32(getattr(user, field), change)
        column = _COLUMNS[field]
        self._db.session().execute(
            f"UPDATE {USER_TABLE_NAME} SET {column} = ? WHERE id = ?", (value, user_id)
        )

    def update_follow(self, user_id: int, follow_change: int) -> None:
        self._update_counter(user_id, "follow_count", follow_change)

    def update_follower(self, user_id: int, follower_change: int) -> None:
        self._update_counter(user_id, "follower_count", follower_change)

    def update_favorited(self, user_id: int, favorited_change: int) -> None:
        self._update_counter(user_id, "total_favorited", favorited_change)

    def update_work(self, user_id: int, work_change: int) -> None:
        self._update_counter(user_id, "work_count", work_change)

    def update_favorite(self, user_id: int, favorite_change: int) -> None:
        self._update_counter(user_id, "favorite_count", favorite_change)