"""SQL storage for published videos."""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Iterable

from atreus.db import Database
from atreus.publish.biz import User, Video

VIDEO_TABLE_NAME = "videos"

_UINT32_MASK = 0xFFFFFFFF

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {VIDEO_TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    author_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    play_url TEXT NOT NULL,
    cover_url TEXT NOT NULL,
    favorite_count INTEGER NOT NULL DEFAULT 0,
    comment_count INTEGER NOT NULL DEFAULT 0,
    create_at INTEGER
)
"""

_SELECT = (
    "SELECT id, author_id, title, play_url, cover_url, favorite_count, comment_count"
    f" FROM {VIDEO_TABLE_NAME}"
)

_COUNTER_COLUMNS = {"favorite": "favorite_count"}


def _row_to_video(row: sqlite3.Row, author: User) -> Video:
    return Video(
        id=row["id"],
        author=author,
        play_url=row["play_url"],
        cover_url=row["cover_url"],
        favorite_count=row["favorite_count"],
        comment_count=row["comment_count"],
        is_favorite=True,
        title=row["title"],
    )


class SqlPublishRepo:
    """A video repository kept in an SQL table."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._db.session().execute(_SCHEMA)

    def find_user_by_id(self, user_id: int) -> User:
        """Return the author record; user data is not held here."""
        return User(signature="this is June")

    def create_video(self, video: Video) -> int:
        """Store ``video`` with zero counters and return its id."""
        values = {
            "author_id": video.author.id,
            "title": video.title,
            "play_url": video.play_url,
            "cover_url": video.cover_url,
            "favorite_count": 0,
            "comment_count": 0,
            "create_at": int(time.time()),
        }
        if video.id:
            values = {"id": video.id, **values}
        columns = ", ".join(values)
        marks = ", ".join("?" * len(values))
        with self._db.transaction() as conn:
            cursor = conn.execute(
                f"INSERT INTO {VIDEO_TABLE_NAME} ({columns}) VALUES ({marks})",
                list(values.values()),
            )
        return video.id or cursor.lastrowid

    def find_video_list_by_user_id(self, user_id: int) -> list[Video]:
        author = self.find_user_by_id(user_id)
        rows = self._db.session().execute(
            f"{_SELECT} WHERE author_id = ? ORDER BY id", (user_id,)
        )
        return [_row_to_video(row, author) for row in rows]

    def find_video_list_by_ids(self, ids: Iterable[int]) -> list[Video]:
        id_list = list(ids)
        if not id_list:
            return []
        marks = ", ".join("?" * len(id_list))
        rows = self._db.session().execute(
            f"{_SELECT} WHERE id IN ({marks}) ORDER BY id", id_list
        ).fetchall()
        return [_row_to_video(row, self.find_user_by_id(row["author_id"])) for row in rows]

    def find_video_list_by_count(self, latest_time: str, number: int) -> list[Video]:
        """Return the feed before ``latest_time``.

        ``number`` must not be negative. No feed is selected from the table,
        so the result is always empty.
        """
        if number < 0:
            raise ValueError(f"number of videos must not be negative: {number}")
        feed: list[Video] = []
        return feed[:number]

    def update_video(self, video_id: int, field: str, count: int, is_positive: bool) -> None:
        """Add or subtract ``count`` on the favorite or comment counter, as uint32."""
        column = _COUNTER_COLUMNS.get(field, "comment_count")
        with self._db.transaction() as conn:
            row = conn.execute(
                f"SELECT {column} FROM {VIDEO_TABLE_NAME} WHERE id = ? LIMIT 1", (video_id,)
            ).fetchone()
            current = row[0] if row is not None else 0
            change = count if is_positive else -count
            conn.execute(
                f"UPDATE {VIDEO_TABLE_NAME} SET {column} = ? WHERE id = ?",
                ((current + change) & _UINT32_MASK, video_id),
            )