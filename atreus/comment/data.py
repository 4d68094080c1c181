"""Comment storage: SQL rows with a Redis hash cache per video."""

from __future__ import annotations

import calendar
import dataclasses
import json
import logging
import random
import re
import sqlite3
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any, Protocol

import redis

from atreus.comment.biz import Comment, User
from atreus.db import Database

COMMENT_TABLE_NAME = "comments"

_log = logging.getLogger(__name__)

_DATE_FORMAT = "%m-%d"
_DATE_PATTERN = re.compile(r"(\d{2})-(\d{2})")
_INVALID_DATE_KEY = (1, 1, 1)

_SCHEMA = (
    f"""
CREATE TABLE IF NOT EXISTS {COMMENT_TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    video_id INTEGER NOT NULL,
    content TEXT NOT NULL,
    created_at TEXT DEFAULT '',
    deleted_at TEXT
)
""",
    f"CREATE INDEX IF NOT EXISTS idx_{COMMENT_TABLE_NAME}_user_id "
    f"ON {COMMENT_TABLE_NAME} (user_id)",
    f"CREATE INDEX IF NOT EXISTS idx_{COMMENT_TABLE_NAME}_video_id "
    f"ON {COMMENT_TABLE_NAME} (video_id)",
)

_USER_FIELDS = (
    ("Id", "id"),
    ("Name", "name"),
    ("Avatar", "avatar"),
    ("BackgroundImage", "background_image"),
    ("Signature", "signature"),
    ("IsFollow", "is_follow"),
    ("FollowCount", "follow_count"),
    ("FollowerCount", "follower_count"),
    ("TotalFavorited", "total_favorited"),
    ("WorkCount", "work_count"),
    ("FavoriteCount", "favorite_count"),
)

_COMMENT_FIELDS = (
    ("Id", "id"),
    ("Content", "content"),
    ("CreateDate", "create_date"),
)


class UserClient(Protocol):
    """The user service, as seen by comment storage.

    ``get_user_infos`` raises when the service reports a failure.
    """

    def get_user_infos(self, user_ids: list[int]) -> list[User]: ...


class PublishClient(Protocol):
    """The publish service, as seen by comment storage.

    ``update_comment`` raises when the service reports a failure.
    """

    def update_comment(self, video_id: int, comment_change: int) -> None: ...


def _seconds(value: float | timedelta | None) -> float | None:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value


def new_redis_conn(
    addr: str,
    db: int = 0,
    password: str | None = None,
    read_timeout: float | timedelta | None = None,
    write_timeout: float | timedelta | None = None,
) -> redis.Redis:
    """Connect to Redis at ``host:port`` and check the connection with a ping."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid redis address {addr!r}")
    client = redis.Redis(
        host=host or "localhost",
        port=int(port),
        db=db,
        password=password or None,
        socket_timeout=_seconds(read_timeout),
        socket_connect_timeout=_seconds(write_timeout),
    )
    try:
        client.ping()
    except redis.RedisError as exc:
        raise ConnectionError(f"Redis database connection failure, err : {exc}") from exc
    return client


def random_time(unit: timedelta, begin: int, end: int) -> timedelta:
    """Return ``unit`` times a random whole number from ``begin`` to ``end``."""
    return unit * random.randint(begin, end)


def _date_key(create_date: str) -> tuple[int, int, int]:
    match = _DATE_PATTERN.fullmatch(create_date)
    if match is None:
        return _INVALID_DATE_KEY
    month, day = int(match.group(1)), int(match.group(2))
    # Dates carry no year; February 29th is accepted.
    if not 1 <= month <= 12 or not 1 <= day <= calendar.monthrange(2000, month)[1]:
        return _INVALID_DATE_KEY
    return (0, month, day)


def sort_comments(comments: Iterable[Comment]) -> list[Comment]:
    """Return the comments newest first by their ``MM-DD`` date.

    Comments whose date cannot be read sort before all others.
    """
    return sorted(comments, key=lambda comment: _date_key(comment.create_date), reverse=True)


def _encode_user(user: User | None) -> dict[str, Any] | None:
    if user is None:
        return None
    return {key: getattr(user, attr) for key, attr in _USER_FIELDS}


def _encode_comment(comment: Comment) -> str:
    data: dict[str, Any] = {"Id": comment.id, "User": _encode_user(comment.user)}
    data["Content"] = comment.content
    data["CreateDate"] = comment.create_date
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def _fields(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return {str(key).lower(): value for key, value in data.items()}


def _decode_user(data: Any) -> User | None:
    if data is None:
        return None
    fields = _fields(data)
    return User(
        **{attr: fields[key.lower()] for key, attr in _USER_FIELDS if key.lower() in fields}
    )


def _decode_comment(raw: str | bytes) -> Comment:
    fields = _fields(json.loads(raw))
    values = {
        attr: fields[key.lower()] for key, attr in _COMMENT_FIELDS if key.lower() in fields
    }
    return Comment(user=_decode_user(fields.get("user")), **values)


class CommentStore:
    """Comments kept in SQL, with each video's comments cached in a Redis hash."""

    def __init__(
        self,
        database: Database,
        cache: redis.Redis,
        user_client: UserClient,
        publish_client: PublishClient,
    ) -> None:
        self._db = database
        self._cache = cache
        self._users = user_client
        self._publish = publish_client
        session = self._db.session()
        for statement in _SCHEMA:
            session.execute(statement)

    def _fetch_users(self, user_ids: list[int]) -> list[User]:
        users = self._users.get_user_infos(user_ids)
        if not users:
            raise RuntimeError("the user service did not search for any information")
        return list(users)

    def delete_comment(self, video_id: int, comment_id: int, user_id: int) -> None:
        """Delete a comment from the database, then from the cache."""
        self.del_comment(video_id, comment_id, user_id)
        key, field = str(video_id), str(comment_id)
        try:
            raw = self._cache.hget(key, field)
            if raw is not None:
                _decode_comment(raw)
                self._cache.hdel(key, field)
        except (redis.RedisError, ValueError) as exc:
            _log.error("redis delete error %s", exc)
        else:
            _log.info("redis delete success")
        _log.info(
            "DeleteComment -> videoId: %s - userId: %s - commentId: %s",
            video_id,
            user_id,
            comment_id,
        )
        return None

    def create_comment(self, video_id: int, comment_text: str, user_id: int) -> Comment:
        """Store a new comment and add it to the video's cached comments."""
        comment = self.insert_comment(video_id, comment_text, user_id)
        key = str(video_id)
        try:
            if self._cache.hlen(key) == 0:
                self.cache_create_comment_transaction(self.search_comment_list(video_id), video_id)
            else:
                self._cache.hset(key, str(comment.id), _encode_comment(comment))
        except (redis.RedisError, RuntimeError) as exc:
            _log.error("redis store error %s", exc)
        else:
            _log.info("redis store success")
        _log.info(
            "CreateComment -> videoId: %s - userId: %s - comment: %s",
            video_id,
            user_id,
            comment_text,
        )
        return comment

    def get_comment_list(self, video_id: int) -> list[Comment]:
        """Return a video's comments newest first, from the cache when it holds them."""
        key = str(video_id)
        try:
            cached = self._cache.hgetall(key)
        except redis.RedisError as exc:
            raise RuntimeError(f"redis query error {exc}") from exc
        if cached:
            try:
                comments = [_decode_comment(raw) for raw in cached.values()]
            except ValueError as exc:
                raise RuntimeError(f"json unmarshal error {exc}") from exc
            return sort_comments(comments)
        comments = self.search_comment_list(video_id)
        try:
            self.cache_create_comment_transaction(comments, video_id)
        except RuntimeError as exc:
            _log.error("redis transaction error %s", exc)
        return sort_comments(comments)

    def del_comment(self, video_id: int, comment_id: int, user_id: int) -> None:
        """Delete the comment if it exists; only its author on its video may."""

        def remove(conn: sqlite3.Connection) -> None:
            row = conn.execute(
                f"SELECT user_id, video_id FROM {COMMENT_TABLE_NAME} "
                "WHERE id = ? AND deleted_at IS NULL LIMIT 1",
                (comment_id,),
            ).fetchone()
            if row is None:
                return
            if row["user_id"] != user_id:
                raise PermissionError("comment user conflict")
            if row["video_id"] != video_id:
                raise ValueError("comment video conflict")
            conn.execute(
                f"UPDATE {COMMENT_TABLE_NAME} SET deleted_at = ? WHERE id = ?",
                (datetime.now().isoformat(), comment_id),
            )
            try:
                self._publish.update_comment(video_id, -1)
            except Exception as exc:
                raise RuntimeError(f"publish update data error {exc}") from exc

        try:
            self._db.action(remove)
        except Exception as exc:
            raise RuntimeError(f"database transaction error {exc}") from exc
        return None

    def insert_comment(self, video_id: int, comment_text: str, user_id: int) -> Comment:
        """Insert a comment and count it on the video."""
        if not comment_text:
            raise ValueError("comment text not exist")
        try:
            users = self._fetch_users([user_id])
        except Exception as exc:
            raise RuntimeError(f"user service transfer error {exc}") from exc
        create_date = datetime.now().strftime(_DATE_FORMAT)

        def insert(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                f"INSERT INTO {COMMENT_TABLE_NAME} (user_id, video_id, content, created_at) "
                "VALUES (?, ?, ?, ?)",
                (user_id, video_id, comment_text, create_date),
            )
            try:
                self._publish.update_comment(video_id, 1)
            except Exception as exc:
                raise RuntimeError(f"publish update data error {exc}") from exc
            return cursor.lastrowid

        try:
            comment_id = self._db.action(insert)
        except Exception as exc:
            raise RuntimeError(f"database transaction error {exc}") from exc
        return Comment(
            id=comment_id,
            user=dataclasses.replace(users[0], is_follow=False),
            content=comment_text,
            create_date=create_date,
        )

    def search_comment_list(self, video_id: int) -> list[Comment]:
        """Read a video's comments from the database, joined with their authors."""
        rows: list[sqlite3.Row] = []
        users: list[User] = []

        def load(conn: sqlite3.Connection) -> None:
            nonlocal users
            rows.extend(
                conn.execute(
                    f"SELECT id, user_id, content, created_at FROM {COMMENT_TABLE_NAME} "
                    "WHERE video_id = ? AND deleted_at IS NULL ORDER BY id",
                    (video_id,),
                ).fetchall()
            )
            if not rows:
                return
            try:
                users = self._fetch_users([row["user_id"] for row in rows])
            except Exception as exc:
                raise RuntimeError(f"user search data error {exc}") from exc

        try:
            self._db.action(load)
        except Exception as exc:
            _log.error("comment search error %s", exc)
        by_id = {user.id: user for user in users}
        return [
            Comment(
                id=row["id"],
                user=by_id.get(row["user_id"]),
                content=row["content"],
                create_date=row["created_at"] or "",
            )
            for row in rows
        ]

    def cache_create_comment_transaction(
        self, comments: Iterable[Comment], video_id: int
    ) -> None:
        """Cache the comments in one Redis transaction with a random expiry."""
        mapping = {str(comment.id): _encode_comment(comment) for comment in comments}
        if not mapping:
            raise RuntimeError("redis store error, err : no comments to store")
        key = str(video_id)
        try:
            with self._cache.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=mapping)
                # A random expiry keeps cached lists from lapsing together.
                pipe.expire(key, random_time(timedelta(minutes=1), 360, 720))
                pipe.execute()
        except redis.RedisError as exc:
            raise RuntimeError(f"redis transaction commit error, err : {exc}") from exc

    def close(self) -> None:
        """Close the cache connection if it still answers."""
        try:
            self._cache.ping()
        except redis.RedisError:
            _log.warning("Redis connection pool is empty")
            return
        try:
            self._cache.close()
        except redis.RedisError as exc:
            _log.error("Redis connection closure failed, err: %s", exc)
            return
        _log.info("Successfully close the Redis connection")