"""Comment business rules: listing, creating and deleting comments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol

from atreus.tokens import TokenError, get_token_data, parse_token

_BAD_ACTION = "the value of action_type is not in the specified range"


@dataclass
class User:
    id: int = 0
    name: str = ""
    avatar: str = ""
    background_image: str = ""
    signature: str = ""
    is_follow: bool = False
    follow_count: int = 0
    follower_count: int = 0
    total_favorited: int = 0
    work_count: int = 0
    favorite_count: int = 0


@dataclass
class Comment:
    id: int = 0
    user: User | None = None
    content: str = ""
    create_date: str = ""


class ActionType(IntEnum):
    """What a comment action does."""

    CREATE = 1
    DELETE = 2


class CommentRepo(Protocol):
    """Storage for comments."""

    def create_comment(self, video_id: int, comment_text: str, user_id: int) -> Comment | None: ...

    def delete_comment(self, video_id: int, comment_id: int, user_id: int) -> Comment | None: ...

    def get_comment_list(self, video_id: int) -> list[Comment]: ...


def _user_id(data: dict[str, Any]) -> int:
    try:
        return int(data["user_id"])
    except (TypeError, ValueError) as exc:
        raise TokenError("the token does not carry critical data") from exc


class CommentUsecase:
    def __init__(self, token_key: str, repo: CommentRepo) -> None:
        self._token_key = token_key
        self._repo = repo

    def _authenticate(self, token_string: str) -> dict[str, Any]:
        return get_token_data(parse_token(self._token_key, token_string))

    def get_comment_list(self, token_string: str, video_id: int) -> list[Comment]:
        """Return the comments on ``video_id`` for a holder of a valid token."""
        self._authenticate(token_string)
        return self._repo.get_comment_list(video_id)

    def comment_action(
        self,
        video_id: int,
        comment_id: int,
        action_type: int,
        comment_text: str,
        token_string: str,
    ) -> Comment | None:
        """Create or delete a comment as the user named in the token."""
        user_id = _user_id(self._authenticate(token_string))
        try:
            action = ActionType(action_type)
        except ValueError:
            raise ValueError(_BAD_ACTION) from None
        if action is ActionType.CREATE:
            return self._repo.create_comment(video_id, comment_text, user_id)
        return self._repo.delete_comment(video_id, comment_id, user_id)