"""User business rules: registration, login and profile counters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from atreus.passwords import gen_salt_password
from atreus.tokens import JWT_SIGN_KEY, parse_token, produce_token


class InternalError(Exception):
    """Raised when storage or token issuing fails."""

    def __init__(self, message: str = "internal error") -> None:
        super().__init__(message)


@dataclass
class User:
    id: int = 0
    username: str = ""
    password: str = ""
    name: str = ""
    follow_count: int = 0
    follower_count: int = 0
    avatar: str = ""
    background_image: str = ""
    signature: str = ""
    total_favorited: int = 0
    work_count: int = 0
    favorite_count: int = 0
    is_follow: bool = False
    token: str = ""


@dataclass
class UserInfo:
    """The parts of a user profile the user may change."""

    name: str = ""
    avatar: str = ""
    background_image: str = ""
    signature: str = ""


class UserRepo(Protocol):
    """Storage for users. Lookups return an empty ``User`` when nothing matches."""

    def save(self, user: User) -> User: ...

    def find_by_id(self, user_id: int) -> User: ...

    def find_by_ids(self, user_ids: list[int]) -> list[User]: ...

    def find_by_username(self, username: str) -> User: ...

    def update_info(self, info: UserInfo) -> None: ...

    def update_follow(self, user_id: int, follow_change: int) -> None: ...

    def update_follower(self, user_id: int, follower_change: int) -> None: ...

    def update_favorited(self, user_id: int, favorited_change: int) -> None: ...

    def update_work(self, user_id: int, work_change: int) -> None: ...

    def update_favorite(self, user_id: int, favorite_change: int) -> None: ...


class UserUsecase:
    def __init__(self, repo: UserRepo) -> None:
        self._repo = repo

    def _find_by_username(self, username: str) -> User:
        try:
            return self._repo.find_by_username(username)
        except Exception as exc:
            raise InternalError() from exc

    @staticmethod
    def _issue_token(user: User) -> User:
        try:
            user.token = produce_token(user.id)
        except Exception as exc:
            raise InternalError() from exc
        return user

    def register(self, username: str, password: str) -> User:
        if self._find_by_username(username).username:
            raise ValueError("the username has been registered")
        new_user = User(
            username=username,
            password=gen_salt_password(username, password),
            name=username,
        )
        try:
            saved = self._repo.save(new_user)
        except Exception as exc:
            raise InternalError() from exc
        return self._issue_token(saved)

    def login(self, username: str, password: str) -> User:
        user = self._find_by_username(username)
        if not user.username:
            raise ValueError("can not find registered user")
        if user.password != gen_salt_password(username, password):
            raise ValueError("incorrect password")
        return self._issue_token(user)

    def get_info(self, user_id: int, token_string: str) -> User:
        parse_token(JWT_SIGN_KEY, token_string)
        try:
            user = self._repo.find_by_id(user_id)
        except Exception as exc:
            raise InternalError() from exc
        if not user.username:
            raise ValueError("can not find the user")
        return user

    def update_info(self, info: UserInfo) -> None:
        try:
            self._repo.update_info(info)
        except Exception as exc:
            raise InternalError() from exc

    def get_infos(self, user_ids: list[int]) -> list[User]:
        try:
            users = self._repo.find_by_ids(user_ids)
        except Exception as exc:
            raise InternalError() from exc
        return list(users) if users else []

    def update_follow(self, user_id: int, follow_change: int) -> None:
        try:
            self._repo.update_follow(user_id, follow_change)
        except Exception as exc:
            raise InternalError() from exc

    def update_follower(self, user_id: int, follower_change: int) -> None:
        try:
            self._repo.update_follower(user_id, follower_change)
        except Exception as exc:
            raise InternalError() from exc

    def update_favorited(self, user_id: int, favorited_change: int) -> None:
        try:
            self._repo.update_favorited(user_id, favorited_change)
        except Exception as exc:
            raise InternalError() from exc

    def update_work(self, user_id: int, work_change: int) -> None:
        try:
            self._repo.update_work(user_id, work_change)
        except Exception as exc:
            raise InternalError() from exc

    def update_favorite(self, user_id: int, favorite_change: int) -> None:
        try:
            self._repo.update_favorite(user_id, favorite_change)
        except Exception as exc:
            raise InternalError() from exc