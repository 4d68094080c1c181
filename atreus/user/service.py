"""The user service: request handlers returning status replies."""

from __future__ import annotations

from dataclasses import dataclass, field

from atreus.tokens import TokenError
from atreus.user.biz import InternalError, User, UserInfo, UserUsecase

_FAILURE = 300
_SUCCESS = 0
_SUCCESS_MSG = "success"
_HANDLED = (ValueError, InternalError, TokenError)


@dataclass
class UserView:
    id: int = 0
    name: str = ""
    follow_count: int = 0
    follower_count: int = 0
    is_follow: bool = False
    avatar: str = ""
    background_image: str = ""
    signature: str = ""
    total_favorited: int = 0
    work_count: int = 0
    favorite_count: int = 0

    @classmethod
    def from_user(cls, user: User) -> UserView:
        return cls(
            id=user.id,
            name=user.name,
            follow_count=user.follow_count,
            follower_count=user.follower_count,
            avatar=user.avatar,
            background_image=user.background_image,
            signature=user.signature,
            total_favorited=user.total_favorited,
            work_count=user.work_count,
            favorite_count=user.favorite_count,
        )


@dataclass
class AuthReply:
    status_code: int
    status_msg: str
    user_id: int = 0
    token: str = ""


@dataclass
class UserInfoReply:
    status_code: int
    status_msg: str
    user: UserView | None = None


@dataclass
class UserInfosReply:
    status_code: int
    status_msg: str
    users: list[UserView] = field(default_factory=list)


@dataclass
class StatusReply:
    status_code: int
    status_msg: str


@dataclass
class UpdateCountReply:
    status_code: int
    status_msg: str
    user_id: int = 0


class UserService:
    def __init__(self, usecase: UserUsecase) -> None:
        self._usecase = usecase

    def user_register(self, username: str, password: str) -> AuthReply:
        try:
            user = self._usecase.register(username, password)
        except _HANDLED as exc:
            return AuthReply(_FAILURE, str(exc))
        return AuthReply(_SUCCESS, _SUCCESS_MSG, user.id, user.token)

    def user_login(self, username: str, password: str) -> AuthReply:
        try:
            user = self._usecase.login(username, password)
        except _HANDLED as exc:
            return AuthReply(_FAILURE, str(exc))
        return AuthReply(_SUCCESS, _SUCCESS_MSG, user.id, user.token)

    def get_user_info(self, user_id: int, token: str) -> UserInfoReply:
        try:
            user = self._usecase.get_info(user_id, token)
        except _HANDLED as exc:
            return UserInfoReply(_FAILURE, str(exc))
        return UserInfoReply(_SUCCESS, _SUCCESS_MSG, UserView.from_user(user))

    def update_user_info(
        self, name: str, avatar: str, background_image: str, signature: str
    ) -> StatusReply:
        info = UserInfo(
            name=name, avatar=avatar, background_image=background_image, signature=signature
        )
        try:
            self._usecase.update_info(info)
        except _HANDLED as exc:
            return StatusReply(_FAILURE, str(exc))
        return StatusReply(_SUCCESS, _SUCCESS_MSG)

    def get_user_infos(self, user_ids: list[int]) -> UserInfosReply:
        try:
            users = self._usecase.get_infos(user_ids)
        except _HANDLED as exc:
            return UserInfosReply(_FAILURE, str(exc))
        return UserInfosReply(
            _SUCCESS, _SUCCESS_MSG, [UserView.from_user(user) for user in users]
        )

    def _update(self, method, user_id: int, change: int) -> UpdateCountReply:
        try:
            method(user_id, change)
        except _HANDLED as exc:
            return UpdateCountReply(_FAILURE, str(exc))
        return UpdateCountReply(_SUCCESS, _SUCCESS_MSG, user_id)

    def update_follow(self, user_id: int, follow_change: int) -> UpdateCountReply:
        return self._update(self._usecase.update_follow, user_id, follow_change)

    def update_follower(self, user_id: int, follower_change: int) -> UpdateCountReply:
        return self._update(self._usecase.update_follower, user_id, follower_change)

    def update_favorited(self, user_id: int, favorited_change: int) -> UpdateCountReply:
        return self._update(self._usecase.update_favorited, user_id, favorited_change)

    def update_work(self, user_id: int, work_change: int) -> UpdateCountReply:
        return self._update(self._usecase.update_work, user_id, work_change)

    def update_favorite(self, user_id: int, favorite_change: int) -> UpdateCountReply:
        return self._update(self._usecase.update_favorite, user_id, favorite_change)