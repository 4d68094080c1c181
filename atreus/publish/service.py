"""The publish service: request handlers returning status replies."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass, field

from atreus.publish.biz import PublishUsecase, User, Video

_SUCCESS = 0
_FAILURE = -1
_PUBLISHED_MSG = "Video published."
_LIST_MSG = "Return video list."
_UPDATED_MSG = "Update is done."


@dataclass
class VideoView:
    """A video as sent to clients."""

    id: int = 0
    author: User = field(default_factory=User)
    play_url: str = ""
    cover_url: str = ""
    favorite_count: int = 0
    comment_count: int = 0
    is_favorite: bool = False
    title: str = ""

    @classmethod
    def from_video(cls, video: Video) -> VideoView:
        return cls(
            id=video.id,
            author=dataclasses.replace(video.author),
            play_url=video.play_url,
            cover_url=video.cover_url,
            favorite_count=video.favorite_count,
            comment_count=video.comment_count,
            is_favorite=video.is_favorite,
            title=video.title,
        )


@dataclass
class PublishActionReply:
    status_code: int
    status_msg: str


@dataclass
class VideoListReply:
    status_code: int
    status_msg: str
    video_list: list[VideoView] = field(default_factory=list)


@dataclass
class UpdateCountReply:
    status_code: int
    status_msg: str


def _views(videos: Iterable[Video] | None) -> list[VideoView]:
    return [VideoView.from_video(video) for video in videos or []]


class PublishService:
    def __init__(self, usecase: PublishUsecase) -> None:
        self._usecase = usecase

    def publish_action(self, token: str, title: str, data: bytes) -> PublishActionReply:
        try:
            self._usecase.publish_video(token, title, data)
        except Exception as exc:
            return PublishActionReply(_FAILURE, str(exc))
        return PublishActionReply(_SUCCESS, _PUBLISHED_MSG)

    def get_publish_list(self, user_id: int) -> VideoListReply:
        try:
            videos = self._usecase.get_video_list_by_user_id(user_id)
        except Exception as exc:
            return VideoListReply(_FAILURE, str(exc))
        return VideoListReply(_SUCCESS, _LIST_MSG, _views(videos))

    def get_video_list(self, latest_time: str, number: int) -> VideoListReply:
        try:
            videos = self._usecase.get_video_list_by_count(latest_time, number)
        except Exception as exc:
            return VideoListReply(_FAILURE, str(exc))
        return VideoListReply(_SUCCESS, _LIST_MSG, _views(videos))

    def get_video_list_by_video_ids(self, video_ids: list[int]) -> VideoListReply:
        try:
            videos = self._usecase.get_video_list_by_ids(video_ids)
        except Exception as exc:
            return VideoListReply(_FAILURE, str(exc))
        return VideoListReply(_SUCCESS, _LIST_MSG, _views(videos))

    def update_comment(self, video_id: int, comment_change: int) -> UpdateCountReply:
        """Change a video's comment count; storage failures propagate."""
        self._usecase.update_video_count(video_id, "comment", comment_change)
        return UpdateCountReply(_SUCCESS, _UPDATED_MSG)

    def update_favorite(self, video_id: int, favorite_change: int) -> UpdateCountReply:
        """Change a video's favorite count; storage failures propagate."""
        self._usecase.update_video_count(video_id, "favorite", favorite_change)
        return UpdateCountReply(_SUCCESS, _UPDATED_MSG)