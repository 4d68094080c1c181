"""Video publishing business rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class User:
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


@dataclass
class Video:
    id: int = 0
    author: User = field(default_factory=User)
    play_url: str = ""
    cover_url: str = ""
    favorite_count: int = 0
    comment_count: int = 0
    is_favorite: bool = False
    title: str = ""


class PublishRepo(Protocol):
    """Storage for published videos."""

    def find_user_by_id(self, user_id: int) -> User: ...

    def create_video(self, video: Video) -> object: ...

    def find_video_list_by_user_id(self, user_id: int) -> list[Video]: ...

    def find_video_list_by_ids(self, ids: list[int]) -> list[Video]: ...

    def find_video_list_by_count(self, latest_time: str, number: int) -> list[Video]: ...

    def update_video(self, video_id: int, field: str, count: int, is_positive: bool) -> None: ...


def auth(token: str) -> User:
    """Return the author behind ``token``.

    Every token is accepted and yields an anonymous user.
    """
    return User()


def upload_video(video_data: bytes) -> tuple[str, str]:
    """Return the play and cover URLs for uploaded video data.

    The data must be a bytes-like object. No storage backend is attached,
    so both URLs are empty.
    """
    if not isinstance(video_data, (bytes, bytearray, memoryview)):
        raise TypeError(f"video data must be bytes, not {type(video_data).__name__}")
    play_url = cover_url = ""
    return play_url, cover_url


class PublishUsecase:
    def __init__(self, repo: PublishRepo) -> None:
        self._repo = repo

    def publish_video(self, token: str, title: str, video_data: bytes) -> None:
        """Authenticate the author, upload the data and store the video."""
        author = auth(token)
        play_url, cover_url = upload_video(video_data)
        video = Video(author=author, title=title, play_url=play_url, cover_url=cover_url)
        self._repo.create_video(video)

    def get_video_list_by_user_id(self, user_id: int) -> list[Video]:
        return self._repo.find_video_list_by_user_id(user_id)

    def get_video_list_by_ids(self, ids: list[int]) -> list[Video]:
        return self._repo.find_video_list_by_ids(ids)

    def get_video_list_by_count(self, latest_time: str, number: int) -> list[Video]:
        """Return up to ``number`` feed videos published before ``latest_time``."""
        return list(self._repo.find_video_list_by_count(latest_time, number) or [])

    def update_video_count(self, video_id: int, field: str, count: int) -> None:
        """Apply a signed change to a video's ``field`` counter."""
        if count < 0:
            self._repo.update_video(video_id, field, -count, False)
        else:
            self._repo.update_video(video_id, field, count, True)