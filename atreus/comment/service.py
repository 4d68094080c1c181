"""The comment service: request handlers returning status replies."""

from __future__ import annotations

from dataclasses import dataclass, field

from atreus.comment.biz import Comment, CommentUsecase

_SUCCESS = 0
_FAILURE = -1
_SUCCESS_MSG = "Success"


@dataclass
class CommentListReply:
    status_code: int
    status_msg: str
    comment_list: list[Comment] = field(default_factory=list)


@dataclass
class CommentActionReply:
    status_code: int
    status_msg: str
    comment: Comment | None = None


class CommentService:
    def __init__(self, usecase: CommentUsecase) -> None:
        self._usecase = usecase

    def get_comment_list(self, video_id: int, token: str) -> CommentListReply:
        try:
            comments = self._usecase.get_comment_list(token, video_id)
        except Exception as exc:
            return CommentListReply(_FAILURE, str(exc))
        return CommentListReply(_SUCCESS, _SUCCESS_MSG, list(comments or []))

    def comment_action(
        self,
        video_id: int,
        comment_id: int,
        action_type: int,
        comment_text: str,
        token: str,
    ) -> CommentActionReply:
        try:
            comment = self._usecase.comment_action(
                video_id, comment_id, action_type, comment_text, token
            )
        except Exception as exc:
            return CommentActionReply(_FAILURE, str(exc))
        # Deleting yields no comment.
        return CommentActionReply(_SUCCESS, _SUCCESS_MSG, comment)