import jwt
import pytest

from atreus.comment.biz import ActionType, Comment, CommentUsecase, User
from atreus.tokens import TokenError

TOKEN_KEY = "secret"


def _initial_comments():
    return {
        1: Comment(1, User(id=1, name="hahah"), "bushuwu1", "08-01"),
        2: Comment(2, User(id=1, name="hahah"), "dadawd", "08-02"),
        3: Comment(3, User(id=2, name="sefafa"), "bdzxvzad", "08-03"),
        4: Comment(4, User(id=1, name="hahah"), "bvrbr", "08-03"),
        5: Comment(5, User(id=3, name="brbs"), "bdadawfvrd", "08-04"),
        6: Comment(6, User(id=5, name="bgssev"), "bdafagaagaga", "08-05"),
    }


class MockCommentRepo:
    def __init__(self):
        self.comments = _initial_comments()
        self.auto_count = 7
        self.deleted = []

    def create_comment(self, video_id, comment_text, user_id):
        comment = Comment(self.auto_count, User(id=user_id, name="hahah"), comment_text, "08-01")
        self.comments[comment.id] = comment
        self.auto_count += 1
        return comment

    def delete_comment(self, video_id, comment_id, user_id):
        self.deleted.append((video_id, comment_id, user_id))
        self.comments.pop(comment_id, None)
        return None

    def get_comment_list(self, video_id):
        return list(self.comments.values())


def _token(claims, key=TOKEN_KEY):
    return jwt.encode(claims, key, algorithm="HS256")


@pytest.fixture
def repo():
    return MockCommentRepo()


@pytest.fixture
def usecase(repo):
    return CommentUsecase(TOKEN_KEY, repo)


@pytest.fixture
def token():
    return _token({"user_id": 1})


def test_comment_action_create(usecase, repo, token):
    comment = usecase.comment_action(1, 0, 1, "test", token)
    assert comment.content == "test"
    assert comment.user.id == 1
    assert repo.comments[comment.id] is comment


def test_comment_action_delete(usecase, repo, token):
    result = usecase.comment_action(1, 1, ActionType.DELETE, "", token)
    assert result is None
    assert 1 not in repo.comments
    assert repo.deleted == [(1, 1, 1)]


def test_get_comment_list(usecase, repo, token):
    comments = usecase.get_comment_list(token, 1)
    assert len(comments) == len(repo.comments)


def test_get_comment_list_after_actions(usecase, repo, token):
    usecase.comment_action(1, 0, ActionType.CREATE, "test", token)
    usecase.comment_action(1, 1, ActionType.DELETE, "", token)
    comments = usecase.get_comment_list(token, 1)
    assert len(comments) == len(repo.comments)
    assert {c.id for c in comments} == set(repo.comments)


@pytest.mark.parametrize("action_type", [0, 3, 99])
def test_unknown_action_type(usecase, token, action_type):
    with pytest.raises(ValueError, match="action_type is not in the specified range"):
        usecase.comment_action(1, 0, action_type, "text", token)


def test_invalid_token_rejected(usecase):
    with pytest.raises(TokenError):
        usecase.get_comment_list("not-a-token", 1)


def test_wrong_key_rejected(usecase):
    with pytest.raises(TokenError):
        usecase.comment_action(1, 0, 1, "text", _token({"user_id": 1}, key="placeholder"))


def test_token_without_user_id_rejected(usecase, repo):
    with pytest.raises(TokenError):
        usecase.comment_action(1, 0, 1, "text", _token({"name": "someone"}))
    assert len(repo.comments) == 6