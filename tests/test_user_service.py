import pytest

from atreus.tokens import JWT_SIGN_KEY, parse_token
from atreus.user.biz import UserUsecase
from atreus.user.data import SqlUserRepo, new_database
from atreus.user.service import UserService


@pytest.fixture
def service():
    database = new_database(":memory:")
    yield UserService(UserUsecase(SqlUserRepo(database)))
    database.close()


PASSWORD = "password"


def test_register_returns_token_for_user(service):
    reply = service.user_register("alice", PASSWORD)
    assert reply.status_code == 0
    assert reply.status_msg == "success"
    assert reply.user_id >= 1
    assert parse_token(JWT_SIGN_KEY, reply.token)["user_id"] == reply.user_id


def test_register_twice_fails(service):
    service.user_register("alice", PASSWORD)
    reply = service.user_register("alice", PASSWORD)
    assert reply.status_code == 300
    assert reply.status_msg == "the username has been registered"
    assert reply.token == ""


def test_login_success(service):
    registered = service.user_register("bob", PASSWORD)
    reply = service.user_login("bob", PASSWORD)
    assert reply.status_code == 0
    assert reply.user_id == registered.user_id


def test_login_wrong_password(service):
    service.user_register("bob", PASSWORD)
    reply = service.user_login("bob", "secret")
    assert reply.status_code == 300
    assert reply.status_msg == "incorrect password"


def test_login_unknown_user(service):
    reply = service.user_login("ghost", PASSWORD)
    assert reply.status_code == 300
    assert reply.status_msg == "can not find registered user"


def test_get_user_info(service):
    registered = service.user_register("carol", PASSWORD)
    reply = service.get_user_info(registered.user_id, registered.token)
    assert reply.status_code == 0
    assert reply.user.name == "carol"
    assert reply.user.id == registered.user_id


def test_get_user_info_bad_token(service):
    registered = service.user_register("carol", PASSWORD)
    reply = service.get_user_info(registered.user_id, "token")
    assert reply.status_code == 300
    assert reply.user is None


def test_get_user_info_unknown_user(service):
    registered = service.user_register("carol", PASSWORD)
    reply = service.get_user_info(registered.user_id + 100, registered.token)
    assert reply.status_code == 300
    assert reply.status_msg == "can not find the user"


def test_update_user_info_reports_internal_error(service):
    reply = service.update_user_info("n", "a", "b", "s")
    assert reply.status_code == 300
    assert reply.status_msg == "internal error"


def test_get_user_infos(service):
    a = service.user_register("a", PASSWORD)
    b = service.user_register("b", PASSWORD)
    reply = service.get_user_infos([a.user_id, b.user_id])
    assert reply.status_code == 0
    assert sorted(u.name for u in reply.users) == ["a", "b"]


def test_get_user_infos_none_found(service):
    reply = service.get_user_infos([5])
    assert reply.status_code == 0
    assert reply.users == []


def test_update_counters_echo_user_and_apply(service):
    registered = service.user_register("dave", PASSWORD)
    uid = registered.user_id
    assert service.update_follow(uid, 2).user_id == uid
    assert service.update_follower(uid, 3).status_msg == "success"
    service.update_work(uid, 1)
    service.update_favorite(uid, 4)
    service.update_favorited(uid, 5)
    user = service.get_user_infos([uid]).users[0]
    assert user.follow_count == 2
    assert user.follower_count == 3
    assert user.work_count == 1
    assert user.favorite_count == 4
    assert user.total_favorited == 5
    assert user.is_follow is False