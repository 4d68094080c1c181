import pytest

from atreus.user.biz import User, UserInfo
from atreus.user.data import SqlUserRepo, calculate_valid_uint32, new_database


@pytest.fixture
def repo():
    database = new_database(":memory:")
    yield SqlUserRepo(database)
    database.close()


def _make(repo, username):
    password = "password"
    return repo.save(User(username=username, password=password, name=username))


def test_save_assigns_distinct_ids(repo):
    first = _make(repo, "alice")
    second = _make(repo, "bob")
    assert first.id >= 1
    assert second.id > first.id


def test_find_by_id_round_trip(repo):
    saved = _make(repo, "alice")
    found = repo.find_by_id(saved.id)
    assert found.username == "alice"
    assert found.name == "alice"
    assert found.password == "password"
    assert found.id == saved.id


def test_find_by_id_missing_returns_empty_user(repo):
    assert repo.find_by_id(42) == User()


def test_find_by_username(repo):
    saved = _make(repo, "carol")
    assert repo.find_by_username("carol").id == saved.id
    assert repo.find_by_username("nobody").username == ""


def test_find_by_ids(repo):
    a = _make(repo, "a")
    _make(repo, "b")
    c = _make(repo, "c")
    found = repo.find_by_ids([c.id, a.id, 999])
    assert sorted(u.username for u in found) == ["a", "c"]
    assert repo.find_by_ids([]) == []


def test_save_existing_updates(repo):
    saved = _make(repo, "dave")
    saved.signature = "hello"
    repo.save(saved)
    assert repo.find_by_id(saved.id).signature == "hello"
    assert len(repo.find_by_ids([saved.id])) == 1


def test_update_counters(repo):
    user = _make(repo, "erin")
    repo.update_follow(user.id, 3)
    repo.update_follower(user.id, 5)
    repo.update_work(user.id, 2)
    repo.update_favorite(user.id, 4)
    repo.update_favorited(user.id, 6)
    found = repo.find_by_id(user.id)
    assert found.follow_count == 3
    assert found.follower_count == 5
    assert found.work_count == 2
    assert found.favorite_count == 4
    assert found.total_favorited == 6


def test_update_counter_decrease_clamps(repo):
    user = _make(repo, "frank")
    repo.update_follow(user.id, 2)
    repo.update_follow(user.id, -5)
    assert repo.find_by_id(user.id).follow_count == 0


def test_update_info_fails(repo):
    with pytest.raises(RuntimeError):
        repo.update_info(UserInfo(name="x"))


@pytest.mark.parametrize("src,mod", [(5, 3), (10, -4), (7, 0), (100, -100)])
def test_calculate_valid_uint32_reversible(src, mod):
    assert calculate_valid_uint32(calculate_valid_uint32(src, mod), -mod) == src


def test_calculate_valid_uint32_clamps_at_zero():
    assert calculate_valid_uint32(2, -5) == 0


def test_calculate_valid_uint32_wraps():
    assert calculate_valid_uint32(0xFFFFFFFF, 1) == 0