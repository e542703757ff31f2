import uuid

import pytest

from geotrack.geo import haversine_distance
from geotrack.types import Coordinate
from geotrack.users import (
    InMemoryUserRepository,
    UserModel,
    UserNotFoundError,
    UserService,
    users_to_dicts,
)

IVAN_POINT = Coordinate(51.11822470712269, 16.990711729269563)


def test_seeded_repository_holds_five_users():
    repo = InMemoryUserRepository()
    names = sorted(u.user_name for u in repo.get_users())
    assert names == sorted(["Ivan", "Igor", "Den", "Kate", "Barbara"])


def test_seeded_user_coordinates():
    repo = InMemoryUserRepository()
    by_id = {u.user_id: u for u in repo.get_users()}
    assert by_id["user1"].coordinate == IVAN_POINT
    assert by_id["user1"].user_name == "Ivan"


def test_to_dict_uses_wire_names():
    user = UserModel("abc", "Ann", Coordinate(1.5, 2.5))
    assert user.to_dict() == {
        "userId": "abc",
        "userName": "Ann",
        "coordinate": {"latitude": 1.5, "longitude": 2.5},
    }


def test_users_to_dicts_keeps_order():
    users = [UserModel("a", "A", Coordinate(1, 2)), UserModel("b", "B", Coordinate(3, 4))]
    result = users_to_dicts(users)
    assert [d["userId"] for d in result] == ["a", "b"]
    assert users_to_dicts([]) == []


def test_update_user_moves_and_keeps_id():
    repo = InMemoryUserRepository()
    target = Coordinate(10.0, 20.0)
    updated = repo.update_user("Igor", target)
    assert updated.user_id == "user2"
    assert updated.coordinate == target
    stored = {u.user_id: u for u in repo.get_users()}["user2"]
    assert stored.coordinate == target


def test_update_unknown_user_raises():
    repo = InMemoryUserRepository()
    with pytest.raises(UserNotFoundError):
        repo.update_user("Nobody", Coordinate(1.0, 1.0))


def test_create_user_in_repository():
    repo = InMemoryUserRepository(users={})
    user = UserModel("x1", "Zed", Coordinate(3.0, 4.0))
    assert repo.create_user(user) is user
    assert repo.get_users() == [user]


def test_service_create_user_assigns_uuid():
    repo = InMemoryUserRepository(users={})
    service = UserService(repo)
    first = service.create_user("Ann", Coordinate(1.0, 2.0))
    second = service.create_user("Bob", Coordinate(1.0, 2.0))
    assert str(uuid.UUID(first.user_id)) == first.user_id
    assert first.user_id != second.user_id
    assert first.user_name == "Ann"
    assert len(repo.get_users()) == 2


def test_service_update_user():
    service = UserService()
    moved = service.update_user("Kate", Coordinate(5.0, 6.0))
    assert moved.user_id == "user4"
    with pytest.raises(UserNotFoundError):
        service.update_user("Ghost", Coordinate(5.0, 6.0))


def test_search_with_zero_radius_finds_only_same_point():
    service = UserService()
    found = service.search_users(IVAN_POINT, 0.0)
    assert [u.user_name for u in found] == ["Ivan"]


def test_search_with_huge_radius_finds_everyone():
    service = UserService()
    found = service.search_users(IVAN_POINT, 25000.0)
    assert len(found) == 5


@pytest.mark.parametrize("radius", [1.0, 5.0, 50.0, 500.0])
def test_search_splits_users_by_distance(radius):
    repo = InMemoryUserRepository()
    service = UserService(repo)
    found = {u.user_id for u in service.search_users(IVAN_POINT, radius)}
    for user in repo.get_users():
        inside = haversine_distance(IVAN_POINT, user.coordinate) <= radius
        assert (user.user_id in found) == inside


def test_search_sees_created_user():
    service = UserService(InMemoryUserRepository(users={}))
    created = service.create_user("Near", Coordinate(0.5, 0.5))
    assert service.search_users(Coordinate(0.5, 0.5), 1.0) == [created]
    assert service.search_users(Coordinate(-45.0, 120.0), 1.0) == []