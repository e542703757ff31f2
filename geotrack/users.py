"""User accounts with locations: the model, an in-memory store and the service."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from geotrack.geo import haversine_distance
from geotrack.types import Coordinate

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserModel:
    """A user known by id and name, placed at a coordinate."""

    user_id: str
    user_name: str
    coordinate: Coordinate

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "coordinate": self.coordinate.to_dict(),
        }


def users_to_dicts(users: Iterable[UserModel]) -> list[dict[str, Any]]:
    """Return the JSON form of each user, in order."""
    return [user.to_dict() for user in users]


class UserNotFoundError(LookupError):
    """Raised when no stored user has the requested name."""


def _seed_users() -> dict[str, UserModel]:
    seed = [
        UserModel("user1", "Ivan", Coordinate(51.11822470712269, 16.990711729269563)),
        UserModel("user2", "Igor", Coordinate(52.23553956649786, 20.984595191389918)),
        UserModel("user3", "Den", Coordinate(50.53401932980686, 31.178889172903055)),
        UserModel("user4", "Kate", Coordinate(51.10181370006046, 17.10312341673202)),
        UserModel("user5", "Barbara", Coordinate(51.11956092410769, 17.05696305051491)),
    ]
    return {user.user_id: user for user in seed}


class InMemoryUserRepository:
    """A thread-safe user store kept in memory, keyed by user id."""

    def __init__(self, users: Optional[Mapping[str, UserModel]] = None) -> None:
        self._users: dict[str, UserModel] = dict(users) if users is not None else _seed_users()
        self._lock = threading.Lock()

    def create_user(self, user: UserModel) -> UserModel:
        """Store ``user`` under its id, replacing any user with that id."""
        with self._lock:
            self._users[user.user_id] = user
        return user

    def update_user(self, user_name: str, coordinate: Coordinate) -> UserModel:
        """Move the first user named ``user_name`` to ``coordinate``."""
        with self._lock:
            for key, user in self._users.items():
                if user.user_name == user_name:
                    updated = UserModel(user.user_id, user.user_name, coordinate)
                    self._users[key] = updated
                    return updated
        raise UserNotFoundError("failed to find user in DB")

    def get_users(self) -> list[UserModel]:
        """Return every stored user."""
        with self._lock:
            return list(self._users.values())


class UserService:
    """Creates, moves and finds users through a repository."""

    def __init__(self, repo: Optional[InMemoryUserRepository] = None) -> None:
        self._repo = repo if repo is not None else InMemoryUserRepository()

    def create_user(self, user_name: str, coordinate: Coordinate) -> UserModel:
        """Create a user with a fresh random id."""
        user = UserModel(str(uuid.uuid4()), user_name, coordinate)
        created = self._repo.create_user(user)
        log.info("user created with id: %s", created.user_id)
        return created

    def update_user(self, user_name: str, coordinate: Coordinate) -> UserModel:
        """Move the user named ``user_name``; raises :class:`UserNotFoundError`."""
        return self._repo.update_user(user_name, coordinate)

    def search_users(self, location: Coordinate, radius: float) -> list[UserModel]:
        """Return the users within ``radius`` kilometres of ``location``."""
        found = []
        for user in self._repo.get_users():
            distance = haversine_distance(location, user.coordinate)
            log.debug("%s %s", distance, user.user_name)
            if distance <= radius:
                found.append(user)
        return found