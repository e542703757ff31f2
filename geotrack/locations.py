"""Location history of users, kept in memory."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from geotrack.types import Coordinate

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)

_SEED_COORDINATE = Coordinate(51.11822470712269, 16.990711729269563)


class TimestampError(ValueError):
    """Raised when a timestamp is not valid RFC 3339."""


@dataclass(frozen=True)
class LocationRecord:
    """Where a user was, and when."""

    coordinate: Coordinate
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"coordinate": self.coordinate.to_dict(), "timestamp": self.timestamp.isoformat()}


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise TimestampError(f"failed to parse timestamp: {text!r}")
    base, fraction, zone = match.groups()
    normalised = base
    if fraction:
        normalised += "." + fraction[:6].ljust(6, "0")
    normalised += "+00:00" if zone == "Z" else zone
    try:
        return datetime.fromisoformat(normalised)
    except ValueError as exc:
        raise TimestampError(f"failed to parse timestamp: {exc}") from exc


class LocationHistoryService:
    """Keeps each user's location records, oldest first."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        moment = now if now is not None else datetime.now().astimezone()
        self._history: dict[str, list[LocationRecord]] = {
            "user1": [
                LocationRecord(_SEED_COORDINATE, moment - timedelta(days=2)),
                LocationRecord(_SEED_COORDINATE, moment - timedelta(hours=1)),
                LocationRecord(_SEED_COORDINATE, moment - timedelta(minutes=30)),
            ]
        }
        self._lock = threading.Lock()

    def register_location(
        self, user_id: str, coordinate: Coordinate, timestamp: datetime
    ) -> list[LocationRecord]:
        """Append a record for ``user_id`` and return the user's whole history."""
        with self._lock:
            records = self._history.setdefault(user_id, [])
            records.append(LocationRecord(coordinate, timestamp))
            return list(records)

    def register_location_iso(
        self, user_id: str, coordinate: Coordinate, timestamp: str
    ) -> dict[str, Any]:
        """Register a location stamped with RFC 3339 text; return the response body."""
        moment = _parse_rfc3339(timestamp)
        records = self.register_location(user_id, coordinate, moment)
        return {"userId": user_id, "locationRecords": [r.to_dict() for r in records]}

    def history(self, user_id: str) -> list[LocationRecord]:
        """Return the records of ``user_id``; empty for an unknown user."""
        with self._lock:
            return list(self._history.get(user_id, []))