"""Shared geographic value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _number(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    return float(value)


@dataclass(frozen=True)
class Coordinate:
    """A point given by latitude and longitude in degrees."""

    latitude: float = 0.0
    longitude: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coordinate":
        """Build a coordinate from a JSON object; missing fields become 0."""
        if not isinstance(data, Mapping):
            raise TypeError("coordinate must be a JSON object")
        return cls(latitude=_number(data, "latitude"), longitude=_number(data, "longitude"))


@dataclass
class Geometry:
    """A line made of coordinates."""

    coordinates: list[Coordinate] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"coordinates": [c.to_dict() for c in self.coordinates]}


@dataclass
class Route:
    """A route with its distance, duration and geometry."""

    distance: float = 0.0
    duration: float = 0.0
    geometry: list[Geometry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance": self.distance,
            "duration": self.duration,
            "geometry": [g.to_dict() for g in self.geometry],
        }