"""Coordinate validation, great-circle distance and avatar links."""

from __future__ import annotations

import math

from geotrack.types import Coordinate

EARTH_RADIUS_KM = 6371.0

_AVATAR_TEMPLATE = "https://randomuser.me/api/portraits/lego/{}.jpg"


class InvalidCoordinateError(ValueError):
    """Raised when a latitude or longitude is out of range."""


def random_avatar(index: int) -> str:
    """Return the avatar image link for ``index``."""
    return _AVATAR_TEMPLATE.format(index)


def validate_coords(lat: float, lon: float) -> None:
    """Raise :class:`InvalidCoordinateError` unless both values are in range."""
    if lat < -90 or lat > 90:
        raise InvalidCoordinateError("latitude must be between -90 and 90")
    if lon < -180 or lon > 180:
        raise InvalidCoordinateError("longitude must be between -180 and 180")


def haversine_distance(first: Coordinate, second: Coordinate) -> float:
    """Return the great-circle distance in kilometres between two points."""
    lat1, lon1 = math.radians(first.latitude), math.radians(first.longitude)
    lat2, lon2 = math.radians(second.latitude), math.radians(second.longitude)

    half_dlat = math.sin((lat2 - lat1) / 2)
    half_dlon = math.sin((lon2 - lon1) / 2)
    a = half_dlat * half_dlat + math.cos(lat1) * math.cos(lat2) * half_dlon * half_dlon
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c