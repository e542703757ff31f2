"""HTTP gateway: user creation, updates and nearby search over WSGI."""

from __future__ import annotations

import argparse
import json
import logging
import math
import signal
import struct
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from http import HTTPStatus
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence
from urllib.parse import parse_qs
from wsgiref.simple_server import make_server

from geotrack.contracts import APIResponse
from geotrack.env import get_string
from geotrack.geo import InvalidCoordinateError, validate_coords
from geotrack.locations import LocationHistoryService, TimestampError
from geotrack.types import Coordinate
from geotrack.users import UserModel, UserNotFoundError, UserService, users_to_dicts

log = logging.getLogger(__name__)

DEFAULT_HTTP_ADDR = ":8004"
DEFAULT_RADIUS_KM = 5.0

_BAD_JSON = "failed to parse JSON data"

_CORS_HEADERS = [
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"),
    ("Access-Control-Allow-Headers", "Content-Type, Authorization"),
]

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class HTTPError(Exception):
    """A request that ends with an HTTP error status and a plain-text message."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = int(status)
        self.message = message


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


@dataclass(frozen=True)
class UserLocationRequest:
    """The body of a create or update request: a user name and a coordinate."""

    user_name: str = ""
    coordinate: Coordinate = field(default_factory=Coordinate)

    @classmethod
    def from_json(cls, body: str | bytes) -> "UserLocationRequest":
        """Parse the first JSON value in ``body``; raises ValueError when malformed."""
        try:
            text = body.decode("utf-8") if isinstance(body, (bytes, bytearray)) else body
            decoder = json.JSONDecoder(parse_constant=_reject_constant)
            value, _ = decoder.raw_decode(text.lstrip(" \t\r\n"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ValueError(_BAD_JSON) from exc

        if value is None:
            return cls()
        if not isinstance(value, dict):
            raise ValueError(_BAD_JSON)

        name = value.get("userName")
        if name is None:
            name = ""
        if not isinstance(name, str):
            raise ValueError(_BAD_JSON)

        raw_coordinate = value.get("coordinate")
        if raw_coordinate is None:
            return cls(user_name=name)
        try:
            coordinate = Coordinate.from_dict(raw_coordinate)
        except TypeError as exc:
            raise ValueError(_BAD_JSON) from exc
        return cls(user_name=name, coordinate=coordinate)


def _parse_float(text: str) -> Optional[float]:
    """Parse a decimal number strictly; return None when it is not one."""
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isinf(number) and "inf" not in text.lower():
        return None
    return number


def _as_float32(number: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _encode_json(payload: Any) -> bytes:
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _JSON_ESCAPES.items():
        text = text.replace(char, escaped)
    return (text + "\n").encode("utf-8")


def _status_line(status: int) -> str:
    return f"{status} {HTTPStatus(status).phrase}"


def _read_body(environ: Mapping[str, Any]) -> bytes:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    stream = environ.get("wsgi.input")
    if stream is None or length <= 0:
        return b""
    return stream.read(length)


class Gateway:
    """The public HTTP API in front of the user and location services."""

    def __init__(
        self,
        users: Optional[UserService] = None,
        locations: Optional[LocationHistoryService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.users = users if users is not None else UserService()
        self.locations = locations if locations is not None else LocationHistoryService()
        self._clock = clock if clock is not None else (lambda: datetime.now().astimezone())
        self._routes: dict[str, dict[str, Callable[[Mapping[str, Any]], dict[str, Any]]]] = {
            "/user/create": {"POST": lambda env: self.handle_create_user(_read_body(env))},
            "/user/update": {"PATCH": lambda env: self.handle_update_user(_read_body(env))},
            "/user/search": {
                "GET": lambda env: self.handle_search_user(
                    parse_qs(env.get("QUERY_STRING", ""), keep_blank_values=True)
                )
            },
        }

    def handle_create_user(self, body: str | bytes) -> dict[str, Any]:
        """Create a user, record its first location and return the response body."""
        request = self._parse_request(body)
        user = self.users.create_user(request.user_name, request.coordinate)
        self._register_location(user)
        return APIResponse(data={"user": user.to_dict()}).to_dict()

    def handle_update_user(self, body: str | bytes) -> dict[str, Any]:
        """Move a user by name, record the location and return the response body."""
        request = self._parse_request(body)
        try:
            user = self.users.update_user(request.user_name, request.coordinate)
        except UserNotFoundError as exc:
            log.warning("Failed to update a user: %s", exc)
            raise HTTPError(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to update a user") from exc
        self._register_location(user)
        return APIResponse(data={"user": user.to_dict()}).to_dict()

    def handle_search_user(self, query: Mapping[str, Sequence[str]]) -> dict[str, Any]:
        """Find users near ``lat``/``lon`` within ``r`` kilometres (5 by default)."""
        log.info("Handle Search User")
        latitudes = query.get("lat", [])
        longitudes = query.get("lon", [])
        if len(latitudes) != 1 or len(longitudes) != 1:
            raise HTTPError(HTTPStatus.BAD_REQUEST, "failed to retrieve coordinates")

        latitude = _parse_float(latitudes[0])
        if latitude is None:
            raise HTTPError(HTTPStatus.BAD_REQUEST, "failed to parse latitude")
        longitude = _parse_float(longitudes[0])
        if longitude is None:
            raise HTTPError(HTTPStatus.BAD_REQUEST, "failed to parse longitude")

        try:
            validate_coords(latitude, longitude)
        except InvalidCoordinateError as exc:
            raise HTTPError(HTTPStatus.BAD_REQUEST, str(exc)) from exc

        radius = DEFAULT_RADIUS_KM
        radii = query.get("r", [])
        if radii and radii[0] != "":
            parsed = _parse_float(radii[0])
            if parsed is None:
                raise HTTPError(HTTPStatus.BAD_REQUEST, "failed to parse radius")
            radius = parsed

        found = self.users.search_users(Coordinate(latitude, longitude), _as_float32(radius))
        return APIResponse(data={"users": users_to_dicts(found)}).to_dict()

    def __call__(
        self, environ: Mapping[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        method = str(environ.get("REQUEST_METHOD", "GET")).upper()
        path = environ.get("PATH_INFO") or "/"

        route = self._routes.get(path)
        if route is None:
            return self._text(start_response, HTTPStatus.NOT_FOUND, "404 page not found", [])

        handler = route.get(method)
        if handler is None and method == "HEAD":
            handler = route.get("GET")
        if handler is None:
            allowed = sorted(set(route) | ({"HEAD"} if "GET" in route else set()))
            return self._text(
                start_response,
                HTTPStatus.METHOD_NOT_ALLOWED,
                HTTPStatus.METHOD_NOT_ALLOWED.phrase,
                [("Allow", ", ".join(allowed))],
            )

        try:
            payload = handler(environ)
        except HTTPError as exc:
            return self._text(start_response, exc.status, exc.message, list(_CORS_HEADERS))

        body = _encode_json(payload)
        headers = list(_CORS_HEADERS) + [("Content-Type", "application/json")]
        start_response(_status_line(HTTPStatus.OK), headers)
        return [b""] if method == "HEAD" else [body]

    def _parse_request(self, body: str | bytes) -> UserLocationRequest:
        try:
            request = UserLocationRequest.from_json(body)
        except ValueError as exc:
            log.info("%s", exc)
            raise HTTPError(HTTPStatus.BAD_REQUEST, _BAD_JSON) from exc
        if request.user_name == "":
            raise HTTPError(HTTPStatus.BAD_REQUEST, _BAD_JSON)
        if request.coordinate.longitude == 0 or request.coordinate.latitude == 0:
            raise HTTPError(HTTPStatus.BAD_REQUEST, "invalid location data")
        return request

    def _timestamp(self) -> str:
        moment = self._clock()
        if moment.tzinfo is None:
            moment = moment.astimezone()
        text = moment.replace(microsecond=0).isoformat(timespec="seconds")
        if moment.utcoffset() == timedelta(0):
            text = text[:-6] + "Z"
        return text

    def _register_location(self, user: UserModel) -> None:
        try:
            record = self.locations.register_location_iso(
                user.user_id, user.coordinate, self._timestamp()
            )
        except TimestampError as exc:
            log.warning("Failed to register user location: %s", exc)
            raise HTTPError(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc)) from exc
        log.info("%s", record)

    @staticmethod
    def _text(
        start_response: Callable[..., Any],
        status: int,
        message: str,
        headers: list[tuple[str, str]],
    ) -> list[bytes]:
        headers = headers + [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("X-Content-Type-Options", "nosniff"),
        ]
        start_response(_status_line(status), headers)
        return [(message + "\n").encode("utf-8")]


def _split_address(address: str) -> tuple[str, int]:
    host, _, port = address.rpartition(":")
    return host.strip("[]"), int(port)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Serve the gateway on HTTP_ADDR until interrupted."""
    parser = argparse.ArgumentParser(prog="geotrack-gateway", description="Run the API gateway.")
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    address = get_string("HTTP_ADDR", DEFAULT_HTTP_ADDR)
    print("Starting API Gateway ", end="", flush=True)

    try:
        host, port = _split_address(address)
        server = make_server(host, port, Gateway())
    except (OSError, ValueError) as exc:
        log.error("Error starting the server: %s", exc)
        return 1

    stop = threading.Event()

    def _on_signal(signum: int, _frame: Any) -> None:
        log.info("Server is shutting down due to %s signal", signal.Signals(signum).name)
        stop.set()

    previous = {sig: signal.signal(sig, _on_signal) for sig in (signal.SIGINT, signal.SIGTERM)}
    worker = threading.Thread(target=server.serve_forever, daemon=True)
    log.info("Server is listening on %s", address)
    worker.start()
    try:
        while not stop.wait(0.5):
            if not worker.is_alive():
                break
    finally:
        server.shutdown()
        server.server_close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0