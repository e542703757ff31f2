"""Message shapes exchanged between services and with clients."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class RoutingKey(str, Enum):
    """Message-broker routing keys for events and commands."""

    TRIP_EVENT_CREATED = "trip.event.created"
    TRIP_EVENT_DRIVER_ASSIGNED = "trip.event.driver_assigned"
    TRIP_EVENT_NO_DRIVERS_FOUND = "trip.event.no_drivers_found"
    TRIP_EVENT_DRIVER_NOT_INTERESTED = "trip.event.driver_not_interested"

    DRIVER_CMD_TRIP_REQUEST = "driver.cmd.trip_request"
    DRIVER_CMD_TRIP_ACCEPT = "driver.cmd.trip_accept"
    DRIVER_CMD_TRIP_DECLINE = "driver.cmd.trip_decline"
    DRIVER_CMD_LOCATION = "driver.cmd.location"
    DRIVER_CMD_REGISTER = "driver.cmd.register"

    PAYMENT_EVENT_SESSION_CREATED = "payment.event.session_created"
    PAYMENT_EVENT_SUCCESS = "payment.event.success"
    PAYMENT_EVENT_FAILED = "payment.event.failed"
    PAYMENT_EVENT_CANCELLED = "payment.event.cancelled"

    PAYMENT_CMD_CREATE_SESSION = "payment.cmd.create_session"


def _jsonable(value: Any) -> Any:
    """Turn objects with ``to_dict`` (and containers of them) into JSON data."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class AmqpMessage:
    """A broker message: the owner's id and an opaque payload."""

    owner_id: str
    data: bytes = b""

    def to_dict(self) -> dict[str, str]:
        return {"ownerId": self.owner_id, "data": base64.b64encode(self.data).decode("ascii")}


@dataclass(frozen=True)
class APIError:
    """An error returned to API clients."""

    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass
class APIResponse:
    """The envelope of every API response; empty fields are left out."""

    data: Any = None
    error: Optional[APIError] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.data is not None:
            out["data"] = _jsonable(self.data)
        if self.error is not None:
            out["error"] = self.error.to_dict()
        return out


@dataclass
class WSMessage:
    """A message sent over a WebSocket."""

    type: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": _jsonable(self.data)}


@dataclass(frozen=True)
class WSDriverMessage:
    """A driver's WebSocket message whose payload is kept as undecoded JSON."""

    type: str
    data: Optional[str] = None

    @classmethod
    def from_json(cls, text: str | bytes) -> "WSDriverMessage":
        """Parse a message; ``data`` keeps the payload as JSON text."""
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("driver message must be a JSON object")
        kind = parsed.get("type", "")
        if kind is None:
            kind = ""
        if not isinstance(kind, str):
            raise ValueError("driver message type must be a string")
        payload = parsed.get("data")
        raw = None if "data" not in parsed else json.dumps(payload, separators=(",", ":"))
        return cls(type=kind, data=raw)