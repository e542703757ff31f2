# geotrack

geotrack keeps track of where users are. It offers three things:

- a user service (`geotrack.users.UserService`) that creates users, moves
  them to a new coordinate and finds every user within a radius (in
  kilometres) of a point, measured with the haversine formula;
- a location-history service (`geotrack.locations.LocationHistoryService`)
  that records, for each user, where they were and when;
- an HTTP gateway (`geotrack.gateway.Gateway`) that puts both behind a
  small JSON API, as a WSGI application.

The package has no dependencies outside the standard library.

## Installing

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## Running the gateway

    geotrack-gateway

The gateway is served with the standard library's `wsgiref` server on the
address in the `HTTP_ADDR` environment variable (`host:port`), `:8004`
when it is not set. It stops on Ctrl-C or SIGTERM.

### Endpoints

| Method  | Path           | Body / query                             |
|---------|----------------|------------------------------------------|
| `POST`  | `/user/create` | `{"userName": ..., "coordinate": {...}}` |
| `PATCH` | `/user/update` | `{"userName": ..., "coordinate": {...}}` |
| `GET`   | `/user/search` | `?lat=...&lon=...&r=...`                 |

A coordinate is written as `{"latitude": 51.118, "longitude": 16.990}`.
The user name must not be empty and neither coordinate value may be zero.
Creating a user gives it a fresh random id; updating moves the first user
with that name. Both also record the new position, stamped with the
current time, in the user's location history, and answer
`{"data": {"user": {"userId": ..., "userName": ..., "coordinate": {...}}}}`.

A search needs exactly one `lat` and one `lon`. The latitude must lie
between -90 and 90 and the longitude between -180 and 180. The radius
`r` is optional and defaults to 5 km. The answer is
`{"data": {"users": [...]}}`.

Errors come back as plain text: `400` for a malformed body or query,
`500` when no user has the name given to an update. Answers from the
three endpoints carry permissive CORS headers. An unknown path gives
`404`, and a method an endpoint does not take gives `405` with an `Allow`
header.

The handlers can also be called directly; they return the response body
as a dict or raise `HTTPError`, which has `status` and `message`:

```python
from geotrack.gateway import Gateway

gateway = Gateway()
result = gateway.handle_search_user({"lat": ["51.11"], "lon": ["17.03"], "r": ["10"]})
```

## Using the services from Python

```python
from geotrack.types import Coordinate
from geotrack.users import InMemoryUserRepository, UserService

service = UserService(InMemoryUserRepository())
user = service.create_user("Ala", Coordinate(latitude=51.11, longitude=17.03))
nearby = service.search_users(Coordinate(latitude=51.11, longitude=17.03), 5.0)
```

`update_user` raises `UserNotFoundError` when no user has the name. A new
`InMemoryUserRepository` starts with five sample users unless it is given
a mapping of its own.

```python
from geotrack.locations import LocationHistoryService
from geotrack.types import Coordinate

history = LocationHistoryService()
history.register_location_iso("user1", Coordinate(latitude=51.11, longitude=17.03),
                              "2024-05-01T12:00:00Z")
records = history.history("user1")
```

`register_location_iso` raises `TimestampError` for text that is not an
RFC 3339 timestamp.

Other modules:

- `geotrack.geo`: `validate_coords` (raises `InvalidCoordinateError`),
  `haversine_distance` and `random_avatar`;
- `geotrack.retry`: `with_backoff` retries an operation with capped
  exponential back-off (`RetryConfig`, `default_config`), re-raising the
  last error, or `RetryCancelled` when a stop event is set;
- `geotrack.env`: `get_string`, `get_int` and `get_bool` read settings
  from the environment with fallbacks;
- `geotrack.contracts`: message shapes such as `APIResponse`, `APIError`,
  `AmqpMessage`, `WSMessage`, `WSDriverMessage` and the `RoutingKey`
  names;
- `geotrack.types`: `Coordinate`, `Geometry` and `Route`.

## Scaffolding a new service

    geotrack-create-service --name payment

This creates `services/payment-service/` in the current directory with
the layer directories (`cmd`, `internal/domain`, `internal/service`,
`internal/infrastructure/{events,grpc,repository}`, `pkg/types`) and a
README that describes them, then prints the layout. From Python,
`geotrack.scaffold.create_service(name, root)` does the same under `root`.

## What it does not do

- Nothing is stored on disk: users and location histories live in
  memory and are lost when the process ends.
- The gateway calls the user and location-history services in the same
  process; they are not run as separate network services.
- There is no message broker or WebSocket server; `geotrack.contracts`
  only describes the message shapes.