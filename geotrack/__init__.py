"""User location tracking: in-memory user and location-history services behind a WSGI gateway."""

__version__ = "0.1.0"