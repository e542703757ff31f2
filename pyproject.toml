[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "geotrack"
version = "0.1.0"
description = "User location tracking: an HTTP gateway over in-memory user and location-history services"
requires-python = ">=3.10"
dependencies = []
keywords = ["geolocation", "haversine", "location-history", "http-gateway", "wsgi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
geotrack-gateway = "geotrack.gateway:main"
geotrack-create-service = "geotrack.scaffold:main"

[tool.hatch.build.targets.wheel]
packages = ["geotrack"]

[tool.pytest.ini_options]
addopts = "-ra"
