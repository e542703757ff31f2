"""Creating the directory skeleton of a new service."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import NamedTuple, Optional, Sequence

SERVICE_DIRS = (
    "cmd",
    "internal/domain",
    "internal/service",
    "internal/infrastructure/events",
    "internal/infrastructure/grpc",
    "internal/infrastructure/repository",
    "pkg/types",
)

_COMMENT_COLUMN = 26


class _Node(NamedTuple):
    name: str
    comment: str
    children: tuple = ()


def _infrastructure() -> _Node:
    return _Node(
        "infrastructure/",
        "External dependencies implementations (abstractions)",
        (
            _Node("events/", "Event handling (RabbitMQ)"),
            _Node("grpc/", "gRPC server handlers"),
            _Node("repository/", "Data persistence"),
        ),
    )


def _service_layout(cmd_children: tuple, domain_children: tuple) -> tuple:
    return (
        _Node("cmd/", "Application entry points", cmd_children),
        _Node(
            "internal/",
            "Private application code",
            (
                _Node("domain/", "Business domain models and interfaces", domain_children),
                _Node(
                    "service/",
                    "Business logic implementation",
                    (_Node("service.go", "Service implementations"),),
                ),
                _infrastructure(),
            ),
        ),
        _Node("pkg/", "Public packages", (_Node("types/", "Shared types and models"),)),
        _Node("README.md", "This file"),
    )


_LAYERS = (
    (
        "Domain Layer",
        "internal/domain/",
        (
            "Contains business domain interfaces",
            "Defines contracts for repositories and services",
            "Pure business logic, no implementation details",
        ),
    ),
    (
        "Service Layer",
        "internal/service/",
        (
            "Implements business logic",
            "Uses repository interfaces",
            "Coordinates between different parts of the system",
        ),
    ),
    (
        "Infrastructure Layer",
        "internal/infrastructure/",
        (
            "`repository/`: Implements data persistence",
            "`events/`: Handles event publishing and consuming",
            "`grpc/`: Handles gRPC communication",
        ),
    ),
    (
        "Public Types",
        "pkg/types/",
        (
            "Contains shared types and models",
            "Can be imported by other services",
        ),
    ),
)

_BENEFITS = (
    ("Dependency Inversion", "Services depend on interfaces, not implementations"),
    ("Separation of Concerns", "Each layer has a specific responsibility"),
    ("Testability", "Easy to mock dependencies for testing"),
    ("Maintainability", "Clear boundaries between components"),
    ("Flexibility", "Easy to swap implementations without affecting business logic"),
)


def _render_tree(nodes: Sequence[_Node], prefix: str = "") -> list[str]:
    """Draw ``nodes`` as box-drawing tree lines with aligned comments."""
    lines: list[str] = []
    last_index = len(nodes) - 1
    for position, node in enumerate(nodes):
        last = position == last_index
        label = f"{prefix}{'└── ' if last else '├── '}{node.name}"
        lines.append(f"{label.ljust(_COMMENT_COLUMN)} # {node.comment}")
        lines.extend(_render_tree(node.children, prefix + ("    " if last else "│   ")))
    return lines


def _tree_block(name: str, nodes: Sequence[_Node]) -> list[str]:
    return [f"services/{name}-service/", *_render_tree(nodes)]


def readme_text(name: str) -> str:
    """Return the README written into a new service named ``name``."""
    layout = _service_layout((_Node("main.go", "Main application setup"),), ())
    parts = [
        f"# {name} service",
        "",
        f"This service handles all {name}-related operations in the system.",
        "",
        "## Architecture",
        "",
        "The service follows Clean Architecture principles with the following structure:",
        "",
        "```",
        *_tree_block(name, layout),
        "```",
        "",
        "### Layer Responsibilities",
        "",
    ]
    for number, (title, path, duties) in enumerate(_LAYERS, start=1):
        parts.append(f"{number}. **{title}** (`{path}`)")
        parts.extend(f"   - {duty}" for duty in duties)
        parts.append("")
    parts.extend(["## Key Benefits", ""])
    parts.extend(
        f"{number}. **{title}**: {text}"
        for number, (title, text) in enumerate(_BENEFITS, start=1)
    )
    return "\n".join(parts) + "\n"


def _summary_tree(name: str) -> str:
    layout = _service_layout((), (_Node(f"{name}.go", "Core domain interfaces"),))
    return "\n" + "\n".join(_tree_block(name, layout))


def create_service(name: str, root: str | os.PathLike[str] = ".") -> Path:
    """Create the skeleton of service ``name`` under ``root``; return its directory."""
    if not name:
        raise ValueError("service name must not be empty")
    base = Path(root) / "services" / f"{name}-service"
    for sub in SERVICE_DIRS:
        (base / sub).mkdir(parents=True, exist_ok=True)
    (base / "README.md").write_text(readme_text(name), encoding="utf-8")
    return base


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Create a service skeleton in the current directory; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="geotrack-new-service", description="Create a service skeleton."
    )
    parser.add_argument(
        "-name", "--name", default="", help="Name of the service (e.g., user, payment)"
    )
    args = parser.parse_args(argv)

    if not args.name:
        print("Please provide a service name using -name flag")
        return 1

    base = Path("services") / f"{args.name}-service"
    try:
        create_service(args.name, ".")
    except OSError as exc:
        print(f"Error creating service {args.name}: {exc}")
        return 1

    print(f"Successfully created {args.name} service structure in {base}")
    print("\nDirectory structure created:")
    print(_summary_tree(args.name))
    return 0