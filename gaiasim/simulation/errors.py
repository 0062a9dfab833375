"""Errors raised by the simulation core.

Placement and query errors are returned to the host for feedback.
``UnknownKind`` signals a broken catalog and is raised while loading
configuration, before any planet is advanced.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar


class GaiaError(Exception):
    """Base class for all gaiasim errors."""


class OutOfBounds(GaiaError, IndexError):
    """A coordinate lies outside the grid on the non-wrapping (latitude) axis."""


class NotPlaceable(GaiaError):
    """A structure footprint is occupied or leaves the grid."""


class UnknownKind(GaiaError, ValueError):
    """A building, structure, biome or resource name is not in the catalog."""


E = TypeVar("E", bound=Enum)


def parse_kind(kinds: type[E], name: str | E) -> E:
    """Look up an enum member by its value.

    Raises:
        UnknownKind: If ``name`` is not a member of ``kinds``.
    """
    if isinstance(name, kinds):
        return name
    try:
        return kinds(name)
    except ValueError as exc:
        msg = f"unknown {kinds.__name__}: {name!r}"
        raise UnknownKind(msg) from exc
