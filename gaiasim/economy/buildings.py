"""Building registry — counts of orbital and star-system facilities.

Counts change only through host commands (construct, demolish, enable,
disable).  The daily production pass in ``economy.production`` reads the
enabled counts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from gaiasim.simulation.errors import parse_kind

logger = logging.getLogger(__name__)


class OrbitalBuildingKind(Enum):
    """Facilities in orbit around the planet."""

    SOLAR_POWER_SATELLITE = "solar_power_satellite"
    ORBITAL_FACTORY = "orbital_factory"
    FUEL_REFINERY = "fuel_refinery"


class StarSystemBuildingKind(Enum):
    """Facilities elsewhere in the star system."""

    ASTEROID_MINING_STATION = "asteroid_mining_station"
    ICE_COMET_HARVESTER = "ice_comet_harvester"
    GAS_GIANT_SKIMMER = "gas_giant_skimmer"


K = TypeVar("K", OrbitalBuildingKind, StarSystemBuildingKind)


@dataclass
class Building:
    """Counts for one building kind.

    Attributes:
        n: Number constructed.
        enabled: Number currently active (``0 <= enabled <= n``).
    """

    n: int = 0
    enabled: int = 0

    def __post_init__(self) -> None:
        if self.n < 0 or not 0 <= self.enabled <= self.n:
            msg = f"invalid building counts n={self.n} enabled={self.enabled}"
            raise ValueError(msg)


@dataclass
class BuildingRegistry(Generic[K]):
    """Per-kind building counts for one family of kinds.

    Attributes:
        kinds: The enum class whose members are tracked.
        buildings: Counts keyed by kind; every member is present.
    """

    kinds: type[K]
    buildings: dict[K, Building] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for kind in self.kinds:
            self.buildings.setdefault(kind, Building())

    def get(self, kind: K) -> Building:
        return self.buildings[kind]

    def _counted(self, kind: K, count: int) -> Building:
        if count < 0:
            msg = f"count must be >= 0, got {count}"
            raise ValueError(msg)
        return self.buildings[kind]

    def construct(self, kind: K, count: int = 1) -> Building:
        """Add ``count`` new buildings; new buildings start enabled."""
        building = self._counted(kind, count)
        building.n += count
        building.enabled += count
        logger.info("constructed %d x %s (now %d)", count, kind.value, building.n)
        return building

    def demolish(self, kind: K, count: int = 1) -> Building:
        """Remove up to ``count`` buildings, capping ``enabled``."""
        building = self._counted(kind, count)
        building.n = max(0, building.n - count)
        building.enabled = min(building.enabled, building.n)
        return building

    def enable(self, kind: K, count: int = 1) -> Building:
        building = self._counted(kind, count)
        building.enabled = min(building.n, building.enabled + count)
        return building

    def disable(self, kind: K, count: int = 1) -> Building:
        building = self._counted(kind, count)
        building.enabled = max(0, building.enabled - count)
        return building

    def enabled_items(self) -> list[tuple[K, int]]:
        """Return ``(kind, enabled)`` for kinds with at least one active unit."""
        return [(kind, b.enabled) for kind, b in self.buildings.items() if b.enabled > 0]

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            kind.value: {"n": b.n, "enabled": b.enabled}
            for kind, b in self.buildings.items()
        }

    @classmethod
    def from_dict(cls, kinds: type[K], data: dict[str, dict[str, int]]) -> BuildingRegistry[K]:
        registry = cls(kinds=kinds)
        for name, counts in data.items():
            registry.buildings[parse_kind(kinds, name)] = Building(
                n=int(counts["n"]),
                enabled=int(counts["enabled"]),
            )
        return registry
