"""Planet — owns all persistent state and advances it day by day.

Each call to ``advance`` runs the subsystems in a fixed order, because
each one consumes what the previous one produced for the same day:

1. Buildings (upkeep, production, structure tile effects)
2. Heat transfer (insolation, radiation, diffusion)
3. Atmosphere (vegetation, gas exchange, greenhouse factor)

Between calls the host may edit tiles, place or demolish structures and
construct buildings; those commands take effect immediately.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gaiasim.climate.atmosphere import Atmosphere, advance_atmosphere
from gaiasim.climate.heat_transfer import advance_heat_transfer
from gaiasim.climate.sim import Sim
from gaiasim.economy.buildings import (
    BuildingRegistry,
    OrbitalBuildingKind,
    StarSystemBuildingKind,
)
from gaiasim.economy.production import advance_buildings
from gaiasim.economy.resources import Resources
from gaiasim.simulation.errors import NotPlaceable, OutOfBounds, parse_kind
from gaiasim.simulation.params import Params, PlanetBasics, StartParams
from gaiasim.world.grid import Coords, TileGrid
from gaiasim.world.tile import Biome, Occupied, StructureKind

logger = logging.getLogger(__name__)


class BuildOutcome(Enum):
    """Result of a host build command."""

    BUILT = "built"
    LOCKED = "locked"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    NOT_PLACEABLE = "not_placeable"


@dataclass
class Player:
    """Player progress.

    Attributes:
        buildable_structures: Structures the player may place.  Only grows.
    """

    buildable_structures: set[StructureKind] = field(default_factory=set)


def _orbit_registry() -> BuildingRegistry[OrbitalBuildingKind]:
    return BuildingRegistry(kinds=OrbitalBuildingKind)


def _star_system_registry() -> BuildingRegistry[StarSystemBuildingKind]:
    return BuildingRegistry(kinds=StarSystemBuildingKind)


@dataclass
class Planet:
    """All persistent state of one planet.

    Attributes:
        basics: Physical constants.
        grid: The tile map.
        days: Number of simulated days so far.
        player: Unlock state.
        res: Resource ledger.
        atmo: Atmosphere.
        orbit: Orbital building counts.
        star_system: Star-system building counts.
    """

    basics: PlanetBasics
    grid: TileGrid
    days: int = 0
    player: Player = field(default_factory=Player)
    res: Resources = field(default_factory=Resources)
    atmo: Atmosphere = field(default_factory=Atmosphere)
    orbit: BuildingRegistry[OrbitalBuildingKind] = field(default_factory=_orbit_registry)
    star_system: BuildingRegistry[StarSystemBuildingKind] = field(
        default_factory=_star_system_registry,
    )

    @classmethod
    def new(
        cls,
        width: int,
        height: int,
        start_params: StartParams,
        params: Params | None = None,
    ) -> Planet:
        """Create a planet of ``width x height`` default tiles.

        Args:
            width: Grid columns.
            height: Grid rows.
            start_params: Initial conditions.
            params: Used to derive the initial greenhouse factor; the
                built-in defaults are used when omitted.
        """
        params = params or Params()
        planet = cls(
            basics=start_params.basics,
            grid=TileGrid(width=width, height=height),
            player=Player(buildable_structures=set(start_params.buildable_structures)),
            res=Resources.with_stock(start_params.resources),
            atmo=Atmosphere.from_gases(start_params.gases, start_params.basics, params.atmo),
        )
        for kind, n in start_params.orbital_buildings.items():
            planet.orbit.construct(kind, n)
        for kind, n in start_params.star_system_buildings.items():
            planet.star_system.construct(kind, n)
        logger.info("created %dx%d planet", width, height)
        return planet

    def advance(self, sim: Sim, params: Params) -> None:
        """Simulate one day."""
        self.days += 1
        self.res.reset_diffs()
        if not sim.matches(self):
            sim.rebuild(self)

        advance_buildings(self, params)
        advance_heat_transfer(self, sim, params)
        advance_atmosphere(self, params)

    def run(self, sim: Sim, params: Params, days: int) -> None:
        """Simulate ``days`` days in a row."""
        for _ in range(days):
            self.advance(sim, params)

    def calc_longitude_latitude(self, coords: Coords) -> tuple[float, float]:
        return self.grid.calc_longitude_latitude(coords)

    def mean_temp(self) -> float:
        """Return the area-weighted mean tile temperature (tiles are equal-area)."""
        return float(self.grid.read_field("temp").mean())

    def edit_biome(self, coords: Coords, biome: Biome) -> None:
        """Set a tile's biome directly, outside the daily cycle."""
        self.grid[coords].biome = biome

    def placeable(self, coords: Coords, size: int) -> bool:
        """Return True if a ``size x size`` footprint at ``coords`` is free."""
        if not 0 < size <= self.grid.width:
            return False
        try:
            footprint = self.grid.footprint(coords, size)
        except OutOfBounds:
            return False
        return all(self.grid[c].structure is None for c in footprint)

    def place(self, coords: Coords, size: int, structure: StructureKind) -> None:
        """Place ``structure`` with its anchor at ``coords``.

        Raises:
            NotPlaceable: If any footprint tile is occupied or off the grid.
        """
        if not isinstance(structure, StructureKind):
            msg = f"cannot place {structure!r}"
            raise TypeError(msg)
        if not self.placeable(coords, size):
            msg = f"{structure.value} of size {size} does not fit at {coords}"
            raise NotPlaceable(msg)

        anchor, *covered = self.grid.footprint(coords, size)
        self.grid[anchor].structure = structure
        marker = Occupied(by=anchor)
        for c in covered:
            self.grid[c].structure = marker

    def structure_at(self, coords: Coords) -> tuple[Coords, StructureKind] | None:
        """Return ``(anchor, kind)`` of the structure covering ``coords``."""
        structure = self.grid[coords].structure
        if structure is None:
            return None
        if isinstance(structure, Occupied):
            anchor = structure.by
            return anchor, self.grid[anchor].structure
        return self.grid.normalize(coords), structure

    def demolish(self, coords: Coords) -> StructureKind | None:
        """Remove the structure covering ``coords``, markers included.

        Returns:
            The removed kind, or None if the tile was empty.
        """
        found = self.structure_at(coords)
        if found is None:
            return None
        anchor, kind = found
        marker = Occupied(by=anchor)
        self.grid[anchor].structure = None
        for c in self.grid.iter_coords():
            tile = self.grid[c]
            if tile.structure == marker:
                tile.structure = None
        logger.info("demolished %s at %s", kind.value, anchor)
        return kind

    def unlock_structure(self, kind: StructureKind) -> None:
        self.player.buildable_structures.add(kind)

    def build_structure(
        self,
        coords: Coords,
        kind: StructureKind,
        params: Params,
    ) -> BuildOutcome:
        """Pay for and place an unlocked structure.

        Nothing changes unless the outcome is ``BUILT``.
        """
        if kind not in self.player.buildable_structures:
            return BuildOutcome.LOCKED
        attrs = params.structure(kind)
        if not self.placeable(coords, attrs.size):
            return BuildOutcome.NOT_PLACEABLE
        if not self.res.spend(attrs.building.cost):
            return BuildOutcome.INSUFFICIENT_RESOURCES
        self.place(coords, attrs.size, kind)
        logger.info("built %s at %s", kind.value, coords)
        return BuildOutcome.BUILT

    def construct_building(
        self,
        kind: OrbitalBuildingKind | StarSystemBuildingKind,
        params: Params,
    ) -> BuildOutcome:
        """Pay for one orbital or star-system building and add it enabled."""
        attrs = params.building(kind)
        if not self.res.spend(attrs.cost):
            return BuildOutcome.INSUFFICIENT_RESOURCES
        if isinstance(kind, OrbitalBuildingKind):
            self.orbit.construct(kind)
        else:
            self.star_system.construct(kind)
        return BuildOutcome.BUILT

    def to_dict(self) -> dict[str, Any]:
        """Return a plain-data form suitable for YAML."""
        return {
            "days": self.days,
            "basics": dataclasses.asdict(self.basics),
            "player": {
                "buildable_structures": sorted(
                    kind.value for kind in self.player.buildable_structures
                ),
            },
            "res": self.res.to_dict(),
            "map": self.grid.to_dict(),
            "atmo": self.atmo.to_dict(),
            "orbit": self.orbit.to_dict(),
            "star_system": self.star_system.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Planet:
        """Rebuild a planet from ``to_dict`` output."""
        player = data.get("player") or {}
        return cls(
            basics=PlanetBasics(**data["basics"]),
            grid=TileGrid.from_dict(data["map"]),
            days=int(data["days"]),
            player=Player(
                buildable_structures={
                    parse_kind(StructureKind, name)
                    for name in player.get("buildable_structures", [])
                },
            ),
            res=Resources.from_dict(data["res"]),
            atmo=Atmosphere.from_dict(data["atmo"]),
            orbit=BuildingRegistry.from_dict(OrbitalBuildingKind, data["orbit"]),
            star_system=BuildingRegistry.from_dict(
                StarSystemBuildingKind,
                data["star_system"],
            ),
        )
