"""Production — one day of building and structure activity.

Runs first in each day.  Orbital buildings, then star-system buildings,
then surface structures (row-major over anchor tiles) pay upkeep,
deliver production to the ledger and gases to the atmosphere, and
structures apply their local tile effects.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from gaiasim.simulation.params import BuildingAttrs, UpkeepPolicy
from gaiasim.world.tile import Occupied

if TYPE_CHECKING:
    from gaiasim.economy.resources import Resources
    from gaiasim.simulation.params import Params, StructureAttrs
    from gaiasim.simulation.planet import Planet
    from gaiasim.world.grid import Coords

logger = logging.getLogger(__name__)


def affordable_units(res: Resources, attrs: BuildingAttrs, units: int) -> int:
    """Return how many of ``units`` can pay their full upkeep from stock."""
    count = units
    for kind, amount in attrs.upkeep.items():
        if amount > 0.0:
            # 0.3 / 0.1 == 2.9999999999999996
            count = min(count, math.floor(res.stock_of(kind) / amount + 1e-9))
    return count


def operate(planet: Planet, attrs: BuildingAttrs, units: int, policy: UpkeepPolicy) -> int:
    """Run ``units`` active units of one kind for a day.

    Under ``TOLERATE`` every unit operates and the ledger clamps at zero.
    Under ``SHUTDOWN`` only the units whose upkeep is fully covered run.

    Returns:
        Number of units that operated.
    """
    res = planet.res
    operating = units
    if policy is UpkeepPolicy.SHUTDOWN:
        operating = affordable_units(res, attrs, units)
        if operating < units:
            logger.warning(
                "day %d: %d of %d units idle for unpaid upkeep",
                planet.days,
                units - operating,
                units,
            )
    if operating == 0:
        return 0

    for kind, amount in attrs.upkeep.items():
        res.add(kind, -amount * operating)
    for kind, amount in attrs.produces.items():
        res.add(kind, amount * operating)
    for gas, amount in attrs.gases.items():
        planet.atmo.add(gas, amount * operating)
    return operating


def apply_tile_effects(planet: Planet, footprint: list[Coords], attrs: StructureAttrs) -> None:
    """Apply a structure's heat and fertility to the tiles it covers."""
    if attrs.heat == 0.0 and attrs.fertility == 0.0:
        return
    for coords in footprint:
        tile = planet.grid[coords]
        tile.temp += attrs.heat
        tile.biomass = max(0.0, tile.biomass + attrs.fertility)


def placed_footprints(planet: Planet) -> dict[Coords, list[Coords]]:
    """Map every anchor to the tiles it covers, anchor first.

    The markers written by ``Planet.place`` are the record of what a
    structure covers, whatever its catalog size.
    """
    footprints: dict[Coords, list[Coords]] = {}
    markers: list[tuple[Coords, Coords]] = []
    for coords in planet.grid.iter_coords():
        structure = planet.grid[coords].structure
        if isinstance(structure, Occupied):
            markers.append((structure.by, coords))
        elif structure is not None:
            footprints[coords] = [coords]
    for anchor, coords in markers:
        if anchor in footprints:
            footprints[anchor].append(coords)
    return footprints


def advance_buildings(planet: Planet, params: Params) -> None:
    """Advance every enabled building and placed structure by one day."""
    policy = params.upkeep_policy

    for kind, enabled in planet.orbit.enabled_items():
        operate(planet, params.building(kind), enabled, policy)
    for kind, enabled in planet.star_system.enabled_items():
        operate(planet, params.building(kind), enabled, policy)

    footprints = placed_footprints(planet)
    for anchor, footprint in footprints.items():
        attrs = params.structure(planet.grid[anchor].structure)
        if operate(planet, attrs.building, 1, policy):
            apply_tile_effects(planet, footprint, attrs)

    logger.debug("day %d: %d structures active", planet.days, len(footprints))
