"""Atmosphere — global gas inventory and the biosphere that feeds it.

Updated last in each day, after heat transfer, so vegetation reacts to
the temperatures just computed.  The greenhouse factor it leaves behind
is what the next day's heat transfer uses.

Model:

* Vegetation grows logistically toward the biome's carrying capacity,
  scaled by a parabolic temperature fitness, and decays at a fixed rate.
  Anything above capacity dies back.
* Net growth fixes carbon on a CH2O basis: each kg of new biomass takes
  44/30 kg of CO2 and releases 32/30 kg of O2; decay does the reverse.
  Growth is throttled when CO2 runs out.
* ``greenhouse = greenhouse_max * (1 - exp(-p_CO2 / co2_reference_pressure))``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from gaiasim.climate.gases import CO2_PER_BIOMASS, O2_PER_BIOMASS, GasKind
from gaiasim.simulation.errors import parse_kind

if TYPE_CHECKING:
    from gaiasim.simulation.params import AtmoParams, Params, PlanetBasics
    from gaiasim.simulation.planet import Planet

logger = logging.getLogger(__name__)


def greenhouse_factor(co2_pressure: float, atmo: AtmoParams) -> float:
    """Return the fraction of outgoing radiation trapped by CO2."""
    return atmo.greenhouse_max * (1.0 - math.exp(-co2_pressure / atmo.co2_reference_pressure))


def _zeroed() -> dict[GasKind, float]:
    return {gas: 0.0 for gas in GasKind}


@dataclass
class Atmosphere:
    """Planet-wide gas masses.

    Attributes:
        gases: Mass of each gas in kg (never negative).
        greenhouse: Fraction of outgoing radiation retained, derived from
            the CO2 partial pressure at the end of each day.
    """

    gases: dict[GasKind, float] = field(default_factory=_zeroed)
    greenhouse: float = 0.0

    @classmethod
    def from_gases(
        cls,
        gases: Mapping[GasKind, float],
        basics: PlanetBasics,
        atmo: AtmoParams,
    ) -> Atmosphere:
        """Create an atmosphere and derive its initial greenhouse factor."""
        atmosphere = cls()
        for gas, mass in gases.items():
            atmosphere.gases[gas] = max(0.0, float(mass))
        atmosphere.refresh(basics, atmo)
        return atmosphere

    def add(self, gas: GasKind, amount: float) -> bool:
        """Add (or remove) gas mass, clamping at zero.

        Returns:
            True if the gas ran out.
        """
        value = self.gases[gas] + amount
        self.gases[gas] = max(0.0, value)
        return value < 0.0

    @property
    def total_mass(self) -> float:
        return sum(self.gases.values())

    def column_mass(self, basics: PlanetBasics) -> float:
        """Return the air mass above one square metre, kg/m²."""
        return self.total_mass / basics.surface_area

    def pressure(self, basics: PlanetBasics) -> float:
        """Return the surface pressure in Pa."""
        return self.column_mass(basics) * basics.gravity

    def partial_pressure(self, gas: GasKind, basics: PlanetBasics) -> float:
        """Return the share of surface pressure due to ``gas`` (by mass)."""
        return self.gases[gas] / basics.surface_area * basics.gravity

    def refresh(self, basics: PlanetBasics, atmo: AtmoParams) -> None:
        """Recompute derived quantities from the gas inventory."""
        self.greenhouse = greenhouse_factor(
            self.partial_pressure(GasKind.CARBON_DIOXIDE, basics),
            atmo,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "gases": {gas.value: mass for gas, mass in self.gases.items()},
            "greenhouse": self.greenhouse,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Atmosphere:
        atmosphere = cls(greenhouse=float(data.get("greenhouse", 0.0)))
        for name, mass in (data.get("gases") or {}).items():
            atmosphere.gases[parse_kind(GasKind, name)] = float(mass)
        return atmosphere


def advance_atmosphere(planet: Planet, params: Params) -> None:
    """Advance vegetation and gas inventory by one day.

    Args:
        planet: The planet; tile biomass and ``planet.atmo`` are updated.
        params: Static configuration (uses ``params.atmo`` and biomes).
    """
    atmo_params = params.atmo
    atmosphere = planet.atmo
    grid = planet.grid
    tile_area = planet.basics.surface_area / (grid.width * grid.height)

    biomass = grid.read_field("biomass")
    temp = grid.read_field("temp")
    capacity = np.array(
        [[params.biome(tile.biome).biomass_capacity for tile in row] for row in grid.tiles],
        dtype=np.float64,
    )

    fitness = np.clip(
        1.0 - ((temp - atmo_params.optimal_temp) / atmo_params.temp_tolerance) ** 2,
        0.0,
        1.0,
    )
    safe_capacity = np.where(capacity > 0.0, capacity, 1.0)
    growth = np.where(
        capacity > 0.0,
        atmo_params.growth_rate * biomass * (1.0 - biomass / safe_capacity) * fitness,
        0.0,
    )
    growth = np.maximum(growth, 0.0)
    decay = atmo_params.decay_rate * biomass + atmo_params.dieback_rate * np.maximum(
        biomass - capacity,
        0.0,
    )
    decay = np.minimum(decay, biomass)

    # Decay returns CO2 the same day, so growth may use it
    grown = float(growth.sum()) * tile_area
    decayed = float(decay.sum()) * tile_area
    available_co2 = atmosphere.gases[GasKind.CARBON_DIOXIDE] + decayed * CO2_PER_BIOMASS
    needed_co2 = grown * CO2_PER_BIOMASS
    if needed_co2 > available_co2:
        scale = available_co2 / needed_co2
        growth *= scale
        grown *= scale

    grid.write_field("biomass", np.maximum(biomass + growth - decay, 0.0))

    fixed = grown - decayed
    atmosphere.add(GasKind.CARBON_DIOXIDE, -fixed * CO2_PER_BIOMASS)
    atmosphere.add(GasKind.OXYGEN, fixed * O2_PER_BIOMASS)
    atmosphere.refresh(planet.basics, atmo_params)

    logger.debug(
        "day %d: fixed %.3e kg biomass, pressure %.1f Pa, greenhouse %.3f",
        planet.days,
        fixed,
        atmosphere.pressure(planet.basics),
        atmosphere.greenhouse,
    )
