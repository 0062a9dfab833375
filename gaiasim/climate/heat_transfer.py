"""Heat transfer — one day of insolation, radiation and diffusion.

Operates on the NumPy buffers in ``Sim``.  Tile temperatures are read
into ``sim.atemp`` at the start of the pass and written back at the end,
so every step of a day works from one consistent snapshot.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from gaiasim.climate.sim import Sim

if TYPE_CHECKING:
    from gaiasim.simulation.params import Params, PlanetBasics
    from gaiasim.simulation.planet import Planet

logger = logging.getLogger(__name__)

STEFAN_BOLTZMANN = 5.670374419e-8


def declination(days: int, basics: PlanetBasics) -> float:
    """Return the sub-solar latitude (radians) on a given day."""
    return basics.axial_tilt * math.sin(2.0 * math.pi * days / basics.year_days)


def daily_insolation(
    latitude: NDArray[np.float64],
    decl: float,
    solar_constant: float,
) -> NDArray[np.float64]:
    """Return the day-averaged top-of-atmosphere flux (W/m²) per latitude.

    Uses the hour angle of sunset ``h0 = acos(-tan φ tan δ)``, clipped so
    that polar day (``h0 = π``) and polar night (``h0 = 0``) come out
    right.
    """
    cos_h0 = np.clip(-np.tan(latitude) * math.tan(decl), -1.0, 1.0)
    h0 = np.arccos(cos_h0)
    flux = (solar_constant / math.pi) * (
        h0 * np.sin(latitude) * math.sin(decl)
        + np.cos(latitude) * math.cos(decl) * np.sin(h0)
    )
    return np.maximum(flux, 0.0)


def update_surface(sim: Sim, planet: Planet, params: Params) -> None:
    """Fill ``sim.albedo`` and ``sim.atmo_heat_cap`` from the tiles.

    Vegetation darkens the ground toward ``vegetation_albedo``.  Heat
    capacity is the air column above the tile plus the biome's surface
    layer.
    """
    heat = params.heat
    rows = planet.grid.tiles
    biome_albedo = np.array(
        [[params.biome(tile.biome).albedo for tile in row] for row in rows],
        dtype=np.float64,
    )
    surface_cap = np.array(
        [[params.biome(tile.biome).heat_capacity for tile in row] for row in rows],
        dtype=np.float64,
    )
    cover = np.minimum(planet.grid.read_field("biomass") / heat.biomass_saturation, 1.0)
    sim.albedo[...] = biome_albedo + (heat.vegetation_albedo - biome_albedo) * cover

    column_mass = planet.atmo.column_mass(planet.basics)
    sim.atmo_heat_cap[...] = sim.tile_area * (heat.air_specific_heat * column_mass + surface_cap)


def apply_radiation(
    sim: Sim,
    planet: Planet,
    params: Params,
    insolation: NDArray[np.float64],
) -> None:
    """Add absorbed sunlight and remove outgoing long-wave radiation.

    ``insolation`` is a per-row flux.  The loss term ``a·T⁴`` is
    linearised around the current temperature (backward Euler), which
    keeps the result positive for any time step.  Updates ``sim.atemp``
    in place; each tile is independent.
    """
    heat = params.heat
    dt = heat.seconds_per_day
    temp = sim.atemp

    absorbed = insolation[:, np.newaxis] * (1.0 - sim.albedo) * sim.tile_area * dt

    elevation = np.maximum(planet.grid.read_field("height"), 0.0)
    greenhouse = planet.atmo.greenhouse * np.exp(-elevation / heat.elevation_scale)
    a = heat.emissivity * STEFAN_BOLTZMANN * (1.0 - greenhouse) * sim.tile_area * dt
    loss = a * temp**4
    loss_slope = 4.0 * a * temp**3

    temp += (absorbed - loss) / (sim.atmo_heat_cap + loss_slope)


def diffuse(sim: Sim, coefficient: float) -> None:
    """Exchange heat between cardinal neighbours.

    Each neighbouring pair swaps ``D·min(Cᵢ, Cⱼ)·(Tᵢ - Tⱼ)`` joules: one
    side loses exactly what the other gains, so Σ(T·C) is conserved.
    Longitude wraps; nothing crosses the poles.  Reads ``sim.atemp`` and
    writes ``sim.atemp_new``.

    Args:
        sim: Scratch buffers with ``atemp`` and ``atmo_heat_cap`` filled.
        coefficient: Diffusion coefficient ``D`` in ``[0, 0.25]``.
    """
    temp = sim.atemp
    cap = sim.atmo_heat_cap
    delta = np.zeros_like(temp)

    if coefficient > 0:
        # East-west pairs, including the seam at longitude 0
        flux = coefficient * np.minimum(cap, np.roll(cap, -1, axis=1)) * (
            temp - np.roll(temp, -1, axis=1)
        )
        delta -= flux
        delta += np.roll(flux, 1, axis=1)

        # North-south pairs
        flux = coefficient * np.minimum(cap[:-1], cap[1:]) * (temp[:-1] - temp[1:])
        delta[:-1] -= flux
        delta[1:] += flux

    sim.atemp_new[...] = temp + delta / cap


def advance_heat_transfer(planet: Planet, sim: Sim, params: Params) -> None:
    """Run one day of heat transfer and write the result into the tiles."""
    basics = planet.basics
    sim.atemp[...] = planet.grid.read_field("temp")
    update_surface(sim, planet, params)

    insolation = daily_insolation(
        sim.latitude,
        declination(planet.days, basics),
        basics.solar_constant,
    )
    apply_radiation(sim, planet, params, insolation)
    diffuse(sim, params.heat.diffusion_coefficient)
    sim.swap()

    assert np.all(np.isfinite(sim.atemp)), "non-finite temperature after heat transfer"
    assert np.all(sim.atemp > 0.0), "non-positive temperature after heat transfer"

    planet.grid.write_field("temp", sim.atemp)
    logger.debug(
        "day %d: temp min %.2f mean %.2f max %.2f K",
        planet.days,
        float(sim.atemp.min()),
        float(sim.atemp.mean()),
        float(sim.atemp.max()),
    )
