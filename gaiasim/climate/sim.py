"""Sim — per-tile scratch buffers for the climate passes.

The buffers are derived entirely from the planet's geometry and state.
They are never saved, and they are rebuilt whenever the grid size or the
planet radius no longer match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from gaiasim.simulation.planet import Planet

logger = logging.getLogger(__name__)


def _empty() -> NDArray[np.float64]:
    return np.zeros((0, 0), dtype=np.float64)


@dataclass
class Sim:
    """Working arrays shaped ``(height, width)`` like the grid.

    Attributes:
        width: Grid columns the buffers were built for.
        height: Grid rows the buffers were built for.
        radius: Planet radius the buffers were built for.
        n_tile: Number of tiles.
        tile_area: Area of every tile in m² (tiles are equal-area).
        latitude: Latitude of every row, radians.
        atemp: Air temperature at the start of the current pass, K.
        atemp_new: Write buffer for the temperature being computed, K.
        atmo_heat_cap: Heat capacity of each tile's column, J/K.
        albedo: Fraction of sunlight each tile reflects.
    """

    width: int = 0
    height: int = 0
    radius: float = 0.0
    n_tile: int = 0
    tile_area: float = 0.0
    latitude: NDArray[np.float64] = field(default_factory=lambda: np.zeros(0), repr=False)
    atemp: NDArray[np.float64] = field(default_factory=_empty, repr=False)
    atemp_new: NDArray[np.float64] = field(default_factory=_empty, repr=False)
    atmo_heat_cap: NDArray[np.float64] = field(default_factory=_empty, repr=False)
    albedo: NDArray[np.float64] = field(default_factory=_empty, repr=False)

    @classmethod
    def new(cls, planet: Planet) -> Sim:
        """Create buffers sized for ``planet``."""
        sim = cls()
        sim.rebuild(planet)
        return sim

    def matches(self, planet: Planet) -> bool:
        """Return True if the buffers fit the planet's geometry."""
        return (self.width, self.height) == planet.grid.size and self.radius == planet.basics.radius

    def rebuild(self, planet: Planet) -> None:
        """Reallocate every buffer for the planet's current geometry."""
        width, height = planet.grid.size
        shape = (height, width)
        self.width = width
        self.height = height
        self.radius = planet.basics.radius
        self.n_tile = width * height
        self.tile_area = planet.basics.surface_area / self.n_tile
        self.latitude = planet.grid.row_latitudes()
        self.atemp = planet.grid.read_field("temp")
        self.atemp_new = self.atemp.copy()
        self.atmo_heat_cap = np.zeros(shape, dtype=np.float64)
        self.albedo = np.zeros(shape, dtype=np.float64)
        logger.debug("rebuilt sim buffers for %dx%d grid", width, height)

    def swap(self) -> None:
        """Make the write buffer the live temperature field."""
        self.atemp, self.atemp_new = self.atemp_new, self.atemp

    def total_heat(self) -> float:
        """Return Σ(temperature × heat capacity) of the live buffer, in J."""
        return float(np.sum(self.atemp * self.atmo_heat_cap))
