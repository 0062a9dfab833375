"""TileGrid — the planet surface mapped onto a rectangle.

Columns are longitude and wrap around; rows are latitude and are
clamped.  Rows are spaced so that every tile covers the same area of the
sphere, which lets the climate code treat all tiles alike apart from
their latitude.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from gaiasim.simulation.errors import OutOfBounds
from gaiasim.world.tile import Tile

Coords = tuple[int, int]

_NUMERIC_FIELDS = ("temp", "biomass", "height")


@dataclass
class TileGrid:
    """A 2D grid of tiles indexed as ``tiles[y][x]``.

    Attributes:
        width: Number of columns (longitude).
        height: Number of rows (latitude).
        tiles: 2D list of Tile objects.
    """

    width: int
    height: int
    tiles: list[list[Tile]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Fill the grid with default tiles."""
        if self.width <= 0 or self.height <= 0:
            msg = f"grid size must be positive, got {self.width}x{self.height}"
            raise ValueError(msg)
        self.tiles = [[Tile() for _ in range(self.width)] for _ in range(self.height)]

    @property
    def size(self) -> tuple[int, int]:
        """Return ``(width, height)``."""
        return self.width, self.height

    def normalize(self, coords: Coords) -> Coords:
        """Wrap longitude and check latitude.

        Raises:
            OutOfBounds: If ``y`` is outside ``[0, height)``.
        """
        x, y = coords
        if not 0 <= y < self.height:
            msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
            raise OutOfBounds(msg)
        return x % self.width, y

    def tile_at(self, x: int, y: int) -> Tile:
        """Return the tile at ``(x, y)``, wrapping ``x``."""
        nx, ny = self.normalize((x, y))
        return self.tiles[ny][nx]

    def __getitem__(self, coords: Coords) -> Tile:
        return self.tile_at(*coords)

    def in_bounds(self, coords: Coords) -> bool:
        """Return True if the latitude row exists."""
        return 0 <= coords[1] < self.height

    def iter_coords(self) -> Iterator[Coords]:
        """Yield every ``(x, y)`` in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def neighbours(self, x: int, y: int) -> list[Coords]:
        """Return the cardinal neighbours of ``(x, y)``.

        Longitude wraps, so east/west neighbours always exist; north and
        south neighbours are dropped at the poles.
        """
        x, y = self.normalize((x, y))
        result: list[Coords] = []
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            ny = y + dy
            if 0 <= ny < self.height:
                result.append(((x + dx) % self.width, ny))
        return result

    def footprint(self, coords: Coords, size: int) -> list[Coords]:
        """Return the ``size x size`` square anchored at ``coords``.

        The anchor is the first entry.  Columns wrap; rows must stay on
        the grid.

        Raises:
            OutOfBounds: If any row of the square is off the grid.
            ValueError: If ``size`` is not positive or wider than the grid.
        """
        if size <= 0 or size > self.width:
            msg = f"footprint size {size} invalid for width {self.width}"
            raise ValueError(msg)
        x0, y0 = coords
        return [
            self.normalize((x0 + dx, y0 + dy))
            for dy in range(size)
            for dx in range(size)
        ]

    def calc_longitude_latitude(self, coords: Coords) -> tuple[float, float]:
        """Map a tile to ``(longitude, latitude)`` in radians.

        Longitude is in ``[0, 2π)``; latitude is in ``[-π/2, π/2]`` and
        follows an equal-area spacing (``asin`` of the row centre).
        """
        x, y = self.normalize(coords)
        u = (2.0 * x + 1.0) / (2.0 * self.width)
        v = ((2.0 * y + 1.0) / (2.0 * self.height)) * 2.0 - 1.0
        return u * 2.0 * math.pi, math.asin(v)

    def inverse_longitude_latitude(self, longitude: float, latitude: float) -> Coords:
        """Return the tile containing the point ``(longitude, latitude)``."""
        u = (longitude / (2.0 * math.pi)) % 1.0
        v = (math.sin(latitude) + 1.0) / 2.0
        x = min(int(u * self.width), self.width - 1)
        y = min(int(v * self.height), self.height - 1)
        return x, y

    def row_latitudes(self) -> NDArray[np.float64]:
        """Return the latitude of every row as a 1D array."""
        rows = np.arange(self.height, dtype=np.float64)
        return np.arcsin(((2.0 * rows + 1.0) / (2.0 * self.height)) * 2.0 - 1.0)

    def read_field(self, name: str) -> NDArray[np.float64]:
        """Copy a numeric tile attribute into a ``(height, width)`` array.

        Args:
            name: One of ``temp``, ``biomass`` or ``height``.
        """
        if name not in _NUMERIC_FIELDS:
            msg = f"{name!r} is not a numeric tile field"
            raise ValueError(msg)
        return np.array(
            [[getattr(tile, name) for tile in row] for row in self.tiles],
            dtype=np.float64,
        )

    def write_field(self, name: str, values: NDArray[np.float64]) -> None:
        """Write a ``(height, width)`` array back into the tiles."""
        if name not in _NUMERIC_FIELDS:
            msg = f"{name!r} is not a numeric tile field"
            raise ValueError(msg)
        if values.shape != (self.height, self.width):
            msg = f"shape {values.shape} does not match grid {self.height}x{self.width}"
            raise ValueError(msg)
        for row, row_values in zip(self.tiles, values.tolist(), strict=True):
            for tile, value in zip(row, row_values, strict=True):
                setattr(tile, name, value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "tiles": [[tile.to_dict() for tile in row] for row in self.tiles],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TileGrid:
        grid = cls(width=int(data["width"]), height=int(data["height"]))
        rows = data["tiles"]
        if len(rows) != grid.height or any(len(row) != grid.width for row in rows):
            msg = f"tile data does not match {grid.width}x{grid.height}"
            raise ValueError(msg)
        grid.tiles = [[Tile.from_dict(tile) for tile in row] for row in rows]
        return grid
