"""Tile — a single cell of the planet grid.

Each tile holds terrain, surface vegetation and local air temperature.
Multi-tile structures live on an anchor tile; the other tiles of the
footprint point back to it with an ``Occupied`` marker.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from gaiasim.simulation.errors import parse_kind


class Biome(Enum):
    """Terrain kind, which drives albedo, heat capacity and plant cover."""

    ROCK = "rock"
    DESERT = "desert"
    ICE = "ice"
    OCEAN = "ocean"
    GRASSLAND = "grassland"
    FOREST = "forest"


class StructureKind(Enum):
    """Surface structures the player can place on the grid."""

    OXYGEN_GENERATOR = "oxygen_generator"
    FERTILIZATION_PLANT = "fertilization_plant"
    HEATER = "heater"
    SOLAR_ARRAY = "solar_array"
    MINE = "mine"


@dataclass(frozen=True)
class Occupied:
    """Marker for a tile covered by a structure anchored elsewhere.

    Attributes:
        by: Normalised ``(x, y)`` of the anchor tile.
    """

    by: tuple[int, int]


Structure = Union[StructureKind, Occupied, None]


@dataclass
class Tile:
    """A single tile in the planet grid.

    Attributes:
        biome: Terrain kind.
        structure: ``None``, the anchored ``StructureKind`` or an
            ``Occupied`` back-reference.
        height: Elevation in metres.
        biomass: Vegetation density in kg/m² (never negative).
        temp: Air temperature in Kelvin (always positive).
    """

    biome: Biome = Biome.ROCK
    structure: Structure = None
    height: float = 0.0
    biomass: float = 0.0
    temp: float = 300.0

    @property
    def is_anchor(self) -> bool:
        """Return True if the tile holds a structure's own data."""
        return isinstance(self.structure, StructureKind)

    def to_dict(self) -> dict[str, Any]:
        structure: Any = None
        if isinstance(self.structure, Occupied):
            structure = {"occupied_by": list(self.structure.by)}
        elif self.structure is not None:
            structure = self.structure.value
        return {
            "biome": self.biome.value,
            "structure": structure,
            "height": self.height,
            "biomass": self.biomass,
            "temp": self.temp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Tile:
        raw = data.get("structure")
        structure: Structure = None
        if isinstance(raw, Mapping):
            x, y = raw["occupied_by"]
            structure = Occupied(by=(int(x), int(y)))
        elif raw is not None:
            structure = parse_kind(StructureKind, raw)
        return cls(
            biome=parse_kind(Biome, data.get("biome", Biome.ROCK.value)),
            structure=structure,
            height=float(data.get("height", 0.0)),
            biomass=float(data.get("biomass", 0.0)),
            temp=float(data.get("temp", 300.0)),
        )
