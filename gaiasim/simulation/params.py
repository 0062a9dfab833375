"""Params — static catalogs and physical constants loaded from YAML.

``Params`` holds everything the daily advance reads but never changes:
biome properties, the structure and building catalogs, and the heat and
atmosphere tuning constants.  ``StartParams`` describes one new planet.
Both come with in-code defaults so tests and tools can run without a
config file; ``from_yaml`` overrides whatever the file mentions.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from gaiasim.climate.gases import GasKind
from gaiasim.economy.buildings import OrbitalBuildingKind, StarSystemBuildingKind
from gaiasim.economy.resources import ResourceKind
from gaiasim.simulation.errors import UnknownKind, parse_kind
from gaiasim.world.tile import Biome, StructureKind

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
D = TypeVar("D")


class UpkeepPolicy(Enum):
    """What happens to a building whose upkeep cannot be paid in full.

    TOLERATE: debit what is there (stock clamps at zero) and keep producing.
    SHUTDOWN: the unit idles for the day; nothing is debited or produced.
    """

    TOLERATE = "tolerate"
    SHUTDOWN = "shutdown"


def _amounts(kinds: type[E], data: Mapping[str, float] | None) -> dict[E, float]:
    return {parse_kind(kinds, name): float(v) for name, v in (data or {}).items()}


def _replace(obj: D, overrides: Mapping[str, Any] | None) -> D:
    """Return a copy of dataclass ``obj`` with YAML overrides applied."""
    if not overrides:
        return obj
    names = {f.name for f in dataclasses.fields(obj)}
    unknown = set(overrides) - names
    if unknown:
        msg = f"unknown {type(obj).__name__} keys: {sorted(unknown)}"
        raise ValueError(msg)
    # PyYAML reads "6.4e6" (no exponent sign) as a string
    coerced = {
        k: float(v) if isinstance(getattr(obj, k), float) else v
        for k, v in overrides.items()
    }
    return dataclasses.replace(obj, **coerced)


@dataclass(frozen=True)
class BuildingAttrs:
    """Static economics of one building or structure kind.

    Attributes:
        cost: One-off construction cost.
        upkeep: Resources consumed per active unit per day.
        produces: Resources produced per active unit per day.
        gases: Gas mass (kg) released per day; negative values absorb.
    """

    cost: dict[ResourceKind, float] = field(default_factory=dict)
    upkeep: dict[ResourceKind, float] = field(default_factory=dict)
    produces: dict[ResourceKind, float] = field(default_factory=dict)
    gases: dict[GasKind, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BuildingAttrs:
        return cls(
            cost=_amounts(ResourceKind, data.get("cost")),
            upkeep=_amounts(ResourceKind, data.get("upkeep")),
            produces=_amounts(ResourceKind, data.get("produces")),
            gases=_amounts(GasKind, data.get("gases")),
        )


@dataclass(frozen=True)
class StructureAttrs:
    """Catalog entry for a placeable surface structure.

    Attributes:
        size: Edge length of the square footprint in tiles.
        building: Cost, upkeep and production.
        heat: Kelvin added per day to every footprint tile.
        fertility: Biomass (kg/m²) added per day to every footprint tile.
    """

    size: int = 1
    building: BuildingAttrs = field(default_factory=BuildingAttrs)
    heat: float = 0.0
    fertility: float = 0.0

    def __post_init__(self) -> None:
        if self.size < 1:
            msg = f"structure size must be >= 1, got {self.size}"
            raise ValueError(msg)
        for name in ("heat", "fertility"):
            value = getattr(self, name)
            if not 0.0 <= value < math.inf:
                msg = f"{name} must be finite and >= 0, got {value}"
                raise ValueError(msg)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StructureAttrs:
        return cls(
            size=int(data.get("size", 1)),
            building=BuildingAttrs.from_dict(data),
            heat=float(data.get("heat", 0.0)),
            fertility=float(data.get("fertility", 0.0)),
        )


@dataclass(frozen=True)
class BiomeAttrs:
    """Physical properties of a terrain kind.

    Attributes:
        albedo: Fraction of sunlight reflected (0-1).
        heat_capacity: Surface layer heat capacity in J/(m²·K).
        biomass_capacity: Carrying capacity for vegetation in kg/m².
    """

    albedo: float
    heat_capacity: float
    biomass_capacity: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.albedo <= 1.0:
            msg = f"albedo must be in [0, 1], got {self.albedo}"
            raise ValueError(msg)
        if self.heat_capacity <= 0.0:
            msg = f"heat_capacity must be positive, got {self.heat_capacity}"
            raise ValueError(msg)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BiomeAttrs:
        return cls(
            albedo=float(data["albedo"]),
            heat_capacity=float(data["heat_capacity"]),
            biomass_capacity=float(data.get("biomass_capacity", 0.0)),
        )


@dataclass(frozen=True)
class HeatParams:
    """Constants for the heat transfer pass.

    Attributes:
        seconds_per_day: Length of one simulated day.
        diffusion_coefficient: Fraction of a temperature difference
            exchanged with each neighbour per day (at most 0.25).
        emissivity: Long-wave emissivity of the surface-air column.
        air_specific_heat: Isobaric specific heat of air, J/(kg·K).
        vegetation_albedo: Albedo of fully vegetated ground.
        biomass_saturation: Biomass (kg/m²) at which ground counts as
            fully vegetated.
        elevation_scale: Height (m) over which the greenhouse effect
            falls off by a factor of e.
    """

    seconds_per_day: float = 86400.0
    diffusion_coefficient: float = 0.1
    emissivity: float = 0.95
    air_specific_heat: float = 1004.0
    vegetation_albedo: float = 0.15
    biomass_saturation: float = 5.0
    elevation_scale: float = 8000.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.diffusion_coefficient <= 0.25:
            msg = f"diffusion_coefficient must be in [0, 0.25], got {self.diffusion_coefficient}"
            raise ValueError(msg)
        if not 0.0 <= self.emissivity <= 1.0:
            msg = f"emissivity must be in [0, 1], got {self.emissivity}"
            raise ValueError(msg)
        if self.seconds_per_day <= 0.0 or self.biomass_saturation <= 0.0:
            msg = "seconds_per_day and biomass_saturation must be positive"
            raise ValueError(msg)
        if self.elevation_scale <= 0.0:
            msg = f"elevation_scale must be positive, got {self.elevation_scale}"
            raise ValueError(msg)


@dataclass(frozen=True)
class AtmoParams:
    """Constants for the atmosphere and biosphere pass.

    Attributes:
        growth_rate: Logistic vegetation growth rate per day.
        decay_rate: Fraction of biomass that decays per day.
        dieback_rate: Fraction of biomass above capacity lost per day.
        optimal_temp: Temperature (K) of fastest growth.
        temp_tolerance: Distance from ``optimal_temp`` (K) at which growth
            stops.
        greenhouse_max: Upper bound of the greenhouse factor (< 1).
        co2_reference_pressure: CO2 partial pressure (Pa) at which the
            greenhouse factor reaches ``1 - 1/e`` of its maximum.
    """

    growth_rate: float = 0.05
    decay_rate: float = 0.01
    dieback_rate: float = 0.1
    optimal_temp: float = 295.0
    temp_tolerance: float = 30.0
    greenhouse_max: float = 0.8
    co2_reference_pressure: float = 60.0

    def __post_init__(self) -> None:
        for name in ("growth_rate", "decay_rate", "dieback_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                msg = f"{name} must be in [0, 1], got {value}"
                raise ValueError(msg)
        if not 0.0 <= self.greenhouse_max < 1.0:
            msg = f"greenhouse_max must be in [0, 1), got {self.greenhouse_max}"
            raise ValueError(msg)
        if self.temp_tolerance <= 0.0 or self.co2_reference_pressure <= 0.0:
            msg = "temp_tolerance and co2_reference_pressure must be positive"
            raise ValueError(msg)


def _default_biomes() -> dict[Biome, BiomeAttrs]:
    return {
        Biome.ROCK: BiomeAttrs(albedo=0.25, heat_capacity=2.0e6),
        Biome.DESERT: BiomeAttrs(albedo=0.35, heat_capacity=1.5e6, biomass_capacity=0.5),
        Biome.ICE: BiomeAttrs(albedo=0.7, heat_capacity=2.0e6),
        Biome.OCEAN: BiomeAttrs(albedo=0.06, heat_capacity=4.0e7, biomass_capacity=0.2),
        Biome.GRASSLAND: BiomeAttrs(albedo=0.2, heat_capacity=2.5e6, biomass_capacity=4.0),
        Biome.FOREST: BiomeAttrs(albedo=0.14, heat_capacity=3.0e6, biomass_capacity=15.0),
    }


def _default_structures() -> dict[StructureKind, StructureAttrs]:
    R = ResourceKind
    return {
        StructureKind.OXYGEN_GENERATOR: StructureAttrs(
            building=BuildingAttrs(
                cost={R.MATERIAL: 100.0},
                upkeep={R.ENERGY: 10.0},
                produces={R.CARBON: 5.0},
                gases={GasKind.CARBON_DIOXIDE: -1.375e12, GasKind.OXYGEN: 1.0e12},
            ),
        ),
        StructureKind.FERTILIZATION_PLANT: StructureAttrs(
            size=2,
            building=BuildingAttrs(
                cost={R.MATERIAL: 200.0},
                upkeep={R.ENERGY: 20.0, R.FERTILIZER: 5.0},
            ),
            fertility=0.05,
        ),
        StructureKind.HEATER: StructureAttrs(
            building=BuildingAttrs(cost={R.MATERIAL: 50.0}, upkeep={R.ENERGY: 30.0}),
            heat=0.5,
        ),
        StructureKind.SOLAR_ARRAY: StructureAttrs(
            size=2,
            building=BuildingAttrs(cost={R.MATERIAL: 80.0}, produces={R.ENERGY: 40.0}),
        ),
        StructureKind.MINE: StructureAttrs(
            building=BuildingAttrs(
                cost={R.MATERIAL: 60.0},
                upkeep={R.ENERGY: 15.0},
                produces={R.MATERIAL: 25.0},
            ),
        ),
    }


def _default_orbital() -> dict[OrbitalBuildingKind, BuildingAttrs]:
    R = ResourceKind
    return {
        OrbitalBuildingKind.SOLAR_POWER_SATELLITE: BuildingAttrs(
            cost={R.MATERIAL: 500.0, R.FUEL: 50.0},
            produces={R.ENERGY: 200.0},
        ),
        OrbitalBuildingKind.ORBITAL_FACTORY: BuildingAttrs(
            cost={R.MATERIAL: 800.0, R.FUEL: 100.0},
            upkeep={R.ENERGY: 100.0},
            produces={R.MATERIAL: 60.0},
        ),
        OrbitalBuildingKind.FUEL_REFINERY: BuildingAttrs(
            cost={R.MATERIAL: 600.0, R.FUEL: 50.0},
            upkeep={R.ENERGY: 50.0, R.ICE: 10.0},
            produces={R.FUEL: 20.0},
        ),
    }


def _default_star_system() -> dict[StarSystemBuildingKind, BuildingAttrs]:
    R = ResourceKind
    return {
        StarSystemBuildingKind.ASTEROID_MINING_STATION: BuildingAttrs(
            cost={R.MATERIAL: 2000.0, R.FUEL: 500.0},
            upkeep={R.FUEL: 10.0},
            produces={R.MATERIAL: 150.0},
        ),
        StarSystemBuildingKind.ICE_COMET_HARVESTER: BuildingAttrs(
            cost={R.MATERIAL: 1500.0, R.FUEL: 400.0},
            upkeep={R.FUEL: 10.0},
            produces={R.ICE: 100.0},
        ),
        StarSystemBuildingKind.GAS_GIANT_SKIMMER: BuildingAttrs(
            cost={R.MATERIAL: 2500.0, R.FUEL: 300.0},
            upkeep={R.FUEL: 15.0},
            produces={R.NITROGEN: 50.0},
            gases={GasKind.NITROGEN: 1.0e13},
        ),
    }


def _merge_catalog(
    kinds: type[E],
    defaults: dict[E, D],
    data: Mapping[str, Any] | None,
    parse: Any,
) -> dict[E, D]:
    catalog = dict(defaults)
    for name, entry in (data or {}).items():
        catalog[parse_kind(kinds, name)] = parse(entry or {})
    return catalog


@dataclass
class Params:
    """Static configuration read by every daily advance.

    Attributes:
        biomes: Physical properties per biome.
        structures: Placeable structure catalog.
        orbital_buildings: Orbital facility catalog.
        star_system_buildings: Star-system facility catalog.
        heat: Heat transfer constants.
        atmo: Atmosphere and biosphere constants.
        upkeep_policy: Handling of unpaid upkeep.
    """

    biomes: dict[Biome, BiomeAttrs] = field(default_factory=_default_biomes)
    structures: dict[StructureKind, StructureAttrs] = field(default_factory=_default_structures)
    orbital_buildings: dict[OrbitalBuildingKind, BuildingAttrs] = field(
        default_factory=_default_orbital,
    )
    star_system_buildings: dict[StarSystemBuildingKind, BuildingAttrs] = field(
        default_factory=_default_star_system,
    )
    heat: HeatParams = field(default_factory=HeatParams)
    atmo: AtmoParams = field(default_factory=AtmoParams)
    upkeep_policy: UpkeepPolicy = UpkeepPolicy.TOLERATE

    def biome(self, biome: Biome) -> BiomeAttrs:
        try:
            return self.biomes[biome]
        except KeyError as exc:
            msg = f"biome {biome.value!r} missing from catalog"
            raise UnknownKind(msg) from exc

    def structure(self, kind: StructureKind) -> StructureAttrs:
        try:
            return self.structures[kind]
        except KeyError as exc:
            msg = f"structure {kind.value!r} missing from catalog"
            raise UnknownKind(msg) from exc

    def building(self, kind: OrbitalBuildingKind | StarSystemBuildingKind) -> BuildingAttrs:
        catalog: Mapping[Any, BuildingAttrs]
        if isinstance(kind, OrbitalBuildingKind):
            catalog = self.orbital_buildings
        else:
            catalog = self.star_system_buildings
        try:
            return catalog[kind]
        except KeyError as exc:
            msg = f"building {kind.value!r} missing from catalog"
            raise UnknownKind(msg) from exc

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Params:
        """Build params from a parsed YAML mapping.

        Raises:
            UnknownKind: If a catalog names a kind that does not exist.
            ValueError: If a value is out of its physical range.
        """
        defaults = cls()
        return cls(
            biomes=_merge_catalog(
                Biome,
                defaults.biomes,
                data.get("biomes"),
                BiomeAttrs.from_dict,
            ),
            structures=_merge_catalog(
                StructureKind,
                defaults.structures,
                data.get("structures"),
                StructureAttrs.from_dict,
            ),
            orbital_buildings=_merge_catalog(
                OrbitalBuildingKind,
                defaults.orbital_buildings,
                data.get("orbital_buildings"),
                BuildingAttrs.from_dict,
            ),
            star_system_buildings=_merge_catalog(
                StarSystemBuildingKind,
                defaults.star_system_buildings,
                data.get("star_system_buildings"),
                BuildingAttrs.from_dict,
            ),
            heat=_replace(defaults.heat, data.get("heat")),
            atmo=_replace(defaults.atmo, data.get("atmo")),
            upkeep_policy=parse_kind(
                UpkeepPolicy,
                data.get("upkeep_policy", defaults.upkeep_policy.value),
            ),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> Params:
        """Load params from a YAML file.

        Raises:
            FileNotFoundError: If the config file does not exist.
            UnknownKind: If a catalog names a kind that does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        params = cls.from_dict(data)
        logger.info("loaded params from %s", path)
        return params


@dataclass(frozen=True)
class PlanetBasics:
    """Physical constants of one planet.

    Attributes:
        radius: Planet radius in metres.
        gravity: Surface gravity in m/s².
        solar_constant: Stellar flux at the planet's orbit, W/m².
        axial_tilt: Obliquity in radians.
        year_days: Length of the orbital year in days.
    """

    radius: float = 6.4e6
    gravity: float = 9.8
    solar_constant: float = 1361.0
    axial_tilt: float = 0.41
    year_days: float = 360.0

    def __post_init__(self) -> None:
        if self.radius <= 0.0 or self.gravity <= 0.0 or self.year_days <= 0.0:
            msg = "radius, gravity and year_days must be positive"
            raise ValueError(msg)
        if self.solar_constant < 0.0:
            msg = f"solar_constant must be >= 0, got {self.solar_constant}"
            raise ValueError(msg)

    @property
    def surface_area(self) -> float:
        return 4.0 * math.pi * self.radius * self.radius


def _default_start_resources() -> dict[ResourceKind, float]:
    R = ResourceKind
    return {
        R.ENERGY: 1000.0,
        R.MATERIAL: 5000.0,
        R.ICE: 500.0,
        R.FERTILIZER: 200.0,
        R.FUEL: 1000.0,
    }


def _default_start_gases() -> dict[GasKind, float]:
    return {
        GasKind.NITROGEN: 4.0e18,
        GasKind.OXYGEN: 1.0e15,
        GasKind.CARBON_DIOXIDE: 2.0e15,
        GasKind.ARGON: 6.0e16,
    }


def _default_start_orbital() -> dict[OrbitalBuildingKind, int]:
    return {OrbitalBuildingKind.SOLAR_POWER_SATELLITE: 2}


def _default_start_star_system() -> dict[StarSystemBuildingKind, int]:
    return {StarSystemBuildingKind.ASTEROID_MINING_STATION: 1}


def _default_buildable() -> frozenset[StructureKind]:
    return frozenset(
        {
            StructureKind.OXYGEN_GENERATOR,
            StructureKind.FERTILIZATION_PLANT,
            StructureKind.HEATER,
        },
    )


@dataclass(frozen=True)
class StartParams:
    """Initial conditions for a new planet; read only by ``Planet.new``.

    Attributes:
        basics: Physical constants copied into the planet.
        resources: Starting stock.
        gases: Starting atmosphere, kg per gas.
        orbital_buildings: Starting orbital building counts (all enabled).
        star_system_buildings: Starting star-system building counts.
        buildable_structures: Structures unlocked from the start.
    """

    basics: PlanetBasics = field(default_factory=PlanetBasics)
    resources: dict[ResourceKind, float] = field(default_factory=_default_start_resources)
    gases: dict[GasKind, float] = field(default_factory=_default_start_gases)
    orbital_buildings: dict[OrbitalBuildingKind, int] = field(
        default_factory=_default_start_orbital,
    )
    star_system_buildings: dict[StarSystemBuildingKind, int] = field(
        default_factory=_default_start_star_system,
    )
    buildable_structures: frozenset[StructureKind] = field(default_factory=_default_buildable)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StartParams:
        defaults = cls()

        def counts(kinds: type[E], key: str, fallback: dict[E, int]) -> dict[E, int]:
            if key not in data:
                return fallback
            return {parse_kind(kinds, k): int(v) for k, v in (data[key] or {}).items()}

        resources = defaults.resources
        if "resources" in data:
            resources = _amounts(ResourceKind, data["resources"])
        gases = defaults.gases
        if "gases" in data:
            gases = _amounts(GasKind, data["gases"])
        buildable = defaults.buildable_structures
        if "buildable_structures" in data:
            buildable = frozenset(
                parse_kind(StructureKind, name) for name in data["buildable_structures"] or []
            )
        return cls(
            basics=_replace(defaults.basics, data.get("basics")),
            resources=resources,
            gases=gases,
            orbital_buildings=counts(
                OrbitalBuildingKind,
                "orbital_buildings",
                defaults.orbital_buildings,
            ),
            star_system_buildings=counts(
                StarSystemBuildingKind,
                "star_system_buildings",
                defaults.star_system_buildings,
            ),
            buildable_structures=buildable,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> StartParams:
        """Load the ``start`` section of a YAML config file."""
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get("start") or {})
