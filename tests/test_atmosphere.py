"""Tests for gaiasim.climate.atmosphere."""

import numpy as np
import pytest

from gaiasim.climate.atmosphere import Atmosphere, advance_atmosphere, greenhouse_factor
from gaiasim.climate.gases import CO2_PER_BIOMASS, O2_PER_BIOMASS, GasKind
from gaiasim.simulation.params import AtmoParams, Params, PlanetBasics
from gaiasim.simulation.planet import Planet
from gaiasim.world.tile import Biome

CO2 = GasKind.CARBON_DIOXIDE
O2 = GasKind.OXYGEN


def cover(planet: Planet, biome: Biome, biomass: float, temp: float) -> None:
    for coords in planet.grid.iter_coords():
        tile = planet.grid[coords]
        tile.biome = biome
        tile.biomass = biomass
        tile.temp = temp


class TestGreenhouseFactor:
    """Tests for the CO2 greenhouse curve."""

    def test_zero_without_co2(self) -> None:
        assert greenhouse_factor(0.0, AtmoParams()) == 0.0

    def test_rises_toward_maximum(self) -> None:
        atmo = AtmoParams(greenhouse_max=0.8, co2_reference_pressure=60.0)
        values = [greenhouse_factor(p, atmo) for p in (1.0, 10.0, 60.0, 1000.0)]
        assert values == sorted(values)
        assert values[2] == pytest.approx(0.8 * (1.0 - np.exp(-1.0)))
        assert values[-1] < 0.8


class TestAtmosphere:
    """Tests for the gas inventory."""

    def test_add_clamps(self) -> None:
        atmo = Atmosphere()
        assert atmo.add(O2, 5.0) is False
        assert atmo.add(O2, -8.0) is True
        assert atmo.gases[O2] == 0.0

    def test_pressure(self) -> None:
        basics = PlanetBasics(radius=1.0, gravity=10.0)
        atmo = Atmosphere.from_gases({GasKind.NITROGEN: 3.0, CO2: 1.0}, basics, AtmoParams())
        area = basics.surface_area
        assert atmo.total_mass == 4.0
        assert atmo.pressure(basics) == pytest.approx(40.0 / area)
        assert atmo.partial_pressure(CO2, basics) == pytest.approx(10.0 / area)

    def test_from_gases_sets_greenhouse(self) -> None:
        basics = PlanetBasics()
        atmo_params = AtmoParams()
        atmo = Atmosphere.from_gases({CO2: 2.0e15}, basics, atmo_params)
        expected = greenhouse_factor(atmo.partial_pressure(CO2, basics), atmo_params)
        assert atmo.greenhouse == pytest.approx(expected)
        assert atmo.greenhouse > 0.0

    def test_dict_round_trip(self) -> None:
        atmo = Atmosphere(greenhouse=0.25)
        atmo.add(CO2, 12.5)
        assert Atmosphere.from_dict(atmo.to_dict()) == atmo


class TestAdvanceAtmosphere:
    """Tests for the daily vegetation and gas exchange."""

    def test_growth_at_optimal_temperature(self, bare_planet: Planet, params: Params) -> None:
        cover(bare_planet, Biome.GRASSLAND, 1.0, 295.0)
        co2_before = bare_planet.atmo.gases[CO2]
        o2_before = bare_planet.atmo.gases[O2]

        advance_atmosphere(bare_planet, params)

        # 0.05 * 1 * (1 - 1/4) grown, 0.01 decayed
        biomass = bare_planet.grid.read_field("biomass")
        assert np.allclose(biomass, 1.0275)
        fixed = 0.0275 * bare_planet.basics.surface_area
        assert bare_planet.atmo.gases[CO2] == pytest.approx(co2_before - fixed * CO2_PER_BIOMASS)
        assert bare_planet.atmo.gases[O2] == pytest.approx(o2_before + fixed * O2_PER_BIOMASS)

    def test_dieback_above_capacity(self, bare_planet: Planet, params: Params) -> None:
        cover(bare_planet, Biome.ROCK, 1.0, 295.0)
        advance_atmosphere(bare_planet, params)
        assert np.allclose(bare_planet.grid.read_field("biomass"), 0.89)

    def test_no_growth_outside_tolerance(self, bare_planet: Planet, params: Params) -> None:
        cover(bare_planet, Biome.FOREST, 2.0, 400.0)
        advance_atmosphere(bare_planet, params)
        assert np.allclose(bare_planet.grid.read_field("biomass"), 1.98)

    def test_growth_limited_by_co2(self, bare_planet: Planet, params: Params) -> None:
        cover(bare_planet, Biome.GRASSLAND, 1.0, 295.0)
        bare_planet.atmo.gases[CO2] = 0.0
        o2_before = bare_planet.atmo.gases[O2]

        advance_atmosphere(bare_planet, params)

        # Only the CO2 released by decay is available to growth
        assert np.allclose(bare_planet.grid.read_field("biomass"), 1.0)
        assert bare_planet.atmo.gases[CO2] >= 0.0
        assert bare_planet.atmo.gases[CO2] == pytest.approx(0.0, abs=1.0e3)
        assert bare_planet.atmo.gases[O2] == pytest.approx(o2_before, abs=1.0e3)

    def test_bare_ground_stays_bare(self, bare_planet: Planet, params: Params) -> None:
        gases = dict(bare_planet.atmo.gases)
        advance_atmosphere(bare_planet, params)
        assert np.all(bare_planet.grid.read_field("biomass") == 0.0)
        assert bare_planet.atmo.gases == gases

    def test_refreshes_greenhouse(self, bare_planet: Planet, params: Params) -> None:
        bare_planet.atmo.gases[CO2] *= 4.0
        old = bare_planet.atmo.greenhouse
        advance_atmosphere(bare_planet, params)
        basics = bare_planet.basics
        expected = greenhouse_factor(bare_planet.atmo.partial_pressure(CO2, basics), params.atmo)
        assert bare_planet.atmo.greenhouse == pytest.approx(expected)
        assert bare_planet.atmo.greenhouse > old
