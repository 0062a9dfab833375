"""Shared fixtures for the gaiasim test suite."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from numpy.random import Generator

from gaiasim.climate.sim import Sim
from gaiasim.simulation.params import Params, StartParams
from gaiasim.simulation.planet import Planet
from gaiasim.world.grid import TileGrid

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "default.yaml"


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_grid() -> TileGrid:
    """An 8x4 grid for fast tests."""
    return TileGrid(width=8, height=4)


@pytest.fixture
def params() -> Params:
    """Default params (no YAML file needed)."""
    return Params()


@pytest.fixture
def start_params() -> StartParams:
    """Default start params."""
    return StartParams()


@pytest.fixture
def bare_start() -> StartParams:
    """Start params with no buildings and an empty ledger."""
    return StartParams(resources={}, orbital_buildings={}, star_system_buildings={})


@pytest.fixture
def planet(start_params: StartParams, params: Params) -> Planet:
    """A 10x10 planet with default start params."""
    return Planet.new(10, 10, start_params, params)


@pytest.fixture
def bare_planet(bare_start: StartParams, params: Params) -> Planet:
    """A 10x10 planet without buildings or stock."""
    return Planet.new(10, 10, bare_start, params)


@pytest.fixture
def sim(planet: Planet) -> Sim:
    """Scratch buffers matching ``planet``."""
    return Sim.new(planet)


@pytest.fixture
def default_config() -> Path:
    """Path to the bundled config/default.yaml."""
    return DEFAULT_CONFIG
