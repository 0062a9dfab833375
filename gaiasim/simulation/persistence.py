"""Save and load planets as YAML.

Only ``Planet`` is written.  ``Sim`` buffers are rebuilt from the loaded
planet on the first ``advance``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from gaiasim.simulation.planet import Planet

logger = logging.getLogger(__name__)


def save_planet(planet: Planet, path: str | Path) -> None:
    """Write ``planet`` to ``path``."""
    path = Path(path)
    with path.open("w") as f:
        yaml.safe_dump(planet.to_dict(), f, sort_keys=False)
    logger.info("saved planet (day %d) to %s", planet.days, path)


def load_planet(path: str | Path) -> Planet:
    """Read a planet written by ``save_planet``.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnknownKind: If the file names a kind this version does not know.
    """
    path = Path(path)
    with path.open("r") as f:
        data = yaml.safe_load(f)
    planet = Planet.from_dict(data)
    logger.info("loaded planet (day %d) from %s", planet.days, path)
    return planet
