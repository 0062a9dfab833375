"""Entry point for ``python -m gaiasim``.

Loads the default YAML config, creates (or loads) a planet and advances
it headlessly, logging a short summary as it goes.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from gaiasim.climate.gases import GasKind
from gaiasim.climate.sim import Sim
from gaiasim.economy.resources import ResourceKind
from gaiasim.simulation.params import Params, StartParams
from gaiasim.simulation.persistence import load_planet, save_planet
from gaiasim.simulation.planet import Planet

logger = logging.getLogger("gaiasim")

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def summarize(planet: Planet) -> str:
    """Return a one-line status report."""
    basics = planet.basics
    return (
        f"day {planet.days}: "
        f"mean temp {planet.mean_temp():.1f} K, "
        f"pressure {planet.atmo.pressure(basics) / 1000.0:.2f} kPa, "
        f"O2 {planet.atmo.partial_pressure(GasKind.OXYGEN, basics):.1f} Pa, "
        f"energy {planet.res.stock_of(ResourceKind.ENERGY):.0f} "
        f"({planet.res.diff_of(ResourceKind.ENERGY):+.0f}/day)"
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args, build the planet, run it."""
    parser = argparse.ArgumentParser(
        prog="gaiasim",
        description="Gaiasim - headless planetary colony simulation",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=64,
        help="Grid columns for a new planet (default: 64)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=32,
        help="Grid rows for a new planet (default: 32)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=360,
        help="Days to simulate (default: 360)",
    )
    parser.add_argument(
        "--report-every",
        type=int,
        default=30,
        help="Log a summary every N days (default: 30)",
    )
    parser.add_argument(
        "--load",
        type=pathlib.Path,
        help="Continue from a saved planet instead of creating one",
    )
    parser.add_argument(
        "--save",
        type=pathlib.Path,
        help="Write the planet here when done",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    params = Params.from_yaml(args.config)
    if args.load is not None:
        planet = load_planet(args.load)
    else:
        start_params = StartParams.from_yaml(args.config)
        planet = Planet.new(args.width, args.height, start_params, params)

    sim = Sim.new(planet)
    for _ in range(args.days):
        planet.advance(sim, params)
        if args.report_every > 0 and planet.days % args.report_every == 0:
            logger.info("%s", summarize(planet))

    logger.info("%s", summarize(planet))
    if args.save is not None:
        save_planet(planet, args.save)


if __name__ == "__main__":
    main()
