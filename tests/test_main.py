"""Tests for the headless runner in gaiasim.__main__."""

import logging
from pathlib import Path

import pytest

from gaiasim.__main__ import main, summarize
from gaiasim.simulation.persistence import load_planet
from gaiasim.simulation.planet import Planet


class TestMain:
    """Tests for the command line entry point."""

    def test_run_and_save(self, tmp_path: Path) -> None:
        out = tmp_path / "planet.yaml"
        main(["--width", "8", "--height", "4", "--days", "3", "--save", str(out)])
        planet = load_planet(out)
        assert planet.days == 3
        assert planet.grid.size == (8, 4)

    def test_load_and_continue(self, tmp_path: Path) -> None:
        first = tmp_path / "first.yaml"
        second = tmp_path / "second.yaml"
        main(["--width", "6", "--height", "3", "--days", "2", "--save", str(first)])
        main(["--load", str(first), "--days", "2", "--save", str(second)])
        assert load_planet(second).days == 4

    def test_reports_summary(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="gaiasim"):
            main(["--width", "4", "--height", "2", "--days", "2", "--report-every", "1"])
        assert sum("mean temp" in r.getMessage() for r in caplog.records) == 3

    def test_bad_argument(self) -> None:
        with pytest.raises(SystemExit):
            main(["--days", "many"])


def test_summarize(planet: Planet) -> None:
    line = summarize(planet)
    assert line.startswith("day 0:")
    assert "mean temp 300.0 K" in line
