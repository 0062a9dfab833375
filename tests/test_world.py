"""Tests for gaiasim.world.grid and gaiasim.world.tile."""

import math

import numpy as np
import pytest

from gaiasim.simulation.errors import OutOfBounds
from gaiasim.world.grid import TileGrid
from gaiasim.world.tile import Biome, Occupied, StructureKind, Tile


class TestTile:
    """Tests for the Tile dataclass."""

    def test_default_values(self) -> None:
        tile = Tile()
        assert tile.biome == Biome.ROCK
        assert tile.structure is None
        assert tile.height == 0.0
        assert tile.biomass == 0.0
        assert tile.temp == 300.0

    def test_is_anchor(self) -> None:
        assert Tile(structure=StructureKind.HEATER).is_anchor
        assert not Tile(structure=Occupied(by=(1, 1))).is_anchor
        assert not Tile().is_anchor

    def test_dict_round_trip_with_marker(self) -> None:
        tile = Tile(biome=Biome.FOREST, structure=Occupied(by=(2, 3)), biomass=1.5, temp=280.25)
        assert Tile.from_dict(tile.to_dict()) == tile


class TestTileGrid:
    """Tests for the TileGrid container."""

    def test_dimensions(self, small_grid: TileGrid) -> None:
        assert small_grid.size == (8, 4)
        assert len(small_grid.tiles) == 4
        assert len(small_grid.tiles[0]) == 8

    def test_tiles_are_distinct_objects(self, small_grid: TileGrid) -> None:
        small_grid.tile_at(0, 0).temp = 100.0
        assert small_grid.tile_at(1, 0).temp == 300.0

    def test_longitude_wraps(self, small_grid: TileGrid) -> None:
        assert small_grid.tile_at(8, 1) is small_grid.tile_at(0, 1)
        assert small_grid[(-1, 2)] is small_grid[(7, 2)]

    def test_latitude_out_of_bounds(self, small_grid: TileGrid) -> None:
        with pytest.raises(OutOfBounds):
            small_grid.tile_at(0, 4)
        with pytest.raises(OutOfBounds):
            small_grid.tile_at(0, -1)

    def test_out_of_bounds_is_index_error(self, small_grid: TileGrid) -> None:
        with pytest.raises(IndexError):
            small_grid.normalize((3, 10))

    def test_in_bounds(self, small_grid: TileGrid) -> None:
        assert small_grid.in_bounds((-5, 0))
        assert small_grid.in_bounds((12, 3))
        assert not small_grid.in_bounds((0, 4))

    def test_neighbours_interior(self, small_grid: TileGrid) -> None:
        assert sorted(small_grid.neighbours(3, 1)) == [(2, 1), (3, 0), (3, 2), (4, 1)]

    def test_neighbours_wrap_and_pole(self, small_grid: TileGrid) -> None:
        # Row 0 has no southern neighbour; column 0 wraps to column 7
        assert sorted(small_grid.neighbours(0, 0)) == [(0, 1), (1, 0), (7, 0)]

    def test_footprint_anchor_first_and_wraps(self, small_grid: TileGrid) -> None:
        footprint = small_grid.footprint((7, 1), 2)
        assert footprint[0] == (7, 1)
        assert set(footprint) == {(7, 1), (0, 1), (7, 2), (0, 2)}

    def test_footprint_off_the_pole(self, small_grid: TileGrid) -> None:
        with pytest.raises(OutOfBounds):
            small_grid.footprint((0, 3), 2)

    def test_read_write_field(self, small_grid: TileGrid) -> None:
        values = np.arange(32, dtype=np.float64).reshape(4, 8) + 200.0
        small_grid.write_field("temp", values)
        assert small_grid.tile_at(5, 2).temp == 221.0
        assert np.array_equal(small_grid.read_field("temp"), values)

    def test_write_field_rejects_wrong_shape(self, small_grid: TileGrid) -> None:
        with pytest.raises(ValueError):
            small_grid.write_field("temp", np.zeros((8, 4)))


class TestCoordinateMapping:
    """Tests for longitude/latitude mapping."""

    @pytest.mark.parametrize(("width", "height"), [(8, 4), (7, 5), (1, 1), (64, 32)])
    def test_inverse_recovers_tile(self, width: int, height: int) -> None:
        grid = TileGrid(width=width, height=height)
        for x, y in grid.iter_coords():
            longitude, latitude = grid.calc_longitude_latitude((x, y))
            assert 0.0 <= longitude < 2.0 * math.pi
            assert -math.pi / 2 <= latitude <= math.pi / 2
            assert grid.inverse_longitude_latitude(longitude, latitude) == (x, y)

    def test_exact_values(self) -> None:
        grid = TileGrid(width=4, height=2)
        longitude, latitude = grid.calc_longitude_latitude((0, 0))
        assert longitude == pytest.approx(math.pi / 4)
        assert latitude == pytest.approx(math.asin(-0.5))

    def test_rows_symmetric_about_equator(self) -> None:
        grid = TileGrid(width=3, height=6)
        latitudes = grid.row_latitudes()
        assert np.allclose(latitudes, -latitudes[::-1])

    def test_row_latitudes_match_scalar_mapping(self, small_grid: TileGrid) -> None:
        latitudes = small_grid.row_latitudes()
        for y in range(small_grid.height):
            assert latitudes[y] == pytest.approx(small_grid.calc_longitude_latitude((0, y))[1])
