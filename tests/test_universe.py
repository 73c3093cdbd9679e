"""
Tests for the Game of Life engine.
"""

import pytest

from lifegrid.engine import ALIVE_SYMBOL, DEAD_SYMBOL, Cell, Universe
from lifegrid.exceptions import CellOutOfBounds, InvalidCells, InvalidDimensions


def universe_with(width, height, alive):
    """Blank universe with the given (row, column) cells alive."""
    universe = Universe.blank(width, height)
    for row, column in alive:
        universe.set_cell(row, column, Cell.ALIVE)
    return universe


class TestCell:
    """Tests for the Cell enum."""

    def test_byte_values(self):
        assert Cell.DEAD == 0
        assert Cell.ALIVE == 1

    def test_toggled(self):
        assert Cell.DEAD.toggled() is Cell.ALIVE
        assert Cell.ALIVE.toggled() is Cell.DEAD


class TestConstruction:
    """Tests for Universe construction and validation."""

    def test_blank(self):
        universe = Universe.blank(8, 4)
        assert universe.width == 8
        assert universe.height == 4
        assert universe.generation == 0
        assert universe.cells == bytes(32)
        assert universe.population() == 0

    def test_from_cells(self):
        universe = Universe(2, 2, [0, 1, 1, 0])
        assert universe.cells == b"\x00\x01\x01\x00"
        assert universe.alive_cells() == [(0, 1), (1, 0)]

    @pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(InvalidDimensions):
            Universe(width, height)

    def test_wrong_cell_count(self):
        with pytest.raises(InvalidCells):
            Universe(3, 3, [0] * 8)

    def test_unknown_cell_state(self):
        with pytest.raises(InvalidCells):
            Universe(2, 1, [0, 2])

    def test_cells_is_a_copy(self):
        """Mutating the universe does not change previously returned buffers."""
        universe = Universe.blank(3, 3)
        before = universe.cells
        universe.toggle_cell(1, 1)
        assert before == bytes(9)
        assert universe.cells[4] == Cell.ALIVE

    def test_copy_is_independent(self):
        universe = Universe.blank(4, 4)
        universe.add_glider(1, 1)
        universe.tick()

        before = universe.cells

        clone = universe.copy()
        assert clone.cells == before
        assert clone.generation == 1

        clone.tick()
        clone.toggle_cell(3, 3)
        assert universe.generation == 1
        assert universe.cells == before
        assert clone.generation == 2


class TestDefaultPattern:
    """Tests for the house-shaped default seed on a 64x64 grid."""

    @pytest.fixture
    def universe(self):
        return Universe.default()

    def test_size(self, universe):
        assert universe.width == 64
        assert universe.height == 64

    def test_top_rows_empty(self, universe):
        for row in range(5):
            assert all(universe.get_cell(row, c) is Cell.DEAD for c in range(64))

    def test_roof_row(self, universe):
        alive = {c for c in range(64) if universe.get_cell(5, c) is Cell.ALIVE}
        assert alive == set(range(13, 20)) | set(range(45, 52))

    def test_wall_row(self, universe):
        alive = {c for c in range(64) if universe.get_cell(20, c) is Cell.ALIVE}
        assert alive == set(range(2, 16)) | set(range(49, 63))

    def test_base_row(self, universe):
        alive = {c for c in range(64) if universe.get_cell(30, c) is Cell.ALIVE}
        assert alive == set(range(7, 58))

    def test_bottom_row_empty(self, universe):
        assert all(universe.get_cell(63, c) is Cell.DEAD for c in range(64))


class TestRandomPattern:
    """Tests for the random seed."""

    def test_same_seed_same_cells(self):
        assert Universe.random(32, 32, seed=7).cells == Universe.random(32, 32, seed=7).cells

    def test_density_extremes(self):
        assert Universe.random(10, 10, seed=1, density=0.0).population() == 0
        assert Universe.random(10, 10, seed=1, density=1.0).population() == 100

    def test_invalid_density(self):
        with pytest.raises(InvalidCells):
            Universe.random(4, 4, density=1.5)


class TestNeighbors:
    """Tests for live_neighbor_count()."""

    def test_interior(self):
        universe = universe_with(5, 5, [(1, 1), (1, 2), (2, 3), (3, 3)])
        assert universe.live_neighbor_count(2, 2) == 4

    def test_cell_itself_not_counted(self):
        universe = universe_with(5, 5, [(2, 2)])
        assert universe.live_neighbor_count(2, 2) == 0

    def test_wraps_around_corners(self):
        """(0, 0) sees the opposite edges and corner."""
        universe = universe_with(5, 5, [(4, 4), (0, 4), (4, 0)])
        assert universe.live_neighbor_count(0, 0) == 3

    def test_wraps_from_bottom_right(self):
        universe = universe_with(5, 5, [(0, 0)])
        assert universe.live_neighbor_count(4, 4) == 1


class TestTick:
    """Tests for tick()."""

    def test_generation_counter(self):
        universe = Universe.blank(4, 4)
        universe.tick()
        universe.tick()
        assert universe.generation == 2

    def test_underpopulation(self):
        universe = universe_with(5, 5, [(2, 2), (2, 3)])
        universe.tick()
        assert universe.population() == 0

    def test_block_is_still_life(self):
        block = [(2, 2), (2, 3), (3, 2), (3, 3)]
        universe = universe_with(6, 6, block)
        universe.tick()
        assert universe.alive_cells() == block

    def test_blinker_oscillates(self):
        universe = universe_with(5, 5, [(2, 1), (2, 2), (2, 3)])
        universe.tick()
        assert universe.alive_cells() == [(1, 2), (2, 2), (3, 2)]
        universe.tick()
        assert universe.alive_cells() == [(2, 1), (2, 2), (2, 3)]

    def test_overpopulation(self):
        """Centre of a plus shape has four neighbours and dies."""
        universe = universe_with(5, 5, [(1, 2), (2, 1), (2, 2), (2, 3), (3, 2)])
        universe.tick()
        assert universe.get_cell(2, 2) is Cell.DEAD

    def test_reproduction(self):
        universe = universe_with(5, 5, [(1, 1), (1, 3), (3, 2)])
        universe.tick()
        assert universe.get_cell(2, 2) is Cell.ALIVE

    def test_blinker_across_edge(self):
        """A blinker straddling the left/right edge behaves as if the edge is not there."""
        universe = universe_with(6, 6, [(3, 5), (3, 0), (3, 1)])
        universe.tick()
        assert universe.alive_cells() == [(2, 0), (3, 0), (4, 0)]


class TestToggle:
    """Tests for toggle_cell()."""

    def test_toggle_flips(self):
        universe = Universe.blank(3, 3)
        assert universe.toggle_cell(0, 2) is Cell.ALIVE
        assert universe.get_cell(0, 2) is Cell.ALIVE
        assert universe.toggle_cell(0, 2) is Cell.DEAD

    @pytest.mark.parametrize("row,column", [(3, 0), (0, 3), (-1, 0), (0, -1)])
    def test_out_of_bounds(self, row, column):
        universe = Universe.blank(3, 3)
        with pytest.raises(CellOutOfBounds):
            universe.toggle_cell(row, column)


class TestGlider:
    """Tests for add_glider()."""

    def test_shape(self):
        universe = Universe.blank(8, 8)
        universe.add_glider(3, 3)
        assert universe.alive_cells() == [(2, 2), (2, 3), (2, 4), (3, 4), (4, 3)]

    def test_overwrites_block(self):
        universe = Universe.blank(8, 8)
        for row in range(2, 5):
            for column in range(2, 5):
                universe.set_cell(row, column, Cell.ALIVE)
        universe.add_glider(3, 3)
        assert universe.population() == 5
        assert universe.get_cell(3, 3) is Cell.DEAD

    def test_wraps_at_origin(self):
        universe = Universe.blank(8, 8)
        universe.add_glider(0, 0)
        assert set(universe.alive_cells()) == {(7, 7), (7, 0), (7, 1), (0, 1), (1, 0)}

    def test_coordinates_wrap(self):
        a = Universe.blank(8, 8)
        b = Universe.blank(8, 8)
        a.add_glider(3, 3)
        b.add_glider(11, 19)
        assert a.cells == b.cells

    def test_glider_travels(self):
        """After four generations the glider moves one row up and one column right."""
        universe = Universe.blank(16, 16)
        universe.add_glider(8, 8)
        start = set(universe.alive_cells())

        for _ in range(4):
            universe.tick()

        assert set(universe.alive_cells()) == {(row - 1, column + 1) for row, column in start}

    def test_negative_rejected(self):
        universe = Universe.blank(8, 8)
        with pytest.raises(CellOutOfBounds):
            universe.add_glider(-1, 0)


class TestRender:
    """Tests for text rendering."""

    def test_render(self):
        universe = universe_with(2, 2, [(0, 1)])
        expected = f"{DEAD_SYMBOL}{ALIVE_SYMBOL}\n{DEAD_SYMBOL}{DEAD_SYMBOL}\n"
        assert universe.render() == expected
        assert str(universe) == expected

    def test_one_line_per_row(self):
        assert len(Universe.default(16, 8).render().splitlines()) == 8

    def test_repr(self):
        assert repr(Universe.blank(2, 3)) == "Universe(width=2, height=3, generation=0, population=0)"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
