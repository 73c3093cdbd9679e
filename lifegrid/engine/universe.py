"""
Game of Life universe.

A fixed-size toroidal grid stored as a flat, row-major buffer with one byte
per cell. Edges wrap on both axes.
"""

import random as _random
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple

from lifegrid.exceptions import CellOutOfBounds, InvalidCells, InvalidDimensions

DEAD_SYMBOL = "◻"
ALIVE_SYMBOL = "◼"


class Cell(IntEnum):
    """State of a single cell. The value is the byte stored in the buffer."""
    DEAD = 0
    ALIVE = 1

    def toggled(self) -> "Cell":
        return Cell.ALIVE if self is Cell.DEAD else Cell.DEAD


class Universe:
    """
    A Game of Life universe.

    Args:
        width: Number of columns
        height: Number of rows
        cells: Optional row-major buffer of ``width * height`` bytes (0 or 1).
               A blank universe is created when omitted.
    """

    def __init__(self, width: int, height: int, cells: Optional[Iterable[int]] = None):
        if not isinstance(width, int) or not isinstance(height, int) or width < 1 or height < 1:
            raise InvalidDimensions(f"Universe dimensions must be positive, got {width}x{height}")

        self._width = width
        self._height = height
        self.generation = 0

        if cells is None:
            self._cells = bytearray(width * height)
        else:
            buf = bytearray(cells)
            if len(buf) != width * height:
                raise InvalidCells(
                    f"Expected {width * height} cells for {width}x{height}, got {len(buf)}"
                )
            if any(b > Cell.ALIVE for b in buf):
                raise InvalidCells("Cell values must be 0 (dead) or 1 (alive)")
            self._cells = buf

    # -------------------------------------------------------------------------
    # Seeds
    # -------------------------------------------------------------------------

    @classmethod
    def blank(cls, width: int, height: int) -> "Universe":
        return cls(width, height)

    @classmethod
    def default(cls, width: int = 64, height: int = 64) -> "Universe":
        """Seed the universe with the house-shaped starting pattern."""
        universe = cls(width, height)
        cells = universe._cells
        for i in range(width * height):
            column = i % width
            row = i // width
            if _house_cell_alive(row, column, width):
                cells[i] = Cell.ALIVE
        return universe

    @classmethod
    def random(
        cls,
        width: int,
        height: int,
        seed: Optional[int] = None,
        density: float = 0.5,
    ) -> "Universe":
        """Seed each cell alive with probability ``density``."""
        if not 0.0 <= density <= 1.0:
            raise InvalidCells(f"Density must be between 0 and 1, got {density}")
        rng = _random.Random(seed)
        return cls(
            width,
            height,
            (Cell.ALIVE if rng.random() < density else Cell.DEAD for _ in range(width * height)),
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def cells(self) -> bytes:
        """Immutable copy of the row-major cell buffer."""
        return bytes(self._cells)

    def copy(self) -> "Universe":
        """Independent universe with the same cells and generation."""
        clone = Universe(self._width, self._height)
        clone._cells = bytearray(self._cells)
        clone.generation = self.generation
        return clone

    def get_index(self, row: int, column: int) -> int:
        return row * self._width + column

    def get_cell(self, row: int, column: int) -> Cell:
        self._check_bounds(row, column)
        return Cell(self._cells[self.get_index(row, column)])

    def population(self) -> int:
        return sum(self._cells)

    def alive_cells(self) -> List[Tuple[int, int]]:
        """(row, column) pairs of every live cell in row-major order."""
        width = self._width
        return [divmod(idx, width) for idx, cell in enumerate(self._cells) if cell]

    def live_neighbor_count(self, row: int, column: int) -> int:
        """Count live cells among the eight neighbours, wrapping at the edges."""
        north = self._height - 1 if row == 0 else row - 1
        south = 0 if row == self._height - 1 else row + 1
        west = self._width - 1 if column == 0 else column - 1
        east = 0 if column == self._width - 1 else column + 1

        cells = self._cells
        idx = self.get_index
        return (
            cells[idx(north, west)]
            + cells[idx(north, column)]
            + cells[idx(north, east)]
            + cells[idx(row, west)]
            + cells[idx(row, east)]
            + cells[idx(south, west)]
            + cells[idx(south, column)]
            + cells[idx(south, east)]
        )

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def tick(self) -> None:
        """Advance one generation."""
        current = self._cells
        next_cells = bytearray(current)

        for row in range(self._height):
            for column in range(self._width):
                idx = self.get_index(row, column)
                live_neighbors = self.live_neighbor_count(row, column)
                next_cells[idx] = _next_state(current[idx], live_neighbors)

        self._cells = next_cells
        self.generation += 1

    def toggle_cell(self, row: int, column: int) -> Cell:
        """Flip one cell and return its new state."""
        self._check_bounds(row, column)
        idx = self.get_index(row, column)
        new_state = Cell(self._cells[idx]).toggled()
        self._cells[idx] = new_state
        return new_state

    def set_cell(self, row: int, column: int, state: Cell) -> None:
        self._check_bounds(row, column)
        self._cells[self.get_index(row, column)] = Cell(state)

    def add_glider(self, row: int, column: int) -> None:
        """
        Stamp a glider on the 3x3 block centred on (row, column).

        Coordinates wrap, so any non-negative row/column is accepted. The
        whole block is overwritten:

            ■ ■ ■
            □ □ ■
            □ ■ □
        """
        if row < 0 or column < 0:
            raise CellOutOfBounds(row, column, self._width, self._height)

        for delta_row, pattern in zip((-1, 0, 1), _GLIDER):
            for delta_col, state in zip((-1, 0, 1), pattern):
                r = (row + delta_row) % self._height
                c = (column + delta_col) % self._width
                self._cells[self.get_index(r, c)] = state

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> str:
        lines = []
        for start in range(0, len(self._cells), self._width):
            row = self._cells[start:start + self._width]
            lines.append("".join(ALIVE_SYMBOL if cell else DEAD_SYMBOL for cell in row))
        return "".join(line + "\n" for line in lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Universe(width={self._width}, height={self._height}, "
            f"generation={self.generation}, population={self.population()})"
        )

    def _check_bounds(self, row: int, column: int) -> None:
        if not (0 <= row < self._height and 0 <= column < self._width):
            raise CellOutOfBounds(row, column, self._width, self._height)


_GLIDER = (
    (Cell.ALIVE, Cell.ALIVE, Cell.ALIVE),
    (Cell.DEAD, Cell.DEAD, Cell.ALIVE),
    (Cell.DEAD, Cell.ALIVE, Cell.DEAD),
)


def _next_state(cell: int, live_neighbors: int) -> int:
    if cell == Cell.ALIVE:
        # Underpopulation below two, overpopulation above three
        return Cell.ALIVE if live_neighbors in (2, 3) else Cell.DEAD
    # Reproduction
    return Cell.ALIVE if live_neighbors == 3 else Cell.DEAD


def _house_cell_alive(row: int, column: int, width: int) -> bool:
    quarter = width // 4
    three_quarters = 3 * width // 4

    if 4 < row <= 16:
        if width - row - three_quarters + 1 < column < quarter:
            return True
        if quarter - 1 < column < quarter + row - 1:
            return True
        if column > width // 2 - 1 and column > width - row - quarter + 1 and column < three_quarters:
            return True
        if three_quarters - 1 < column < three_quarters + row - 1:
            return True
        return False

    if 16 < row <= 24:
        return 1 < column < quarter or three_quarters < column < width - 1

    if row > 24:
        return row - 24 < column < width - row + 24

    return False
