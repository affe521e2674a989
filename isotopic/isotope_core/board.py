"""
Board
=====

The playfield grid. Row 0 is the top of the board; each slot holds an
optional Cell (an element instance or waste).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from isotopic.isotope_core.element_catalog import (
    ElementCatalog,
    ElementType,
    WASTE,
    get_catalog
)

Position = Tuple[int, int]  # (row, col)

EMPTY_CODE = -1


@dataclass
class Cell:
    """A placed unit on the board."""
    element: ElementType
    half_life: Optional[float]  # Remaining seconds, None if stable
    uid: int = field(compare=False)

    @property
    def atomic_number(self) -> int:
        return self.element.atomic_number

    @property
    def is_waste(self) -> bool:
        return self.element.is_waste

    @property
    def is_unstable(self) -> bool:
        return self.half_life is not None


class CellFactory:
    """Creates cells with unique, increasing instance IDs."""

    def __init__(self, catalog: Optional[ElementCatalog] = None):
        self._catalog = catalog if catalog is not None else get_catalog()
        self._next_uid = 0

    def _take_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def create(self, atomic_number: int) -> Cell:
        """Create a fresh cell; atomic number 0 yields waste."""
        element = self._catalog[atomic_number]
        return Cell(element=element, half_life=element.base_half_life, uid=self._take_uid())

    def create_waste(self) -> Cell:
        return Cell(element=WASTE, half_life=None, uid=self._take_uid())

    @property
    def catalog(self) -> ElementCatalog:
        return self._catalog


class Board:
    """
    Fixed-size grid of optional cells.

    Engines receive the board by reference and mutate it in place.
    """

    def __init__(self, width: int, height: int):
        self._width = width
        self._height = height
        self._rows: List[List[Optional[Cell]]] = [
            [None] * width for _ in range(height)
        ]

    @classmethod
    def from_atomic_numbers(
        cls,
        rows: Sequence[Sequence[Optional[int]]],
        factory: Optional[CellFactory] = None,
        width: Optional[int] = None,
        height: Optional[int] = None
    ) -> "Board":
        """
        Build a board from a grid of atomic numbers.

        The given rows are aligned to the bottom of the board; None marks an
        empty slot and 0 marks waste.

        Args:
            rows: Rows of atomic numbers, top to bottom.
            factory: Cell factory to use. A fresh one if None.
            width: Board width. Defaults to the width of the given rows.
            height: Board height. Defaults to the number of given rows.
        """
        if factory is None:
            factory = CellFactory()
        width = width if width is not None else max(len(r) for r in rows)
        height = height if height is not None else len(rows)
        if len(rows) > height:
            raise ValueError(f"{len(rows)} rows do not fit a board of height {height}")

        board = cls(width, height)
        offset = height - len(rows)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    board.set(offset + r, c, factory.create(value))
        return board

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def rows(self) -> List[List[Optional[Cell]]]:
        """Direct access to the row lists (row 0 = top)."""
        return self._rows

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._height and 0 <= col < self._width

    def get(self, row: int, col: int) -> Optional[Cell]:
        return self._rows[row][col]

    def set(self, row: int, col: int, cell: Optional[Cell]) -> None:
        self._rows[row][col] = cell

    def clear(self, row: int, col: int) -> None:
        self._rows[row][col] = None

    def is_empty(self, row: int, col: int) -> bool:
        return self._rows[row][col] is None

    def reset(self) -> None:
        """Empty every slot."""
        for row in self._rows:
            for c in range(self._width):
                row[c] = None

    def iter_cells(self) -> Iterator[Tuple[int, int, Cell]]:
        """Yield (row, col, cell) for occupied slots, top-left to bottom-right."""
        for r, row in enumerate(self._rows):
            for c, cell in enumerate(row):
                if cell is not None:
                    yield r, c, cell

    def column(self, col: int) -> List[Optional[Cell]]:
        return [row[col] for row in self._rows]

    def cell_count(self) -> int:
        return sum(1 for _ in self.iter_cells())

    def count_waste(self) -> int:
        return sum(1 for _, _, cell in self.iter_cells() if cell.is_waste)

    def count_unstable(self) -> int:
        return sum(1 for _, _, cell in self.iter_cells() if cell.is_unstable)

    def highest_atomic_number(self) -> int:
        """Largest atomic number on the board (0 if empty or only waste)."""
        return max((cell.atomic_number for _, _, cell in self.iter_cells()), default=0)

    def full_rows(self) -> List[int]:
        return [r for r, row in enumerate(self._rows) if all(cell is not None for cell in row)]

    def clear_full_rows(self) -> int:
        """
        Remove every full row, shifting the rows above down.

        Returns:
            Number of rows removed.
        """
        kept = [row for row in self._rows if not all(cell is not None for cell in row)]
        cleared = self._height - len(kept)
        if cleared:
            self._rows = [[None] * self._width for _ in range(cleared)] + kept
        return cleared

    def is_settled(self) -> bool:
        """True if no column has an empty slot below an occupied one."""
        for c in range(self._width):
            seen_cell = False
            for r in range(self._height):
                if self._rows[r][c] is not None:
                    seen_cell = True
                elif seen_cell:
                    return False
        return True

    def copy(self) -> "Board":
        """Copy the grid; cells are copied so half-lives are independent."""
        clone = Board(self._width, self._height)
        clone._rows = [
            [Cell(cell.element, cell.half_life, cell.uid) if cell is not None else None
             for cell in row]
            for row in self._rows
        ]
        return clone

    def atomic_grid(self) -> np.ndarray:
        """Atomic numbers as an int16 array (-1 empty, 0 waste)."""
        grid = np.full((self._height, self._width), EMPTY_CODE, dtype=np.int16)
        for r, c, cell in self.iter_cells():
            grid[r, c] = cell.atomic_number
        return grid

    def half_life_grid(self) -> np.ndarray:
        """Remaining half-lives as a float32 array (NaN where stable or empty)."""
        grid = np.full((self._height, self._width), np.nan, dtype=np.float32)
        for r, c, cell in self.iter_cells():
            if cell.half_life is not None:
                grid[r, c] = cell.half_life
        return grid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and np.array_equal(self.atomic_grid(), other.atomic_grid())
        )

    def __repr__(self) -> str:
        return f"Board({self._width}x{self._height}, cells={self.cell_count()})"
