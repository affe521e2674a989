"""
Decay System
============

Half-life countdown for unstable cells, decay into lighter elements or
waste, and half-life extension (stabilization) after line clears.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from isotopic.isotope_core.board import Board, CellFactory, Position
from isotopic.isotope_core.config_loader import GameConfig, get_config
from isotopic.isotope_core.element_catalog import get_catalog


@dataclass(frozen=True)
class DecayEvent:
    """Record of one cell decaying."""
    position: Position
    from_element: int
    to_element: int  # 0 means the cell became waste

    @property
    def became_waste(self) -> bool:
        return self.to_element == 0


class DecayEngine:
    """
    Advances half-lives and converts expired cells.

    Randomness comes from a private seeded generator so a session replays
    identically for a given seed.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        cells: Optional[CellFactory] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize decay engine.

        Args:
            config: Game configuration. Uses default if None.
            cells: Factory for decay products.
            seed: Random seed for decay steps.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = get_catalog(config)
        self._cells = cells if cells is not None else CellFactory(self._catalog)
        self._rng = random.Random(seed)
        self._min_step = config.decay.min_step
        self._max_step = config.decay.max_step

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self._rng = random.Random(seed)

    def tick(self, board: Board, elapsed: float) -> List[DecayEvent]:
        """
        Count down every unstable cell by `elapsed` seconds.

        Args:
            board: Board to mutate.
            elapsed: Seconds of active (unpaused) game time.

        Returns:
            One event per cell that decayed, in scan order.
        """
        events: List[DecayEvent] = []
        for row, col, cell in list(board.iter_cells()):
            if cell.half_life is None or cell.half_life <= 0:
                continue

            cell.half_life -= elapsed
            if cell.half_life > 0:
                continue

            source = cell.atomic_number
            step = self._rng.randint(self._min_step, self._max_step)
            product = source - step
            if product in self._catalog:
                board.set(row, col, self._cells.create(product))
            else:
                product = 0
                board.set(row, col, self._cells.create_waste())
            events.append(DecayEvent((row, col), source, product))

        return events

    def stabilize(self, board: Board, extension: Optional[float] = None) -> int:
        """
        Extend the remaining half-life of every unstable cell.

        The result is capped at twice the element's base half-life.

        Args:
            board: Board to mutate.
            extension: Seconds to add. Uses the configured line-clear
                stabilization if None.

        Returns:
            Number of cells extended.
        """
        if extension is None:
            extension = self._config.decay.line_clear_stabilization

        count = 0
        for _, _, cell in board.iter_cells():
            base = cell.element.base_half_life
            if cell.half_life is None or base is None:
                continue
            cell.half_life = min(cell.half_life + extension, base * 2)
            count += 1
        return count

    def warning_cells(
        self,
        board: Board,
        threshold: Optional[float] = None
    ) -> List[Tuple[Position, float]]:
        """Unstable cells with at most `threshold` seconds left."""
        if threshold is None:
            threshold = self._config.decay.warning_threshold
        return [
            ((row, col), cell.half_life)
            for row, col, cell in board.iter_cells()
            if cell.half_life is not None and 0 < cell.half_life <= threshold
        ]
