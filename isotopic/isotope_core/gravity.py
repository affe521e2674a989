"""
Gravity
=======

Column compaction and heavy-element crushing.
"""

from __future__ import annotations

import logging
from typing import Optional

from isotopic.isotope_core.board import Board
from isotopic.isotope_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


def settle(board: Board) -> bool:
    """
    Compact every column toward the bottom, preserving cell order.

    Idempotent: settling a settled board changes nothing.

    Returns:
        True if any cell moved.
    """
    moved = False
    rows = board.rows
    height = board.height
    for col in range(board.width):
        target = height - 1
        for row in range(height - 1, -1, -1):
            cell = rows[row][col]
            if cell is None:
                continue
            if row != target:
                rows[target][col] = cell
                rows[row][col] = None
                moved = True
            target -= 1
    return moved


def crush_heavy(board: Board, heavy_threshold: int) -> bool:
    """
    One crushing pass.

    A heavy cell swaps with a strictly lighter, non-waste cell directly below
    it, or drops into an empty slot below it. Each column is processed bottom
    to top, so a heavy cell moves at most one slot per pass.

    Args:
        board: Board to mutate.
        heavy_threshold: Minimum atomic number considered heavy.

    Returns:
        True if any cell moved.
    """
    changed = False
    rows = board.rows
    for col in range(board.width):
        for row in range(board.height - 2, -1, -1):
            cell = rows[row][col]
            if cell is None or cell.is_waste or cell.atomic_number < heavy_threshold:
                continue
            below = rows[row + 1][col]
            if below is None:
                rows[row + 1][col] = cell
                rows[row][col] = None
                changed = True
            elif not below.is_waste and below.atomic_number < cell.atomic_number:
                rows[row + 1][col] = cell
                rows[row][col] = below
                changed = True
    return changed


class GravityEngine:
    """
    Applies plain settling and, when enabled, heavy crushing.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize gravity engine.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._heavy_crush = config.gravity.heavy_crush
        self._heavy_threshold = config.gravity.heavy_threshold
        self._max_passes = config.gravity.max_crush_passes

    @property
    def heavy_crush_enabled(self) -> bool:
        return self._heavy_crush

    def settle(self, board: Board) -> bool:
        return settle(board)

    def crush_heavy(self, board: Board) -> bool:
        return crush_heavy(board, self._heavy_threshold)

    def full_settle(self, board: Board) -> bool:
        """
        Settle, then alternate crushing and settling until nothing moves.

        Returns:
            True if the board changed.
        """
        changed = settle(board)
        if not self._heavy_crush:
            return changed

        for _ in range(self._max_passes):
            if not crush_heavy(board, self._heavy_threshold):
                return changed
            changed = True
            settle(board)

        logger.warning(
            "Heavy crushing did not converge after %d passes; leaving board as is",
            self._max_passes
        )
        return changed
