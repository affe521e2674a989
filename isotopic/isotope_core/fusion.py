"""
Fusion System
=============

Scans the board for adjacent cells that can fuse and applies the rules one
at a time, re-settling the board after each application, until no rule
applies anywhere.

Rules, highest priority first:

- Triple-alpha: He + He + He -> C
- Standard:     X + X -> 2X
- Alpha:        X + He -> X+2
- Beta:         X + H -> X+1

A result above the heaviest element turns both source cells into waste
(an overflow event).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from isotopic.isotope_core.board import Board, CellFactory, Position
from isotopic.isotope_core.config_loader import GameConfig, get_config
from isotopic.isotope_core.element_catalog import get_catalog
from isotopic.isotope_core.gravity import GravityEngine

logger = logging.getLogger(__name__)

HYDROGEN = 1
HELIUM = 2
CARBON = 6

# Up, down, left, right
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class FusionKind(str, Enum):
    TRIPLE_ALPHA = "triple-alpha"
    STANDARD = "standard"
    ALPHA = "alpha"
    BETA = "beta"
    OVERFLOW = "overflow"


@dataclass(frozen=True)
class FusionEvent:
    """Record of a single rule application."""
    kind: FusionKind
    from_elements: Tuple[int, ...]
    to_element: int               # 0 for overflow
    positions: Tuple[Position, ...]

    @property
    def is_overflow(self) -> bool:
        return self.kind is FusionKind.OVERFLOW

    def __repr__(self) -> str:
        sources = "+".join(str(n) for n in self.from_elements)
        return f"FusionEvent({self.kind.value}: {sources}->{self.to_element})"


@dataclass
class FusionResult:
    """Outcome of running the fusion engine to a fixed point."""
    events: List[FusionEvent] = field(default_factory=list)
    highest_element: int = 0
    iterations: int = 0
    capped: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.events)


Rule = Callable[[Board, int, int], Optional[FusionEvent]]


class FusionEngine:
    """
    Applies fusion rules to a settled board.

    Exactly one rule application happens per scan; the board is then
    re-settled and the scan restarts from the highest-priority rule.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        cells: Optional[CellFactory] = None,
        gravity: Optional[GravityEngine] = None
    ):
        """
        Initialize fusion engine.

        Args:
            config: Game configuration. Uses default if None.
            cells: Factory for the cells fusion creates.
            gravity: Gravity engine used between applications.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._cells = cells if cells is not None else CellFactory(get_catalog(config))
        self._gravity = gravity if gravity is not None else GravityEngine(config)
        self._max_atomic = config.max_atomic_number
        self._max_iterations = config.fusion.max_iterations

        self._rules: List[Rule] = []
        if config.fusion.triple_alpha:
            self._rules.append(self._try_triple_alpha)
        if config.fusion.standard:
            self._rules.append(self._try_standard)
        if config.fusion.alpha:
            self._rules.append(self._try_alpha)
        if config.fusion.beta:
            self._rules.append(self._try_beta)

    def resolve(self, board: Board) -> FusionResult:
        """
        Fuse until no rule applies (or the iteration cap is reached).

        Args:
            board: Board to mutate in place. Must have no falling piece on it.

        Returns:
            FusionResult with every event in application order.
        """
        result = FusionResult(highest_element=board.highest_atomic_number())

        while True:
            if result.iterations >= self._max_iterations:
                result.capped = True
                logger.warning(
                    "Fusion did not reach a fixed point after %d applications; "
                    "returning partial result", self._max_iterations
                )
                break

            event = self.apply_once(board)
            if event is None:
                break

            result.iterations += 1
            result.events.append(event)
            result.highest_element = max(result.highest_element, event.to_element)
            self._gravity.full_settle(board)

        return result

    def apply_once(self, board: Board) -> Optional[FusionEvent]:
        """Apply the first matching rule found, in priority then scan order."""
        for rule in self._rules:
            for row, col, _ in list(board.iter_cells()):
                event = rule(board, row, col)
                if event is not None:
                    return event
        return None

    def _fusable_neighbors(self, board: Board, row: int, col: int) -> List[Position]:
        neighbors = []
        for dr, dc in DIRECTIONS:
            r, c = row + dr, col + dc
            if not board.in_bounds(r, c):
                continue
            cell = board.get(r, c)
            if cell is not None and not cell.is_waste:
                neighbors.append((r, c))
        return neighbors

    def _fuse_pair(
        self,
        board: Board,
        kind: FusionKind,
        origin: Position,
        partner: Position,
        from_elements: Tuple[int, int],
        new_atomic: int
    ) -> FusionEvent:
        """Write the product at origin and consume the partner, or overflow."""
        if new_atomic > self._max_atomic:
            board.set(*origin, self._cells.create_waste())
            board.set(*partner, self._cells.create_waste())
            return FusionEvent(FusionKind.OVERFLOW, from_elements, 0, (origin, partner))

        board.set(*origin, self._cells.create(new_atomic))
        board.clear(*partner)
        return FusionEvent(kind, from_elements, new_atomic, (origin, partner))

    def _try_triple_alpha(self, board: Board, row: int, col: int) -> Optional[FusionEvent]:
        cell = board.get(row, col)
        if cell.atomic_number != HELIUM:
            return None

        helium = [
            pos for pos in self._fusable_neighbors(board, row, col)
            if board.get(*pos).atomic_number == HELIUM
        ]
        if len(helium) < 2:
            return None

        first, second = helium[0], helium[1]
        board.set(row, col, self._cells.create(CARBON))
        board.clear(*first)
        board.clear(*second)
        return FusionEvent(
            FusionKind.TRIPLE_ALPHA,
            (HELIUM, HELIUM, HELIUM),
            CARBON,
            ((row, col), first, second)
        )

    def _try_standard(self, board: Board, row: int, col: int) -> Optional[FusionEvent]:
        cell = board.get(row, col)
        if cell.is_waste:
            return None

        n = cell.atomic_number
        for pos in self._fusable_neighbors(board, row, col):
            if board.get(*pos).atomic_number == n:
                return self._fuse_pair(board, FusionKind.STANDARD, (row, col), pos, (n, n), n * 2)
        return None

    def _try_capture(
        self,
        board: Board,
        row: int,
        col: int,
        kind: FusionKind,
        captured: int,
        gain: int
    ) -> Optional[FusionEvent]:
        """A non-`captured` cell absorbs an adjacent `captured` cell."""
        cell = board.get(row, col)
        if cell.is_waste or cell.atomic_number == captured:
            return None

        n = cell.atomic_number
        for pos in self._fusable_neighbors(board, row, col):
            if board.get(*pos).atomic_number == captured:
                return self._fuse_pair(board, kind, (row, col), pos, (n, captured), n + gain)
        return None

    def _try_alpha(self, board: Board, row: int, col: int) -> Optional[FusionEvent]:
        return self._try_capture(board, row, col, FusionKind.ALPHA, HELIUM, 2)

    def _try_beta(self, board: Board, row: int, col: int) -> Optional[FusionEvent]:
        return self._try_capture(board, row, col, FusionKind.BETA, HYDROGEN, 1)
