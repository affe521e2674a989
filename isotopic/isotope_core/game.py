"""
Core Game
=========

Main session orchestrator combining the piece engine, gravity, fusion,
decay, scoring and rules.

The session owns one board and one scheduler. Three kinds of timer drive it:
the fall timer (gravity step and lock arming), the decay tick and the
one-shot lock timer. Input operations run synchronously between timer
callbacks, and the resolve cycle that follows a lock runs to its fixed point
before anything else can happen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from isotopic.isotope_core.board import Board, CellFactory
from isotopic.isotope_core.config_loader import GameConfig, StageConfig, get_config
from isotopic.isotope_core.decay import DecayEngine, DecayEvent
from isotopic.isotope_core.element_catalog import ElementCatalog, get_catalog
from isotopic.isotope_core.fusion import FusionEngine, FusionEvent
from isotopic.isotope_core.gravity import GravityEngine
from isotopic.isotope_core.pieces import (
    Piece,
    PieceDescriptor,
    fits,
    ghost_y,
    is_grounded,
    is_valid_position,
    piece_cells,
    rotate,
    spawn_piece,
)
from isotopic.isotope_core.rng import PieceQueue
from isotopic.isotope_core.rules import GameRules, TerminationResult
from isotopic.isotope_core.scheduler import Scheduler, Timer
from isotopic.isotope_core.scoring import ScoreTracker
from isotopic.isotope_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    SPAWNING = "spawning"
    FALLING = "falling"
    GROUNDED = "grounded"
    LOCKING = "locking"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"
    VICTORY = "victory"


@dataclass(frozen=True)
class GameResult:
    """Final outcome handed to the persistence collaborator."""
    score: int
    highest_element_reached: int
    lines_cleared: int
    victory: bool


@dataclass
class ResolveReport:
    """What one resolve cycle did."""
    lines_cleared: int = 0
    fusion_events: List[FusionEvent] = field(default_factory=list)
    score_delta: int = 0
    iterations: int = 0
    highest_element: int = 0
    capped: bool = False


ResultListener = Callable[[GameResult], None]


class IsotopicGame:
    """
    One game session.

    Time only passes through `advance(seconds)`; a front-end calls it from
    its frame loop (see `run_realtime`) while forwarding discrete input
    operations (`move_left`, `rotate_cw`, `hard_drop`, ...).
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize and start a session.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for pieces and decay. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        # Subsystems
        self._catalog = get_catalog(config)
        self._cells = CellFactory(self._catalog)
        self._board = Board(config.board.width, config.board.height)
        self._gravity = GravityEngine(config)
        self._fusion = FusionEngine(config, self._cells, self._gravity)
        self._decay = DecayEngine(config, self._cells, seed)
        self._scorer = ScoreTracker(config)
        self._queue = PieceQueue(config, seed)
        self._rules = GameRules(config)
        self._snapshot_builder = SnapshotBuilder(config)

        self._result_listeners: List[ResultListener] = []
        self._closed: bool = False
        self._scheduler: Optional[Scheduler] = None
        self._generation = 0

        self.reset(seed)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> ElementCatalog:
        return self._catalog

    @property
    def cells(self) -> CellFactory:
        """Cell factory shared by every engine of this session."""
        return self._cells

    @property
    def board(self) -> Board:
        return self._board

    @property
    def piece(self) -> Optional[Piece]:
        return self._piece

    @property
    def hold_piece(self) -> Optional[PieceDescriptor]:
        return self._hold

    @property
    def can_hold(self) -> bool:
        return self._can_hold

    @property
    def next_pieces(self) -> List[PieceDescriptor]:
        return self._queue.peek()

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def level(self) -> int:
        return self._level

    @property
    def lines(self) -> int:
        return self._lines

    @property
    def combo(self) -> int:
        return self._scorer.combo

    @property
    def highest_element(self) -> int:
        return self._highest_element

    @property
    def stage(self) -> StageConfig:
        return self._stage

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def game_over(self) -> bool:
        return self._game_over

    @property
    def victory(self) -> bool:
        return self._victory

    @property
    def is_over(self) -> bool:
        return self._game_over

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def result(self) -> Optional[GameResult]:
        """Final result once the session has ended."""
        return self._result

    @property
    def grounded(self) -> bool:
        return self._grounded

    @property
    def lock_resets(self) -> int:
        return self._lock_resets

    @property
    def lock_pending(self) -> bool:
        return self._lock_timer is not None

    @property
    def fall_interval(self) -> float:
        """Current fall cadence in seconds."""
        return self._fall_timer.interval

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def last_resolve(self) -> Optional[ResolveReport]:
        return self._last_resolve

    @property
    def last_decay_events(self) -> List[DecayEvent]:
        return list(self._last_decay_events)

    def landing_row(self) -> Optional[int]:
        """Row the falling piece would hard-drop to."""
        if self._piece is None:
            return None
        return ghost_y(self._board, self._piece)

    def snapshot(self) -> GameSnapshot:
        """Build a read-only view of the session for the UI."""
        ghost = None
        if self._piece is not None:
            ghost = self._piece.placed(self._piece.x, ghost_y(self._board, self._piece))
        return self._snapshot_builder.build(
            board=self._board,
            piece=self._piece,
            ghost=ghost,
            hold=self._hold,
            can_hold=self._can_hold,
            next_pieces=self._queue.peek(),
            score=self._scorer.score,
            level=self._level,
            lines=self._lines,
            combo=self._scorer.combo,
            highest_element=self._highest_element,
            stage=self._stage,
            stage_index=self._rules.stages.index_of(self._stage),
            paused=self._paused,
            game_over=self._game_over,
            victory=self._victory,
            phase=self._phase.value
        )

    def get_info(self) -> Dict[str, Any]:
        """Summary dict for the environment wrapper and tools."""
        return {
            "score": self._scorer.score,
            "level": self._level,
            "lines": self._lines,
            "combo": self._scorer.combo,
            "highest_element": self._highest_element,
            "stage": self._stage.name,
            "phase": self._phase.value,
            "paused": self._paused,
            "game_over": self._game_over,
            "victory": self._victory,
        }

    def add_result_listener(self, listener: ResultListener) -> None:
        """Register a callback invoked once with the final GameResult."""
        self._result_listeners.append(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a fresh game on this session.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial snapshot.
        """
        if self._closed:
            return self.snapshot()

        if seed is not None:
            self._seed = seed

        if self._scheduler is not None:
            self._scheduler.close()
        self._scheduler = Scheduler()
        self._generation += 1

        self._board.reset()
        self._scorer.reset()
        self._queue.reset(self._seed)
        self._decay.reset(self._seed)

        self._piece: Optional[Piece] = None
        self._hold: Optional[PieceDescriptor] = None
        self._can_hold = True
        self._level = 1
        self._lines = 0
        self._highest_element = 1
        self._stage = self._rules.stages.first
        self._paused = False
        self._game_over = False
        self._victory = False
        self._result: Optional[GameResult] = None
        self._phase = Phase.SPAWNING
        self._grounded = False
        self._lock_resets = 0
        self._lock_timer: Optional[Timer] = None
        self._last_resolve: Optional[ResolveReport] = None
        self._last_decay_events: List[DecayEvent] = []

        self._queue.fill(self._stage)

        self._cadence = self._cadence_key()
        self._fall_timer = self._scheduler.every(
            self._compute_fall_interval(), self._on_fall_tick, "fall"
        )
        self._decay_timer = self._scheduler.every(
            self._config.timing.decay_interval, self._on_decay_tick, "decay"
        )

        self._spawn()
        return self.snapshot()

    def restart(self, seed: Optional[int] = None) -> GameSnapshot:
        return self.reset(seed)

    def close(self) -> None:
        """Tear down the session: stop every timer and ignore later input."""
        self._closed = True
        if self._scheduler is not None:
            self._scheduler.close()
        self._lock_timer = None

    def advance(self, seconds: float) -> int:
        """
        Let game time pass, firing due fall, lock and decay callbacks.

        Returns:
            Number of timer callbacks fired.
        """
        if self._closed:
            return 0
        return self._scheduler.advance(seconds)

    # ------------------------------------------------------------------
    # Input operations
    # ------------------------------------------------------------------

    def _accepting_input(self) -> bool:
        return (
            not self._closed
            and not self._game_over
            and not self._paused
            and self._piece is not None
        )

    def move(self, dx: int, dy: int) -> bool:
        """
        Shift the piece. Returns False (and changes nothing) if blocked.
        """
        if not self._accepting_input():
            return False

        piece = self._piece
        if not is_valid_position(self._board, piece, piece.x + dx, piece.y + dy, piece.rotation):
            return False

        if dx != 0 and self._grounded:
            self._reset_lock_delay()

        self._piece = piece.moved(dx, dy)
        self._update_grounded()
        return True

    def move_left(self) -> bool:
        return self.move(-1, 0)

    def move_right(self) -> bool:
        return self.move(1, 0)

    def soft_drop(self) -> bool:
        """Move down one row, scoring soft-drop points on success."""
        if self.move(0, 1):
            self._scorer.apply_soft_drop(1)
            return True
        return False

    def move_down(self) -> bool:
        return self.soft_drop()

    def rotate(self, direction: int) -> bool:
        """Rotate with wall kicks (+1 clockwise, -1 counter-clockwise)."""
        if not self._accepting_input():
            return False

        rotated = rotate(self._board, self._piece, direction)
        if rotated is None:
            return False

        if self._grounded:
            self._reset_lock_delay()

        self._piece = rotated
        self._update_grounded()
        return True

    def rotate_cw(self) -> bool:
        return self.rotate(1)

    def rotate_ccw(self) -> bool:
        return self.rotate(-1)

    def hard_drop(self) -> bool:
        """Drop to the ghost row, score the distance and lock immediately."""
        if not self._accepting_input():
            return False

        target = ghost_y(self._board, self._piece)
        distance = target - self._piece.y
        self._piece = self._piece.placed(self._piece.x, target)
        self._scorer.apply_hard_drop(distance)
        self._lock()
        return True

    def hold(self) -> bool:
        """Swap the falling piece with the hold slot (once per spawn)."""
        if not self._accepting_input() or not self._can_hold:
            return False

        current = self._piece.descriptor
        held = self._hold
        self._hold = current

        if held is None:
            self._spawn()
        else:
            self._spawn(held)
        self._can_hold = False
        return True

    def toggle_pause(self) -> bool:
        """
        Pause or resume. Timers keep their cadence; their callbacks no-op
        while paused. A grounded piece whose lock timer lapsed during the
        pause gets a fresh lock delay on resume.

        Returns:
            The new paused flag.
        """
        if self._closed or self._game_over:
            return self._paused
        self._paused = not self._paused
        if not self._paused and self._grounded and self._lock_timer is None:
            self._arm_lock()
        return self._paused

    def replace_piece(self, descriptor: PieceDescriptor) -> bool:
        """Respawn the falling piece as `descriptor` (tools and tests)."""
        if not self._accepting_input():
            return False
        self._spawn(descriptor)
        return True

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _timers_live(self) -> bool:
        return not self._closed and not self._game_over and not self._paused

    def _cadence_key(self) -> Tuple[str, bool]:
        return (self._stage.name, self._rules.speed.is_heavy(self._highest_element))

    def _compute_fall_interval(self) -> float:
        return self._rules.speed.fall_interval(self._level, self._stage, self._highest_element)

    def _on_fall_tick(self) -> None:
        if not self._timers_live() or self._piece is None:
            return

        cadence = self._cadence_key()
        if cadence != self._cadence:
            # Restart on the new cadence instead of stepping this tick
            self._cadence = cadence
            interval = self._compute_fall_interval()
            self._scheduler.restart(self._fall_timer, interval)
            logger.debug("Fall cadence changed to %.3fs (%s)", interval, cadence)
            return

        if self.move(0, 1):
            return

        if not self._grounded:
            self._grounded = True
            self._phase = Phase.GROUNDED
            self._arm_lock()
        elif self._lock_timer is None:
            self._arm_lock()

    def _on_decay_tick(self) -> None:
        if not self._timers_live():
            return

        events = self._decay.tick(self._board, self._config.timing.decay_interval)
        if events:
            self._last_decay_events = events
            self._gravity.full_settle(self._board)

    def _arm_lock(self) -> None:
        self._scheduler.cancel(self._lock_timer)
        self._lock_timer = self._scheduler.after(
            self._config.timing.lock_delay, self._on_lock_timer, "lock"
        )

    def _cancel_lock(self) -> None:
        if self._scheduler is not None:
            self._scheduler.cancel(self._lock_timer)
        self._lock_timer = None

    def _reset_lock_delay(self) -> bool:
        """Restart the lock timer if resets remain; otherwise leave it running."""
        if self._grounded and self._lock_resets < self._config.timing.max_lock_resets:
            self._lock_resets += 1
            self._arm_lock()
            return True
        return False

    def _on_lock_timer(self) -> None:
        self._lock_timer = None
        if not self._timers_live() or self._piece is None:
            return
        if self._grounded and is_grounded(self._board, self._piece):
            self._lock()

    def _update_grounded(self) -> None:
        was_grounded = self._grounded
        self._grounded = is_grounded(self._board, self._piece)

        if not was_grounded and self._grounded:
            self._arm_lock()
        elif was_grounded and not self._grounded:
            self._cancel_lock()

        self._phase = Phase.GROUNDED if self._grounded else Phase.FALLING

    # ------------------------------------------------------------------
    # Spawn / lock / resolve
    # ------------------------------------------------------------------

    def _spawn(self, descriptor: Optional[PieceDescriptor] = None) -> None:
        self._phase = Phase.SPAWNING
        if descriptor is None:
            descriptor = self._queue.pop_and_refill(self._stage)

        self._piece = spawn_piece(
            descriptor, self._board.width, self._config.board.spawn_row
        )
        self._can_hold = True
        self._cancel_lock()
        self._lock_resets = 0
        self._grounded = False

        termination = self._rules.termination.check_spawn(fits(self._board, self._piece))
        if termination.terminated:
            self._end(termination)
            return

        self._phase = Phase.FALLING

    def _lock(self) -> None:
        self._phase = Phase.LOCKING
        self._cancel_lock()

        for row, col in piece_cells(self._piece):
            if row >= 0:
                self._board.set(row, col, self._cells.create(self._piece.element))
        self._piece = None
        self._grounded = False

        generation = self._generation
        report = self._resolve()
        if self._generation != generation:
            # A result listener restarted the session
            return
        self._last_resolve = report
        if self._game_over:
            return
        self._spawn()

    def _resolve(self) -> ResolveReport:
        """
        Settle, clear, stabilize and fuse until a full pass changes nothing.
        """
        self._phase = Phase.RESOLVING
        report = ResolveReport(highest_element=self._highest_element)
        score_before = self._scorer.score
        max_iterations = self._config.resolve.max_iterations

        changed = True
        while changed:
            if report.iterations >= max_iterations:
                report.capped = True
                logger.warning(
                    "Resolve cycle did not stabilize after %d iterations; "
                    "keeping partial result", max_iterations
                )
                break

            report.iterations += 1
            changed = False

            self._gravity.full_settle(self._board)

            cleared = self._board.clear_full_rows()
            if cleared:
                report.lines_cleared += cleared
                changed = True
                self._decay.stabilize(self._board)

            fusion = self._fusion.resolve(self._board)
            if fusion.events:
                report.fusion_events.extend(fusion.events)
                report.highest_element = max(report.highest_element, fusion.highest_element)
                changed = True

        self._scorer.apply_line_clears(report.lines_cleared, self._level)
        if report.lines_cleared:
            self._lines += report.lines_cleared
            self._level = max(self._level, self._scorer.level_for_lines(self._lines))

        if report.fusion_events:
            self._scorer.apply_fusion_chain(len(report.fusion_events), self._level)

        report.score_delta = self._scorer.score - score_before

        if report.highest_element > self._highest_element:
            self._highest_element = report.highest_element
            stage = self._rules.stages.stage_for(self._highest_element)
            if stage != self._stage:
                logger.debug("Stage advanced: %s -> %s", self._stage.name, stage.name)
                self._stage = stage

            termination = self._rules.termination.check_victory(self._highest_element)
            if termination.terminated:
                self._end(termination)

        return report

    def _end(self, termination: TerminationResult) -> None:
        """Stop every timer and publish the final result once."""
        if self._game_over:
            return

        self._game_over = True
        self._victory = termination.victory
        self._phase = Phase.VICTORY if termination.victory else Phase.GAME_OVER
        self._lock_timer = None
        self._scheduler.close()

        self._result = GameResult(
            score=self._scorer.score,
            highest_element_reached=self._highest_element,
            lines_cleared=self._lines,
            victory=self._victory
        )
        logger.info(
            "Game ended (%s): score=%d highest=%d lines=%d",
            termination.reason, self._result.score,
            self._result.highest_element_reached, self._result.lines_cleared
        )
        for listener in self._result_listeners:
            listener(self._result)
