"""
State Snapshot
==============

Read-only view of a session for renderers, and its packing into fixed-size
numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np

from isotopic.isotope_core.board import Board, Position
from isotopic.isotope_core.config_loader import GameConfig, StageConfig, get_config
from isotopic.isotope_core.pieces import PIECE_KINDS, Piece, PieceDescriptor, piece_cells


def kind_index(kind: Optional[str]) -> int:
    """Index of a piece kind in PIECE_KINDS, -1 for none."""
    if kind is None:
        return -1
    return PIECE_KINDS.index(kind)


@dataclass
class GameSnapshot:
    """
    Complete session state at one instant.

    Grids are copies; mutating them does not touch the live board.
    """
    # Counters
    score: int
    level: int
    lines: int
    combo: int
    highest_element: int

    # Progress
    stage_name: str
    stage_index: int
    stage_target: int
    phase: str
    paused: bool
    game_over: bool
    victory: bool

    # Board (height, width); -1 empty, 0 waste, else atomic number
    board: np.ndarray                 # int16
    half_lives: np.ndarray            # float32, NaN where stable or empty

    # Pieces
    piece: Optional[PieceDescriptor]
    piece_cells: Tuple[Position, ...]
    ghost_cells: Tuple[Position, ...]
    ghost_y: Optional[int]            # Row the piece would land at
    hold: Optional[PieceDescriptor]
    can_hold: bool
    next_pieces: Tuple[PieceDescriptor, ...]

    @property
    def board_width(self) -> int:
        return int(self.board.shape[1])

    @property
    def board_height(self) -> int:
        return int(self.board.shape[0])

    def _mask(self, cells: Sequence[Position]) -> np.ndarray:
        mask = np.zeros(self.board.shape, dtype=np.int8)
        for row, col in cells:
            if 0 <= row < self.board_height and 0 <= col < self.board_width:
                mask[row, col] = 1
        return mask

    def to_obs_dict(self, preview_count: Optional[int] = None) -> Dict[str, np.ndarray]:
        """
        Convert to Gymnasium observation dictionary.

        Args:
            preview_count: Length of the padded preview arrays. Uses the
                number of pieces in the snapshot if None.
        """
        if preview_count is None:
            preview_count = len(self.next_pieces)

        next_kinds = np.full(preview_count, -1, dtype=np.int8)
        next_elements = np.zeros(preview_count, dtype=np.int16)
        for i, descriptor in enumerate(self.next_pieces[:preview_count]):
            next_kinds[i] = kind_index(descriptor.kind)
            next_elements[i] = descriptor.element

        return {
            "board": self.board.copy(),
            "half_lives": np.nan_to_num(self.half_lives, nan=0.0),
            "piece_mask": self._mask(self.piece_cells),
            "ghost_mask": self._mask(self.ghost_cells),
            "piece_kind": np.array(kind_index(self.piece.kind if self.piece else None), dtype=np.int8),
            "piece_element": np.array(self.piece.element if self.piece else 0, dtype=np.int16),
            "hold_kind": np.array(kind_index(self.hold.kind if self.hold else None), dtype=np.int8),
            "hold_element": np.array(self.hold.element if self.hold else 0, dtype=np.int16),
            "can_hold": np.array(int(self.can_hold), dtype=np.int8),
            "next_kinds": next_kinds,
            "next_elements": next_elements,
            "score": np.array(self.score, dtype=np.int64),
            "level": np.array(self.level, dtype=np.int32),
            "lines": np.array(self.lines, dtype=np.int32),
            "highest_element": np.array(self.highest_element, dtype=np.int32),
            "stage_index": np.array(self.stage_index, dtype=np.int32),
        }


class SnapshotBuilder:
    """Builds game state snapshots."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._preview_count = config.queue.preview_count

    @property
    def preview_count(self) -> int:
        return self._preview_count

    def build(
        self,
        board: Board,
        piece: Optional[Piece],
        ghost: Optional[Piece],
        hold: Optional[PieceDescriptor],
        can_hold: bool,
        next_pieces: List[PieceDescriptor],
        score: int,
        level: int,
        lines: int,
        combo: int,
        highest_element: int,
        stage: StageConfig,
        stage_index: int,
        paused: bool,
        game_over: bool,
        victory: bool,
        phase: str
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        return GameSnapshot(
            score=score,
            level=level,
            lines=lines,
            combo=combo,
            highest_element=highest_element,
            stage_name=stage.name,
            stage_index=stage_index,
            stage_target=stage.target_element,
            phase=phase,
            paused=paused,
            game_over=game_over,
            victory=victory,
            board=board.atomic_grid(),
            half_lives=board.half_life_grid(),
            piece=piece.descriptor if piece is not None else None,
            piece_cells=tuple(piece_cells(piece)) if piece is not None else (),
            ghost_cells=tuple(piece_cells(ghost)) if ghost is not None else (),
            ghost_y=ghost.y if ghost is not None else None,
            hold=hold,
            can_hold=can_hold,
            next_pieces=tuple(next_pieces[:self._preview_count])
        )
