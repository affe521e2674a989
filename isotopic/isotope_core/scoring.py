"""
Scoring System
==============

Line-clear, fusion-chain and drop scoring, plus level progression.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from isotopic.isotope_core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    lines: int = 0
    fusions: int = 0
    combo: int = 0
    back_to_back: bool = False

    def __repr__(self) -> str:
        if self.fusions:
            return f"ScoreEvent(fusion_chain={self.fusions}, points={self.points})"
        if self.lines:
            b2b = ", back_to_back" if self.back_to_back else ""
            return f"ScoreEvent(lines={self.lines}, combo={self.combo}{b2b}, points={self.points})"
        return f"ScoreEvent(points={self.points})"


class ScoreTracker:
    """
    Tracks score, combo and back-to-back state.

    Line scoring for one resolve cycle:
    - table value for min(lines, 4), plus a flat bonus per line beyond four
    - x1.5 when a 4+ line clear follows another 4+ line clear
    - combo bonus (combo_bonus * combo * level) from the second consecutive
      clearing cycle on
    - everything multiplied by the level
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scoring = config.scoring
        self._score: int = 0
        self._combo: int = 0
        self._last_clear_was_tetris: bool = False

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def combo(self) -> int:
        """Consecutive resolve cycles that cleared lines."""
        return self._combo

    @property
    def last_clear_was_tetris(self) -> bool:
        return self._last_clear_was_tetris

    def line_clear_points(self, lines: int) -> int:
        """Base table value for a line count, before any multiplier."""
        if lines <= 0:
            return 0
        table = self._scoring.line_table
        points = table[min(lines, len(table)) - 1]
        if lines > len(table):
            points += (lines - len(table)) * self._scoring.extra_line_bonus
        return points

    def apply_line_clears(self, lines: int, level: int) -> ScoreEvent:
        """
        Score the lines cleared by one resolve cycle.

        A cycle with no clears resets the combo.

        Args:
            lines: Total lines cleared during the cycle.
            level: Level in effect when the cycle started.

        Returns:
            ScoreEvent describing the points awarded.
        """
        if lines <= 0:
            self._combo = 0
            return ScoreEvent(points=0)

        base = self.line_clear_points(lines)

        back_to_back = False
        if lines >= 4:
            if self._last_clear_was_tetris:
                base = int(base * self._scoring.back_to_back_multiplier)
                back_to_back = True
            self._last_clear_was_tetris = True
        else:
            self._last_clear_was_tetris = False

        self._combo += 1
        if self._combo > 1:
            base += self._scoring.combo_bonus * self._combo * level

        points = base * level
        self._score += points
        return ScoreEvent(points=points, lines=lines, combo=self._combo, back_to_back=back_to_back)

    def fusion_chain_points(self, event_count: int, level: int) -> int:
        """Points for a chain of fusion events; each step scales by the chain multiplier."""
        points = 0
        multiplier = 1.0
        for _ in range(event_count):
            points += int(self._scoring.fusion_base * multiplier * level)
            multiplier *= self._scoring.chain_multiplier
        return points

    def apply_fusion_chain(self, event_count: int, level: int) -> ScoreEvent:
        """Score all fusion events of one resolve cycle."""
        points = self.fusion_chain_points(event_count, level)
        self._score += points
        return ScoreEvent(points=points, fusions=event_count)

    def apply_soft_drop(self, rows: int = 1) -> int:
        points = rows * self._scoring.soft_drop_points
        self._score += points
        return points

    def apply_hard_drop(self, rows: int) -> int:
        points = rows * self._scoring.hard_drop_points
        self._score += points
        return points

    def level_for_lines(self, lines: int) -> int:
        """Level reached after `lines` cumulative lines (1-based, capped)."""
        level = lines // self._scoring.lines_per_level + 1
        return min(level, self._scoring.max_level)

    def reset(self) -> None:
        """Reset score and streaks."""
        self._score = 0
        self._combo = 0
        self._last_clear_was_tetris = False
