"""
Game Rules
==========

Handles stage progression, fall cadence and termination conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from isotopic.isotope_core.config_loader import GameConfig, StageConfig, get_config


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    victory: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, False, reason)

    @staticmethod
    def win(reason: str) -> "TerminationResult":
        return TerminationResult(True, True, reason)


class StageRules:
    """
    Maps the highest element synthesized to a stage.

    Stages only depend on the (monotonic) highest element, so they never
    regress.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._stages = config.stages

    @property
    def first(self) -> StageConfig:
        return self._stages[0]

    def stage_for(self, highest_element: int) -> StageConfig:
        """Latest stage whose unlock threshold has been reached."""
        current = self._stages[0]
        for stage in self._stages:
            if highest_element >= stage.unlock_at:
                current = stage
        return current

    def index_of(self, stage: StageConfig) -> int:
        return self._stages.index(stage)


class SpeedRules:
    """
    Computes the fall interval from level, stage and highest element.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._timing = config.timing

    def is_heavy(self, highest_element: int) -> bool:
        """True once the highest element passes the speed-boost threshold."""
        return highest_element > self._timing.heavy_speed_threshold

    def fall_interval(
        self,
        level: int,
        stage: StageConfig,
        highest_element: int
    ) -> float:
        """
        Seconds between gravity steps.

        Args:
            level: Current level.
            stage: Current stage (its multiplier shortens the interval).
            highest_element: Highest element synthesized so far.

        Returns:
            Interval in seconds, never below the configured minimum.
        """
        interval = self._timing.level_interval(level) * stage.speed_multiplier
        if self.is_heavy(highest_element):
            interval *= self._timing.heavy_speed_multiplier
        return max(self._timing.min_fall_interval, interval)


class TerminationRules:
    """
    Handles game termination conditions.

    - Victory: the heaviest element has been synthesized
    - Game over: a new piece collides at its spawn position
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._max_atomic = config.max_atomic_number

    @property
    def victory_element(self) -> int:
        return self._max_atomic

    def check_victory(self, highest_element: int) -> TerminationResult:
        if highest_element >= self._max_atomic:
            return TerminationResult.win("uranium")
        return TerminationResult.none()

    def check_spawn(self, spawn_fits: bool) -> TerminationResult:
        if not spawn_fits:
            return TerminationResult.game_over("spawn_collision")
        return TerminationResult.none()


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.stages = StageRules(config)
        self.speed = SpeedRules(config)
        self.termination = TerminationRules(config)
