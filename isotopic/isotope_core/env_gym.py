"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to an Isotopic Tetris session.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from isotopic.isotope_core.config_loader import GameConfig, load_config
from isotopic.isotope_core.game import IsotopicGame
from isotopic.isotope_core.pieces import PIECE_KINDS
from isotopic.isotope_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)

ACTION_NOOP = 0
ACTION_LEFT = 1
ACTION_RIGHT = 2
ACTION_SOFT_DROP = 3
ACTION_ROTATE_CW = 4
ACTION_ROTATE_CCW = 5
ACTION_HARD_DROP = 6
ACTION_HOLD = 7

ACTION_NAMES = (
    "noop", "left", "right", "soft_drop",
    "rotate_cw", "rotate_ccw", "hard_drop", "hold",
)


class IsotopicEnv(gym.Env):
    """
    Isotopic Tetris as a Gymnasium environment.

    Action Space:
        Discrete(8): noop, left, right, soft drop, rotate cw, rotate ccw,
        hard drop, hold. The action is applied, then the session advances
        by `observation.frame_seconds` of game time.

    Observation Space:
        Dict of board grids, piece masks, preview arrays and counters.

    Reward:
        Always 0.0. Compute your own from the info dict.

    Info:
        Contains score, delta_score, lines, highest_element, stage, etc.
    """

    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 20,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        frame_seconds: Optional[float] = None,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "ansi" for a text board, None for headless.
            frame_seconds: Override game time advanced per step.
        """
        super().__init__()

        self._config = load_config(config_path)
        self.render_mode = render_mode
        self._frame_seconds = frame_seconds or self._config.observation.frame_seconds

        self._game = IsotopicGame(config=self._config)

        self.action_space = spaces.Discrete(len(ACTION_NAMES))
        self.observation_space = self._build_observation_space()

        self._actions = {
            ACTION_NOOP: lambda: False,
            ACTION_LEFT: self._game.move_left,
            ACTION_RIGHT: self._game.move_right,
            ACTION_SOFT_DROP: self._game.soft_drop,
            ACTION_ROTATE_CW: self._game.rotate_cw,
            ACTION_ROTATE_CCW: self._game.rotate_ccw,
            ACTION_HARD_DROP: self._game.hard_drop,
            ACTION_HOLD: self._game.hold,
        }

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        board = self._config.board
        grid = (board.height, board.width)
        preview = self._config.queue.preview_count
        max_atomic = self._config.max_atomic_number
        num_kinds = len(PIECE_KINDS)

        return spaces.Dict({
            "board": spaces.Box(low=-1, high=max_atomic, shape=grid, dtype=np.int16),
            "half_lives": spaces.Box(low=0, high=np.inf, shape=grid, dtype=np.float32),
            "piece_mask": spaces.Box(low=0, high=1, shape=grid, dtype=np.int8),
            "ghost_mask": spaces.Box(low=0, high=1, shape=grid, dtype=np.int8),
            "piece_kind": spaces.Box(low=-1, high=num_kinds - 1, shape=(), dtype=np.int8),
            "piece_element": spaces.Box(low=0, high=max_atomic, shape=(), dtype=np.int16),
            "hold_kind": spaces.Box(low=-1, high=num_kinds - 1, shape=(), dtype=np.int8),
            "hold_element": spaces.Box(low=0, high=max_atomic, shape=(), dtype=np.int16),
            "can_hold": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),
            "next_kinds": spaces.Box(low=-1, high=num_kinds - 1, shape=(preview,), dtype=np.int8),
            "next_elements": spaces.Box(low=0, high=max_atomic, shape=(preview,), dtype=np.int16),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "level": spaces.Box(low=1, high=self._config.scoring.max_level, shape=(), dtype=np.int32),
            "lines": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "highest_element": spaces.Box(low=0, high=max_atomic, shape=(), dtype=np.int32),
            "stage_index": spaces.Box(low=0, high=len(self._config.stages) - 1, shape=(), dtype=np.int32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.reset(seed=seed)

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: Index into ACTION_NAMES.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action {action}; expected 0..{self.action_space.n - 1}")

        score_before = self._game.score
        applied = self._actions[action]()
        self._game.advance(self._frame_seconds)

        obs = self._snapshot_to_obs(self._game.snapshot())
        reward = 0.0

        info = self._game.get_info()
        info["delta_score"] = self._game.score - score_before
        info["action"] = ACTION_NAMES[action]
        info["action_applied"] = applied

        terminated = self._game.is_over
        if terminated:
            logger.debug("Episode terminated: %s", info)

        return obs, reward, terminated, False, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        return snapshot.to_obs_dict(self._config.queue.preview_count)

    def render(self) -> Optional[str]:
        """
        Render the current game state.

        Returns:
            Text board if render_mode is "ansi", None otherwise.
        """
        if self.render_mode != "ansi":
            return None

        snapshot = self._game.snapshot()
        catalog = self._game.catalog
        piece_cells = set(snapshot.piece_cells)
        lines = []
        for r in range(snapshot.board_height):
            row = []
            for c in range(snapshot.board_width):
                code = int(snapshot.board[r, c])
                if (r, c) in piece_cells and snapshot.piece is not None:
                    row.append(catalog[snapshot.piece.element].symbol.ljust(2))
                elif code < 0:
                    row.append(". ")
                else:
                    row.append(catalog[code].symbol.ljust(2))
            lines.append("".join(row))
        lines.append(f"score={snapshot.score} level={snapshot.level} "
                     f"highest={snapshot.highest_element} stage={snapshot.stage_name}")
        return "\n".join(lines)

    def close(self) -> None:
        """Clean up resources."""
        self._game.close()

    @property
    def game(self) -> IsotopicGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
