"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml


@dataclass(frozen=True)
class BoardConfig:
    """Board geometry."""
    width: int       # Columns
    height: int      # Visible rows
    spawn_row: int   # Row of the spawned piece's shape origin


@dataclass(frozen=True)
class TimingConfig:
    """Fall cadence and lock delay parameters (all values in seconds)."""
    lock_delay: float
    max_lock_resets: int
    decay_interval: float
    min_fall_interval: float
    heavy_speed_threshold: int
    heavy_speed_multiplier: float
    level_fall_intervals: Tuple[float, ...]

    def level_interval(self, level: int) -> float:
        """Base fall interval for a 1-based level (clamped to the table)."""
        index = max(1, min(level, len(self.level_fall_intervals))) - 1
        return self.level_fall_intervals[index]


@dataclass(frozen=True)
class FusionConfig:
    """Fusion rule switches and the fixed-point safety bound."""
    max_iterations: int
    triple_alpha: bool
    standard: bool
    alpha: bool
    beta: bool


@dataclass(frozen=True)
class GravityConfig:
    """Heavy element crushing parameters."""
    heavy_crush: bool
    heavy_threshold: int
    max_crush_passes: int


@dataclass(frozen=True)
class DecayConfig:
    """Radioactive decay parameters."""
    min_step: int
    max_step: int
    line_clear_stabilization: float
    warning_threshold: float


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    line_table: Tuple[int, ...]     # Points for 1..4 lines
    extra_line_bonus: int           # Per line beyond four in one resolve cycle
    back_to_back_multiplier: float
    combo_bonus: int
    fusion_base: int
    chain_multiplier: float
    soft_drop_points: int
    hard_drop_points: int
    lines_per_level: int
    max_level: int


@dataclass(frozen=True)
class QueueConfig:
    """Next-queue parameters."""
    preview_count: int


@dataclass(frozen=True)
class ResolveConfig:
    """Resolve cycle safety bound."""
    max_iterations: int


@dataclass(frozen=True)
class ObservationConfig:
    """Environment wrapper parameters."""
    frame_seconds: float


@dataclass(frozen=True)
class StageConfig:
    """A gameplay phase, unlocked by the highest element synthesized."""
    name: str
    unlock_at: int
    target_element: int
    spawn_pool: Tuple[int, ...]
    speed_multiplier: float
    description: str


@dataclass(frozen=True)
class ElementConfig:
    """Static definition of a single element."""
    atomic_number: int
    symbol: str
    name: str
    half_life: Optional[float]  # Seconds, None if stable
    color: str

    @property
    def is_stable(self) -> bool:
        return self.half_life is None


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    timing: TimingConfig
    fusion: FusionConfig
    gravity: GravityConfig
    decay: DecayConfig
    scoring: ScoringConfig
    queue: QueueConfig
    resolve: ResolveConfig
    observation: ObservationConfig
    stages: Tuple[StageConfig, ...]
    elements: Tuple[ElementConfig, ...]

    @property
    def max_atomic_number(self) -> int:
        """Atomic number of the heaviest element (Uranium)."""
        return self.elements[-1].atomic_number

    @property
    def first_stage(self) -> StageConfig:
        return self.stages[0]

    def get_element(self, atomic_number: int) -> ElementConfig:
        """Get element config by atomic number."""
        if 1 <= atomic_number <= len(self.elements):
            return self.elements[atomic_number - 1]
        raise ValueError(f"Invalid atomic number: {atomic_number}")


def _parse_element(element_data: dict) -> ElementConfig:
    """Parse a single element definition from YAML."""
    half_life = element_data.get("half_life")
    return ElementConfig(
        atomic_number=int(element_data["atomic_number"]),
        symbol=str(element_data["symbol"]),
        name=str(element_data["name"]),
        half_life=float(half_life) if half_life is not None else None,
        color=str(element_data.get("color", "#90a4ae"))
    )


def _parse_stage(stage_data: dict) -> StageConfig:
    """Parse a single stage definition from YAML."""
    return StageConfig(
        name=str(stage_data["name"]),
        unlock_at=int(stage_data["unlock_at"]),
        target_element=int(stage_data["target_element"]),
        spawn_pool=tuple(int(n) for n in stage_data["spawn_pool"]),
        speed_multiplier=float(stage_data.get("speed_multiplier", 1.0)),
        description=str(stage_data.get("description", ""))
    )


def _float_tuple(values: List) -> Tuple[float, ...]:
    return tuple(float(v) for v in values)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    # Elements must be exactly 1..N in order
    for i, element in enumerate(config.elements):
        if element.atomic_number != i + 1:
            raise ValueError(
                f"Element order mismatch: expected atomic number {i + 1}, "
                f"got {element.atomic_number}"
            )
        if element.half_life is not None and element.half_life <= 0:
            raise ValueError(
                f"Unstable element {element.symbol} needs a positive half-life, "
                f"got {element.half_life}"
            )

    if not config.stages:
        raise ValueError("At least one stage is required")

    # Stage thresholds start at zero and strictly increase
    if config.stages[0].unlock_at != 0:
        raise ValueError(f"First stage must unlock at 0, got {config.stages[0].unlock_at}")
    for prev, stage in zip(config.stages, config.stages[1:]):
        if stage.unlock_at <= prev.unlock_at:
            raise ValueError(
                f"Stage '{stage.name}' unlock_at ({stage.unlock_at}) must exceed "
                f"'{prev.name}' ({prev.unlock_at})"
            )

    for stage in config.stages:
        if not stage.spawn_pool:
            raise ValueError(f"Stage '{stage.name}' has an empty spawn pool")
        for atomic_number in stage.spawn_pool:
            if not 1 <= atomic_number <= len(config.elements):
                raise ValueError(
                    f"Stage '{stage.name}' spawns unknown element {atomic_number}"
                )

    if len(config.timing.level_fall_intervals) < config.scoring.max_level:
        raise ValueError(
            f"level_fall_intervals ({len(config.timing.level_fall_intervals)}) must cover "
            f"max_level ({config.scoring.max_level})"
        )

    if len(config.scoring.line_table) != 4:
        raise ValueError(f"line_table must have 4 entries, got {len(config.scoring.line_table)}")

    if not 1 <= config.decay.min_step <= config.decay.max_step:
        raise ValueError(
            f"Decay steps must satisfy 1 <= min_step <= max_step, got "
            f"{config.decay.min_step}..{config.decay.max_step}"
        )

    if config.board.width < 4 or config.board.height < 4:
        raise ValueError(
            f"Board must be at least 4x4, got {config.board.width}x{config.board.height}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        width=int(board_data["width"]),
        height=int(board_data["height"]),
        spawn_row=int(board_data.get("spawn_row", 0))
    )

    timing_data = raw["timing"]
    timing = TimingConfig(
        lock_delay=float(timing_data["lock_delay"]),
        max_lock_resets=int(timing_data["max_lock_resets"]),
        decay_interval=float(timing_data["decay_interval"]),
        min_fall_interval=float(timing_data.get("min_fall_interval", 0.02)),
        heavy_speed_threshold=int(timing_data.get("heavy_speed_threshold", 60)),
        heavy_speed_multiplier=float(timing_data.get("heavy_speed_multiplier", 0.8)),
        level_fall_intervals=_float_tuple(timing_data["level_fall_intervals"])
    )

    fusion_data = raw.get("fusion", {})
    fusion = FusionConfig(
        max_iterations=int(fusion_data.get("max_iterations", 500)),
        triple_alpha=bool(fusion_data.get("triple_alpha", True)),
        standard=bool(fusion_data.get("standard", True)),
        alpha=bool(fusion_data.get("alpha", True)),
        beta=bool(fusion_data.get("beta", True))
    )

    gravity_data = raw.get("gravity", {})
    gravity = GravityConfig(
        heavy_crush=bool(gravity_data.get("heavy_crush", True)),
        heavy_threshold=int(gravity_data.get("heavy_threshold", 26)),
        max_crush_passes=int(gravity_data.get("max_crush_passes", 40))
    )

    decay_data = raw["decay"]
    decay = DecayConfig(
        min_step=int(decay_data.get("min_step", 1)),
        max_step=int(decay_data.get("max_step", 3)),
        line_clear_stabilization=float(decay_data["line_clear_stabilization"]),
        warning_threshold=float(decay_data.get("warning_threshold", 3.0))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        line_table=tuple(int(p) for p in scoring_data["line_table"]),
        extra_line_bonus=int(scoring_data["extra_line_bonus"]),
        back_to_back_multiplier=float(scoring_data["back_to_back_multiplier"]),
        combo_bonus=int(scoring_data["combo_bonus"]),
        fusion_base=int(scoring_data["fusion_base"]),
        chain_multiplier=float(scoring_data["chain_multiplier"]),
        soft_drop_points=int(scoring_data.get("soft_drop_points", 1)),
        hard_drop_points=int(scoring_data.get("hard_drop_points", 2)),
        lines_per_level=int(scoring_data.get("lines_per_level", 10)),
        max_level=int(scoring_data.get("max_level", 20))
    )

    queue = QueueConfig(
        preview_count=int(raw.get("queue", {}).get("preview_count", 4))
    )

    resolve = ResolveConfig(
        max_iterations=int(raw.get("resolve", {}).get("max_iterations", 50))
    )

    observation = ObservationConfig(
        frame_seconds=float(raw.get("observation", {}).get("frame_seconds", 0.05))
    )

    config = GameConfig(
        board=board,
        timing=timing,
        fusion=fusion,
        gravity=gravity,
        decay=decay,
        scoring=scoring,
        queue=queue,
        resolve=resolve,
        observation=observation,
        stages=tuple(_parse_stage(s) for s in raw["stages"]),
        elements=tuple(_parse_element(e) for e in raw["elements"])
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
