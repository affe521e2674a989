"""
Isotope Core - the game engine.

This module provides the session controller, its supporting systems
(pieces, fusion, gravity, decay, scoring, rules, timers) and a Gymnasium
wrapper.

Main exports:
- IsotopicGame: One game session driven by input operations and advance()
- IsotopicEnv: Gymnasium environment over a session
- run_realtime: asyncio driver feeding wall-clock time into a session
- GameConfig: Configuration loaded from game_config.yaml
"""

from isotopic.isotope_core.config_loader import GameConfig, load_config
from isotopic.isotope_core.element_catalog import ElementType, ElementCatalog
from isotopic.isotope_core.board import Board, Cell
from isotopic.isotope_core.pieces import Piece, PieceDescriptor
from isotopic.isotope_core.game import GameResult, IsotopicGame, Phase
from isotopic.isotope_core.state_snapshot import GameSnapshot
from isotopic.isotope_core.env_gym import IsotopicEnv
from isotopic.isotope_core.realtime import run_realtime

__all__ = [
    "GameConfig",
    "load_config",
    "ElementType",
    "ElementCatalog",
    "Board",
    "Cell",
    "Piece",
    "PieceDescriptor",
    "GameResult",
    "IsotopicGame",
    "Phase",
    "GameSnapshot",
    "IsotopicEnv",
    "run_realtime",
]
