"""
Realtime Driver
===============

Feeds wall-clock time into a session from an asyncio loop, so interactive
front-ends can forward input from their own tasks while the game ticks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from isotopic.isotope_core.game import GameResult, IsotopicGame
from isotopic.isotope_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)

FrameCallback = Callable[[GameSnapshot], None]


async def run_realtime(
    game: IsotopicGame,
    frame_seconds: Optional[float] = None,
    on_frame: Optional[FrameCallback] = None,
    stop: Optional[asyncio.Event] = None,
    clock: Callable[[], float] = time.monotonic
) -> Optional[GameResult]:
    """
    Advance `game` by elapsed wall-clock time until it ends.

    Args:
        game: Session to drive.
        frame_seconds: Sleep between advances. Uses the configured frame
            time if None.
        on_frame: Called with a fresh snapshot after every advance.
        stop: Setting this event ends the loop early (the session is left
            open).
        clock: Monotonic time source in seconds.

    Returns:
        The session result, or None if stopped before the game ended.
    """
    if frame_seconds is None:
        frame_seconds = game.config.observation.frame_seconds

    last = clock()
    while not game.closed and not game.is_over:
        if stop is not None and stop.is_set():
            logger.debug("Realtime driver stopped")
            return None

        await asyncio.sleep(frame_seconds)

        now = clock()
        game.advance(now - last)
        last = now

        if on_frame is not None:
            on_frame(game.snapshot())

    return game.result
