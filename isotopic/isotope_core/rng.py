"""
RNG - 7-Bag Piece Queue
=======================

Provides deterministic piece spawning: shapes come from a shuffled 7-bag,
elements are drawn from the active stage's spawn pool.
"""

from __future__ import annotations

import random
from collections import deque
from typing import Deque, List, Optional

from isotopic.isotope_core.config_loader import GameConfig, StageConfig, get_config
from isotopic.isotope_core.pieces import PIECE_KINDS, PieceDescriptor


class PieceQueue:
    """
    Next-piece queue backed by a 7-bag randomizer.

    Each bag is a shuffled permutation of the seven shapes; when it is
    exhausted a new one is shuffled. The element for a descriptor is chosen
    when the descriptor is pushed, using the stage active at that moment.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize piece queue.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._preview_count = config.queue.preview_count

        self._bag: List[str] = []
        self._queue: Deque[PieceDescriptor] = deque()

    def _refill_bag(self) -> None:
        """Refill and shuffle the bag."""
        self._bag = list(PIECE_KINDS)
        self._rng.shuffle(self._bag)

    def next_kind(self) -> str:
        """Draw the next shape from the bag."""
        if not self._bag:
            self._refill_bag()
        return self._bag.pop()

    def draw_element(self, stage: StageConfig) -> int:
        """Pick an element uniformly from a stage's spawn pool."""
        return self._rng.choice(stage.spawn_pool)

    def draw(self, stage: StageConfig) -> PieceDescriptor:
        """Draw a fresh descriptor without touching the queue."""
        return PieceDescriptor(self.next_kind(), self.draw_element(stage))

    def fill(self, stage: StageConfig) -> None:
        """Top up the queue to the preview length."""
        while len(self._queue) < self._preview_count:
            self._queue.append(self.draw(stage))

    def pop_and_refill(self, stage: StageConfig) -> PieceDescriptor:
        """
        Take the head of the queue and push a new descriptor onto the tail.

        Args:
            stage: Stage whose spawn pool supplies the new tail element.

        Returns:
            The descriptor that was at the head.
        """
        self.fill(stage)
        head = self._queue.popleft()
        self._queue.append(self.draw(stage))
        return head

    def peek(self, count: Optional[int] = None) -> List[PieceDescriptor]:
        """Upcoming descriptors, head first."""
        items = list(self._queue)
        return items if count is None else items[:count]

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def bag_remaining(self) -> List[str]:
        """Shapes left in the current bag (in draw order, last drawn first)."""
        return list(self._bag)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Empty the queue and bag.

        Args:
            seed: New random seed. Keeps current RNG if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._bag = []
        self._queue.clear()
