"""
Element Catalog
===============

Provides convenient access to element definitions loaded from config,
plus the inert waste sentinel produced by overflow and failed decay.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from isotopic.isotope_core.config_loader import (
    ElementConfig,
    GameConfig,
    get_config
)

WASTE_ATOMIC_NUMBER = 0


@dataclass(frozen=True)
class ElementType:
    """
    Runtime representation of an element.

    Wraps ElementConfig with the heavy classification used by gravity.
    """
    config: ElementConfig
    is_heavy: bool = False
    is_waste: bool = False

    @property
    def atomic_number(self) -> int:
        return self.config.atomic_number

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def color(self) -> str:
        return self.config.color

    @property
    def base_half_life(self) -> Optional[float]:
        return self.config.half_life

    @property
    def is_stable(self) -> bool:
        return self.config.is_stable

    @property
    def can_fuse(self) -> bool:
        """Waste never takes part in fusion."""
        return not self.is_waste

    def __repr__(self) -> str:
        return f"ElementType({self.atomic_number}: {self.symbol})"


WASTE = ElementType(
    config=ElementConfig(
        atomic_number=WASTE_ATOMIC_NUMBER,
        symbol="☢",
        name="Isotope Waste",
        half_life=None,
        color="#424242"
    ),
    is_waste=True
)


class ElementCatalog:
    """
    Registry of all elements, indexed by atomic number.

    Index 0 resolves to the waste sentinel.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        threshold = config.gravity.heavy_threshold
        self._types: Tuple[ElementType, ...] = tuple(
            ElementType(element, is_heavy=element.atomic_number >= threshold)
            for element in config.elements
        )
        self._by_symbol = {t.symbol.lower(): t for t in self._types}

    def __len__(self) -> int:
        """Number of real elements (waste excluded)."""
        return len(self._types)

    def __getitem__(self, atomic_number: int) -> ElementType:
        """Get element by atomic number (0 is waste)."""
        if atomic_number == WASTE_ATOMIC_NUMBER:
            return WASTE
        if 1 <= atomic_number <= len(self._types):
            return self._types[atomic_number - 1]
        raise IndexError(
            f"Atomic number {atomic_number} out of range [0, {len(self._types)}]"
        )

    def __iter__(self) -> Iterator[ElementType]:
        """Iterate over real elements in atomic order."""
        return iter(self._types)

    def __contains__(self, atomic_number: int) -> bool:
        return 1 <= atomic_number <= len(self._types)

    @property
    def max_atomic_number(self) -> int:
        """Heaviest element in the table (Uranium)."""
        return len(self._types)

    @property
    def waste(self) -> ElementType:
        return WASTE

    @property
    def hydrogen(self) -> ElementType:
        return self._types[0]

    @property
    def helium(self) -> ElementType:
        return self._types[1]

    @property
    def carbon(self) -> ElementType:
        return self._types[5]

    def get(self, atomic_number: int) -> Optional[ElementType]:
        """Get an element by atomic number, or None if it doesn't exist."""
        if atomic_number in self:
            return self._types[atomic_number - 1]
        return None

    def by_symbol(self, symbol: str) -> Optional[ElementType]:
        """Get element by chemical symbol (case-insensitive)."""
        return self._by_symbol.get(symbol.lower())

    def is_unstable(self, atomic_number: int) -> bool:
        """True if the element has a half-life."""
        element = self.get(atomic_number)
        return element is not None and not element.is_stable

    def is_heavy(self, atomic_number: int) -> bool:
        """True if the element sinks through lighter cells."""
        element = self.get(atomic_number)
        return element is not None and element.is_heavy

    @property
    def unstable_types(self) -> Tuple[ElementType, ...]:
        return tuple(t for t in self._types if not t.is_stable)


# Module-level singleton
_cached_catalog: Optional[ElementCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> ElementCatalog:
    """
    Get the element catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ElementCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ElementCatalog(config)
    return _cached_catalog
