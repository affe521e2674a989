"""
Tests for settling and heavy crushing.
"""

import logging

import pytest

from dataclasses import replace

from isotopic.isotope_core.board import Board, CellFactory
from isotopic.isotope_core.config_loader import load_config
from isotopic.isotope_core.element_catalog import get_catalog
from isotopic.isotope_core.gravity import GravityEngine, crush_heavy, settle


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def cells(config):
    return CellFactory(get_catalog(config))


@pytest.fixture
def gravity(config):
    return GravityEngine(config)


class TestSettle:
    """Plain column compaction."""

    def test_cells_fall_to_floor(self, cells):
        board = Board.from_atomic_numbers(
            [[1, None],
             [None, 2],
             [None, None]],
            cells
        )
        assert settle(board)
        assert board.get(2, 0).atomic_number == 1
        assert board.get(2, 1).atomic_number == 2
        assert board.is_settled()

    def test_order_preserved(self, cells):
        board = Board.from_atomic_numbers([[3], [None], [5], [None]], cells)
        settle(board)
        assert board.get(2, 0).atomic_number == 3
        assert board.get(3, 0).atomic_number == 5

    def test_idempotent(self, cells):
        board = Board.from_atomic_numbers([[1, None, 4], [None, 0, None]], cells)
        settle(board)
        snapshot = board.atomic_grid()
        assert not settle(board)
        assert (board.atomic_grid() == snapshot).all()


class TestCrush:
    """Heavy elements sink through lighter ones."""

    def test_heavy_swaps_with_lighter(self, cells):
        board = Board.from_atomic_numbers([[26], [3]], cells)
        assert crush_heavy(board, 26)
        assert board.get(1, 0).atomic_number == 26
        assert board.get(0, 0).atomic_number == 3

    def test_waste_blocks_crushing(self, cells):
        board = Board.from_atomic_numbers([[30], [0]], cells)
        assert not crush_heavy(board, 26)

    def test_heavier_below_blocks(self, cells):
        board = Board.from_atomic_numbers([[30], [31]], cells)
        assert not crush_heavy(board, 26)

    def test_full_settle_sinks_to_bottom(self, gravity, cells):
        board = Board.from_atomic_numbers([[40], [None], [2], [5], [1]], cells)
        gravity.full_settle(board)
        assert [board.get(r, 0).atomic_number for r in range(1, 5)] == [2, 5, 1, 40]
        assert board.is_settled()

    def test_full_settle_is_fixed_point(self, gravity, cells):
        board = Board.from_atomic_numbers([[50, 2], [3, 60], [1, 1]], cells)
        gravity.full_settle(board)
        assert not gravity.full_settle(board)

    def test_crush_disabled(self, config, cells):
        gravity = GravityEngine(replace(config, gravity=replace(config.gravity, heavy_crush=False)))
        board = Board.from_atomic_numbers([[40], [1]], cells)
        gravity.full_settle(board)
        assert board.get(0, 0).atomic_number == 40

    def test_crush_pass_cap(self, config, cells, caplog):
        gravity = GravityEngine(replace(config, gravity=replace(config.gravity, max_crush_passes=1)))
        board = Board.from_atomic_numbers([[40], [2], [1]], cells)

        with caplog.at_level(logging.WARNING, logger="isotopic.isotope_core.gravity"):
            assert gravity.full_settle(board)

        # One pass moves the heavy cell a single slot
        assert [board.get(r, 0).atomic_number for r in range(3)] == [2, 40, 1]
        assert "did not converge after 1 passes" in caplog.text
