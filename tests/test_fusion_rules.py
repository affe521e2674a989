"""
Tests for fusion rules and their priority.
"""

import logging

import pytest

from dataclasses import replace

from isotopic.isotope_core.board import Board, CellFactory
from isotopic.isotope_core.config_loader import load_config
from isotopic.isotope_core.element_catalog import get_catalog
from isotopic.isotope_core.fusion import FusionEngine, FusionKind
from isotopic.isotope_core.gravity import GravityEngine


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def cells(config):
    return CellFactory(get_catalog(config))


@pytest.fixture
def fusion(config, cells):
    return FusionEngine(config, cells, GravityEngine(config))


class TestFusionRules:
    """Individual rules."""

    def test_standard_doubles(self, fusion, cells):
        board = Board.from_atomic_numbers([[1, 1]], cells)
        result = fusion.resolve(board)

        assert len(result.events) == 1
        assert result.events[0].kind is FusionKind.STANDARD
        assert board.get(0, 0).atomic_number == 2
        assert board.is_empty(0, 1)

    def test_palladium_pair_makes_uranium(self, fusion, cells):
        board = Board.from_atomic_numbers([[46, 46]], cells)
        result = fusion.resolve(board)

        assert result.highest_element == 92
        assert board.get(0, 0).atomic_number == 92
        assert board.cell_count() == 1

    def test_overflow_becomes_waste(self, fusion, cells):
        board = Board.from_atomic_numbers([[50, 50]], cells)
        result = fusion.resolve(board)

        assert len(result.events) == 1
        event = result.events[0]
        assert event.is_overflow
        assert event.to_element == 0
        assert board.count_waste() == 2

    @pytest.mark.parametrize("row", [[91, 2], [92, 1]])
    def test_capture_overflow_becomes_waste(self, fusion, cells, row):
        board = Board.from_atomic_numbers([row], cells)
        result = fusion.resolve(board)

        assert len(result.events) == 1
        event = result.events[0]
        assert event.kind is FusionKind.OVERFLOW
        assert event.from_elements == tuple(row)
        assert event.to_element == 0
        assert board.count_waste() == 2

    def test_triple_alpha(self, fusion, cells):
        board = Board.from_atomic_numbers([[2, 2, 2]], cells)
        result = fusion.resolve(board)

        assert [e.kind for e in result.events] == [FusionKind.TRIPLE_ALPHA]
        assert board.get(0, 1).atomic_number == 6
        assert board.cell_count() == 1

    def test_alpha_capture(self, fusion, cells):
        board = Board.from_atomic_numbers([[6, 2]], cells)
        result = fusion.resolve(board)

        assert result.events[0].kind is FusionKind.ALPHA
        assert board.get(0, 0).atomic_number == 8

    def test_beta_capture(self, fusion, cells):
        board = Board.from_atomic_numbers([[7, 1]], cells)
        result = fusion.resolve(board)

        assert result.events[0].kind is FusionKind.BETA
        assert board.get(0, 0).atomic_number == 8

    def test_waste_never_fuses(self, fusion, cells):
        board = Board.from_atomic_numbers([[0, 0], [0, 1]], cells)
        result = fusion.resolve(board)
        assert not result.changed

    def test_product_gets_base_half_life(self, fusion, cells):
        board = Board.from_atomic_numbers([[41, 2]], cells)
        fusion.resolve(board)

        cell = board.get(0, 0)
        assert cell.atomic_number == 43
        assert cell.half_life == 24.0


class TestFusionOrdering:
    """Priority, scan order and fixed point."""

    def test_standard_before_alpha(self, fusion, cells):
        board = Board.from_atomic_numbers(
            [[4, None],
             [4, 2]],
            cells
        )
        result = fusion.resolve(board)

        kinds = [e.kind for e in result.events]
        assert kinds == [FusionKind.STANDARD, FusionKind.ALPHA]
        assert result.highest_element == 10
        assert board.get(1, 0).atomic_number == 10

    def test_upward_neighbor_checked_first(self, fusion, cells):
        board = Board.from_atomic_numbers([[1], [5], [1]], cells)
        result = fusion.resolve(board)

        first = result.events[0]
        assert first.kind is FusionKind.BETA
        assert first.positions == ((1, 0), (0, 0))
        assert board.get(2, 0).atomic_number == 7

    def test_board_settled_after_resolve(self, fusion, cells):
        board = Board.from_atomic_numbers(
            [[1, 2, 3],
             [1, 2, 3],
             [6, 7, 8]],
            cells
        )
        fusion.resolve(board)
        assert board.is_settled()
        assert fusion.apply_once(board) is None

    def test_cell_count_never_increases(self, fusion, cells):
        board = Board.from_atomic_numbers(
            [[2, 1, 2, 4],
             [1, 2, 2, 4],
             [3, 6, 1, 0]],
            cells
        )
        before = board.cell_count()
        result = fusion.resolve(board)
        assert result.changed
        assert board.cell_count() <= before
        assert not result.capped


class TestFusionConfig:
    """Rule switches and the application cap."""

    def _engine(self, config, cells, **fusion_overrides):
        tuned = replace(config, fusion=replace(config.fusion, **fusion_overrides))
        return FusionEngine(tuned, cells, GravityEngine(tuned))

    def test_triple_alpha_disabled(self, config, cells):
        fusion = self._engine(config, cells, triple_alpha=False)
        board = Board.from_atomic_numbers([[2, 2, 2]], cells)
        result = fusion.resolve(board)

        assert [e.kind for e in result.events] == [FusionKind.STANDARD]
        assert board.get(0, 0).atomic_number == 4
        assert board.get(0, 2).atomic_number == 2

    def test_beta_disabled(self, config, cells):
        fusion = self._engine(config, cells, beta=False)
        board = Board.from_atomic_numbers([[7, 1]], cells)
        assert not fusion.resolve(board).changed

    def test_cap_returns_partial_result(self, config, cells, caplog):
        fusion = self._engine(config, cells, max_iterations=1)
        board = Board.from_atomic_numbers([[1, 1, 1, 1]], cells)

        with caplog.at_level(logging.WARNING, logger="isotopic.isotope_core.fusion"):
            result = fusion.resolve(board)

        assert result.capped
        assert len(result.events) == 1
        assert board.get(0, 0).atomic_number == 2
        assert board.get(0, 2).atomic_number == 1
        assert board.get(0, 3).atomic_number == 1
        assert "did not reach a fixed point after 1 applications" in caplog.text
