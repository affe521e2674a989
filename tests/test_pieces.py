"""
Tests for tetromino movement, collision and SRS rotation.
"""

import pytest

from isotopic.isotope_core.board import Board, CellFactory
from isotopic.isotope_core.config_loader import load_config
from isotopic.isotope_core.element_catalog import get_catalog
from isotopic.isotope_core.pieces import (
    PIECE_KINDS,
    Piece,
    PieceDescriptor,
    find_kick,
    fits,
    ghost_y,
    is_grounded,
    is_valid_position,
    piece_cells,
    rotate,
    spawn_piece,
)


@pytest.fixture
def cells():
    return CellFactory(get_catalog(load_config()))


@pytest.fixture
def board():
    return Board(10, 20)


class TestSpawn:
    """Spawn placement."""

    @pytest.mark.parametrize("kind,x", [("I", 3), ("O", 4), ("T", 3), ("L", 3)])
    def test_spawn_centered(self, kind, x):
        piece = spawn_piece(PieceDescriptor(kind, 1), 10)
        assert piece.x == x
        assert piece.y == 0
        assert piece.rotation == 0

    def test_every_kind_has_four_cells(self):
        for kind in PIECE_KINDS:
            for rotation in range(4):
                piece = Piece(kind, 1, rotation, 3, 0)
                assert len(piece_cells(piece)) == 4


class TestCollision:
    """Walls, floor and occupied cells."""

    def test_walls(self, board):
        piece = Piece("I", 1, 0, 0, 0)
        assert is_valid_position(board, piece, 0, 0, 0)
        assert not is_valid_position(board, piece, -1, 0, 0)
        assert not is_valid_position(board, piece, 7, 0, 0)

    def test_rows_above_board_allowed(self, board):
        piece = Piece("T", 1, 0, 3, -1)
        assert fits(board, piece)

    def test_floor_and_ghost(self, board):
        piece = Piece("O", 1, 0, 4, 0)
        assert ghost_y(board, piece) == 18
        landed = piece.placed(4, 18)
        assert is_grounded(board, landed)
        assert not is_grounded(board, piece)

    def test_ghost_stops_on_cells(self, board, cells):
        board.set(19, 4, cells.create(1))
        piece = Piece("O", 1, 0, 4, 0)
        assert ghost_y(board, piece) == 17


class TestRotation:
    """SRS rotation with kicks."""

    def test_plain_rotation(self, board):
        piece = Piece("T", 1, 0, 4, 10)
        rotated = rotate(board, piece, 1)
        assert rotated == Piece("T", 1, 1, 4, 10)

    def test_four_rotations_return_to_start(self, board):
        piece = Piece("J", 1, 0, 4, 10)
        current = piece
        for _ in range(4):
            current = rotate(board, current, 1)
        assert current == piece

    def test_third_kick_used_when_first_two_blocked(self, board, cells):
        # Kick 0 needs (12, 5) and kick 1 needs (12, 4); kick 2 shifts left and up
        board.set(12, 4, cells.create_waste())
        board.set(12, 5, cells.create_waste())
        piece = Piece("T", 1, 0, 4, 10)

        index, rotated = find_kick(board, piece, 1)
        assert index == 2
        assert rotated == Piece("T", 1, 1, 3, 9)

    def test_third_kick_against_right_wall(self, board, cells):
        # Rotating back to spawn would poke past column 9; kick 1 is blocked at (11, 7)
        board.set(11, 7, cells.create_waste())
        piece = Piece("T", 1, 3, 8, 10)
        assert max(col for _, col in piece_cells(piece)) == 9

        index, rotated = find_kick(board, piece, 1)
        assert index == 2
        assert rotated == Piece("T", 1, 0, 7, 11)
        assert fits(board, rotated)

    def test_wall_kick_off_left_wall(self, board):
        # Vertical I against the left wall cannot rotate in place
        piece = Piece("I", 1, 3, -1, 5)
        rotated = rotate(board, piece, 1)
        assert rotated is not None
        assert rotated.rotation == 0
        assert fits(board, rotated)

    def test_rotation_rejected_when_all_kicks_fail(self, cells):
        board = Board(3, 3)
        for c in range(3):
            board.set(2, c, cells.create_waste())
        board.set(0, 0, cells.create_waste())
        piece = Piece("T", 1, 0, 0, 0)
        assert fits(board, piece)
        assert rotate(board, piece, 1) is None

    def test_o_does_not_move(self, board):
        piece = Piece("O", 1, 0, 4, 5)
        rotated = rotate(board, piece, -1)
        assert (rotated.x, rotated.y) == (4, 5)
        assert rotated.rotation == 3
