"""
Pieces
======

Tetromino shapes, SRS rotation with wall kicks, and collision checks.

Shapes are stored as four explicit rotation states (0 = spawn, 1 = clockwise,
2 = 180, 3 = counter-clockwise). Kick offsets use the SRS convention where
+y points up, so they are negated when applied to board rows.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from isotopic.isotope_core.board import Board, Position

Shape = Tuple[Tuple[int, ...], ...]
Kick = Tuple[int, int]

PIECE_KINDS: Tuple[str, ...] = ("I", "O", "T", "S", "Z", "J", "L")

SHAPES: Dict[str, Tuple[Shape, Shape, Shape, Shape]] = {
    "I": (
        ((0, 0, 0, 0), (1, 1, 1, 1), (0, 0, 0, 0), (0, 0, 0, 0)),
        ((0, 0, 1, 0), (0, 0, 1, 0), (0, 0, 1, 0), (0, 0, 1, 0)),
        ((0, 0, 0, 0), (0, 0, 0, 0), (1, 1, 1, 1), (0, 0, 0, 0)),
        ((0, 1, 0, 0), (0, 1, 0, 0), (0, 1, 0, 0), (0, 1, 0, 0)),
    ),
    "O": (
        ((1, 1), (1, 1)),
        ((1, 1), (1, 1)),
        ((1, 1), (1, 1)),
        ((1, 1), (1, 1)),
    ),
    "T": (
        ((0, 1, 0), (1, 1, 1), (0, 0, 0)),
        ((0, 1, 0), (0, 1, 1), (0, 1, 0)),
        ((0, 0, 0), (1, 1, 1), (0, 1, 0)),
        ((0, 1, 0), (1, 1, 0), (0, 1, 0)),
    ),
    "S": (
        ((0, 1, 1), (1, 1, 0), (0, 0, 0)),
        ((0, 1, 0), (0, 1, 1), (0, 0, 1)),
        ((0, 0, 0), (0, 1, 1), (1, 1, 0)),
        ((1, 0, 0), (1, 1, 0), (0, 1, 0)),
    ),
    "Z": (
        ((1, 1, 0), (0, 1, 1), (0, 0, 0)),
        ((0, 0, 1), (0, 1, 1), (0, 1, 0)),
        ((0, 0, 0), (1, 1, 0), (0, 1, 1)),
        ((0, 1, 0), (1, 1, 0), (1, 0, 0)),
    ),
    "J": (
        ((1, 0, 0), (1, 1, 1), (0, 0, 0)),
        ((0, 1, 1), (0, 1, 0), (0, 1, 0)),
        ((0, 0, 0), (1, 1, 1), (0, 0, 1)),
        ((0, 1, 0), (0, 1, 0), (1, 1, 0)),
    ),
    "L": (
        ((0, 0, 1), (1, 1, 1), (0, 0, 0)),
        ((0, 1, 0), (0, 1, 0), (0, 1, 1)),
        ((0, 0, 0), (1, 1, 1), (1, 0, 0)),
        ((1, 1, 0), (0, 1, 0), (0, 1, 0)),
    ),
}

JLSTZ_KICKS: Dict[Tuple[int, int], Tuple[Kick, ...]] = {
    (0, 1): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (1, 0): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
    (1, 2): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
    (2, 1): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (2, 3): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
    (3, 2): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (3, 0): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (0, 3): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
}

I_KICKS: Dict[Tuple[int, int], Tuple[Kick, ...]] = {
    (0, 1): ((0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)),
    (1, 0): ((0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)),
    (1, 2): ((0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)),
    (2, 1): ((0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)),
    (2, 3): ((0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)),
    (3, 2): ((0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)),
    (3, 0): ((0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)),
    (0, 3): ((0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)),
}

O_KICKS: Tuple[Kick, ...] = ((0, 0),)


@dataclass(frozen=True)
class PieceDescriptor:
    """A queued or held piece: shape kind plus the element of its blocks."""
    kind: str
    element: int


@dataclass(frozen=True)
class Piece:
    """The falling tetromino. Position is the top-left of its shape box."""
    kind: str
    element: int
    rotation: int
    x: int
    y: int

    @property
    def descriptor(self) -> PieceDescriptor:
        return PieceDescriptor(self.kind, self.element)

    @property
    def shape(self) -> Shape:
        return SHAPES[self.kind][self.rotation]

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def placed(self, x: int, y: int, rotation: Optional[int] = None) -> "Piece":
        return replace(
            self, x=x, y=y,
            rotation=self.rotation if rotation is None else rotation
        )


def shape_cells(kind: str, rotation: int) -> List[Position]:
    """Occupied (row, col) offsets of a shape within its box."""
    shape = SHAPES[kind][rotation % 4]
    return [
        (r, c)
        for r, row in enumerate(shape)
        for c, value in enumerate(row)
        if value
    ]


def piece_cells(piece: Piece) -> List[Position]:
    """Board (row, col) positions covered by a piece; rows may be negative."""
    return [(piece.y + r, piece.x + c) for r, c in shape_cells(piece.kind, piece.rotation)]


def spawn_piece(descriptor: PieceDescriptor, board_width: int, spawn_row: int = 0) -> Piece:
    """Place a descriptor centered at the top of the board in rotation 0."""
    box_width = len(SHAPES[descriptor.kind][0][0])
    x = board_width // 2 - math.ceil(box_width / 2)
    return Piece(descriptor.kind, descriptor.element, 0, x, spawn_row)


def is_valid_position(board: Board, piece: Piece, x: int, y: int, rotation: int) -> bool:
    """
    Check whether a piece fits at a candidate placement.

    Cells must be within the side walls and above the floor; rows above the
    board (negative) are always allowed so pieces can spawn partially hidden.
    """
    for r, c in shape_cells(piece.kind, rotation):
        row = y + r
        col = x + c
        if col < 0 or col >= board.width or row >= board.height:
            return False
        if row >= 0 and not board.is_empty(row, col):
            return False
    return True


def fits(board: Board, piece: Piece) -> bool:
    """Check whether a piece fits where it currently is."""
    return is_valid_position(board, piece, piece.x, piece.y, piece.rotation)


def is_grounded(board: Board, piece: Piece) -> bool:
    """True if the piece cannot move down one row."""
    return not is_valid_position(board, piece, piece.x, piece.y + 1, piece.rotation)


def ghost_y(board: Board, piece: Piece) -> int:
    """Row the piece would come to rest on if hard-dropped."""
    y = piece.y
    while is_valid_position(board, piece, piece.x, y + 1, piece.rotation):
        y += 1
    return y


def kicks_for(kind: str, from_rotation: int, to_rotation: int) -> Sequence[Kick]:
    """Kick offsets to try, in priority order, for a rotation."""
    if kind == "O":
        return O_KICKS
    table = I_KICKS if kind == "I" else JLSTZ_KICKS
    return table.get((from_rotation, to_rotation), O_KICKS)


def find_kick(board: Board, piece: Piece, direction: int) -> Optional[Tuple[int, Piece]]:
    """
    Resolve a rotation against the kick table.

    Args:
        board: Board to test against.
        piece: Piece to rotate.
        direction: +1 clockwise, -1 counter-clockwise.

    Returns:
        (kick_index, rotated_piece) for the first kick that fits, or None.
    """
    to_rotation = (piece.rotation + direction) % 4
    for index, (dx, dy) in enumerate(kicks_for(piece.kind, piece.rotation, to_rotation)):
        x = piece.x + dx
        y = piece.y - dy
        if is_valid_position(board, piece, x, y, to_rotation):
            return index, piece.placed(x, y, to_rotation)
    return None


def rotate(board: Board, piece: Piece, direction: int) -> Optional[Piece]:
    """Rotate with wall kicks; returns the rotated piece or None if rejected."""
    found = find_kick(board, piece, direction)
    return found[1] if found is not None else None
