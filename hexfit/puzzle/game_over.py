"""Game-over detection.

A move exists if some offered piece, in its current rotation, can be anchored
on some board cell using the same anchoring as a real placement. The search
returns on the first hit.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from hexfit.puzzle.board import Board
from hexfit.puzzle.pieces import Piece
from hexfit.puzzle.placement import can_place_piece
from hexfit.puzzle.types import Hex


class Move(NamedTuple):
    piece: Piece
    anchor: Hex


def find_first_placeable_move(pieces: Sequence[Piece], board: Board) -> Move | None:
    """First (piece, anchor) pair, piece-major then board order, that is legal."""
    cells = board.all_cells()
    for piece in pieces:
        for cell in cells:
            if can_place_piece(piece, cell.coord, board):
                return Move(piece, cell.coord)
    return None


def is_game_over(pieces: Sequence[Piece], board: Board) -> bool:
    return find_first_placeable_move(pieces, board) is None


# ── Diagnostics ──

def find_any_footprint_move(pieces: Sequence[Piece], board: Board) -> Move | None:
    """Try mapping every piece cell onto every empty cell.

    Rotationless and independent of the reference cell, so it is never used
    to end a game; diagnose() reports when it disagrees with the anchored
    search. The returned anchor is the translation offset, not a cell.
    """
    empties = board.empty_cells()
    for piece in pieces:
        shape_cells = piece.cells
        for empty in empties:
            for pc in shape_cells:
                offset = Hex(empty.q - pc.q, empty.r - pc.r)
                if board.can_place_cells(piece.world_positions(offset)):
                    return Move(piece, offset)
    return None


def diagnose(pieces: Sequence[Piece], board: Board) -> dict[str, bool]:
    """Compare the footprint sweep with the authoritative anchored search."""
    return {
        "footprint_move": find_any_footprint_move(pieces, board) is not None,
        "player_move": find_first_placeable_move(pieces, board) is not None,
    }


def placement_summary(pieces: Sequence[Piece], board: Board) -> list[dict]:
    """Count valid anchors per piece. Each item is {"id": str, "anchors": int}."""
    cells = board.all_cells()
    return [
        {
            "id": piece.id,
            "anchors": sum(1 for cell in cells if can_place_piece(piece, cell.coord, board)),
        }
        for piece in pieces
    ]
