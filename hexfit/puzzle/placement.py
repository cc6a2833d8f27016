"""Placement validation.

Every consumer that turns (piece, anchor) into board cells goes through
reference_point() and placement_cells(): the drag preview, the commit, the
generator's solvability check, the solver and the game-over detector. A
piece's reference cell is its (0, 0) offset if it has one, otherwise its
first listed cell.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from hexfit.puzzle.board import Board
from hexfit.puzzle.pieces import Piece
from hexfit.puzzle.types import ORIGIN, Hex

ISOLATED_NEIGHBOR_THRESHOLD = 5


def reference_point(cells: Sequence[tuple[int, int]]) -> Hex:
    """Return the cell that is mapped onto the anchor."""
    if not cells:
        return ORIGIN
    for cell in cells:
        if cell == ORIGIN:
            return ORIGIN
    return Hex(*cells[0])


def placement_cells(piece: Piece, anchor: tuple[int, int]) -> list[Hex]:
    """The board cells piece would cover with its reference cell on anchor."""
    ref = reference_point(piece.cells)
    return piece.world_positions((anchor[0] - ref.q, anchor[1] - ref.r))


def can_place_piece(piece: Piece, anchor: tuple[int, int], board: Board) -> bool:
    for cell in placement_cells(piece, anchor):
        if not board.is_valid_coordinate(cell):
            return False
        if board.is_occupied(cell):
            return False
    return True


def find_valid_placements(piece: Piece, board: Board) -> list[Hex]:
    """Every board cell that works as an anchor for piece, in board order."""
    return [
        cell.coord
        for cell in board.all_cells()
        if can_place_piece(piece, cell.coord, board)
    ]


def can_place_any_piece(pieces: Iterable[Piece], board: Board) -> bool:
    for piece in pieces:
        for cell in board.all_cells():
            if can_place_piece(piece, cell.coord, board):
                return True
    return False


def count_isolated_cells(board: Board) -> int:
    """Count empty cells with at least 5 occupied neighbors (hard to fill)."""
    isolated = 0
    for cell in board.all_cells():
        if cell.occupied:
            continue
        occupied_neighbors = sum(1 for n in board.neighbors(cell.coord) if board.is_occupied(n))
        if occupied_neighbors >= ISOLATED_NEIGHBOR_THRESHOLD:
            isolated += 1
    return isolated


def placement_score(piece: Piece, anchor: tuple[int, int], board: Board) -> int:
    """Heuristic value of a placement for hints and bots. -1 if illegal.

    Not used for legality or for the player's score.
    """
    if not can_place_piece(piece, anchor, board):
        return -1

    cells = placement_cells(piece, anchor)
    score = len(cells) * 10

    simulated = board.clone()
    simulated.place_cells(cells, "simulated")

    lines = simulated.detect_complete_lines()
    score += len(lines) * 100
    if len(lines) > 1:
        score += len(lines) * 50

    score -= count_isolated_cells(simulated) * 20
    return score
