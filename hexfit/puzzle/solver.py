"""Round solvability, difficulty and placement suggestions.

These searches simulate whole rounds on cloned boards: pieces are placed one
after another (trying every rotation) and completed lines are cleared between
placements, as in real play. Input boards and pieces are never mutated.
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterator, Sequence
from typing import NamedTuple

from hexfit.puzzle.board import Board
from hexfit.puzzle.pieces import Piece
from hexfit.puzzle.placement import can_place_piece, placement_cells
from hexfit.puzzle.types import Hex

MAX_ORDERINGS = 24


class Suggestion(NamedTuple):
    anchor: Hex
    rotation: int
    score: float


def _orderings(count: int) -> Iterator[tuple[int, ...]]:
    perms = itertools.permutations(range(count))
    if count <= 3:
        return perms
    return itertools.islice(perms, MAX_ORDERINGS)


def _rotations(piece: Piece, allow_rotation: bool) -> Iterator[Piece]:
    """Yield a probe copy of piece in each rotation to try."""
    probe = piece.clone()
    probe.anchor = None
    for _ in range(6 if allow_rotation else 1):
        yield probe
        probe = probe.clone()
        probe.rotate_clockwise()


def find_placement(
    piece: Piece, board: Board, allow_rotation: bool = True,
) -> list[Hex] | None:
    """Cells of the first legal placement of piece in any rotation, or None."""
    empties = board.empty_cells()
    for probe in _rotations(piece, allow_rotation):
        for anchor in empties:
            cells = placement_cells(probe, anchor)
            if board.can_place_cells(cells):
                return cells
    return None


def _simulate_round(
    pieces: Sequence[Piece], board: Board, order: Sequence[int], allow_rotation: bool,
) -> bool:
    simulated = board.clone()
    for index in order:
        piece = pieces[index]
        cells = find_placement(piece, simulated, allow_rotation)
        if cells is None:
            return False
        simulated.place_cells(cells, piece.id, piece.color_index)
        lines = simulated.detect_complete_lines()
        if lines:
            simulated.clear_lines(lines)
    return True


def has_solution(
    pieces: Sequence[Piece], board: Board, allow_rotation: bool = True,
) -> bool:
    """True if every piece can be placed in some order.

    All orderings are tried for up to 3 pieces; larger sets are capped at
    MAX_ORDERINGS orderings.
    """
    if not pieces:
        return True
    return any(
        _simulate_round(pieces, board, order, allow_rotation)
        for order in _orderings(len(pieces))
    )


def count_placements(piece: Piece, board: Board, allow_rotation: bool = True) -> int:
    """Number of legal (rotation, anchor) pairs for piece."""
    total = 0
    for probe in _rotations(piece, allow_rotation):
        total += sum(1 for anchor in board.empty_cells() if can_place_piece(probe, anchor, board))
    return total


def calculate_difficulty(pieces: Sequence[Piece], board: Board) -> float:
    """Difficulty from 0 (easy) to 100 (hard).

    Fewer placement options overall, and especially for the most constrained
    piece, means a harder set.
    """
    if not pieces:
        return 0.0
    counts = [count_placements(piece, board) for piece in pieces]
    avg_placements = sum(counts) / len(counts)
    difficulty = 100 - (avg_placements * 2 + min(counts) * 3)
    return float(max(0, min(100, difficulty)))


def _score_placement(
    piece: Piece, anchor: Hex, board: Board, remaining: Sequence[Piece],
) -> float:
    simulated = board.clone()
    cells = placement_cells(piece, anchor)
    if not simulated.place_cells(cells, piece.id):
        return -math.inf

    score = 0.0
    lines = simulated.detect_complete_lines()
    score += len(lines) * 100
    score += sum(len(line) for line in lines) * 10
    if lines:
        simulated.clear_lines(lines)

    if remaining:
        if not has_solution(remaining, simulated):
            return -math.inf
        for next_piece in remaining:
            score += count_placements(next_piece, simulated) * 5

    fullness = simulated.fullness_percentage()
    if fullness < 0.5:
        score += (0.5 - abs(0.3 - fullness)) * 50

    return score


def suggest_best_placement(
    piece: Piece, board: Board, remaining: Sequence[Piece] = (),
) -> Suggestion | None:
    """Best (anchor, rotation) for piece that keeps the rest of the round solvable."""
    best: Suggestion | None = None
    for probe in _rotations(piece, allow_rotation=True):
        for anchor in board.empty_cells():
            if not can_place_piece(probe, anchor, board):
                continue
            score = _score_placement(probe, anchor, board, remaining)
            if score == -math.inf:
                continue
            if best is None or score > best.score:
                best = Suggestion(anchor=anchor, rotation=probe.rotation, score=score)
    return best
