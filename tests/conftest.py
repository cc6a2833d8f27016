from __future__ import annotations

from collections.abc import Iterable, Sequence

import pytest

from hexfit.config import Settings
from hexfit.engine.session import PuzzleSession
from hexfit.puzzle import shapes
from hexfit.puzzle.board import Board
from hexfit.puzzle.pieces import Piece
from hexfit.puzzle.shapes import PieceShape


def fill_board(board: Board, keep_empty: Iterable[tuple[int, int]] = ()) -> Board:
    """Occupy every cell of board except keep_empty."""
    holes = {tuple(c) for c in keep_empty}
    for cell in board.all_cells():
        if tuple(cell.coord) not in holes:
            board.set_occupied(cell.coord, True, "filler", 0)
    return board


class FixedGenerator:
    """Deals predetermined shape sets, then single pieces once they run out."""

    def __init__(self, piece_sets: Sequence[Sequence[PieceShape]]):
        self._sets = [list(s) for s in piece_sets]
        self._counter = 0
        self.calls = 0

    def generate_piece_set(self, board: Board, count: int = 3) -> list[Piece]:
        self.calls += 1
        if self._sets:
            chosen = self._sets.pop(0)
        else:
            chosen = [shapes.SINGLE] * count
        pieces = []
        for shape in chosen:
            pieces.append(Piece(shape, color_index=self._counter % 8, piece_id=f"{shape.id}-{self._counter}"))
            self._counter += 1
        return pieces


@pytest.fixture
def fill():
    return fill_board


@pytest.fixture
def board() -> Board:
    return Board(4)


@pytest.fixture
def tiny_board() -> Board:
    """Radius 1: the origin and its six neighbours."""
    return Board(1)


@pytest.fixture
def one_hole_board() -> Board:
    """Radius 3 board with only the origin left empty."""
    return fill_board(Board(3), keep_empty=[(0, 0)])


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        values = {"board_radius": 1, "tray_size": 3, "random_seed": 0}
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def make_session(make_settings):
    """Start a game whose tray is dealt from the given shape sets."""

    def _make(*piece_sets: Sequence[PieceShape], radius: int = 1) -> PuzzleSession:
        session = PuzzleSession(
            make_settings(board_radius=radius),
            generator=FixedGenerator(piece_sets),
        )
        session.new_game()
        return session

    return _make
