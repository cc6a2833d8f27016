"""Tests for the puzzle session: dealing, placing, clearing and game over."""

from __future__ import annotations

import pytest

from hexfit.engine.errors import (
    GameOverError,
    InvalidPlacementError,
    PieceNotFoundError,
)
from hexfit.engine.models import GameStatus
from hexfit.engine.session import PuzzleSession
from hexfit.puzzle import shapes
from hexfit.puzzle.placement import can_place_piece, find_valid_placements, placement_score
from hexfit.puzzle.types import Hex, LineAxis

THREE_SINGLES = [shapes.SINGLE, shapes.SINGLE, shapes.SINGLE]


class TestNewGame:
    def test_deals_first_set(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        assert [p.id for p in session.tray] == ["single-0", "single-1", "single-2"]
        assert session.status == GameStatus.PLAYING
        assert session.score == 0
        assert session.board.occupied_cells() == []

    def test_new_game_events(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        events = session.new_game()
        assert [e.event_type for e in events] == ["game_started", "pieces_dealt"]
        assert events[0].payload["board_radius"] == 1
        assert len(events[1].payload["pieces"]) == 3

    def test_new_game_resets_board_in_place(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        board = session.board
        session.place_piece("single-0", (0, 0))
        session.new_game()
        assert session.board is board
        assert board.occupied_cells() == []
        assert session.move_count == 0

    def test_tray_view(self, make_session) -> None:
        session = make_session([shapes.TRIPLE_LINE])
        view = session.tray_view()
        assert len(view) == 1
        assert view[0].shape_id == "triple_line"
        assert view[0].category == "small"
        assert view[0].cells == [(-1, 0), (0, 0), (1, 0)]


class TestPlacement:
    def test_plain_placement(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        result = session.place_piece("single-0", (-1, 0))

        assert result.points == 10
        assert result.score == 10
        assert result.cells == [(-1, 0)]
        assert result.lines_cleared == []
        assert result.new_set_dealt is False
        assert session.board.get_cell((-1, 0)).piece_id == "single-0"
        assert [p.id for p in session.tray] == ["single-1", "single-2"]
        assert session.move_count == 1

    def test_radius_one_line_clear(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        session.place_piece("single-0", (-1, 0))
        session.place_piece("single-1", (1, 0))
        result = session.place_piece("single-2", (0, 0))

        assert result.points == 110
        assert session.score == 130
        assert len(result.lines_cleared) == 1
        assert result.lines_cleared[0].axis == LineAxis.HORIZONTAL.value
        assert result.lines_cleared[0].value == 0
        assert result.cleared_piece_ids == ["single-0", "single-1", "single-2"]
        assert session.board.occupied_cells() == []
        assert session.lines_cleared == 1

    def test_empty_tray_is_refilled(self, make_session) -> None:
        session = make_session(THREE_SINGLES, [shapes.DOUBLE_HORIZONTAL])
        session.place_piece("single-0", (-1, 0))
        session.place_piece("single-1", (1, 0))
        result = session.place_piece("single-2", (0, 0))

        assert result.new_set_dealt is True
        assert [e.event_type for e in result.events] == [
            "piece_placed", "lines_cleared", "pieces_dealt",
        ]
        assert [p.shape.id for p in session.tray] == ["double_h"]

    def test_preview_matches_commit(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        session.place_piece("single-0", (-1, 0))
        session.place_piece("single-1", (1, 0))

        preview = session.preview("single-2", (0, 0))

        assert preview.valid
        assert not session.board.is_occupied((0, 0))
        result = session.place_piece("single-2", (0, 0))
        assert preview.completed_lines == result.lines_cleared

    def test_preview_of_illegal_anchor(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        session.place_piece("single-0", (-1, 0))
        preview = session.preview("single-1", (-1, 0))
        assert preview.valid is False
        assert preview.completed_lines == []

    def test_illegal_anchor_rejected(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        with pytest.raises(InvalidPlacementError) as exc_info:
            session.place_piece("single-0", (2, 0))

        assert exc_info.value.piece_id == "single-0"
        assert exc_info.value.anchor == (2, 0)
        assert session.move_count == 0
        assert len(session.tray) == 3
        assert session.board.occupied_cells() == []

    def test_overlap_rejected(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        session.place_piece("single-0", (0, 0))
        with pytest.raises(InvalidPlacementError):
            session.place_piece("single-1", (0, 0))

    def test_unknown_piece(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        with pytest.raises(PieceNotFoundError):
            session.place_piece("ghost", (0, 0))

    def test_piece_cannot_be_placed_twice(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        session.place_piece("single-0", (0, 0))
        with pytest.raises(PieceNotFoundError):
            session.place_piece("single-0", (1, 0))

    def test_validate_placement(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        assert session.validate_placement("single-0", (0, 0)) is None
        assert "cannot be placed" in session.validate_placement("single-0", (5, 5))
        assert "not in the tray" in session.validate_placement("ghost", (0, 0))

    def test_rotation_changes_footprint(self, make_session) -> None:
        session = make_session([shapes.TRIPLE_LINE])
        session.board.place_cells([(-1, 0)], "x")
        assert session.validate_placement("triple_line-0", (0, 0)) is not None

        piece = session.rotate_piece("triple_line-0")

        assert piece.rotation == 60
        assert session.tray_view()[0].rotation == 60
        result = session.place_piece("triple_line-0", (0, 0))
        assert result.cells == [(0, -1), (0, 0), (0, 1)]

    def test_counter_clockwise_rotation(self, make_session) -> None:
        session = make_session([shapes.TRIPLE_LINE])
        piece = session.rotate_piece("triple_line-0", clockwise=False)
        assert piece.rotation == 300


class TestGameOver:
    def _blocked_session(self, make_session) -> PuzzleSession:
        session = make_session([shapes.SINGLE, shapes.HEPTA_FULL], radius=2)
        # no cell of a radius-2 board can host the flower once the center is taken
        session.board.set_occupied((0, 0), True, "x")
        return session

    def test_game_over_when_nothing_fits(self, make_session) -> None:
        session = self._blocked_session(make_session)

        result = session.place_piece("single-0", (2, 0))

        assert result.game_over is True
        assert session.is_over
        assert result.events[-1].event_type == "game_over"
        assert result.events[-1].payload["reason"] == "no_moves"

    def test_actions_rejected_after_game_over(self, make_session) -> None:
        session = self._blocked_session(make_session)
        session.place_piece("single-0", (2, 0))

        with pytest.raises(GameOverError):
            session.place_piece("hepta_full-1", (1, 1))
        with pytest.raises(GameOverError):
            session.rotate_piece("hepta_full-1")
        assert session.validate_placement("hepta_full-1", (1, 1)) == "Game is over"
        assert session.hint() is None
        assert session.preview("hepta_full-1", (1, 1)).valid is False

    def test_game_continues_while_a_piece_fits(self, make_session) -> None:
        session = make_session([shapes.SINGLE, shapes.SINGLE, shapes.HEPTA_FULL], radius=2)
        session.board.set_occupied((0, 0), True, "x")
        result = session.place_piece("single-0", (2, 0))
        assert result.game_over is False
        assert session.first_move().piece.id == "single-1"

    def test_new_game_after_game_over(self, make_session) -> None:
        session = self._blocked_session(make_session)
        session.place_piece("single-0", (2, 0))
        session.new_game()
        assert session.status == GameStatus.PLAYING
        assert session.scores.high_score == 10


class TestHints:
    def _center_row_gap(self, make_session) -> PuzzleSession:
        # on radius 2 only the center completes a line: every other line
        # would still have an empty cell
        session = make_session(THREE_SINGLES, radius=2)
        session.board.place_cells([(-2, 0), (-1, 0), (1, 0), (2, 0)], "row")
        return session

    def test_quick_hint_completes_line(self, make_session) -> None:
        session = self._center_row_gap(make_session)

        hint = session.hint()

        assert hint.piece_id == "single-0"
        assert hint.anchor == (0, 0)

    def test_deep_hint_completes_line(self, make_session) -> None:
        session = self._center_row_gap(make_session)

        hint = session.hint(deep=True)

        assert hint.anchor == (0, 0)

    def test_quick_hint_scores_best_among_ties(self, make_session) -> None:
        session = make_session(THREE_SINGLES)
        session.place_piece("single-0", (-1, 0))
        session.place_piece("single-1", (1, 0))
        piece = session.get_piece("single-2")
        best = max(
            placement_score(piece, anchor, session.board)
            for anchor in find_valid_placements(piece, session.board)
        )

        hint = session.hint()

        assert placement_score(piece, Hex(*hint.anchor), session.board) == best == 110

    def test_hint_is_legal(self, make_settings) -> None:
        session = PuzzleSession(make_settings(board_radius=3), seed=21)
        session.new_game()
        hint = session.hint()
        piece = session.get_piece(hint.piece_id)
        assert can_place_piece(piece, Hex(*hint.anchor), session.board)


class TestSeededPlay:
    def test_plays_through_a_full_round(self, make_settings) -> None:
        session = PuzzleSession(make_settings(board_radius=3), seed=5)
        session.new_game()
        first_round = [p.id for p in session.tray]

        for _ in range(3):
            move = session.first_move()
            if move is None:
                break
            session.place_piece(move.piece.id, move.anchor)

        assert session.is_over or len(session.tray) == 3
        if not session.is_over:
            assert [p.id for p in session.tray] != first_round

    def test_same_seed_same_deal(self, make_settings) -> None:
        a = PuzzleSession(make_settings(board_radius=3), seed=9)
        b = PuzzleSession(make_settings(board_radius=3), seed=9)
        a.new_game()
        b.new_game()
        assert [p.shape.id for p in a.tray] == [p.shape.id for p in b.tray]
