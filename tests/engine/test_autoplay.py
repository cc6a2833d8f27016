"""Tests for the self-play runner and its CLI."""

from __future__ import annotations

import pytest

from hexfit.engine.autoplay import (
    STRATEGIES,
    AutoplayResult,
    GreedyStrategy,
    RandomStrategy,
    run_autoplay,
)
from hexfit.engine.autoplay_cli import main
from hexfit.engine.session import PuzzleSession


def test_random_autoplay_runs_games(make_settings):
    """Autoplay should play N games and record one entry per game."""
    result = run_autoplay(
        RandomStrategy(seed=1), num_games=3, base_seed=0,
        settings=make_settings(board_radius=2), max_moves=100,
    )

    assert result.num_games == 3
    assert len(result.scores) == 3
    assert len(result.moves) == 3
    assert len(result.game_durations_ms) == 3
    for score, moves in zip(result.scores, result.moves):
        assert moves >= 1
        assert score >= 10 * moves


def test_greedy_autoplay(make_settings):
    result = run_autoplay(
        GreedyStrategy(), num_games=1, settings=make_settings(board_radius=2), max_moves=30,
    )
    assert len(result.scores) == 1
    assert result.moves[0] >= 1


def test_max_moves_truncates(make_settings):
    result = run_autoplay(
        RandomStrategy(seed=2), num_games=2, settings=make_settings(board_radius=4), max_moves=1,
    )
    assert result.moves == [1, 1]
    assert result.truncated == 2


def test_progress_callback(make_settings):
    calls = []
    run_autoplay(
        RandomStrategy(seed=0), num_games=2, settings=make_settings(board_radius=2),
        max_moves=5, progress_callback=lambda done, total: calls.append((done, total)),
    )
    assert calls == [(1, 2), (2, 2)]


def test_random_strategy_picks_legal_moves(make_settings):
    session = PuzzleSession(make_settings(board_radius=3), seed=3)
    session.new_game()
    strategy = RandomStrategy(seed=4)
    for _ in range(5):
        if session.is_over:
            break
        piece_id, anchor = strategy.choose_move(session)
        assert session.validate_placement(piece_id, anchor) is None
        session.place_piece(piece_id, anchor)


def test_result_statistics():
    result = AutoplayResult(
        num_games=3,
        scores=[100, 200, 300],
        moves=[5, 10, 15],
        lines_cleared=[0, 1, 2],
        game_durations_ms=[10.0, 10.0, 10.0],
        truncated=1,
    )
    assert result.avg_score() == 200
    assert result.max_score() == 300
    assert result.score_stddev() == pytest.approx(100.0)
    assert result.avg_moves() == 10

    summary = result.summary()
    assert "Autoplay Results (3 games)" in summary
    assert "Lines cleared: 3" in summary
    assert "Truncated games: 1" in summary


def test_empty_result_statistics():
    result = AutoplayResult(num_games=0)
    assert result.avg_score() == 0
    assert result.max_score() == 0
    assert result.score_stddev() == 0.0


def test_strategy_registry():
    assert set(STRATEGIES) == {"random", "greedy"}
    assert isinstance(STRATEGIES["random"](1), RandomStrategy)
    assert isinstance(STRATEGIES["greedy"](None), GreedyStrategy)


class TestCli:
    def test_prints_summary(self, capsys) -> None:
        main(["--games", "1", "--radius", "2", "--max-moves", "20", "--strategy", "random"])
        out = capsys.readouterr().out
        assert "Autoplay: random, 1 games, radius 2" in out
        assert "Autoplay Results (1 games)" in out

    def test_unknown_strategy(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--strategy", "psychic"])
        assert exc_info.value.code == 1
        assert "Unknown strategy" in capsys.readouterr().err

    def test_bad_radius(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--radius", "0"])
        assert exc_info.value.code == 1

    def test_bad_tray_size(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--tray-size", "0"])
        assert exc_info.value.code == 1
        assert "Invalid settings" in capsys.readouterr().err
