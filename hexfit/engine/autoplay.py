"""Self-play runner: play N games with a strategy and report results.

Useful for tuning the generator: a strategy that survives long on average
means the dealt sets stay playable.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

from hexfit.config import Settings
from hexfit.config import settings as default_settings
from hexfit.engine.session import PuzzleSession
from hexfit.puzzle.placement import find_valid_placements
from hexfit.puzzle.types import Hex

logger = logging.getLogger(__name__)


class PlayStrategy(Protocol):
    """Chooses the next placement for a session, or None to give up."""

    def choose_move(self, session: PuzzleSession) -> tuple[str, Hex] | None:
        ...


class RandomStrategy:
    """Picks a uniformly random legal (piece, anchor) pair."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def choose_move(self, session: PuzzleSession) -> tuple[str, Hex] | None:
        moves = [
            (piece.id, anchor)
            for piece in session.tray
            for anchor in find_valid_placements(piece, session.board)
        ]
        if not moves:
            return None
        return self._rng.choice(moves)


class GreedyStrategy:
    """Picks the legal placement with the highest placement_score."""

    def choose_move(self, session: PuzzleSession) -> tuple[str, Hex] | None:
        hint = session.hint()
        if hint is None:
            return None
        return hint.piece_id, Hex(*hint.anchor)


STRATEGIES: dict[str, Callable[[int | None], PlayStrategy]] = {
    "random": lambda seed: RandomStrategy(seed),
    "greedy": lambda seed: GreedyStrategy(),
}


@dataclass
class AutoplayResult:
    """Aggregated results from an autoplay run."""

    num_games: int
    scores: list[int] = field(default_factory=list)
    moves: list[int] = field(default_factory=list)
    lines_cleared: list[int] = field(default_factory=list)
    game_durations_ms: list[float] = field(default_factory=list)
    truncated: int = 0  # games stopped by max_moves

    def avg_score(self) -> float:
        return sum(self.scores) / max(len(self.scores), 1)

    def max_score(self) -> int:
        return max(self.scores, default=0)

    def score_stddev(self) -> float:
        if len(self.scores) < 2:
            return 0.0
        avg = self.avg_score()
        variance = sum((s - avg) ** 2 for s in self.scores) / (len(self.scores) - 1)
        return math.sqrt(variance)

    def avg_moves(self) -> float:
        return sum(self.moves) / max(len(self.moves), 1)

    def summary(self) -> str:
        lines = [f"Autoplay Results ({self.num_games} games)"]
        lines.append("=" * 60)
        lines.append(
            f"  Score: avg={self.avg_score():7.1f} +/- {self.score_stddev():6.1f}  "
            f"max={self.max_score()}"
        )
        lines.append(
            f"  Moves: avg={self.avg_moves():5.1f}  "
            f"Lines cleared: {sum(self.lines_cleared)}"
        )
        if self.truncated:
            lines.append(f"  Truncated games: {self.truncated}")
        if self.game_durations_ms:
            avg_ms = sum(self.game_durations_ms) / len(self.game_durations_ms)
            total_s = sum(self.game_durations_ms) / 1000
            lines.append(f"  Avg game: {avg_ms:.0f}ms  |  Total: {total_s:.1f}s")
        return "\n".join(lines)


def run_autoplay(
    strategy: PlayStrategy,
    num_games: int = 10,
    base_seed: int = 0,
    settings: Settings | None = None,
    max_moves: int = 1000,
    progress_callback: Callable[[int, int], None] | None = None,
) -> AutoplayResult:
    """Play *num_games* games with *strategy*.

    Game *i* deals pieces from ``random_seed = base_seed + i``. A game ends on
    game over, when the strategy gives up, or after *max_moves* placements.
    """
    settings = settings or default_settings
    result = AutoplayResult(num_games=num_games)

    for game_idx in range(num_games):
        session = PuzzleSession(settings, seed=base_seed + game_idx)

        t0 = time.monotonic()
        finished = _play_one_game(session, strategy, max_moves)
        elapsed_ms = (time.monotonic() - t0) * 1000

        result.scores.append(session.score)
        result.moves.append(session.move_count)
        result.lines_cleared.append(session.lines_cleared)
        result.game_durations_ms.append(elapsed_ms)
        if not finished:
            result.truncated += 1

        if progress_callback:
            progress_callback(game_idx + 1, num_games)

    return result


def _play_one_game(session: PuzzleSession, strategy: PlayStrategy, max_moves: int) -> bool:
    """Play until game over. Returns False if max_moves cut the game short."""
    session.new_game()
    for _ in range(max_moves):
        if session.is_over:
            return True
        move = strategy.choose_move(session)
        if move is None:
            logger.debug("Strategy found no move before game over")
            return True
        piece_id, anchor = move
        session.place_piece(piece_id, anchor)
    return session.is_over
