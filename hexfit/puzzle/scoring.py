"""Scoring: points per placed cell, per cleared line, and the combo bonus."""

from __future__ import annotations

import math
from dataclasses import dataclass

POINTS_PER_CELL = 10
POINTS_PER_LINE = 100
COMBO_START = 3        # consecutive clearing placements before the combo kicks in
COMBO_STEP = 0.1
COMBO_BREAK_AFTER = 3  # non-clearing placements that reset the combo


def placement_points(cells_placed: int) -> int:
    return cells_placed * POINTS_PER_CELL


def combo_level(consecutive_clears: int) -> int:
    """0 below COMBO_START, then 1, 2, ... for each further consecutive clear."""
    if consecutive_clears < COMBO_START:
        return 0
    return consecutive_clears - COMBO_START + 1


def line_clear_points(lines_cleared: int, consecutive_clears: int) -> int:
    """Points for clearing lines_cleared lines on the nth consecutive clear.

    Combo level 1 pays 1.0x, level 2 pays 1.1x, level 3 pays 1.2x, and so on.
    """
    base = lines_cleared * POINTS_PER_LINE
    level = combo_level(consecutive_clears)
    if level == 0:
        return base
    multiplier = 1 + COMBO_STEP * (level - 1)
    return math.floor(base * multiplier + 0.5)


@dataclass
class ScoreKeeper:
    """Running score and combo state for one game."""

    score: int = 0
    high_score: int = 0
    consecutive_clears: int = 0
    non_clearing_placements: int = 0

    @property
    def combo(self) -> int:
        return combo_level(self.consecutive_clears)

    def add(self, points: int) -> None:
        self.score += points
        if self.score > self.high_score:
            self.high_score = self.score

    def record_placement(self, cells_placed: int) -> int:
        points = placement_points(cells_placed)
        self.add(points)
        return points

    def record_clear(self, lines_cleared: int) -> int:
        """Register a placement that cleared lines. Returns the points awarded."""
        self.consecutive_clears += 1
        self.non_clearing_placements = 0
        points = line_clear_points(lines_cleared, self.consecutive_clears)
        self.add(points)
        return points

    def record_no_clear(self) -> None:
        self.non_clearing_placements += 1
        if self.non_clearing_placements >= COMBO_BREAK_AFTER and self.consecutive_clears > 0:
            self.consecutive_clears = 0
            self.non_clearing_placements = 0

    def reset(self) -> None:
        self.score = 0
        self.consecutive_clears = 0
        self.non_clearing_placements = 0
