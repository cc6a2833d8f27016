"""Piece-set generation.

Deals the next batch of offered pieces. With adaptive sizing, shapes get
smaller as the board fills up. With the solvability guarantee, a batch is
only accepted if at least one of its pieces fits the current board; after
max_generation_attempts rejected batches the generator deals single-cell
pieces, which fit any board with an empty cell.

The generator only reads the board, through the placement queries.
"""

from __future__ import annotations

import logging
import random

from pydantic import BaseModel, Field

from hexfit.engine.errors import BoardFullError
from hexfit.puzzle import shapes
from hexfit.puzzle.board import Board
from hexfit.puzzle.pieces import Piece
from hexfit.puzzle.placement import can_place_any_piece
from hexfit.puzzle.shapes import PieceShape
from hexfit.puzzle.solver import has_solution
from hexfit.puzzle.types import ShapeCategory

logger = logging.getLogger(__name__)

EARLY_GAME_FULLNESS = 0.3
LATE_GAME_FULLNESS = 0.8
CRITICAL_SMALL_CHANCE = 0.3


class GenerationConfig(BaseModel):
    use_procedural_generation: bool = False
    use_adaptive_sizing: bool = True
    max_size_late_game: int = Field(default=3, ge=2)
    max_hexagon_count: int = Field(default=7, ge=2)
    adaptive_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    guarantee_solvability: bool = True
    # Also require the whole batch to be placeable in some order
    require_round_solution: bool = False
    max_generation_attempts: int = Field(default=100, ge=1)


class PieceGenerator:
    """Produces batches of fresh, unplaced pieces from the shape catalog."""

    def __init__(
        self,
        config: GenerationConfig | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or GenerationConfig()
        self._rng = rng or random.Random(seed)

    @property
    def config(self) -> GenerationConfig:
        return self._config.model_copy()

    def update_config(self, **changes) -> None:
        """Apply changes to the config. Raises pydantic.ValidationError on bad values."""
        self._config = GenerationConfig.model_validate({**self._config.model_dump(), **changes})

    # ── Batches ──

    def generate_piece_set(self, board: Board, count: int = 3) -> list[Piece]:
        """Deal count pieces for the current board.

        Raises BoardFullError when solvability is guaranteed but the board
        has no empty cell, since no batch could ever satisfy it.
        """
        if not self._config.guarantee_solvability:
            return self._generate_random_pieces(board, count)

        if board.is_full():
            raise BoardFullError("Board has no empty cell; no piece can be placed")

        for attempt in range(1, self._config.max_generation_attempts + 1):
            pieces = self._generate_random_pieces(board, count)
            if self._is_acceptable(pieces, board):
                if attempt > 1:
                    logger.debug(f"Accepted piece set after {attempt} attempts")
                return pieces

        logger.warning(
            f"Could not generate a solvable piece set in "
            f"{self._config.max_generation_attempts} attempts, "
            f"falling back to single pieces"
        )
        return self._generate_fallback_pieces(count)

    def generate_specific_piece(self, shape_id: str) -> Piece | None:
        shape = shapes.get_shape(shape_id)
        if shape is None:
            logger.warning(f"Shape with id {shape_id!r} not found")
            return None
        return self._make_piece(shape)

    def generate_tutorial_pieces(self) -> list[Piece]:
        """Simple, easy-to-place pieces."""
        return [
            self._make_piece(shape)
            for shape in (shapes.SINGLE, shapes.DOUBLE_HORIZONTAL, shapes.TRIPLE_LINE)
        ]

    def generate_line_clear_set(self) -> list[Piece]:
        """Straight pieces that tend to finish lines."""
        return [
            self._make_piece(shape)
            for shape in (shapes.TRIPLE_LINE, shapes.QUAD_LINE, shapes.DOUBLE_HORIZONTAL)
        ]

    # ── Internals ──

    def _is_acceptable(self, pieces: list[Piece], board: Board) -> bool:
        if not can_place_any_piece(pieces, board):
            return False
        if self._config.require_round_solution:
            return has_solution(pieces, board)
        return True

    def _generate_random_pieces(self, board: Board, count: int) -> list[Piece]:
        fullness = board.fullness_percentage()
        return [self._make_piece(self._select_shape(fullness)) for _ in range(count)]

    def _generate_fallback_pieces(self, count: int) -> list[Piece]:
        return [self._make_piece(shapes.SINGLE) for _ in range(count)]

    def _make_piece(self, shape: PieceShape) -> Piece:
        return Piece(
            shape,
            color_index=self._rng.randrange(shapes.COLOR_COUNT),
            piece_id=f"piece_{self._rng.getrandbits(48):012x}",
        )

    def _select_shape(self, fullness: float) -> PieceShape:
        if self._config.use_procedural_generation:
            return shapes.generate_procedural_shape(
                self.max_size_for_fullness(fullness), rng=self._rng,
            )
        shape = shapes.random_shape_from_categories(
            *self.categories_for_fullness(fullness), rng=self._rng,
        )
        return shape or shapes.SINGLE

    def max_size_for_fullness(self, fullness: float) -> int:
        """Largest procedural shape size allowed at this board fullness."""
        cfg = self._config
        if not cfg.use_adaptive_sizing:
            return cfg.max_hexagon_count
        if fullness < EARLY_GAME_FULLNESS:
            return min(7, cfg.max_hexagon_count)
        if fullness < cfg.adaptive_threshold:
            return min(5, cfg.max_hexagon_count)
        return min(cfg.max_size_late_game, 3)

    def categories_for_fullness(self, fullness: float) -> list[ShapeCategory]:
        """Catalog categories to draw from at this board fullness."""
        all_categories = [
            ShapeCategory.SINGLE, ShapeCategory.SMALL, ShapeCategory.MEDIUM, ShapeCategory.LARGE,
        ]
        if not self._config.use_adaptive_sizing or fullness < EARLY_GAME_FULLNESS:
            return all_categories
        if fullness < self._config.adaptive_threshold:
            return all_categories[:3]
        if fullness < LATE_GAME_FULLNESS:
            return all_categories[:2]
        categories = [ShapeCategory.SINGLE]
        if self._rng.random() < CRITICAL_SMALL_CHANCE:
            categories.append(ShapeCategory.SMALL)
        return categories
