from __future__ import annotations

from hexfit.puzzle.board import Board, Cell
from hexfit.puzzle.game_over import Move, find_first_placeable_move, is_game_over
from hexfit.puzzle.generator import GenerationConfig, PieceGenerator
from hexfit.puzzle.pieces import Piece, rotate_hex
from hexfit.puzzle.placement import (
    can_place_any_piece,
    can_place_piece,
    find_valid_placements,
    placement_cells,
    placement_score,
    reference_point,
)
from hexfit.puzzle.shapes import PieceShape
from hexfit.puzzle.types import Hex, Line, LineAxis, ShapeCategory

__all__ = [
    "Board",
    "Cell",
    "GenerationConfig",
    "Hex",
    "Line",
    "LineAxis",
    "Move",
    "Piece",
    "PieceGenerator",
    "PieceShape",
    "ShapeCategory",
    "can_place_any_piece",
    "can_place_piece",
    "find_first_placeable_move",
    "find_valid_placements",
    "is_game_over",
    "placement_cells",
    "placement_score",
    "reference_point",
    "rotate_hex",
]
