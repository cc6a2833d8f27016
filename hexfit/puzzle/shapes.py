"""Piece shape catalog.

Every catalog shape lists its cells relative to the origin (0, 0), and the
origin is always one of them: it is the reference cell that gets mapped onto
the anchor when a piece is placed.

The catalog is built once at import time and never mutated.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass

from hexfit.engine.errors import InvalidShapeError
from hexfit.puzzle.types import ORIGIN, Hex, ShapeCategory, hex_neighbors

COLORS: dict[str, str] = {
    "red": "#FF6B6B",
    "blue": "#4ECDC4",
    "green": "#95E77E",
    "yellow": "#FFE66D",
    "purple": "#A78BFA",
    "orange": "#FB923C",
    "pink": "#F472B6",
    "cyan": "#67E8F9",
}

COLOR_COUNT = len(COLORS)  # 8


@dataclass(frozen=True)
class PieceShape:
    """Immutable piece template."""

    id: str
    name: str
    cells: tuple[Hex, ...]
    color: str
    category: ShapeCategory

    def __post_init__(self) -> None:
        if not self.cells:
            raise InvalidShapeError(f"Shape {self.id!r} has no cells")
        if len(set(self.cells)) != len(self.cells):
            raise InvalidShapeError(f"Shape {self.id!r} has duplicate cells")

    @property
    def size(self) -> int:
        return len(self.cells)

    @property
    def has_origin(self) -> bool:
        return ORIGIN in self.cells


def _shape(
    shape_id: str, name: str, cells: list[tuple[int, int]], color: str, category: ShapeCategory,
) -> PieceShape:
    return PieceShape(
        id=shape_id,
        name=name,
        cells=tuple(Hex(q, r) for q, r in cells),
        color=COLORS[color],
        category=category,
    )


# ── Single ──

SINGLE = _shape("single", "Single", [(0, 0)], "cyan", ShapeCategory.SINGLE)

# ── Small (2-3 hexes) ──

DOUBLE_HORIZONTAL = _shape(
    "double_h", "Double Horizontal", [(0, 0), (1, 0)], "blue", ShapeCategory.SMALL,
)
DOUBLE_DIAGONAL = _shape(
    "double_d", "Double Diagonal", [(0, 0), (1, -1)], "green", ShapeCategory.SMALL,
)
TRIPLE_LINE = _shape(
    "triple_line", "Triple Line", [(-1, 0), (0, 0), (1, 0)], "red", ShapeCategory.SMALL,
)
TRIPLE_V = _shape(
    "triple_v", "Triple V", [(0, 0), (1, -1), (1, 0)], "yellow", ShapeCategory.SMALL,
)
TRIPLE_TRIANGLE = _shape(
    "triple_triangle", "Triple Triangle", [(0, 0), (1, 0), (0, 1)], "purple", ShapeCategory.SMALL,
)

# ── Medium (4-5 hexes) ──

QUAD_LINE = _shape(
    "quad_line", "Quad Line", [(-1, 0), (0, 0), (1, 0), (2, 0)], "orange", ShapeCategory.MEDIUM,
)
QUAD_SQUARE = _shape(
    "quad_square", "Quad Square", [(0, 0), (1, 0), (0, 1), (1, -1)], "pink", ShapeCategory.MEDIUM,
)
QUAD_L = _shape(
    "quad_l", "Quad L", [(0, 0), (1, 0), (2, 0), (0, 1)], "blue", ShapeCategory.MEDIUM,
)
QUAD_Z = _shape(
    "quad_z", "Quad Z", [(0, 0), (1, 0), (1, -1), (2, -1)], "green", ShapeCategory.MEDIUM,
)
PENTA_CROSS = _shape(
    "penta_cross", "Penta Cross",
    [(0, 0), (-1, 0), (1, 0), (0, -1), (0, 1)],
    "red", ShapeCategory.MEDIUM,
)
PENTA_ARROW = _shape(
    "penta_arrow", "Penta Arrow",
    [(0, 0), (1, 0), (2, 0), (1, -1), (1, 1)],
    "yellow", ShapeCategory.MEDIUM,
)

# ── Large (6-7 hexes) ──

HEXA_LINE = _shape(
    "hexa_line", "Hexa Line",
    [(-2, 0), (-1, 0), (0, 0), (1, 0), (2, 0), (3, 0)],
    "purple", ShapeCategory.LARGE,
)
HEXA_FLOWER = _shape(
    "hexa_flower", "Hexa Flower",
    [(0, 0), (1, 0), (0, 1), (-1, 1), (-1, 0), (0, -1)],
    "orange", ShapeCategory.LARGE,
)
HEPTA_FULL = _shape(
    "hepta_full", "Hepta Full",
    [(0, 0), (1, 0), (0, 1), (-1, 1), (-1, 0), (0, -1), (1, -1)],
    "pink", ShapeCategory.LARGE,
)

ALL_SHAPES: tuple[PieceShape, ...] = (
    SINGLE,
    DOUBLE_HORIZONTAL,
    DOUBLE_DIAGONAL,
    TRIPLE_LINE,
    TRIPLE_V,
    TRIPLE_TRIANGLE,
    QUAD_LINE,
    QUAD_SQUARE,
    QUAD_L,
    QUAD_Z,
    PENTA_CROSS,
    PENTA_ARROW,
    HEXA_LINE,
    HEXA_FLOWER,
    HEPTA_FULL,
)

_SHAPES_BY_ID: dict[str, PieceShape] = {shape.id: shape for shape in ALL_SHAPES}


# ── Accessors ──

def all_shapes() -> tuple[PieceShape, ...]:
    return ALL_SHAPES


def get_shape(shape_id: str) -> PieceShape | None:
    return _SHAPES_BY_ID.get(shape_id)


def shapes_by_category(category: ShapeCategory | str) -> list[PieceShape]:
    category = ShapeCategory(category)
    return [shape for shape in ALL_SHAPES if shape.category == category]


def shapes_by_size(min_size: int, max_size: int) -> list[PieceShape]:
    return [shape for shape in ALL_SHAPES if min_size <= shape.size <= max_size]


def random_shape(rng: random.Random | None = None) -> PieceShape:
    rng = rng or random.Random()
    return rng.choice(ALL_SHAPES)


def random_shape_from_categories(
    *categories: ShapeCategory | str,
    rng: random.Random | None = None,
) -> PieceShape | None:
    """Pick a random catalog shape whose category is one of categories."""
    wanted = {ShapeCategory(c) for c in categories}
    candidates = [shape for shape in ALL_SHAPES if shape.category in wanted]
    if not candidates:
        return None
    rng = rng or random.Random()
    return rng.choice(candidates)


def random_color(rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    return rng.choice(list(COLORS.values()))


def categorize_by_size(size: int) -> ShapeCategory:
    if size == 1:
        return ShapeCategory.SINGLE
    if size <= 3:
        return ShapeCategory.SMALL
    if size <= 5:
        return ShapeCategory.MEDIUM
    return ShapeCategory.LARGE


def create_custom_shape(
    shape_id: str,
    name: str,
    cells: Iterable[tuple[int, int]],
    color: str | None = None,
    category: ShapeCategory | str | None = None,
    rng: random.Random | None = None,
) -> PieceShape:
    """Assemble an ad hoc shape, categorized by cell count unless given."""
    hexes = tuple(Hex(q, r) for q, r in cells)
    return PieceShape(
        id=shape_id,
        name=name,
        cells=hexes,
        color=color or random_color(rng),
        category=ShapeCategory(category) if category else categorize_by_size(len(hexes)),
    )


def generate_procedural_shape(
    max_size: int = 5,
    rng: random.Random | None = None,
) -> PieceShape:
    """Grow a random connected shape from the origin, then re-center it.

    The target size is drawn uniformly from [2, max_size]. Each step picks
    uniformly among the unvisited neighbors of the cells chosen so far. The
    result is shifted by the rounded centroid, so the origin is not
    guaranteed to remain one of its cells.
    """
    if max_size < 2:
        raise InvalidShapeError(f"Procedural shapes need max_size >= 2, got {max_size}")
    rng = rng or random.Random()

    cells: list[Hex] = [ORIGIN]
    visited: set[Hex] = {ORIGIN}
    target_size = rng.randint(2, max_size)

    while len(cells) < target_size:
        candidates: list[Hex] = []
        for cell in cells:
            for neighbor in hex_neighbors(cell):
                if neighbor not in visited:
                    candidates.append(neighbor)
        if not candidates:
            break
        new_cell = rng.choice(candidates)
        cells.append(new_cell)
        visited.add(new_cell)

    shift_q = math.floor(sum(c.q for c in cells) / len(cells) + 0.5)
    shift_r = math.floor(sum(c.r for c in cells) / len(cells) + 0.5)
    centered = [Hex(c.q - shift_q, c.r - shift_r) for c in cells]

    return create_custom_shape(
        f"proc_{rng.getrandbits(32):08x}",
        "Procedural Shape",
        centered,
        rng=rng,
    )
