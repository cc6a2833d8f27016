"""Runtime piece instances and discrete hex rotation.

A piece wraps a catalog shape with a 60-degree rotation state, a colour index
and an optional anchor. Rotation is about the shape's origin, so the origin
cell (the placement reference) stays fixed as the piece turns.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import uuid4

from hexfit.puzzle.shapes import PieceShape
from hexfit.puzzle.types import Hex

ROTATION_STEP = 60
ROTATIONS: tuple[int, ...] = (0, 60, 120, 180, 240, 300)


def rotate_hex(h: tuple[int, int], steps: int) -> Hex:
    """Rotate h about the origin by steps × 60 degrees.

    Positive steps turn clockwise, negative counter-clockwise. Works in cube
    coordinates with y = -q - r; k clockwise steps equal 6 - k
    counter-clockwise steps, and every result keeps its distance from the
    origin.
    """
    q, r = h
    y = -q - r
    k = steps % 6
    if k == 1:
        return Hex(-r, -y)
    if k == 2:
        return Hex(y, q)
    if k == 3:
        return Hex(-q, -r)
    if k == 4:
        return Hex(r, y)
    if k == 5:
        return Hex(-y, -q)
    return Hex(q, r)


def rotate_cells(cells: Iterable[tuple[int, int]], steps: int) -> tuple[Hex, ...]:
    return tuple(rotate_hex(c, steps) for c in cells)


def normalize_cells(cells: Iterable[tuple[int, int]]) -> frozenset[Hex]:
    """Translate cells so the minimum q and r are both 0."""
    cells = list(cells)
    if not cells:
        return frozenset()
    min_q = min(q for q, _r in cells)
    min_r = min(r for _q, r in cells)
    return frozenset(Hex(q - min_q, r - min_r) for q, r in cells)


def new_piece_id() -> str:
    return f"piece_{uuid4().hex[:12]}"


class Piece:
    """A shape offered to the player: rotation, colour and placement anchor."""

    def __init__(
        self,
        shape: PieceShape,
        color_index: int = 0,
        piece_id: str | None = None,
    ) -> None:
        self.id = piece_id or new_piece_id()
        self.shape = shape
        self.color_index = color_index
        self.anchor: Hex | None = None
        self._rotation = 0
        self._cells: tuple[Hex, ...] = shape.cells

    @property
    def rotation(self) -> int:
        return self._rotation

    @property
    def cells(self) -> tuple[Hex, ...]:
        """Current relative cells, with rotation applied."""
        return self._cells

    @property
    def size(self) -> int:
        return len(self._cells)

    @property
    def category(self) -> str:
        return self.shape.category.value

    # ── Rotation ──

    def rotate_clockwise(self) -> None:
        self._rotation = (self._rotation + ROTATION_STEP) % 360
        self._cells = rotate_cells(self._cells, 1)

    def rotate_counter_clockwise(self) -> None:
        self._rotation = (self._rotation - ROTATION_STEP) % 360
        self._cells = rotate_cells(self._cells, -1)

    def set_rotation(self, degrees: int) -> None:
        if degrees % ROTATION_STEP != 0:
            raise ValueError(f"Rotation must be a multiple of 60, got {degrees}")
        self._rotation = degrees % 360
        self._cells = rotate_cells(self.shape.cells, self._rotation // ROTATION_STEP)

    def reset(self) -> None:
        self.anchor = None
        self._rotation = 0
        self._cells = self.shape.cells

    # ── Geometry ──

    def world_positions(self, center: tuple[int, int]) -> list[Hex]:
        """Absolute board coordinates of every cell, offset by center."""
        cq, cr = center
        return [Hex(cq + q, cr + r) for q, r in self._cells]

    def bounds(self) -> tuple[int, int, int, int]:
        """(min_q, max_q, min_r, max_r) of the current cells."""
        qs = [c.q for c in self._cells]
        rs = [c.r for c in self._cells]
        return min(qs), max(qs), min(rs), max(rs)

    def is_equivalent(self, other: Piece) -> bool:
        """True if other is congruent under some rotation, ignoring position."""
        if self.size != other.size:
            return False
        mine = normalize_cells(self._cells)
        return any(
            normalize_cells(rotate_cells(other.cells, steps)) == mine
            for steps in range(6)
        )

    def clone(self) -> Piece:
        cloned = Piece(self.shape, self.color_index, piece_id=self.id)
        cloned._rotation = self._rotation
        cloned._cells = self._cells
        cloned.anchor = self.anchor
        return cloned

    def __repr__(self) -> str:
        return (
            f"Piece(id={self.id!r}, shape={self.shape.id!r}, "
            f"rotation={self._rotation}, anchor={self.anchor})"
        )
