"""Domain types for the hex puzzle: axial coordinates, lines, size categories."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class Hex(NamedTuple):
    """Axial hex coordinate. The cube coordinate s is derived, never stored."""

    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def __add__(self, other: tuple[int, int]) -> Hex:  # type: ignore[override]
        return Hex(self.q + other[0], self.r + other[1])

    def __sub__(self, other: tuple[int, int]) -> Hex:
        return Hex(self.q - other[0], self.r - other[1])


ORIGIN = Hex(0, 0)


class LineAxis(str, Enum):
    HORIZONTAL = "horizontal"          # constant r
    DIAGONAL_NE_SW = "diagonal_ne_sw"  # constant q
    DIAGONAL_NW_SE = "diagonal_nw_se"  # constant s


class ShapeCategory(str, Enum):
    SINGLE = "single"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    LINE_CLEAR = "line_clear"


@dataclass(frozen=True)
class Line:
    """A full run of cells along one axis family, derived from board topology."""

    axis: LineAxis
    value: int
    cells: tuple[Hex, ...]

    def __len__(self) -> int:
        return len(self.cells)


# Axial hex directions: E, NE, NW, W, SW, SE
HEX_DIRECTIONS: tuple[Hex, ...] = (
    Hex(1, 0), Hex(1, -1), Hex(0, -1), Hex(-1, 0), Hex(-1, 1), Hex(0, 1),
)


def hex_add(a: tuple[int, int], b: tuple[int, int]) -> Hex:
    return Hex(a[0] + b[0], a[1] + b[1])


def hex_subtract(a: tuple[int, int], b: tuple[int, int]) -> Hex:
    return Hex(a[0] - b[0], a[1] - b[1])


def hex_equals(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return a[0] == b[0] and a[1] == b[1]


def hex_distance(a: tuple[int, int], b: tuple[int, int]) -> int:
    """Number of steps between two hexes."""
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return (abs(dq) + abs(dq + dr) + abs(dr)) // 2


def hex_neighbor(h: tuple[int, int], direction: int) -> Hex:
    d = HEX_DIRECTIONS[direction % 6]
    return Hex(h[0] + d.q, h[1] + d.r)


def hex_neighbors(h: tuple[int, int]) -> list[Hex]:
    """Return the 6 axial-coordinate neighbors of h, in direction order."""
    return [Hex(h[0] + d.q, h[1] + d.r) for d in HEX_DIRECTIONS]


def hex_to_key(h: tuple[int, int]) -> str:
    return f"{h[0]},{h[1]}"


def key_to_hex(key: str) -> Hex:
    q, r = key.split(",")
    return Hex(int(q), int(r))
