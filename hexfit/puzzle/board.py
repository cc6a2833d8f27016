"""Board state management for the hex puzzle.

The board is a fixed-radius hexagonal lattice. It tracks which cells are
occupied and by which piece, detects complete lines along the three axis
families, and clears them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hexfit.puzzle.types import Hex, Line, LineAxis, hex_neighbors


@dataclass
class Cell:
    """A single board cell. Only the occupancy fields ever change."""

    coord: Hex
    occupied: bool = False
    piece_id: str | None = None
    color_index: int | None = None

    def clear(self) -> None:
        self.occupied = False
        self.piece_id = None
        self.color_index = None


def expected_cell_count(radius: int) -> int:
    return 3 * radius * radius + 3 * radius + 1


class Board:
    """Hexagonal grid of radius R holding 3R² + 3R + 1 cells."""

    def __init__(self, radius: int = 4) -> None:
        if radius < 1:
            raise ValueError(f"Board radius must be >= 1, got {radius}")
        self._radius = radius
        self._cells: dict[Hex, Cell] = {}
        for q in range(-radius, radius + 1):
            r1 = max(-radius, -q - radius)
            r2 = min(radius, -q + radius)
            for r in range(r1, r2 + 1):
                coord = Hex(q, r)
                self._cells[coord] = Cell(coord=coord)

    # ── Topology ──

    @property
    def radius(self) -> int:
        return self._radius

    @property
    def cell_count(self) -> int:
        return len(self._cells)

    def is_valid_coordinate(self, coord: tuple[int, int]) -> bool:
        q, r = coord
        s = -q - r
        return abs(q) <= self._radius and abs(r) <= self._radius and abs(s) <= self._radius

    def get_cell(self, coord: tuple[int, int]) -> Cell | None:
        return self._cells.get(Hex(*coord))

    def all_cells(self) -> list[Cell]:
        return list(self._cells.values())

    def neighbors(self, coord: tuple[int, int]) -> list[Hex]:
        """Return the in-bounds neighbors of coord (up to 6)."""
        return [n for n in hex_neighbors(coord) if self.is_valid_coordinate(n)]

    def line(self, axis: LineAxis, value: int) -> Line:
        """Build the line of the given axis family at the given axis value.

        Values outside [-R, R] produce an empty line.
        """
        radius = self._radius
        if abs(value) > radius:
            return Line(axis=axis, value=value, cells=())
        cells: list[Hex] = []
        if axis == LineAxis.HORIZONTAL:
            r = value
            for q in range(max(-radius, -r - radius), min(radius, -r + radius) + 1):
                cells.append(Hex(q, r))
        elif axis == LineAxis.DIAGONAL_NE_SW:
            q = value
            for r in range(max(-radius, -q - radius), min(radius, -q + radius) + 1):
                cells.append(Hex(q, r))
        else:
            s = value
            for q in range(max(-radius, -s - radius), min(radius, -s + radius) + 1):
                r = -s - q
                if abs(r) <= radius:
                    cells.append(Hex(q, r))
        return Line(axis=axis, value=value, cells=tuple(cells))

    def lines(self) -> list[Line]:
        """Every line of the board: horizontal, then NE-SW, then NW-SE."""
        return [
            self.line(axis, value)
            for axis in LineAxis
            for value in range(-self._radius, self._radius + 1)
        ]

    # ── Occupancy ──

    def is_occupied(self, coord: tuple[int, int]) -> bool:
        cell = self.get_cell(coord)
        return cell.occupied if cell is not None else False

    def set_occupied(
        self,
        coord: tuple[int, int],
        occupied: bool,
        piece_id: str | None = None,
        color_index: int | None = None,
    ) -> bool:
        """Set a cell's occupancy. Returns False if coord is off the board."""
        cell = self.get_cell(coord)
        if cell is None:
            return False
        if occupied:
            cell.occupied = True
            cell.piece_id = piece_id
            cell.color_index = color_index
        else:
            cell.clear()
        return True

    def can_place_cells(self, coords: Iterable[tuple[int, int]]) -> bool:
        seen: set[Hex] = set()
        for coord in coords:
            h = Hex(*coord)
            if h in seen:
                return False
            seen.add(h)
            if not self.is_valid_coordinate(h) or self.is_occupied(h):
                return False
        return True

    def place_cells(
        self,
        coords: Iterable[tuple[int, int]],
        piece_id: str | None,
        color_index: int | None = None,
    ) -> bool:
        """Occupy every coordinate, or none of them if any is invalid or taken."""
        coords = [Hex(*c) for c in coords]
        if not self.can_place_cells(coords):
            return False
        for coord in coords:
            self.set_occupied(coord, True, piece_id, color_index)
        return True

    def remove_by_piece_id(self, piece_id: str) -> set[Hex]:
        """Free every cell owned by piece_id. Returns the freed coordinates."""
        removed: set[Hex] = set()
        for cell in self._cells.values():
            if cell.piece_id == piece_id:
                cell.clear()
                removed.add(cell.coord)
        return removed

    # ── Lines ──

    def detect_complete_lines(self) -> list[Line]:
        return [line for line in self.lines() if self._is_line_complete(line)]

    def detect_potential_complete_lines(
        self, extra_cells: Iterable[tuple[int, int]],
    ) -> list[Line]:
        """Lines that would be complete if extra_cells were also occupied."""
        extra = {Hex(*c) for c in extra_cells}
        return [line for line in self.lines() if self._is_line_complete(line, extra)]

    def clear_lines(self, lines: Iterable[Line]) -> set[str]:
        """Empty every cell of the given lines.

        Returns the ids of pieces that lost at least one cell.
        """
        cleared_piece_ids: set[str] = set()
        for line in lines:
            for coord in line.cells:
                cell = self.get_cell(coord)
                if cell is None:
                    continue
                if cell.piece_id is not None:
                    cleared_piece_ids.add(cell.piece_id)
                cell.clear()
        return cleared_piece_ids

    def _is_line_complete(self, line: Line, extra: set[Hex] | None = None) -> bool:
        if not line.cells:
            return False
        for coord in line.cells:
            if self.is_occupied(coord):
                continue
            if extra is not None and coord in extra:
                continue
            return False
        return True

    # ── Aggregates ──

    def fullness_percentage(self) -> float:
        """Fraction of occupied cells, 0.0 to 1.0."""
        if not self._cells:
            return 0.0
        occupied = sum(1 for cell in self._cells.values() if cell.occupied)
        return occupied / len(self._cells)

    def is_full(self) -> bool:
        return all(cell.occupied for cell in self._cells.values())

    def empty_cells(self) -> list[Hex]:
        return [cell.coord for cell in self._cells.values() if not cell.occupied]

    def occupied_cells(self) -> list[Hex]:
        return [cell.coord for cell in self._cells.values() if cell.occupied]

    # ── Lifecycle ──

    def clone(self) -> Board:
        cloned = Board(self._radius)
        for coord, cell in self._cells.items():
            if cell.occupied:
                cloned.set_occupied(coord, True, cell.piece_id, cell.color_index)
        return cloned

    def reset(self) -> None:
        for cell in self._cells.values():
            cell.clear()

    def __repr__(self) -> str:
        return (
            f"Board(radius={self._radius}, "
            f"occupied={len(self.occupied_cells())}/{self.cell_count})"
        )
