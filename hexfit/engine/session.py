from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from hexfit.config import Settings
from hexfit.config import settings as default_settings
from hexfit.engine.errors import (
    BoardFullError,
    GameOverError,
    InvalidPlacementError,
    InvalidShapeError,
    PieceNotFoundError,
    SnapshotError,
)
from hexfit.engine.models import (
    SNAPSHOT_VERSION,
    Event,
    GameSnapshot,
    GameStatus,
    Hint,
    LineView,
    PlacementPreview,
    PlacementResult,
    SavedCell,
    SavedPiece,
    TrayPiece,
)
from hexfit.puzzle import shapes
from hexfit.puzzle.board import Board
from hexfit.puzzle.game_over import Move, find_first_placeable_move, is_game_over
from hexfit.puzzle.generator import GenerationConfig, PieceGenerator
from hexfit.puzzle.pieces import Piece
from hexfit.puzzle.placement import (
    can_place_piece,
    find_valid_placements,
    placement_cells,
    placement_score,
)
from hexfit.puzzle.scoring import ScoreKeeper
from hexfit.puzzle.solver import suggest_best_placement
from hexfit.puzzle.types import Hex, Line

logger = logging.getLogger(__name__)


def _line_view(line: Line) -> LineView:
    return LineView(axis=line.axis.value, value=line.value, cells=list(line.cells))


def generation_config_from_settings(settings: Settings) -> GenerationConfig:
    return GenerationConfig(
        use_procedural_generation=settings.use_procedural_generation,
        use_adaptive_sizing=settings.use_adaptive_sizing,
        guarantee_solvability=settings.guarantee_solvability,
        require_round_solution=settings.require_round_solution,
        max_generation_attempts=settings.max_generation_attempts,
    )


class PuzzleSession:
    """
    Orchestrates a single puzzle game.

    Responsibilities:
    - Deal piece sets into the tray and refill it when it empties
    - Re-validate and commit placements against the current board
    - Clear completed lines and keep score and combo
    - Detect game over
    - Save and restore snapshots
    """

    def __init__(
        self,
        settings: Settings | None = None,
        seed: int | None = None,
        generator: PieceGenerator | None = None,
    ) -> None:
        self.settings = settings or default_settings
        if seed is None:
            seed = self.settings.random_seed
        self.board = Board(self.settings.board_radius)
        self.generator = generator or PieceGenerator(
            generation_config_from_settings(self.settings), seed=seed,
        )
        self.scores = ScoreKeeper()
        self.status = GameStatus.PLAYING
        self.move_count = 0
        self.lines_cleared = 0
        self._dealt: list[Piece] = []
        self._used: set[str] = set()

    # ------------------------------------------------------------------ #
    #  Lifecycle
    # ------------------------------------------------------------------ #

    def new_game(self) -> list[Event]:
        """Clear the board in place, reset scores and deal the first set."""
        self.board.reset()
        self.scores.reset()
        self.status = GameStatus.PLAYING
        self.move_count = 0
        self.lines_cleared = 0
        self._dealt = []
        self._used = set()

        events = [
            Event(event_type="game_started", payload={
                "board_radius": self.board.radius,
                "tray_size": self.settings.tray_size,
            }),
        ]
        events.extend(self._deal())
        return events

    @property
    def tray(self) -> list[Piece]:
        """Offered pieces not yet placed, in deal order."""
        return [p for p in self._dealt if p.id not in self._used]

    @property
    def score(self) -> int:
        return self.scores.score

    @property
    def is_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    def get_piece(self, piece_id: str) -> Piece:
        for piece in self.tray:
            if piece.id == piece_id:
                return piece
        raise PieceNotFoundError(piece_id)

    def tray_view(self) -> list[TrayPiece]:
        return [
            TrayPiece(
                piece_id=p.id,
                shape_id=p.shape.id,
                name=p.shape.name,
                category=p.category,
                cells=list(p.cells),
                color_index=p.color_index,
                rotation=p.rotation,
            )
            for p in self.tray
        ]

    # ------------------------------------------------------------------ #
    #  Player actions
    # ------------------------------------------------------------------ #

    def rotate_piece(self, piece_id: str, clockwise: bool = True) -> Piece:
        if self.is_over:
            raise GameOverError("Game is over")
        piece = self.get_piece(piece_id)
        if clockwise:
            piece.rotate_clockwise()
        else:
            piece.rotate_counter_clockwise()
        return piece

    def preview(self, piece_id: str, anchor: tuple[int, int]) -> PlacementPreview:
        """What placing piece_id on anchor would do, without changing anything."""
        piece = self.get_piece(piece_id)
        cells = placement_cells(piece, anchor)
        valid = not self.is_over and can_place_piece(piece, anchor, self.board)
        lines = self.board.detect_potential_complete_lines(cells) if valid else []
        return PlacementPreview(
            piece_id=piece_id,
            anchor=tuple(anchor),
            valid=valid,
            cells=list(cells),
            completed_lines=[_line_view(line) for line in lines],
        )

    def validate_placement(self, piece_id: str, anchor: tuple[int, int]) -> str | None:
        """Return error message or None if the placement is legal right now."""
        if self.is_over:
            return "Game is over"
        if piece_id not in {p.id for p in self.tray}:
            return f"Piece {piece_id!r} is not in the tray"
        piece = self.get_piece(piece_id)
        if not can_place_piece(piece, anchor, self.board):
            return f"Piece {piece_id!r} cannot be placed at {tuple(anchor)}"
        return None

    def place_piece(self, piece_id: str, anchor: tuple[int, int]) -> PlacementResult:
        """Commit a placement.

        Legality is checked against the board as it is now, never against an
        earlier preview.
        """
        if self.is_over:
            raise GameOverError("Game is over")
        piece = self.get_piece(piece_id)
        anchor = Hex(*anchor)
        error = self.validate_placement(piece_id, anchor)
        if error:
            raise InvalidPlacementError(error, piece_id=piece_id, anchor=anchor)

        cells = placement_cells(piece, anchor)
        self.board.place_cells(cells, piece.id, piece.color_index)
        piece.anchor = anchor
        self._used.add(piece.id)
        self.move_count += 1

        points = self.scores.record_placement(len(cells))
        events = [
            Event(event_type="piece_placed", payload={
                "piece_id": piece.id,
                "shape_id": piece.shape.id,
                "anchor": list(anchor),
                "cells": [list(c) for c in cells],
            }),
        ]

        lines = self.board.detect_complete_lines()
        cleared_piece_ids: set[str] = set()
        if lines:
            cleared_piece_ids = self.board.clear_lines(lines)
            line_points = self.scores.record_clear(len(lines))
            points += line_points
            self.lines_cleared += len(lines)
            events.append(Event(event_type="lines_cleared", payload={
                "lines": len(lines),
                "points": line_points,
                "combo": self.scores.combo,
                "piece_ids": sorted(cleared_piece_ids),
            }))
        else:
            self.scores.record_no_clear()

        new_set_dealt = False
        if not self.tray:
            events.extend(self._deal())
            new_set_dealt = bool(self.tray)
        else:
            events.extend(self._check_game_over())

        return PlacementResult(
            piece_id=piece.id,
            anchor=anchor,
            cells=list(cells),
            points=points,
            lines_cleared=[_line_view(line) for line in lines],
            cleared_piece_ids=sorted(cleared_piece_ids),
            combo=self.scores.combo,
            score=self.scores.score,
            new_set_dealt=new_set_dealt,
            game_over=self.is_over,
            events=events,
        )

    def hint(self, deep: bool = False) -> Hint | None:
        """Suggest a placement from the tray.

        The quick hint ranks anchors of each piece in its current rotation by
        placement_score. The deep hint also tries rotations and keeps the rest
        of the tray solvable, which is much slower.
        """
        if self.is_over:
            return None
        tray = self.tray
        if deep:
            best: tuple[float, Hint] | None = None
            for piece in tray:
                others = [p for p in tray if p.id != piece.id]
                suggestion = suggest_best_placement(piece, self.board, others)
                if suggestion is None:
                    continue
                if best is None or suggestion.score > best[0]:
                    best = (suggestion.score, Hint(
                        piece_id=piece.id,
                        anchor=suggestion.anchor,
                        rotation=suggestion.rotation,
                    ))
            if best is not None:
                return best[1]

        quick: tuple[int, Hint] | None = None
        for piece in tray:
            for anchor in find_valid_placements(piece, self.board):
                value = placement_score(piece, anchor, self.board)
                if quick is None or value > quick[0]:
                    quick = (value, Hint(piece_id=piece.id, anchor=anchor, rotation=piece.rotation))
        return quick[1] if quick else None

    # ------------------------------------------------------------------ #
    #  Dealing and game over
    # ------------------------------------------------------------------ #

    def _deal(self) -> list[Event]:
        try:
            pieces = self.generator.generate_piece_set(self.board, self.settings.tray_size)
        except BoardFullError:
            return self._end_game(reason="board_full")

        self._dealt = pieces
        self._used = set()
        logger.debug(f"Dealt pieces: {[p.shape.id for p in pieces]}")
        events = [
            Event(event_type="pieces_dealt", payload={
                "pieces": [{"piece_id": p.id, "shape_id": p.shape.id} for p in pieces],
            }),
        ]
        events.extend(self._check_game_over())
        return events

    def _check_game_over(self) -> list[Event]:
        if self.is_over:
            return []
        if is_game_over(self.tray, self.board):
            return self._end_game(reason="no_moves")
        return []

    def _end_game(self, reason: str) -> list[Event]:
        self.status = GameStatus.GAME_OVER
        logger.info(
            f"Game over ({reason}): score={self.scores.score} "
            f"moves={self.move_count} lines={self.lines_cleared}"
        )
        return [
            Event(event_type="game_over", payload={
                "reason": reason,
                "score": self.scores.score,
                "high_score": self.scores.high_score,
                "move_count": self.move_count,
            }),
        ]

    def first_move(self) -> Move | None:
        """First legal (piece, anchor) in the tray, or None."""
        return find_first_placeable_move(self.tray, self.board)

    # ------------------------------------------------------------------ #
    #  Snapshots
    # ------------------------------------------------------------------ #

    def to_snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            board_radius=self.board.radius,
            grid=[
                SavedCell(q=cell.coord.q, r=cell.coord.r, color_index=cell.color_index)
                for cell in self.board.all_cells()
                if cell.occupied
            ],
            pieces=[
                SavedPiece(
                    piece_id=p.id,
                    shape_id=p.shape.id,
                    name=p.shape.name,
                    cells=list(p.shape.cells),
                    color_index=p.color_index,
                    rotation=p.rotation,
                    used=p.id in self._used,
                )
                for p in self._dealt
            ],
            score=self.scores.score,
            high_score=self.scores.high_score,
            move_count=self.move_count,
            lines_cleared=self.lines_cleared,
            consecutive_clears=self.scores.consecutive_clears,
            non_clearing_placements=self.scores.non_clearing_placements,
            status=self.status,
        )

    def dumps(self) -> str:
        return self.to_snapshot().model_dump_json()

    @classmethod
    def loads(
        cls,
        data: str,
        settings: Settings | None = None,
        seed: int | None = None,
        now: datetime | None = None,
    ) -> PuzzleSession:
        try:
            snapshot = GameSnapshot.model_validate_json(data)
        except ValidationError as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e
        return cls.from_snapshot(snapshot, settings=settings, seed=seed, now=now)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: GameSnapshot,
        settings: Settings | None = None,
        seed: int | None = None,
        now: datetime | None = None,
    ) -> PuzzleSession:
        """Rebuild a session: cells via set_occupied, pieces via the catalog."""
        settings = settings or default_settings
        if snapshot.version != SNAPSHOT_VERSION:
            raise SnapshotError(
                f"Snapshot version {snapshot.version} is not supported "
                f"(expected {SNAPSHOT_VERSION})"
            )

        now = now or datetime.now(timezone.utc)
        saved_at = snapshot.timestamp
        if saved_at.tzinfo is None:
            saved_at = saved_at.replace(tzinfo=timezone.utc)
        if now - saved_at > timedelta(days=settings.snapshot_max_age_days):
            raise SnapshotError(f"Snapshot from {saved_at.isoformat()} has expired")

        session = cls(
            settings.with_overrides(board_radius=snapshot.board_radius),
            seed=seed,
        )
        for saved_cell in snapshot.grid:
            coord = (saved_cell.q, saved_cell.r)
            if not session.board.set_occupied(coord, True, None, saved_cell.color_index):
                raise SnapshotError(f"Saved cell {coord} is outside the board")

        for saved in snapshot.pieces:
            piece = Piece(_restore_shape(saved), saved.color_index, piece_id=saved.piece_id)
            piece.set_rotation(saved.rotation)
            session._dealt.append(piece)
            if saved.used:
                session._used.add(piece.id)

        session.scores.score = snapshot.score
        session.scores.high_score = max(snapshot.high_score, snapshot.score)
        session.scores.consecutive_clears = snapshot.consecutive_clears
        session.scores.non_clearing_placements = snapshot.non_clearing_placements
        session.move_count = snapshot.move_count
        session.lines_cleared = snapshot.lines_cleared
        session.status = snapshot.status

        if not session.is_over:
            if not session.tray:
                session._deal()
            else:
                session._check_game_over()
        logger.debug(
            f"Restored game: score={session.score}, {len(snapshot.grid)} cells, "
            f"{len(session.tray)} pieces remaining"
        )
        return session


def _restore_shape(saved: SavedPiece) -> shapes.PieceShape:
    shape = shapes.get_shape(saved.shape_id)
    if shape is not None:
        return shape
    if not saved.cells:
        raise SnapshotError(f"Unknown shape {saved.shape_id!r} with no saved cells")
    palette = list(shapes.COLORS.values())
    try:
        return shapes.create_custom_shape(
            saved.shape_id,
            saved.name or "Procedural Shape",
            saved.cells,
            color=palette[saved.color_index % shapes.COLOR_COUNT],
        )
    except InvalidShapeError as e:
        raise SnapshotError(f"Saved shape {saved.shape_id!r} is invalid: {e}") from e
