from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

SNAPSHOT_VERSION = 1

# --- Status ---
class GameStatus(str, Enum):
    PLAYING = "playing"
    GAME_OVER = "game_over"

# --- Event ---
class Event(BaseModel):
    event_type: str
    payload: dict = Field(default_factory=dict)

# --- Views ---
class LineView(BaseModel):
    axis: str
    value: int
    cells: list[tuple[int, int]]

class TrayPiece(BaseModel):
    piece_id: str
    shape_id: str
    name: str
    category: str
    cells: list[tuple[int, int]]
    color_index: int
    rotation: int = 0

class PlacementPreview(BaseModel):
    piece_id: str
    anchor: tuple[int, int]
    valid: bool
    cells: list[tuple[int, int]] = Field(default_factory=list)
    completed_lines: list[LineView] = Field(default_factory=list)

class PlacementResult(BaseModel):
    piece_id: str
    anchor: tuple[int, int]
    cells: list[tuple[int, int]]
    points: int
    lines_cleared: list[LineView] = Field(default_factory=list)
    cleared_piece_ids: list[str] = Field(default_factory=list)
    combo: int = 0
    score: int
    new_set_dealt: bool = False
    game_over: bool = False
    events: list[Event] = Field(default_factory=list)

class Hint(BaseModel):
    piece_id: str
    anchor: tuple[int, int]
    rotation: int = 0

# --- Snapshot ---
class SavedCell(BaseModel):
    q: int
    r: int
    color_index: int | None = None

class SavedPiece(BaseModel):
    piece_id: str
    shape_id: str
    name: str = ""
    cells: list[tuple[int, int]] = Field(default_factory=list)  # unrotated shape cells
    color_index: int = 0
    rotation: int = Field(default=0, ge=0, lt=360, multiple_of=60)
    used: bool = False

class GameSnapshot(BaseModel):
    version: int = SNAPSHOT_VERSION
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    board_radius: int = Field(ge=1)
    grid: list[SavedCell] = Field(default_factory=list)
    pieces: list[SavedPiece] = Field(default_factory=list)
    score: int = 0
    high_score: int = 0
    move_count: int = 0
    lines_cleared: int = 0
    consecutive_clears: int = 0
    non_clearing_placements: int = 0
    status: GameStatus = GameStatus.PLAYING
