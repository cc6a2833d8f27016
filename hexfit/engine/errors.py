from __future__ import annotations


class HexfitError(Exception):
    """Base class for hexfit errors."""
    pass


class InvalidShapeError(HexfitError, ValueError):
    """A piece shape is malformed (no cells, duplicate cells, bad size)."""
    pass


class BoardFullError(HexfitError):
    """No empty cell is left, so no piece can ever be placed."""
    pass


class InvalidPlacementError(HexfitError):
    """Placement is not legal on the current board."""

    def __init__(
        self,
        message: str,
        piece_id: str | None = None,
        anchor: tuple[int, int] | None = None,
    ):
        self.message = message
        self.piece_id = piece_id
        self.anchor = anchor
        super().__init__(message)


class PieceNotFoundError(HexfitError):
    """The referenced piece is not in the tray."""

    def __init__(self, piece_id: str):
        self.piece_id = piece_id
        super().__init__(f"Piece {piece_id!r} is not in the tray")


class GameOverError(HexfitError):
    """Action submitted to a finished game."""
    pass


class SnapshotError(HexfitError):
    """A saved game snapshot cannot be restored."""
    pass
