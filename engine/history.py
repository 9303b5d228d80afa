"""Snapshot-based undo stack."""

from __future__ import annotations

import logging

from types_sudoku import Board
from .board_core import clone_board

logger = logging.getLogger(__name__)


class History:
    """Deep board snapshots, newest last.

    ``limit`` caps the number of snapshots kept; the oldest one is dropped on overflow.
    """

    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("history limit must be positive")
        self.limit = limit
        self._stack: list[Board] = []

    def save(self, board: Board) -> None:
        self._stack.append(clone_board(board))
        if self.limit is not None and len(self._stack) > self.limit:
            del self._stack[0]

    def undo(self) -> Board | None:
        """Pop the newest snapshot, or return None when there is nothing to undo."""
        if not self._stack:
            return None
        board = self._stack.pop()
        logger.debug("undo: %d snapshot(s) left", len(self._stack))
        return clone_board(board)

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)
