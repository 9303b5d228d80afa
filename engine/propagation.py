"""Candidate bookkeeping: legal digits per cell, single-digit elimination after a placement, and board seeding when a game phase starts."""

from __future__ import annotations

import logging

from types_sudoku import Board, Cell
from .board_core import (
    DIGITS,
    all_cells,
    for_each_cell,
    is_empty,
    is_filled,
    peers,
    unit_cells_box,
    unit_cells_col,
    which_box,
)

logger = logging.getLogger(__name__)


def row_values(board: Board, r: int) -> set[int]:
    return {cell.value for cell in board[r]} - {None}


def col_values(board: Board, c: int) -> set[int]:
    return {board[rr][cc].value for rr, cc in unit_cells_col(c)} - {None}


def box_values(board: Board, r: int, c: int) -> set[int]:
    return {board[rr][cc].value for rr, cc in unit_cells_box(which_box(r, c))} - {None}


def legal_digits(board: Board, r: int, c: int) -> set[int]:
    """Digits 1..9 not already placed in the row, column or box of (r, c)."""
    used = row_values(board, r) | col_values(board, c) | box_values(board, r, c)
    return set(DIGITS) - used


def propagate_after_placement(board: Board, r: int, c: int, digit: int) -> None:
    """Remove ``digit`` from the candidates of every non-initial peer of (r, c). Mutates ``board``.

    Only the placed digit is eliminated; nothing cascades from here.
    """
    for pr, pc in peers(r, c):
        cell = board[pr][pc]
        if not cell.is_initial:
            cell.candidates.discard(digit)


def is_complete(board: Board) -> bool:
    """True when every cell holds a value; correctness is not checked."""
    return all_cells(board, is_filled)


def seed_candidates(board: Board, full: bool = False) -> None:
    """Mark filled cells as clues and fill the notes of every empty cell. Mutates ``board``.

    With ``full`` every empty cell gets all nine digits, otherwise only its legal digits.
    """

    def seed(cell: Cell, r: int, c: int, b: Board) -> None:
        if is_empty(cell):
            cell.candidates = set(DIGITS) if full else legal_digits(b, r, c)
        else:
            cell.is_initial = True
            cell.candidates = set()

    for_each_cell(board, seed)
    logger.debug("seeded candidates (full=%s)", full)
