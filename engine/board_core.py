"""Core board utilities used by the phase handlers and hint dispatcher: index math, square labels, peers, unit iterators, traversal, conversions, and clue loading."""

# board_core.py
# Board is a 9x9 list of lists of Cell. Rows/cols are 0-based here; the square
# label used by the solver oracle and hint producers is 'A1'..'I9'
# (rows A-I, cols 1-9).

from __future__ import annotations

from typing import Callable, Iterator, Mapping

from types_sudoku import Board, Cell, CandidateMap, Position, Solution, Values

ROWS = "ABCDEFGHI"
COLS = "123456789"
DIGITS = range(1, 10)
EMPTY_CHARS = ".0"

CellCallback = Callable[[Cell, int, int, Board], None]
CellPredicate = Callable[[Cell, int, int, Board], bool]


class BoardContractError(ValueError):
    """Raised when a caller passes coordinates, digits or labels outside the board's domain."""


def in_bounds(r: int, c: int) -> bool:
    return 0 <= r <= 8 and 0 <= c <= 8


def check_position(r: int, c: int) -> None:
    if not (isinstance(r, int) and isinstance(c, int)) or not in_bounds(r, c):
        raise BoardContractError(f"position ({r}, {c}) is outside the 9x9 board")


def check_digit(d) -> int:
    """Coerce a hint/API digit ('5' or 5) to int and check it is 1..9."""
    try:
        value = int(d)
    except (TypeError, ValueError):
        raise BoardContractError(f"digit {d!r} is not a number") from None
    if value not in DIGITS:
        raise BoardContractError(f"digit {value} is outside 1..9")
    return value


def rc_to_square(r: int, c: int) -> str:
    return f"{ROWS[r]}{COLS[c]}"


def square_to_rc(square: str) -> Position:
    if not isinstance(square, str) or len(square) != 2:
        raise BoardContractError(f"square {square!r} is not a label like 'A1'")
    r = ROWS.find(square[0].upper())
    c = COLS.find(square[1])
    if r < 0 or c < 0:
        raise BoardContractError(f"square {square!r} is not a label like 'A1'")
    return (r, c)


def create_empty_board() -> Board:
    return [[Cell() for _ in range(9)] for _ in range(9)]


def clone_board(board: Board) -> Board:
    return [[cell.copy() for cell in row] for row in board]


def which_box(r: int, c: int) -> int:
    """0-based box index, numbered left-to-right, top-to-bottom."""
    return 3 * (r // 3) + (c // 3)


def unit_cells_row(r: int) -> list[Position]:
    return [(r, c) for c in range(9)]


def unit_cells_col(c: int) -> list[Position]:
    return [(r, c) for r in range(9)]


def unit_cells_box(b: int) -> list[Position]:
    r0 = 3 * (b // 3)
    c0 = 3 * (b % 3)
    return [(r0 + i, c0 + j) for i in range(3) for j in range(3)]


def peers(r: int, c: int) -> set[Position]:
    """Return the set of peer coordinates for a given cell (same row, column, and 3x3 box)."""
    ps = set(unit_cells_row(r)) | set(unit_cells_col(c)) | set(unit_cells_box(which_box(r, c)))
    ps.discard((r, c))
    return ps


# ---- traversal ----


def iter_positions() -> Iterator[Position]:
    for r in range(9):
        for c in range(9):
            yield (r, c)


def for_each_cell(board: Board, callback: CellCallback) -> None:
    for r, c in iter_positions():
        callback(board[r][c], r, c, board)


def find_cells(board: Board, predicate: CellPredicate) -> list[Position]:
    return [(r, c) for r, c in iter_positions() if predicate(board[r][c], r, c, board)]


def count_cells(board: Board, predicate: CellPredicate) -> int:
    return len(find_cells(board, predicate))


def all_cells(board: Board, predicate: CellPredicate) -> bool:
    return all(predicate(board[r][c], r, c, board) for r, c in iter_positions())


def is_empty(cell: Cell, *_) -> bool:
    return cell.value is None


def is_filled(cell: Cell, *_) -> bool:
    return cell.value is not None


def has_value(digit: int) -> CellPredicate:
    return lambda cell, *_: cell.value == digit


# ---- counts / lookups ----


def number_counts(board: Board) -> dict[int, int]:
    counts = {d: 0 for d in DIGITS}
    for r, c in iter_positions():
        v = board[r][c].value
        if v is not None:
            counts[v] += 1
    return counts


def cells_with_value(board: Board, digit: int) -> list[Position]:
    return find_cells(board, has_value(digit))


def is_correct_placement(solution: Solution | None, r: int, c: int, digit: int) -> bool:
    if not solution:
        return True  # nothing to compare against
    return solution.get(rc_to_square(r, c)) == digit


# ---- conversions ----


def board_to_string(board: Board) -> str:
    return "".join(str(cell.value) if cell.value is not None else "." for row in board for cell in row)


def board_to_values(board: Board) -> Values:
    return {
        rc_to_square(r, c): board[r][c].value
        for r, c in iter_positions()
        if board[r][c].value is not None
    }


def board_to_candidates(board: Board) -> CandidateMap:
    """Candidate sets of empty cells, skipping cells with no notes at all."""
    return {
        rc_to_square(r, c): set(board[r][c].candidates)
        for r, c in iter_positions()
        if board[r][c].value is None and board[r][c].candidates
    }


def initial_clues(board: Board) -> Values:
    return {
        rc_to_square(r, c): board[r][c].value
        for r, c in iter_positions()
        if board[r][c].is_initial and board[r][c].value is not None
    }


def load_puzzle_string(board: Board, text: str) -> Board:
    """Load 81 characters into cell values; every digit becomes an initial clue.

    '.' and '0' mark empty cells. Mutates and returns ``board``.
    """
    if len(text) != 81:
        raise BoardContractError(f"puzzle string must have 81 characters, got {len(text)}")
    for i, ch in enumerate(text):
        if ch in EMPTY_CHARS:
            continue
        if ch not in COLS:
            raise BoardContractError(f"unexpected character {ch!r} at index {i}")
        cell = board[i // 9][i % 9]
        cell.value = int(ch)
        cell.candidates = set()
        cell.is_initial = True
    return board


def clues_to_board(clues: Mapping[str, int | str]) -> Board:
    """Build a fresh board from a generator's {square: digit} mapping."""
    board = create_empty_board()
    for square, digit in clues.items():
        r, c = square_to_rc(square)
        cell = board[r][c]
        cell.value = check_digit(digit)
        cell.is_initial = True
    return board


def solution_from_string(text: str) -> Solution:
    if len(text) != 81 or any(ch not in COLS for ch in text):
        raise BoardContractError("a solution string must be 81 digits 1-9")
    return {rc_to_square(i // 9, i % 9): int(ch) for i, ch in enumerate(text)}


# ---- sanity ----


def _duplicates_in_unit(vals: list[int | None]) -> set[int]:
    seen = set()
    dups = set()
    for v in vals:
        if v is None:
            continue
        if v in seen:
            dups.add(v)
        seen.add(v)
    return dups


def sanity_check(board: Board) -> dict:
    """Report duplicate digits per row, column and box."""
    issues = []
    units = (
        [(f"r{r + 1}", unit_cells_row(r)) for r in range(9)]
        + [(f"c{c + 1}", unit_cells_col(c)) for c in range(9)]
        + [(f"b{b + 1}", unit_cells_box(b)) for b in range(9)]
    )
    for name, cells in units:
        vals = [board[r][c].value for r, c in cells]
        dups = _duplicates_in_unit(vals)
        if dups:
            bad = [rc_to_square(r, c) for r, c in cells if board[r][c].value in dups]
            issues.append({"type": "duplicate", "unit": name, "digits": sorted(dups), "cells": bad})
    return {"ok": len(issues) == 0, "issues": issues}
