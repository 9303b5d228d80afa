"""Phase-aware board mutation.

Each game phase is a ``PhaseHandler``: a bundle of capability flags and the
functions that turn one user action into a new board. ``PHASE_HANDLERS`` maps
every ``GamePhase`` to its handler and the ``apply_*`` functions dispatch
through it.

Rules shared by every handler:

- input needs a selected cell; initial (clue) cells are never touched
- handlers work on a clone and never mutate ``context.board``
- outside Configuring, ``context.save_to_history`` runs before any change
- a rejected action returns the input board unchanged with ``changed=False``
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from types_sudoku import Board, GamePhase, Position, Solution
from .board_core import check_digit, check_position, clone_board, is_correct_placement, iter_positions
from .propagation import is_complete, propagate_after_placement

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _noop() -> None:
    return None


@dataclass
class MutationContext:
    phase: GamePhase
    board: Board
    selected: Position | None = None
    solution: Solution | None = None
    error_cell: Position | None = None
    save_to_history: Callable[[], None] = _noop
    timer_start_ms: int | None = None
    timer_running: bool = False
    now_ms: Callable[[], int] = _now_ms


@dataclass
class MutationResult:
    board: Board
    error_cell: Position | None = None
    game_completed: bool = False
    timer_stopped: bool = False
    final_time: int | None = None
    changed: bool = False


def _unchanged(context: MutationContext) -> MutationResult:
    return MutationResult(board=context.board)


def _editable_cell(context: MutationContext) -> Position | None:
    """Selected position if it exists and is not a clue, else None."""
    if context.selected is None:
        return None
    r, c = context.selected
    check_position(r, c)
    if context.board[r][c].is_initial:
        return None
    return (r, c)


# ---- shared behaviour ----


def default_validate_completion(context: MutationContext) -> bool:
    return is_complete(context.board)


def toggle_note(context: MutationContext, digit: int) -> MutationResult:
    pos = _editable_cell(context)
    if pos is None:
        return _unchanged(context)
    r, c = pos
    if context.board[r][c].value is not None:
        # filled cells keep an empty candidate set
        return _unchanged(context)
    context.save_to_history()
    board = clone_board(context.board)
    cell = board[r][c]
    if digit in cell.candidates:
        cell.candidates.discard(digit)
    else:
        cell.candidates.add(digit)
    return MutationResult(board=board, changed=True)


def notes_disabled(context: MutationContext, digit: int) -> MutationResult:
    return _unchanged(context)


def no_delete(context: MutationContext) -> MutationResult:
    return _unchanged(context)


def _clear_value(context: MutationContext, snapshot: bool) -> MutationResult:
    pos = _editable_cell(context)
    if pos is None:
        return _unchanged(context)
    r, c = pos
    if context.board[r][c].value is None:
        return _unchanged(context)
    if snapshot:
        context.save_to_history()
    board = clone_board(context.board)
    board[r][c].value = None
    return MutationResult(board=board, changed=True)


def _place(context: MutationContext, digit: int) -> tuple[Board, Position] | None:
    """Snapshot and write ``digit`` into the selected empty cell, clearing its notes."""
    pos = _editable_cell(context)
    if pos is None:
        return None
    r, c = pos
    if context.board[r][c].value is not None:
        return None
    context.save_to_history()
    board = clone_board(context.board)
    board[r][c].value = digit
    board[r][c].candidates = set()
    return board, pos


# ---- configuring ----


def configuring_normal_input(context: MutationContext, digit: int) -> MutationResult:
    pos = _editable_cell(context)
    if pos is None:
        return _unchanged(context)
    r, c = pos
    board = clone_board(context.board)
    board[r][c].value = digit
    board[r][c].candidates = set()
    return MutationResult(board=board, changed=True)


def configuring_delete(context: MutationContext) -> MutationResult:
    return _clear_value(context, snapshot=False)


# ---- manual ----


def manual_normal_input(context: MutationContext, digit: int) -> MutationResult:
    placed = _place(context, digit)
    if placed is None:
        return _unchanged(context)
    board, _ = placed
    completed = is_complete(board)
    return MutationResult(board=board, game_completed=completed, changed=True)


def manual_delete(context: MutationContext) -> MutationResult:
    return _clear_value(context, snapshot=True)


# ---- solving ----


def solving_normal_input(context: MutationContext, digit: int) -> MutationResult:
    placed = _place(context, digit)
    if placed is None:
        return _unchanged(context)
    board, (r, c) = placed
    if not is_correct_placement(context.solution, r, c, digit):
        logger.debug("wrong digit %d at (%d, %d)", digit, r, c)
        return MutationResult(board=board, error_cell=(r, c), changed=True)

    propagate_after_placement(board, r, c, digit)
    completed = is_complete(board)
    return MutationResult(board=board, game_completed=completed, changed=True)


# ---- competition ----


def competition_validate_completion(context: MutationContext) -> bool:
    if not is_complete(context.board):
        return False
    for r, c in iter_positions():
        value = context.board[r][c].value
        if value is None or not is_correct_placement(context.solution, r, c, value):
            return False
    return True


def competition_normal_input(context: MutationContext, digit: int) -> MutationResult:
    placed = _place(context, digit)
    if placed is None:
        return _unchanged(context)
    board, (r, c) = placed
    # no error checking here: notes are updated whatever the digit
    propagate_after_placement(board, r, c, digit)

    completed = competition_validate_completion(
        MutationContext(phase=context.phase, board=board, solution=context.solution)
    )
    result = MutationResult(board=board, game_completed=completed, changed=True)
    if completed and context.timer_running and context.timer_start_ms is not None:
        result.timer_stopped = True
        result.final_time = context.now_ms() - context.timer_start_ms
        logger.debug("competition finished in %d ms", result.final_time)
    return result


# ---- handler table ----


@dataclass(frozen=True)
class PhaseHandler:
    phase: GamePhase
    can_delete_cells: bool
    supports_hints: bool
    supports_error_checking: bool
    propagates_on_placement: bool
    normal_input: Callable[[MutationContext, int], MutationResult]
    note_input: Callable[[MutationContext, int], MutationResult] = field(default=toggle_note)
    delete: Callable[[MutationContext], MutationResult] = field(default=no_delete)
    validate_completion: Callable[[MutationContext], bool] = field(default=default_validate_completion)


PHASE_HANDLERS: dict[GamePhase, PhaseHandler] = {
    GamePhase.CONFIGURING: PhaseHandler(
        phase=GamePhase.CONFIGURING,
        can_delete_cells=True,
        supports_hints=False,
        supports_error_checking=False,
        propagates_on_placement=False,
        normal_input=configuring_normal_input,
        note_input=notes_disabled,
        delete=configuring_delete,
    ),
    GamePhase.MANUAL: PhaseHandler(
        phase=GamePhase.MANUAL,
        can_delete_cells=True,
        supports_hints=True,
        supports_error_checking=False,
        propagates_on_placement=False,
        normal_input=manual_normal_input,
        delete=manual_delete,
    ),
    GamePhase.SOLVING: PhaseHandler(
        phase=GamePhase.SOLVING,
        can_delete_cells=False,
        supports_hints=True,
        supports_error_checking=True,
        propagates_on_placement=True,
        normal_input=solving_normal_input,
    ),
    GamePhase.COMPETITION: PhaseHandler(
        phase=GamePhase.COMPETITION,
        can_delete_cells=False,
        supports_hints=False,
        supports_error_checking=False,
        propagates_on_placement=True,
        normal_input=competition_normal_input,
        validate_completion=competition_validate_completion,
    ),
}

_missing = set(GamePhase) - set(PHASE_HANDLERS)
if _missing:
    raise RuntimeError(f"no phase handler for {sorted(p.value for p in _missing)}")


# ---- coordinator ----


def handler_for(phase: GamePhase | str) -> PhaseHandler:
    return PHASE_HANDLERS[GamePhase(phase)]


def can_delete(phase: GamePhase | str) -> bool:
    return handler_for(phase).can_delete_cells


def supports_hints(phase: GamePhase | str) -> bool:
    return handler_for(phase).supports_hints


def supports_error_checking(phase: GamePhase | str) -> bool:
    return handler_for(phase).supports_error_checking


def validate_completion(context: MutationContext) -> bool:
    return handler_for(context.phase).validate_completion(context)


def apply_normal_input(context: MutationContext, digit: int) -> MutationResult:
    digit = check_digit(digit)
    return handler_for(context.phase).normal_input(context, digit)


def apply_note_input(context: MutationContext, digit: int) -> MutationResult:
    digit = check_digit(digit)
    return handler_for(context.phase).note_input(context, digit)


def apply_delete(context: MutationContext) -> MutationResult:
    return handler_for(context.phase).delete(context)
