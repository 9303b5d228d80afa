"""Hint application: turns a hint payload (placement, candidate addition, or candidate elimination) into a new board, plus a short human-readable summary for UI layers."""

# hints.py
# Hints are dicts keyed by "type" (see types_sudoku.Hint). Cell references are
# square labels ('A1'..'I9'); digits may be ints or digit strings.
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from types_sudoku import Board, GamePhase, Hint
from .board_core import check_digit, clone_board, square_to_rc
from .phases import handler_for
from .propagation import propagate_after_placement

logger = logging.getLogger(__name__)

ELIMINATION_TYPES = (
    "naked_set",
    "hidden_set",
    "intersection_removal",
    "x_wing",
    "chute_remote_pairs",
    "simple_coloring",
    "y_wing",
)


def elimination_digits(hint: Hint) -> List[int]:
    """Digits an elimination hint removes; the field holding them depends on the hint type."""
    kind = hint.get("type")
    if kind in ("naked_set", "hidden_set"):
        raw = hint.get("elimination_digits") or []
    elif kind in ("intersection_removal", "x_wing", "simple_coloring"):
        raw = [hint["digit"]]
    elif kind == "chute_remote_pairs":
        raw = [hint["absent_digit"]]
    elif kind == "y_wing":
        raw = [hint["candidate_c"]]
    else:
        raw = []
    return [check_digit(d) for d in raw]


def _apply_error(board: Board, hint: Hint, propagate: bool) -> None:
    r, c = square_to_rc(hint["square"])
    board[r][c].value = check_digit(hint["correct_value"])
    board[r][c].candidates = set()


def _apply_missing_candidate(board: Board, hint: Hint, propagate: bool) -> None:
    r, c = square_to_rc(hint["square"])
    digit = check_digit(hint["missing_digit"])
    if board[r][c].value is None:
        board[r][c].candidates.add(digit)


def _apply_single_cell(board: Board, hint: Hint, propagate: bool) -> None:
    r, c = square_to_rc(hint["square"])
    digit = check_digit(hint["digit"])
    board[r][c].value = digit
    board[r][c].candidates = set()
    if propagate:
        propagate_after_placement(board, r, c, digit)


def _apply_elimination(board: Board, hint: Hint, propagate: bool) -> None:
    digits = elimination_digits(hint)
    for square in hint.get("elimination_cells") or []:
        r, c = square_to_rc(square)
        board[r][c].candidates.difference_update(digits)


_APPLIERS: Dict[str, Callable[[Board, Hint, bool], None]] = {
    "error": _apply_error,
    "missing_candidate": _apply_missing_candidate,
    "single_cell": _apply_single_cell,
    **{kind: _apply_elimination for kind in ELIMINATION_TYPES},
}


def apply_hint(board: Board, hint: Hint, phase: GamePhase | str) -> Board:
    """Return a copy of ``board`` with ``hint`` applied; ``board`` itself is never mutated.

    A ``single_cell`` placement also updates peer notes when the phase propagates
    placements. Unknown hint types leave the copy unchanged.
    """
    new_board = clone_board(board)
    applier = _APPLIERS.get(hint.get("type"))
    if applier is None:
        logger.warning("Unknown hint type: %r", hint.get("type"))
        return new_board
    applier(new_board, hint, handler_for(phase).propagates_on_placement)
    logger.debug("applied %s hint", hint["type"])
    return new_board


def hint_summary(hint: Hint) -> Optional[Dict[str, str]]:
    """One-line description of what applying ``hint`` will do, or None."""
    kind = hint.get("type")
    if kind == "error":
        return {"type": "place_value", "details": f"Place {hint['correct_value']} in {hint['square']}"}
    if kind == "missing_candidate":
        return {"type": "add_candidate", "details": f"Add candidate {hint['missing_digit']} to {hint['square']}"}
    if kind == "single_cell":
        return {"type": "place_value", "details": f"Place {hint['digit']} in {hint['square']}"}
    if kind in ELIMINATION_TYPES and hint.get("elimination_cells"):
        digits = ", ".join(str(d) for d in elimination_digits(hint))
        return {
            "type": "remove_candidates",
            "details": f"Remove {digits} from {len(hint['elimination_cells'])} cells",
        }
    return None
