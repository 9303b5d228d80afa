"""Phase-aware Sudoku board engine: candidate propagation, per-phase input rules, hint application, undo, and the session that ties them together."""

from .board_core import BoardContractError
from .hints import apply_hint
from .history import History
from .phases import (
    MutationContext,
    MutationResult,
    apply_delete,
    apply_normal_input,
    apply_note_input,
    can_delete,
    supports_error_checking,
    supports_hints,
)
from .session import GameSession
