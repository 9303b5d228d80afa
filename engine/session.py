"""Game session: owns the board, undo history, stored solution and timer for one game, and routes user actions through the phase handlers and hint dispatcher."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from types_sudoku import Board, Difficulty, GamePhase, Hint, InputMode, Position, Solution
from .board_core import (
    DIGITS,
    BoardContractError,
    board_to_candidates,
    board_to_values,
    cells_with_value,
    check_position,
    clues_to_board,
    create_empty_board,
    initial_clues,
    load_puzzle_string,
    number_counts,
)
from .config import EngineConfig
from .hints import apply_hint, hint_summary
from .history import History
from .oracle import HintSource, PuzzleGenerator, SolverOracle, validate_board
from .phases import (
    MutationContext,
    MutationResult,
    apply_delete,
    apply_normal_input,
    apply_note_input,
    can_delete,
    supports_error_checking,
    supports_hints,
    validate_completion,
)
from .propagation import seed_candidates

logger = logging.getLogger(__name__)

# direction -> (d_row, d_col); arrows and WASD share one table
MOVES = {
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}
PLAY_PHASES = (GamePhase.MANUAL, GamePhase.SOLVING, GamePhase.COMPETITION)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class GameSession:
    """One player's game from configuration to completion.

    Collaborators are injected: ``oracle`` validates and solves, ``generator``
    produces clue sets, ``hint_source`` discovers the next deduction. Any of them
    may be None when the host never uses the matching feature.
    """

    def __init__(
        self,
        oracle: Optional[SolverOracle] = None,
        generator: Optional[PuzzleGenerator] = None,
        hint_source: Optional[HintSource] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], int] = _wall_clock_ms,
    ) -> None:
        self.oracle = oracle
        self.generator = generator
        self.hint_source = hint_source
        self.config = config or EngineConfig()
        self.clock = clock

        self.history = History(self.config.history_limit)
        self.difficulty: Difficulty = self.config.default_difficulty
        self.input_mode = InputMode.NORMAL
        self.color_mode = False
        self.start_new_game()

    # ---- lifecycle ----

    def start_new_game(self) -> None:
        self.board: Board = create_empty_board()
        self.phase = GamePhase.CONFIGURING
        self.selected: Optional[Position] = None
        self.solution: Optional[Solution] = None
        self.error_cell: Optional[Position] = None
        self.error_message: Optional[str] = None
        self.is_game_completed = False
        self.show_congratulations = False
        self.highlighted_number: Optional[int] = None
        self.cycling_number: Optional[int] = None
        self.current_hint: Optional[Hint] = None
        self.timer_start_ms: Optional[int] = None
        self.timer_final_ms: Optional[int] = None
        self.timer_running = False
        self.history.clear()

    def generate_puzzle(self, difficulty: Difficulty | str | None = None) -> bool:
        """Replace the board with a generated clue set; only allowed while configuring."""
        if not self._check_configuring("generate a puzzle"):
            return False
        if self.generator is None:
            raise RuntimeError("no puzzle generator configured")
        if difficulty is not None:
            self.difficulty = Difficulty(difficulty)
        clues = self.generator.generate(self.difficulty.value)
        self.board = clues_to_board(clues)
        self.error_cell = None
        self.error_message = None
        self.is_game_completed = False
        logger.info("generated %s puzzle with %d clues", self.difficulty.value, len(clues))
        return True

    def load_puzzle(
        self, text: str, difficulty: Difficulty | str | None = None, color_mode: bool = False
    ) -> bool:
        """Replace the board with the clues in an 81-character string; only allowed while configuring."""
        if not self._check_configuring("load a puzzle"):
            return False
        self.board = load_puzzle_string(create_empty_board(), text)
        if difficulty is not None:
            self.difficulty = Difficulty(difficulty)
        self.color_mode = color_mode
        self.error_message = None
        return True

    def _check_configuring(self, action: str = "start a game") -> bool:
        if self.phase != GamePhase.CONFIGURING:
            self.error_message = f"cannot {action} during the {self.phase.value} phase"
            return False
        return True

    def _validated_solution(self) -> Optional[Solution]:
        if self.oracle is None:
            raise RuntimeError("no solver oracle configured")
        result = validate_board(self.board, self.oracle)
        if not result.is_valid:
            self.error_message = result.error_message or "Invalid puzzle configuration"
            return None
        self.error_message = None
        return result.solution

    def _enter_phase(self, phase: GamePhase, solution: Optional[Solution]) -> None:
        self.solution = solution
        self.phase = phase
        self.error_cell = None
        self.is_game_completed = False
        seed_candidates(self.board, full=phase == GamePhase.MANUAL and self.config.manual_full_candidates)
        self.save_to_history()
        logger.info("entered %s phase", phase.value)

    def start_game(self) -> bool:
        """Validate the configured board and start solving with error checking."""
        if not self._check_configuring():
            return False
        solution = self._validated_solution()
        if solution is None:
            return False
        self._enter_phase(GamePhase.SOLVING, solution)
        return True

    def start_manual_game(self) -> bool:
        if not self._check_configuring():
            return False
        self.error_message = None
        self._enter_phase(GamePhase.MANUAL, None)
        return True

    def start_competition_game(self) -> bool:
        if not self._check_configuring():
            return False
        solution = self._validated_solution()
        if solution is None:
            return False
        self._enter_phase(GamePhase.COMPETITION, solution)
        self.timer_start_ms = self.clock()
        self.timer_final_ms = None
        self.timer_running = True
        return True

    def start_challenge(
        self, text: str, difficulty: Difficulty | str | None = None, color_mode: bool = False
    ) -> bool:
        """Load a shared puzzle string and go straight into a competition."""
        self.start_new_game()
        self.load_puzzle(text, difficulty, color_mode)
        return self.start_competition_game()

    # ---- selection / modes ----

    def select(self, row: int, col: int) -> None:
        check_position(row, col)
        self.selected = (row, col)
        self.update_highlighted_number(row, col)

    def clear_selection(self) -> None:
        self.selected = None

    def move_selection(self, direction: str) -> None:
        if direction not in MOVES:
            raise BoardContractError(f"unknown direction {direction!r}, expected one of {sorted(MOVES)}")
        if self.selected is None:
            self.select(4, 4)
            return
        dr, dc = MOVES[direction]
        r, c = self.selected
        nr = min(8, max(0, r + dr))
        nc = min(8, max(0, c + dc))
        if (nr, nc) != (r, c):
            self.select(nr, nc)

    def set_input_mode(self, mode: InputMode | str) -> None:
        self.input_mode = InputMode(mode)

    def toggle_input_mode(self) -> None:
        self.input_mode = InputMode.NOTE if self.input_mode == InputMode.NORMAL else InputMode.NORMAL

    # ---- input ----

    def save_to_history(self) -> None:
        self.history.save(self.board)

    def _context(self) -> MutationContext:
        return MutationContext(
            phase=self.phase,
            board=self.board,
            selected=self.selected,
            solution=self.solution,
            error_cell=self.error_cell,
            save_to_history=self.save_to_history,
            timer_start_ms=self.timer_start_ms,
            timer_running=self.timer_running,
            now_ms=self.clock,
        )

    def handle_input(self, digit: int) -> MutationResult:
        self.highlighted_number = digit
        if (
            self.config.block_input_on_error
            and self.error_cell is not None
            and supports_error_checking(self.phase)
        ):
            return MutationResult(board=self.board)

        context = self._context()
        if self.input_mode == InputMode.NORMAL:
            result = apply_normal_input(context, digit)
        else:
            result = apply_note_input(context, digit)
        self.board = result.board

        if result.changed and self.input_mode == InputMode.NORMAL and supports_error_checking(self.phase):
            self.error_cell = result.error_cell
        if result.timer_stopped:
            self.timer_running = False
            self.timer_final_ms = result.final_time
        if result.game_completed:
            self._mark_completed()
        return result

    def handle_delete(self) -> MutationResult:
        if self.selected is None or not can_delete(self.phase):
            return MutationResult(board=self.board)
        result = apply_delete(self._context())
        self.board = result.board
        return result

    def undo(self) -> bool:
        board = self.history.undo()
        if board is None:
            return False
        self.board = board
        self.error_cell = None
        return True

    def _mark_completed(self) -> None:
        self.is_game_completed = True
        if self.phase == GamePhase.COMPETITION:
            self.timer_running = False
            if self.timer_final_ms is None and self.timer_start_ms is not None:
                self.timer_final_ms = self.clock() - self.timer_start_ms
        else:
            self.show_congratulations = True
        logger.info("game completed in %s phase", self.phase.value)

    def is_puzzle_complete(self) -> bool:
        return validate_completion(self._context())

    # ---- hints ----

    def get_hint(self) -> Optional[Hint]:
        if not supports_hints(self.phase) or self.hint_source is None:
            return None
        self.close_hint()
        values = board_to_values(self.board)
        candidates = board_to_candidates(self.board)
        # manual games have no trusted clue set, so current values stand in for it
        initial = initial_clues(self.board) if self.phase == GamePhase.SOLVING else values
        hint = self.hint_source.discover_hint(initial, values, candidates)
        if hint:
            self.current_hint = hint
            self.selected = None
            self.highlighted_number = None
            self.cycling_number = None
        return hint

    def close_hint(self) -> None:
        self.current_hint = None

    def apply_current_hint(self) -> bool:
        if not self.current_hint:
            return False
        self.save_to_history()
        self.board = apply_hint(self.board, self.current_hint, self.phase)
        if self.current_hint.get("type") == "error":
            self.error_cell = None
        if self.phase in (GamePhase.SOLVING, GamePhase.MANUAL) and self.is_puzzle_complete():
            self._mark_completed()
        self.close_hint()
        return True

    # ---- timer ----

    def elapsed_ms(self) -> Optional[int]:
        if self.timer_final_ms is not None:
            return self.timer_final_ms
        if self.timer_running and self.timer_start_ms is not None:
            return self.clock() - self.timer_start_ms
        return None

    # ---- highlight / cycling ----

    @property
    def number_counts(self) -> Dict[int, int]:
        return number_counts(self.board)

    def update_highlighted_number(self, row: int, col: int) -> None:
        cell = self.board[row][col]
        if cell.value is not None:
            self.highlighted_number = cell.value
            self.cycling_number = None
        elif self.phase in PLAY_PHASES and cell.candidates:
            if self.highlighted_number is not None and (
                self.input_mode == InputMode.NOTE or self.highlighted_number in cell.candidates
            ):
                self.cycling_number = self.highlighted_number
                return
            self.highlighted_number = None
            self.start_cycling()
        else:
            self.highlighted_number = None
            self.cycling_number = None

    def available_numbers_for_cycling(self) -> List[int]:
        if self.selected is None or self.phase not in PLAY_PHASES:
            return []
        r, c = self.selected
        cell = self.board[r][c]
        if cell.value is not None:
            return []
        if self.input_mode == InputMode.NORMAL:
            return sorted(cell.candidates)
        return list(DIGITS)

    def start_cycling(self) -> None:
        available = self.available_numbers_for_cycling()
        if not available:
            return
        self.cycling_number = available[0]
        self.highlighted_number = self.cycling_number

    def cycle_to_next_number(self) -> None:
        available = self.available_numbers_for_cycling()
        if not available:
            return
        if self.cycling_number not in available:
            self.start_cycling()
            return
        i = available.index(self.cycling_number)
        self.cycling_number = available[(i + 1) % len(available)]
        self.highlighted_number = self.cycling_number

    def place_cycling_number(self) -> Optional[MutationResult]:
        if self.cycling_number is None or self.selected is None:
            return None
        return self.handle_input(self.cycling_number)

    def cycle_to_next_cell_with_same_number(self) -> None:
        if self.selected is None:
            return
        r, c = self.selected
        value = self.board[r][c].value
        if value is None:
            return
        same = cells_with_value(self.board, value)
        if len(same) <= 1:
            return
        nr, nc = same[(same.index((r, c)) + 1) % len(same)]
        self.select(nr, nc)

    # ---- export ----

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view of the session for API and CLI callers."""
        return {
            "phase": self.phase.value,
            "input_mode": self.input_mode.value,
            "difficulty": self.difficulty.value,
            "color_mode": self.color_mode,
            "board": [
                [
                    {
                        "value": cell.value,
                        "candidates": sorted(cell.candidates),
                        "is_initial": cell.is_initial,
                    }
                    for cell in row
                ]
                for row in self.board
            ],
            "selected": list(self.selected) if self.selected else None,
            "error_cell": list(self.error_cell) if self.error_cell else None,
            "error_message": self.error_message,
            "is_game_completed": self.is_game_completed,
            "timer_running": self.timer_running,
            "elapsed_ms": self.elapsed_ms(),
            "history_depth": len(self.history),
            "current_hint": self.current_hint,
            "hint_summary": hint_summary(self.current_hint) if self.current_hint else None,
            "number_counts": self.number_counts,
        }
