"""Boundaries to the external collaborators (solver oracle, puzzle generator, hint source) and board validation against the oracle.

The engine never searches for solutions or detects techniques itself. The two
reference adapters here answer from data they are given: a known solution
string and a fixed table of puzzles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from types_sudoku import Board, CandidateMap, Hint, Solution, Values
from .board_core import (
    COLS,
    EMPTY_CHARS,
    BoardContractError,
    board_to_string,
    rc_to_square,
    solution_from_string,
)

logger = logging.getLogger(__name__)

UNSOLVABLE_MESSAGE = "Invalid or unsolvable puzzle"
NOT_UNIQUE_MESSAGE = "Puzzle has multiple solutions"


class SolverOracle(Protocol):
    def solve(self, grid: str) -> Optional[Solution]:
        """Solve an 81-char grid ('.' = empty); None when there is no solution."""

    def is_unique(self, grid: str) -> bool:
        ...


class PuzzleGenerator(Protocol):
    def generate(self, difficulty: str) -> Mapping[str, int]:
        """Return the clues of a new puzzle as {square: digit}."""


class HintSource(Protocol):
    def discover_hint(self, initial: Values, values: Values, candidates: CandidateMap) -> Optional[Hint]:
        ...


@dataclass
class ValidationResult:
    is_valid: bool
    has_unique_solution: bool = False
    solution: Optional[Solution] = None
    error_message: Optional[str] = None


def validate_board(board: Board, oracle: SolverOracle) -> ValidationResult:
    """Ask the oracle whether the board's values form a puzzle with exactly one solution."""
    grid = board_to_string(board)
    try:
        solution = oracle.solve(grid)
        if not solution:
            logger.warning("validation failed: %s", UNSOLVABLE_MESSAGE)
            return ValidationResult(is_valid=False, error_message=UNSOLVABLE_MESSAGE)
        if not oracle.is_unique(grid):
            logger.warning("validation failed: %s", NOT_UNIQUE_MESSAGE)
            return ValidationResult(
                is_valid=False, solution=dict(solution), error_message=NOT_UNIQUE_MESSAGE
            )
    except Exception as e:
        logger.exception("solver oracle raised")
        return ValidationResult(is_valid=False, error_message=f"Validation error: {e}")
    return ValidationResult(is_valid=True, has_unique_solution=True, solution=dict(solution))


class KnownSolutionOracle:
    """Answers for grids whose placed digits all agree with one known solution.

    Any such grid is reported solvable; it counts as unique only when it is one
    of the registered ``unique_grids`` (or when none were registered).
    """

    def __init__(self, solution: str, unique_grids: Optional[list[str]] = None) -> None:
        self.solution = solution_from_string(solution)
        self._solution_string = solution
        self.unique_grids = set(unique_grids) if unique_grids else None

    def _consistent(self, grid: str) -> bool:
        if len(grid) != 81:
            raise BoardContractError(f"grid must have 81 characters, got {len(grid)}")
        for i, ch in enumerate(grid):
            if ch in EMPTY_CHARS:
                continue
            if ch not in COLS or self._solution_string[i] != ch:
                return False
        return True

    def solve(self, grid: str) -> Optional[Solution]:
        return dict(self.solution) if self._consistent(grid) else None

    def is_unique(self, grid: str) -> bool:
        if not self._consistent(grid):
            return False
        return self.unique_grids is None or grid in self.unique_grids


class FixedPuzzleGenerator:
    """Hands out a stored puzzle string per difficulty."""

    def __init__(self, puzzles: Mapping[str, str]) -> None:
        self.puzzles = {getattr(k, "value", k): v for k, v in puzzles.items()}

    def generate(self, difficulty: str) -> dict[str, int]:
        key = getattr(difficulty, "value", difficulty)
        if key not in self.puzzles:
            raise KeyError(f"no puzzle stored for difficulty {key!r}")
        text = self.puzzles[key]
        return {
            rc_to_square(i // 9, i % 9): int(ch)
            for i, ch in enumerate(text)
            if ch not in EMPTY_CHARS
        }
