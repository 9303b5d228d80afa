# types_sudoku.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, TypedDict, Union

Position = tuple[int, int]
"""A (row, col) pair, both 0-based (row 0 is 'A', col 0 is '1')."""

Solution = dict[str, int]
"""Map from square label (e.g., 'A1') to the correct digit."""

Values = dict[str, int]
"""Map from square label to the digit currently placed there."""

CandidateMap = dict[str, set[int]]
"""Map from square label to the candidate digits of an empty cell."""


@dataclass
class Cell:
    """One of the 81 board positions.

    A filled cell always carries an empty candidate set; candidates only mean
    something while ``value`` is None.
    """

    value: int | None = None
    candidates: set[int] = field(default_factory=set)
    is_initial: bool = False

    def copy(self) -> "Cell":
        return Cell(self.value, set(self.candidates), self.is_initial)


Board = list[list[Cell]]
"""A 9x9 board of cells, row-major."""


class GamePhase(str, Enum):
    CONFIGURING = "configuring"
    MANUAL = "manual"
    SOLVING = "solving"
    COMPETITION = "competition"


class InputMode(str, Enum):
    NORMAL = "normal"
    NOTE = "note"


class Difficulty(str, Enum):
    TRIVIAL = "trivial"
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    TOUGH = "tough"
    DIABOLICAL = "diabolical"
    EXTREME = "extreme"
    MASTER = "master"
    GRANDMASTER = "grandmaster"


Digit = Union[int, str]  # hint producers may send '5' or 5


class ErrorHint(TypedDict):
    type: Literal["error"]
    square: str  # cell holding the wrong value, e.g. 'C4'
    correct_value: Digit


class MissingCandidateHint(TypedDict):
    type: Literal["missing_candidate"]
    square: str
    missing_digit: Digit


class SingleCellHint(TypedDict):
    type: Literal["single_cell"]
    square: str
    digit: Digit


class SetHint(TypedDict):
    """naked_set / hidden_set: several digits removed from several cells."""

    type: Literal["naked_set", "hidden_set"]
    elimination_cells: list[str]
    elimination_digits: list[Digit]


class LineHint(TypedDict):
    """intersection_removal / x_wing / simple_coloring: one digit removed."""

    type: Literal["intersection_removal", "x_wing", "simple_coloring"]
    elimination_cells: list[str]
    digit: Digit


class ChuteRemotePairsHint(TypedDict):
    type: Literal["chute_remote_pairs"]
    elimination_cells: list[str]
    absent_digit: Digit


class YWingHint(TypedDict):
    type: Literal["y_wing"]
    elimination_cells: list[str]
    candidate_c: Digit  # the third candidate shared by both pincers


Hint = Union[
    ErrorHint,
    MissingCandidateHint,
    SingleCellHint,
    SetHint,
    LineHint,
    ChuteRemotePairsHint,
    YWingHint,
]
