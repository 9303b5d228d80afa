# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so "engine", "apps" and "types_sudoku" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.board_core import create_empty_board, load_puzzle_string, solution_from_string  # noqa: E402
from engine.config import EngineConfig  # noqa: E402
from engine.oracle import KnownSolutionOracle  # noqa: E402
from engine.session import GameSession  # noqa: E402

PUZZLE = "53..7....6..195....98....6.8...6...34..8.3..17...2...6.6....28....419..5....8..79"
SOLUTION = "534678912672195348198342567859761423426853791713924856961537284287419635345286179"


class FakeClock:
    def __init__(self, start: int = 1_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def puzzle_board():
    return load_puzzle_string(create_empty_board(), PUZZLE)


@pytest.fixture
def solution():
    return solution_from_string(SOLUTION)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def oracle():
    return KnownSolutionOracle(SOLUTION)


@pytest.fixture
def session(oracle, clock):
    s = GameSession(oracle=oracle, config=EngineConfig(), clock=clock)
    s.load_puzzle(PUZZLE)
    return s


@pytest.fixture
def puzzle_text():
    return PUZZLE


@pytest.fixture
def solution_text():
    return SOLUTION
