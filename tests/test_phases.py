# tests/test_phases.py
import pytest

from engine.board_core import BoardContractError, clone_board, create_empty_board, iter_positions, solution_from_string
from engine.phases import (
    PHASE_HANDLERS,
    MutationContext,
    apply_delete,
    apply_normal_input,
    apply_note_input,
    can_delete,
    supports_error_checking,
    supports_hints,
    validate_completion,
)
from engine.propagation import seed_candidates
from types_sudoku import GamePhase

ALL_PHASES = list(GamePhase)
PLAY_PHASES = [GamePhase.MANUAL, GamePhase.SOLVING, GamePhase.COMPETITION]


class SnapshotCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


def make_context(phase, board, selected, solution=None, **kw):
    return MutationContext(phase=phase, board=board, selected=selected, solution=solution, **kw)


def board_to_snapshot(board):
    return [[(c.value, frozenset(c.candidates), c.is_initial) for c in row] for row in board]


def test_every_phase_has_a_handler():
    assert set(PHASE_HANDLERS) == set(GamePhase)


@pytest.mark.parametrize(
    "phase, delete, hints, errors",
    [
        (GamePhase.CONFIGURING, True, False, False),
        (GamePhase.MANUAL, True, True, False),
        (GamePhase.SOLVING, False, True, True),
        (GamePhase.COMPETITION, False, False, False),
    ],
)
def test_capability_table(phase, delete, hints, errors):
    assert can_delete(phase) is delete
    assert supports_hints(phase) is hints
    assert supports_error_checking(phase) is errors
    assert can_delete(phase.value) is delete


def test_configuring_last_write_wins():
    board = create_empty_board()
    r1 = apply_normal_input(make_context(GamePhase.CONFIGURING, board, (0, 0)), 5)
    r2 = apply_normal_input(make_context(GamePhase.CONFIGURING, r1.board, (0, 0)), 7)
    assert r2.board[0][0].value == 7
    assert board[0][0].value is None  # input board untouched


def test_configuring_takes_no_snapshot_and_ignores_notes():
    counter = SnapshotCounter()
    board = create_empty_board()
    ctx = make_context(GamePhase.CONFIGURING, board, (1, 1), save_to_history=counter)
    result = apply_normal_input(ctx, 3)
    assert counter.calls == 0
    note = apply_note_input(make_context(GamePhase.CONFIGURING, result.board, (2, 2)), 4)
    assert not note.changed
    assert note.board[2][2].candidates == set()


def test_configuring_delete():
    board = create_empty_board()
    board[4][4].value = 8
    result = apply_delete(make_context(GamePhase.CONFIGURING, board, (4, 4)))
    assert result.changed and result.board[4][4].value is None


@pytest.mark.parametrize("phase", ALL_PHASES)
def test_initial_cells_are_never_altered(phase, puzzle_board, solution):
    before = board_to_snapshot(puzzle_board)
    ctx = make_context(phase, puzzle_board, (0, 0), solution)
    for result in (apply_normal_input(ctx, 9), apply_note_input(ctx, 9), apply_delete(ctx)):
        assert not result.changed
        assert board_to_snapshot(result.board) == before


@pytest.mark.parametrize("phase", ALL_PHASES)
def test_no_selection_is_a_no_op(phase, puzzle_board, solution):
    ctx = make_context(phase, puzzle_board, None, solution)
    assert apply_normal_input(ctx, 4).board is puzzle_board
    assert apply_note_input(ctx, 4).board is puzzle_board
    assert apply_delete(ctx).board is puzzle_board


@pytest.mark.parametrize("phase", PLAY_PHASES)
def test_filled_cell_is_not_overwritten(phase, puzzle_board, solution):
    first = apply_normal_input(make_context(phase, puzzle_board, (0, 2), solution), 4)
    assert first.board[0][2].value == 4
    again = apply_normal_input(make_context(phase, first.board, (0, 2), solution), 1)
    assert not again.changed
    assert board_to_snapshot(again.board) == board_to_snapshot(first.board)


@pytest.mark.parametrize("phase", PLAY_PHASES)
def test_snapshot_taken_before_each_change(phase, puzzle_board, solution):
    counter = SnapshotCounter()
    seen = []

    def save():
        counter()
        seen.append(puzzle_board[0][2].value)

    ctx = make_context(phase, puzzle_board, (0, 2), solution, save_to_history=save)
    apply_normal_input(ctx, 4)
    assert counter.calls == 1
    assert seen == [None]


def test_manual_places_clears_notes_without_error_check(puzzle_board):
    seed_candidates(puzzle_board, full=True)
    result = apply_normal_input(make_context(GamePhase.MANUAL, puzzle_board, (0, 2)), 9)
    assert result.board[0][2].value == 9
    assert result.board[0][2].candidates == set()
    assert result.error_cell is None
    assert 9 in result.board[0][3].candidates  # manual mode never propagates
    assert not result.game_completed


def test_manual_note_toggle_round_trip():
    board = create_empty_board()
    ctx = make_context(GamePhase.MANUAL, board, (3, 3))
    added = apply_note_input(ctx, 3)
    assert added.board[3][3].candidates == {3}
    removed = apply_note_input(make_context(GamePhase.MANUAL, added.board, (3, 3)), 3)
    assert removed.board[3][3].candidates == set()


def test_note_on_filled_cell_is_ignored(puzzle_board):
    placed = apply_normal_input(make_context(GamePhase.MANUAL, puzzle_board, (0, 2)), 4)
    note = apply_note_input(make_context(GamePhase.MANUAL, placed.board, (0, 2)), 2)
    assert not note.changed
    assert note.board[0][2].candidates == set()


def test_manual_delete_snapshots_and_clears(puzzle_board):
    placed = apply_normal_input(make_context(GamePhase.MANUAL, puzzle_board, (0, 2)), 4)
    counter = SnapshotCounter()
    result = apply_delete(make_context(GamePhase.MANUAL, placed.board, (0, 2), save_to_history=counter))
    assert result.changed and result.board[0][2].value is None
    assert counter.calls == 1
    empty = apply_delete(make_context(GamePhase.MANUAL, result.board, (0, 2), save_to_history=counter))
    assert not empty.changed and counter.calls == 1


def test_manual_completion_on_full_board(solution_text):
    board = create_empty_board()
    for r, c in iter_positions():
        board[r][c].value = int(solution_text[r * 9 + c])
    board[8][8].value = None
    result = apply_normal_input(make_context(GamePhase.MANUAL, board, (8, 8)), 1)  # wrong, still "complete"
    assert result.game_completed


def test_solving_correct_placement_propagates(puzzle_board, solution):
    seed_candidates(puzzle_board)
    assert 4 in puzzle_board[0][8].candidates
    result = apply_normal_input(make_context(GamePhase.SOLVING, puzzle_board, (0, 2), solution), 4)
    assert result.error_cell is None
    assert result.board[0][2].value == 4
    assert 4 not in result.board[0][8].candidates
    assert 4 in puzzle_board[0][8].candidates  # input board untouched


def test_solving_wrong_digit_flags_error_without_propagation(solution_text):
    # row A solved 1-9 in the stored solution; A1 is empty on the board
    solution = solution_from_string("123456789" + solution_text[9:])
    board = create_empty_board()
    for c in range(1, 9):
        board[0][c].value = c + 1
        board[0][c].is_initial = True
    seed_candidates(board)
    before = clone_board(board)
    result = apply_normal_input(make_context(GamePhase.SOLVING, board, (0, 0), solution), 5)
    assert result.error_cell == (0, 0)
    assert result.board[0][0].value == 5
    assert not result.game_completed
    for r, c in iter_positions():
        if (r, c) != (0, 0):
            assert result.board[r][c].candidates == before[r][c].candidates


def test_solving_has_no_delete(puzzle_board, solution):
    placed = apply_normal_input(make_context(GamePhase.SOLVING, puzzle_board, (0, 2), solution), 4)
    result = apply_delete(make_context(GamePhase.SOLVING, placed.board, (0, 2), solution))
    assert not result.changed and result.board[0][2].value == 4


def _all_but_last(solution_text):
    board = create_empty_board()
    for r, c in iter_positions():
        board[r][c].value = int(solution_text[r * 9 + c])
        board[r][c].is_initial = True
    board[8][8].value = None
    board[8][8].is_initial = False
    return board


def test_competition_completion_stops_timer(solution, solution_text):
    board = _all_but_last(solution_text)
    ctx = make_context(
        GamePhase.COMPETITION, board, (8, 8), solution,
        timer_start_ms=1_000, timer_running=True, now_ms=lambda: 61_000,
    )
    result = apply_normal_input(ctx, int(solution_text[80]))
    assert result.game_completed
    assert result.timer_stopped
    assert result.final_time == 60_000


def test_competition_wrong_last_digit_is_not_completion(solution, solution_text):
    board = _all_but_last(solution_text)
    wrong = 1 if solution_text[80] != "1" else 2
    ctx = make_context(GamePhase.COMPETITION, board, (8, 8), solution, timer_start_ms=0, timer_running=True)
    result = apply_normal_input(ctx, wrong)
    assert result.error_cell is None
    assert not result.game_completed
    assert not result.timer_stopped and result.final_time is None


def test_competition_propagates_even_wrong_digits(puzzle_board, solution):
    seed_candidates(puzzle_board)
    assert 1 in puzzle_board[0][6].candidates
    result = apply_normal_input(make_context(GamePhase.COMPETITION, puzzle_board, (0, 2), solution), 1)
    assert result.error_cell is None
    assert 1 not in result.board[0][6].candidates


def test_competition_validate_completion_checks_solution(solution, solution_text):
    board = _all_but_last(solution_text)
    board[8][8].value = int(solution_text[80])
    assert validate_completion(make_context(GamePhase.COMPETITION, board, None, solution))
    board[8][8].value = 1 if solution_text[80] != "1" else 2
    assert not validate_completion(make_context(GamePhase.COMPETITION, board, None, solution))
    assert validate_completion(make_context(GamePhase.MANUAL, board, None, solution))


def test_contract_violations_are_rejected(puzzle_board):
    with pytest.raises(BoardContractError):
        apply_normal_input(make_context(GamePhase.MANUAL, puzzle_board, (0, 2)), 10)
    with pytest.raises(BoardContractError):
        apply_normal_input(make_context(GamePhase.MANUAL, puzzle_board, (9, 2)), 1)
