from itertools import permutations

import numpy as np
import pytest

from lineup.errors import LineupError, NonFiniteCostError
from lineup.hungarian import (
    assignment_cost,
    hungarian,
    pad_to_square,
    solve_assignment,
    validate_cost_matrix,
)

SENTINEL = 1e6


def _brute_force_min(matrix: np.ndarray) -> float:
    n = matrix.shape[0]
    return min(sum(matrix[r, c] for r, c in enumerate(perm)) for perm in permutations(range(n)))


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6])
def test_matches_brute_force_on_random_matrices(n):
    rng = np.random.RandomState(1234 + n)
    for _ in range(25):
        matrix = rng.uniform(-3.0, 3.0, size=(n, n))
        assignment = hungarian(matrix)
        assert sorted(assignment) == list(range(n))
        assert assignment_cost(matrix, assignment) <= _brute_force_min(matrix) + 1e-9


@pytest.mark.parametrize("n", [3, 5, 6])
def test_matches_brute_force_with_heavy_ties(n):
    rng = np.random.RandomState(99 + n)
    for _ in range(25):
        matrix = rng.randint(0, 3, size=(n, n)).astype(float)
        assignment = hungarian(matrix)
        assert sorted(assignment) == list(range(n))
        assert assignment_cost(matrix, assignment) == pytest.approx(_brute_force_min(matrix))


def test_tie_break_is_deterministic_and_prefers_low_columns():
    matrix = np.zeros((4, 4))
    first = hungarian(matrix)
    assert first == hungarian(matrix.copy())
    assert first == [0, 1, 2, 3]


def test_known_small_case():
    matrix = [[4, 1, 3], [2, 0, 5], [3, 2, 2]]
    assignment = hungarian(matrix)
    assert assignment == [1, 0, 2]
    assert assignment_cost(matrix, assignment) == 5


def test_empty_and_non_square_inputs():
    assert hungarian(np.zeros((0, 0))) == []
    with pytest.raises(ValueError):
        hungarian(np.zeros((2, 3)))


def test_pad_to_square_fills_with_sentinel():
    padded = pad_to_square(np.ones((2, 4)), SENTINEL)
    assert padded.shape == (4, 4)
    assert (padded[:2] == 1).all()
    assert (padded[2:] == SENTINEL).all()


def test_padding_never_selects_sentinel_when_feasible():
    rng = np.random.RandomState(7)
    for _ in range(20):
        rows, cols = 7, 4
        matrix = rng.uniform(-2.0, 2.0, size=(rows, cols))
        # forbid a few cells but keep a feasible diagonal
        for r in range(rows):
            for c in range(cols):
                if r != c and rng.rand() < 0.4:
                    matrix[r, c] = SENTINEL
        pairs = solve_assignment(matrix, SENTINEL)
        assert len(pairs) == cols
        assert [c for _, c in pairs] == list(range(cols))
        assert len({r for r, _ in pairs}) == cols
        assert all(matrix[r, c] < SENTINEL / 2 for r, c in pairs)


def test_wide_matrix_leaves_columns_unfilled():
    matrix = np.array([[1.0, 2.0, 3.0, 4.0], [2.0, 1.0, 0.5, 3.0]])
    pairs = solve_assignment(matrix, SENTINEL)
    assert pairs == [(0, 0), (1, 2)]


def test_infeasible_cells_are_discarded():
    matrix = np.array([[SENTINEL, SENTINEL], [0.0, SENTINEL], [1.0, 2.0]])
    pairs = solve_assignment(matrix, SENTINEL)
    assert pairs == [(1, 0), (2, 1)]

    blocked = np.array([[SENTINEL, 1.0], [SENTINEL, 2.0]])
    assert solve_assignment(blocked, SENTINEL) == [(0, 1)]


def test_non_finite_cells_fail_loudly():
    matrix = np.zeros((3, 3))
    matrix[1, 2] = np.nan
    with pytest.raises(NonFiniteCostError) as excinfo:
        solve_assignment(matrix, SENTINEL, formation_code="433_dm")
    assert excinfo.value.cell == (1, 2)
    assert excinfo.value.formation_code == "433_dm"
    assert isinstance(excinfo.value, LineupError)

    with pytest.raises(NonFiniteCostError):
        validate_cost_matrix([[0.0, np.inf]])
