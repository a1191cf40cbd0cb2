"""
Optimal assignment (Kuhn-Munkres / Hungarian algorithm) over numpy matrices.

`hungarian` solves a square matrix exactly in O(n^3) using the
shortest-augmenting-path formulation with row/column potentials. Rows are
inserted in ascending order, and when several columns tie for the smallest
reduced cost the lowest column index wins (`numpy.argmin` returns the first
minimum), so identical matrices always produce identical assignments.

`solve_assignment` handles the rectangular roster x slots case: it checks
finiteness, pads to square with the sentinel, solves, and drops anything that
touches a phantom row/column or a sentinel-valued cell.
"""
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from lineup.errors import NonFiniteCostError

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


def validate_cost_matrix(cost: MatrixLike, formation_code: Optional[str] = None) -> np.ndarray:
    """Return `cost` as a 2-D float array, raising on NaN/inf cells."""
    matrix = np.asarray(cost, dtype=float)
    if matrix.ndim != 2:
        raise ValueError(f"Cost matrix must be 2-D, got shape {matrix.shape}")
    finite = np.isfinite(matrix)
    if not finite.all():
        row, col = (int(i) for i in np.argwhere(~finite)[0])
        raise NonFiniteCostError((row, col), float(matrix[row, col]), formation_code)
    return matrix


def pad_to_square(cost: MatrixLike, fill_value: float) -> np.ndarray:
    """Embed `cost` in the top-left of an n x n matrix filled with `fill_value`."""
    matrix = np.asarray(cost, dtype=float)
    rows, cols = matrix.shape
    n = max(rows, cols)
    if rows == cols:
        return matrix.copy()
    padded = np.full((n, n), fill_value, dtype=float)
    padded[:rows, :cols] = matrix
    return padded


def hungarian(cost: MatrixLike) -> List[int]:
    """
    Minimum-cost perfect matching on a square matrix.
    Returns `assignment` where `assignment[row] == col`.
    """
    matrix = np.asarray(cost, dtype=float)
    n = matrix.shape[0]
    if n == 0:
        return []
    if matrix.shape != (n, n):
        raise ValueError(f"hungarian() needs a square matrix, got shape {matrix.shape}")

    # 1-based potentials; column 0 is the virtual root of each augmenting search
    u = np.zeros(n + 1)
    v = np.zeros(n + 1)
    p = np.zeros(n + 1, dtype=int)     # p[j]: row matched to column j (0 = free)
    way = np.zeros(n + 1, dtype=int)   # predecessor column on the alternating path

    for i in range(1, n + 1):
        p[0] = i
        j0 = 0
        minv = np.full(n + 1, np.inf)
        used = np.zeros(n + 1, dtype=bool)

        while True:
            used[j0] = True
            i0 = p[j0]
            free = ~used

            reduced = np.full(n + 1, np.inf)
            reduced[1:] = matrix[i0 - 1] - u[i0] - v[1:]
            improved = free & (reduced < minv)
            minv[improved] = reduced[improved]
            way[improved] = j0

            candidates = np.where(free, minv, np.inf)
            j1 = int(np.argmin(candidates))
            delta = candidates[j1]

            u[p[used]] += delta
            v[used] -= delta
            minv[free] -= delta

            j0 = j1
            if p[j0] == 0:
                break

        # flip the alternating path back to the root
        while j0 != 0:
            j1 = way[j0]
            p[j0] = p[j1]
            j0 = j1

    assignment = [-1] * n
    for j in range(1, n + 1):
        assignment[p[j] - 1] = j - 1
    return assignment


def assignment_cost(cost: MatrixLike, assignment: Sequence[int]) -> float:
    matrix = np.asarray(cost, dtype=float)
    return float(sum(matrix[r, c] for r, c in enumerate(assignment)))


def solve_assignment(
    cost: MatrixLike,
    sentinel: float,
    formation_code: Optional[str] = None,
) -> List[Tuple[int, int]]:
    """
    Optimal (row, col) pairs for a rectangular matrix, sorted by column.

    Pairs on phantom padding, or on cells at/above half the sentinel, are
    discarded, so the result may cover fewer columns than the input has.
    """
    matrix = validate_cost_matrix(cost, formation_code)
    rows, cols = matrix.shape
    if rows == 0 or cols == 0:
        return []
    square = pad_to_square(matrix, sentinel)
    assignment = hungarian(square)

    discard_at = sentinel / 2.0
    pairs = [
        (r, c)
        for r, c in enumerate(assignment)
        if r < rows and c < cols and matrix[r, c] < discard_at
    ]
    return sorted(pairs, key=lambda rc: rc[1])
