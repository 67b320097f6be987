"""Tableau implementation of the primal simplex method for augmented <= LPs.

The constraint matrix handed to the solver must already carry its slack
columns as an identity block, so the origin is a basic feasible solution and
no phase-1 step is needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_TOL = 1e-9


@dataclass(frozen=True)
class SimplexProblem:
    """Maximize c^T x subject to A x = b (slack included), x >= 0."""

    A: np.ndarray
    b: np.ndarray
    c: np.ndarray

    @classmethod
    def from_inequalities(cls, A, b, c) -> "SimplexProblem":
        """Append one slack column per row of ``A x <= b`` and pad ``c``."""
        A = np.asarray(A, dtype=float)
        c = np.asarray(c, dtype=float).reshape(-1)
        m = A.shape[0]
        augmented = np.hstack([A, np.eye(m)])
        return cls(
            A=augmented,
            b=np.asarray(b, dtype=float).reshape(-1),
            c=np.concatenate([c, np.zeros(m, dtype=float)]),
        )


@dataclass(frozen=True)
class PivotRecord:
    iteration: int
    entering: int
    leaving: int
    pivot_value: float
    objective: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "iteration": self.iteration,
            "entering": self.entering,
            "leaving": self.leaving,
            "pivot_value": self.pivot_value,
            "objective": self.objective,
        }


@dataclass(frozen=True)
class SimplexSolution:
    x: np.ndarray
    objective: float
    status: str
    iterations: int
    basis: Dict[int, int] = field(default_factory=dict)
    trace: List[PivotRecord] = field(default_factory=list)


class SimplexError(RuntimeError):
    """Raised when the simplex solver cannot produce a result."""


class PivotError(SimplexError):
    """Pivot requested on a zero entry; the row/column selection is broken."""


def build_tableau(c, A, b) -> np.ndarray:
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float).reshape(-1)
    c = np.asarray(c, dtype=float).reshape(-1)
    m, n = A.shape

    tableau = np.zeros((m + 1, n + 1), dtype=float)
    tableau[:m, :n] = A
    tableau[:m, -1] = b
    tableau[-1, :n] = -c
    return tableau


def is_optimal(tableau: np.ndarray, tol: float = DEFAULT_TOL) -> bool:
    return bool(np.all(tableau[-1, :-1] >= -tol))


def choose_entering_column(tableau: np.ndarray, tol: float = DEFAULT_TOL) -> Optional[int]:
    """Dantzig's rule: most negative reduced cost, left-most on ties."""
    last_row = tableau[-1, :-1]
    min_value = np.min(last_row)
    if min_value >= -tol:
        return None
    # argmin returns the first occurrence of the minimum
    return int(np.argmin(last_row))


def choose_leaving_row(
    tableau: np.ndarray, pivot_col: int, tol: float = DEFAULT_TOL
) -> Optional[int]:
    """Minimum-ratio test over rows with a positive entry, top-most on ties."""
    column = tableau[:-1, pivot_col]
    rhs = tableau[:-1, -1]
    best_row: Optional[int] = None
    best_ratio = np.inf
    for idx, coeff in enumerate(column):
        if coeff > tol:
            ratio = rhs[idx] / coeff
            if ratio < best_ratio:
                best_ratio = ratio
                best_row = idx
    return best_row


def pivot(tableau: np.ndarray, pivot_row: int, pivot_col: int) -> None:
    pivot_value = tableau[pivot_row, pivot_col]
    if pivot_value == 0.0:
        raise PivotError(f"pivot value is zero at row {pivot_row}, column {pivot_col}")
    tableau[pivot_row, :] /= pivot_value
    normalized = tableau[pivot_row, :].copy()
    for row in range(tableau.shape[0]):
        if row == pivot_row:
            continue
        factor = tableau[row, pivot_col]
        if factor != 0.0:
            tableau[row, :] -= factor * normalized


def find_basis(tableau: np.ndarray, tol: float = DEFAULT_TOL) -> Dict[int, int]:
    """Map each basic column to the constraint row holding its unit entry.

    A column is basic when exactly one constraint-row entry is non-zero and
    that entry equals 1. When several unit columns share a row, the row goes
    to the left-most one with a zero objective-row entry.
    """
    constraints = tableau[:-1, :-1]
    reduced = tableau[-1, :-1]
    candidates: Dict[int, List[int]] = {}
    for col in range(constraints.shape[1]):
        nonzero = np.flatnonzero(np.abs(constraints[:, col]) > tol)
        if nonzero.size != 1:
            continue
        row = int(nonzero[0])
        if abs(constraints[row, col] - 1.0) > tol:
            continue
        candidates.setdefault(row, []).append(col)

    basis: Dict[int, int] = {}
    for row, cols in candidates.items():
        priced_out = [col for col in cols if abs(reduced[col]) <= tol]
        basis[(priced_out or cols)[0]] = row
    return dict(sorted(basis.items()))


def extract_solution(
    tableau: np.ndarray,
    tol: float = DEFAULT_TOL,
    basis: Optional[Dict[int, int]] = None,
) -> Tuple[np.ndarray, float, Dict[int, int]]:
    """Read variable values off the tableau; ``basis`` maps column to row."""
    x = np.zeros(tableau.shape[1] - 1, dtype=float)
    if basis is None:
        basis = find_basis(tableau, tol)
    for col, row in basis.items():
        x[col] = tableau[row, -1]
    return x, float(tableau[-1, -1]), basis


class SimplexSolver:
    def __init__(
        self, *, tol: float = DEFAULT_TOL, max_iterations: Optional[int] = None
    ) -> None:
        self._tol = tol
        self._max_iterations = max_iterations

    def solve(self, problem: SimplexProblem) -> SimplexSolution:
        tableau = build_tableau(problem.c, problem.A, problem.b)
        m, n = tableau.shape[0] - 1, tableau.shape[1] - 1
        logger.debug("starting simplex on %d constraints and %d variables", m, n)

        # row -> basic column, seeded from the unit (slack) columns
        basic_cols = {row: col for col, row in find_basis(tableau, self._tol).items()}
        trace: List[PivotRecord] = []
        status = "optimal"
        iterations = 0

        while not is_optimal(tableau, self._tol):
            if self._max_iterations is not None and iterations >= self._max_iterations:
                status = "iteration_limit"
                logger.warning("stopped after %d pivots without reaching optimality", iterations)
                break
            pivot_col = self._choose_entering_column(tableau)
            if pivot_col is None:
                status = "stalled"
                logger.warning("no entering column found; no further progress possible")
                break
            pivot_row = self._choose_leaving_row(tableau, pivot_col)
            if pivot_row is None:
                status = "unbounded"
                logger.warning("problem is unbounded: no valid leaving variable for column %d", pivot_col)
                break
            pivot_value = float(tableau[pivot_row, pivot_col])
            self._pivot(tableau, pivot_row, pivot_col)
            basic_cols[pivot_row] = pivot_col
            iterations += 1
            record = PivotRecord(
                iteration=iterations,
                entering=pivot_col,
                leaving=pivot_row,
                pivot_value=pivot_value,
                objective=float(tableau[-1, -1]),
            )
            trace.append(record)
            logger.debug(
                "pivot %d: column %d enters at row %d (pivot %.6g), objective %.6g",
                record.iteration,
                record.entering,
                record.leaving,
                record.pivot_value,
                record.objective,
            )

        basis = dict(sorted((col, row) for row, col in basic_cols.items()))
        x, objective, basis = extract_solution(tableau, self._tol, basis)
        if status == "optimal":
            logger.info("optimal after %d pivots, objective %.6g", iterations, objective)
        return SimplexSolution(
            x=x,
            objective=objective,
            status=status,
            iterations=iterations,
            basis=basis,
            trace=trace,
        )

    def _choose_entering_column(self, tableau: np.ndarray) -> Optional[int]:
        return choose_entering_column(tableau, self._tol)

    def _choose_leaving_row(self, tableau: np.ndarray, pivot_col: int) -> Optional[int]:
        return choose_leaving_row(tableau, pivot_col, self._tol)

    def _pivot(self, tableau: np.ndarray, pivot_row: int, pivot_col: int) -> None:
        pivot(tableau, pivot_row, pivot_col)


def solve(
    objective: Sequence[float],
    constraints,
    rhs: Sequence[float],
    *,
    tol: float = DEFAULT_TOL,
    max_iterations: Optional[int] = None,
) -> Optional[Tuple[np.ndarray, float]]:
    """Return ``(solution, objective_value)`` or ``None`` when unbounded."""
    problem = SimplexProblem(
        A=np.asarray(constraints, dtype=float),
        b=np.asarray(rhs, dtype=float).reshape(-1),
        c=np.asarray(objective, dtype=float).reshape(-1),
    )
    result = SimplexSolver(tol=tol, max_iterations=max_iterations).solve(problem)
    if result.status == "unbounded":
        return None
    if result.status != "optimal":
        raise SimplexError(f"simplex solver failed: {result.status}")
    return result.x, result.objective
