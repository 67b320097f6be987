"""Reference linear program solver built on SciPy, used to cross-check results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.optimize import linprog

from simplex import SimplexProblem, SimplexSolution

# scipy.optimize.linprog status codes
_STATUS_OPTIMAL = 0
_STATUS_UNBOUNDED = 3


@dataclass
class LPSolution:
    x: np.ndarray
    status: str
    objective: float


class LPSolverError(RuntimeError):
    pass


def solve_lp(problem: SimplexProblem) -> Optional[LPSolution]:
    """Solve the augmented equality form with HiGHS; ``None`` when unbounded."""
    c = np.asarray(problem.c, dtype=float).reshape(-1)
    A = np.asarray(problem.A, dtype=float)
    b = np.asarray(problem.b, dtype=float).reshape(-1)
    n = c.size

    if A.ndim != 2 or A.shape[1] != n:
        raise ValueError("A must be a 2-D array with n columns")
    if b.size != A.shape[0]:
        raise ValueError("b must match the number of rows in A")

    res = linprog(
        -c,
        A_eq=A,
        b_eq=b,
        bounds=[(0, None)] * n,
        method="highs",
    )
    if res.status == _STATUS_UNBOUNDED:
        return None
    if res.status != _STATUS_OPTIMAL:
        raise LPSolverError(res.message)
    return LPSolution(res.x, "optimal", float(c @ res.x))


def objectives_agree(
    solution: SimplexSolution,
    reference: Optional[LPSolution],
    *,
    atol: float = 1e-6,
) -> bool:
    """True when both solvers reach the same verdict and objective value."""
    if reference is None:
        return solution.status == "unbounded"
    if solution.status != "optimal":
        return False
    return bool(np.isclose(solution.objective, reference.objective, atol=atol))
