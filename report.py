"""Plain-text formatting of simplex results."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from simplex import SimplexSolution

UNBOUNDED_MESSAGE = "The problem is unbounded or infeasible."


def _format_values(prefix: str, values: Iterable[float]) -> str:
    return ", ".join(f"{prefix}{i + 1}: {float(val):g}" for i, val in enumerate(values))


def format_values(x: Sequence[float], num_slack: int) -> str:
    """Render ``x`` as structural values followed by the trailing slack values."""
    split = max(len(x) - num_slack, 0)
    x_vals = _format_values("x", x[:split])
    s_vals = _format_values("s", x[split:])
    return f"x vals: [{x_vals}] s vals: [{s_vals}]"


def format_solution(solution: SimplexSolution, num_slack: int) -> List[str]:
    if solution.status == "unbounded":
        return [UNBOUNDED_MESSAGE]
    lines = [
        format_values(solution.x, num_slack),
        f"Optimal objective value: {solution.objective:g}",
        f"Base (indices of basic variables): {sorted(solution.basis)}",
    ]
    if solution.status != "optimal":
        lines.insert(0, f"Solver stopped early: {solution.status} after {solution.iterations} pivots")
    return lines
