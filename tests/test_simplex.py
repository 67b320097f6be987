from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from simplex import (
    PivotError,
    SimplexError,
    SimplexProblem,
    SimplexSolver,
    build_tableau,
    choose_entering_column,
    choose_leaving_row,
    extract_solution,
    find_basis,
    is_optimal,
    pivot,
    solve,
)

OBJECTIVE = np.array([2.0, -3.0, 0.0, -5.0, 0.0, 0.0, 0.0])
CONSTRAINTS = np.array(
    [
        [-1.0, 1.0, -1.0, -1.0, 1.0, 0.0, 0.0],
        [2.0, 4.0, 0.0, 0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0, 1.0, 0.0, 0.0, 1.0],
    ]
)


def test_simplex_solver_finds_optimum():
    A = np.array(
        [
            [1.0, 1.0],
            [1.0, 0.0],
            [0.0, 1.0],
        ]
    )
    b = np.array([4.0, 2.0, 3.0])
    c = np.array([3.0, 2.0])
    solver = SimplexSolver()
    result = solver.solve(SimplexProblem.from_inequalities(A, b, c))
    assert result.status == "optimal"
    assert result.iterations == 2
    np.testing.assert_allclose(result.x, [2.0, 2.0, 0.0, 0.0, 1.0], atol=1e-9)
    assert result.objective == pytest.approx(10.0, rel=1e-9)


def test_solve_reference_scenario():
    result = solve(OBJECTIVE, CONSTRAINTS, [8.0, 10.0, 3.0])
    assert result is not None
    x, objective = result
    np.testing.assert_allclose(x, [5.0, 0.0, 0.0, 0.0, 13.0, 0.0, 3.0], atol=1e-9)
    assert objective == pytest.approx(10.0)


def test_solve_degenerate_scenario_terminates():
    result = solve(OBJECTIVE, CONSTRAINTS, [8.0, 0.0, 3.0])
    assert result is not None
    x, objective = result
    np.testing.assert_allclose(x, [0.0, 0.0, 0.0, 0.0, 8.0, 0.0, 3.0], atol=1e-9)
    assert np.all(x >= 0.0)
    assert objective == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("rhs", [[8.0, 10.0, 3.0], [8.0, 0.0, 3.0], [1.0, 7.0, 2.5]])
def test_solution_is_consistent_and_feasible(rhs):
    result = SimplexSolver().solve(SimplexProblem(A=CONSTRAINTS, b=np.array(rhs), c=OBJECTIVE))
    assert result.status == "optimal"
    assert OBJECTIVE @ result.x == pytest.approx(result.objective)
    np.testing.assert_allclose(CONSTRAINTS @ result.x, rhs, atol=1e-9)
    assert np.all(result.x >= -1e-9)
    # structural part satisfies the original <= rows
    structural = CONSTRAINTS[:, :4] @ result.x[:4]
    assert np.all(structural <= np.array(rhs) + 1e-9)


def test_objective_row_is_certificate_at_termination():
    tableau = build_tableau(OBJECTIVE, CONSTRAINTS, [8.0, 10.0, 3.0])
    pivots = 0
    while not is_optimal(tableau):
        col = choose_entering_column(tableau)
        row = choose_leaving_row(tableau, col)
        assert row is not None
        pivot(tableau, row, col)
        pivots += 1
    assert pivots == 1
    assert np.all(tableau[-1, :-1] >= -1e-9)


def test_extraction_is_idempotent():
    tableau = build_tableau(OBJECTIVE, CONSTRAINTS, [8.0, 10.0, 3.0])
    pivot(tableau, 1, 0)
    snapshot = tableau.copy()
    assert is_optimal(tableau)
    first = extract_solution(tableau)
    assert is_optimal(tableau)
    second = extract_solution(tableau)
    np.testing.assert_array_equal(first[0], second[0])
    assert first[1] == second[1]
    assert first[2] == second[2]
    np.testing.assert_array_equal(tableau, snapshot)


def test_build_tableau_layout():
    tableau = build_tableau([3.0, 2.0], [[1.0, 2.0], [4.0, 5.0]], [6.0, 7.0])
    expected = np.array(
        [
            [1.0, 2.0, 6.0],
            [4.0, 5.0, 7.0],
            [-3.0, -2.0, 0.0],
        ]
    )
    np.testing.assert_array_equal(tableau, expected)


def test_entering_column_prefers_most_negative_then_leftmost():
    tableau = np.array(
        [
            [1.0, 1.0, 1.0, 1.0, 5.0],
            [-1.0, -4.0, -2.0, -4.0, 0.0],
        ]
    )
    assert choose_entering_column(tableau) == 1
    tableau[-1, :-1] = [0.0, 1.0, 2.0, 3.0]
    assert choose_entering_column(tableau) is None


def test_leaving_row_minimum_ratio_topmost_on_ties():
    tableau = np.array(
        [
            [-1.0, 0.0, 8.0],
            [2.0, 0.0, 6.0],
            [1.0, 0.0, 3.0],
            [4.0, 0.0, 20.0],
            [-1.0, 0.0, 0.0],
        ]
    )
    # rows 1 and 2 both give ratio 3; row 0 is skipped for its negative entry
    assert choose_leaving_row(tableau, 0) == 1
    assert choose_leaving_row(tableau, 1) is None


def test_pivot_normalizes_and_eliminates_column():
    tableau = build_tableau(OBJECTIVE, CONSTRAINTS, [8.0, 10.0, 3.0])
    pivot(tableau, 1, 0)
    np.testing.assert_allclose(tableau[:, 0], [0.0, 1.0, 0.0, 0.0])
    np.testing.assert_allclose(tableau[1], [1.0, 2.0, 0.0, 0.0, 0.0, 0.5, 0.0, 5.0])
    np.testing.assert_allclose(tableau[0], [0.0, 3.0, -1.0, -1.0, 1.0, 0.5, 0.0, 13.0])
    np.testing.assert_allclose(tableau[-1], [0.0, 7.0, 0.0, 5.0, 0.0, 1.0, 0.0, 10.0])


def test_pivot_on_zero_entry_is_fatal():
    tableau = build_tableau([1.0, 0.0], [[0.0, 1.0]], [1.0])
    with pytest.raises(PivotError):
        pivot(tableau, 0, 0)


def test_unbounded_column_reports_no_solution():
    c = np.array([1.0, 0.0])
    A = np.array([[-1.0, 1.0]])
    b = np.array([1.0])
    assert solve(c, A, b) is None

    result = SimplexSolver().solve(SimplexProblem(A=A, b=b, c=c))
    assert result.status == "unbounded"
    assert result.iterations == 0
    assert result.trace == []


def test_find_basis_requires_single_unit_entry():
    tableau = np.array(
        [
            [1.0, 0.0, 2.0, 1.0, 0.0, 4.0],
            [0.0, 1.0, 0.0, 1.0, 1.0, 5.0],
            [0.0, 0.0, 1.0, 0.0, 0.0, 0.0],
        ]
    )
    # column 3 has two non-zeros, column 4 loses row 1 to column 1
    assert find_basis(tableau) == {0: 0, 1: 1}
    x, objective, _ = extract_solution(tableau)
    np.testing.assert_array_equal(x, [4.0, 5.0, 0.0, 0.0, 0.0])
    assert objective == 0.0


def test_iteration_cap_stops_without_changing_results():
    problem = SimplexProblem.from_inequalities(
        [[1.0, 1.0], [1.0, 0.0], [0.0, 1.0]], [4.0, 2.0, 3.0], [3.0, 2.0]
    )
    capped = SimplexSolver(max_iterations=1).solve(problem)
    assert capped.status == "iteration_limit"
    assert capped.iterations == 1

    uncapped = SimplexSolver(max_iterations=2).solve(problem)
    assert uncapped.status == "optimal"
    assert uncapped.objective == pytest.approx(10.0)

    with pytest.raises(SimplexError):
        solve(problem.c, problem.A, problem.b, max_iterations=1)


def test_trace_records_each_pivot():
    problem = SimplexProblem.from_inequalities(
        [[1.0, 1.0], [1.0, 0.0], [0.0, 1.0]], [4.0, 2.0, 3.0], [3.0, 2.0]
    )
    result = SimplexSolver().solve(problem)
    assert [(rec.entering, rec.leaving) for rec in result.trace] == [(0, 1), (1, 0)]
    assert [rec.objective for rec in result.trace] == pytest.approx([6.0, 10.0])
    assert result.trace[0].to_dict()["iteration"] == 1


def test_parallel_columns_report_the_entering_variable():
    c = np.array([1.0, 2.0, 0.0])
    result = SimplexSolver().solve(SimplexProblem(A=np.array([[1.0, 1.0, 1.0]]), b=np.array([4.0]), c=c))
    assert result.status == "optimal"
    assert result.basis == {1: 0}
    np.testing.assert_allclose(result.x, [0.0, 4.0, 0.0])
    assert c @ result.x == pytest.approx(result.objective)
    assert result.objective == pytest.approx(8.0)


def test_find_basis_prefers_priced_out_column_on_shared_row():
    tableau = build_tableau([1.0, 2.0, 0.0], [[1.0, 1.0, 1.0]], [4.0])
    assert find_basis(tableau) == {2: 0}
    pivot(tableau, 0, 1)
    x, objective, basis = extract_solution(tableau)
    assert basis == {1: 0}
    np.testing.assert_allclose(x, [0.0, 4.0, 0.0])
    assert objective == pytest.approx(8.0)


class _NoEnteringSolver(SimplexSolver):
    def _choose_entering_column(self, tableau):
        return None


def test_missing_entering_column_reports_stalled():
    problem = SimplexProblem.from_inequalities([[1.0]], [2.0], [1.0])
    result = _NoEnteringSolver().solve(problem)
    assert result.status == "stalled"
    assert result.iterations == 0
    np.testing.assert_allclose(result.x, [0.0, 2.0])
