"""Command-line interface for solving a configured linear program."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from config import Config, load_config
from plots.trace import generate_plots
from report import format_solution
from simplex import SimplexSolution
from solver.lp_solver import LPSolverError, objectives_agree, solve_lp
from telemetry.writer import write_history
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tableau simplex solver")
    parser.add_argument(
        "--config",
        required=True,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--out",
        default=None,
        help="Output directory for the pivot trace and plots.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the log level from the configuration file.",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Cross-check the result against SciPy's HiGHS solver.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    cfg = load_config(args.config)
    setup_logging(args.log_level or cfg.run.log_level)

    problem = cfg.problem.to_problem()
    solution = cfg.solver.build().solve(problem)

    for line in format_solution(solution, cfg.problem.num_slack):
        print(line)

    ok = solution.status == "optimal"
    if args.verify or cfg.run.verify:
        ok = _verify(cfg, solution) and ok

    if args.out is not None:
        _write_outputs(cfg, solution, Path(args.out))

    return 0 if ok else 1


def _verify(cfg: Config, solution: SimplexSolution) -> bool:
    try:
        reference = solve_lp(cfg.problem.to_problem())
    except LPSolverError as exc:
        logger.error("reference solver failed, result cannot be trusted: %s", exc)
        return False
    if objectives_agree(solution, reference, atol=max(cfg.solver.tol, 1e-6)):
        logger.info("result agrees with the HiGHS reference")
        return True
    expected = "unbounded" if reference is None else f"{reference.objective:g}"
    logger.error(
        "result disagrees with the HiGHS reference: got %s (%s), expected %s",
        f"{solution.objective:g}",
        solution.status,
        expected,
    )
    return False


def _write_outputs(cfg: Config, solution: SimplexSolution, out_dir: Path) -> None:
    if cfg.run.trace:
        count = write_history(
            out_dir / "pivots.jsonl", (record.to_dict() for record in solution.trace)
        )
        logger.info("wrote %d pivot records to %s", count, out_dir / "pivots.jsonl")
    if cfg.run.plots:
        generate_plots(solution.trace, out_dir / "plots")


if __name__ == "__main__":
    raise SystemExit(main())
