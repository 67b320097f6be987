"""Configuration loading for the simplex runner."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np
import yaml

from simplex import DEFAULT_TOL, SimplexProblem, SimplexSolver


@dataclass
class ProblemConfig:
    c: np.ndarray
    A: np.ndarray
    b: np.ndarray
    add_slack: bool = False
    slack_count: Optional[int] = None

    def to_problem(self) -> SimplexProblem:
        if self.add_slack:
            return SimplexProblem.from_inequalities(self.A, self.b, self.c)
        return SimplexProblem(A=self.A, b=self.b, c=self.c)

    @property
    def num_slack(self) -> int:
        if self.slack_count is not None:
            return self.slack_count
        # augmented input carries one slack column per constraint row
        return int(self.A.shape[0])


@dataclass
class SolverConfig:
    tol: float = DEFAULT_TOL
    max_iterations: Optional[int] = None

    def build(self) -> SimplexSolver:
        return SimplexSolver(tol=self.tol, max_iterations=self.max_iterations)


@dataclass
class RunConfig:
    log_level: str = "INFO"
    verify: bool = False
    trace: bool = True
    plots: bool = False


@dataclass
class Config:
    problem: ProblemConfig
    solver: SolverConfig
    run: RunConfig
    base_path: Path


def _load_array(path: Path) -> np.ndarray:
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix == ".npy":
        return np.load(path)
    if path.suffix in {".csv", ".txt"}:
        return np.loadtxt(path, delimiter=",", ndmin=1)
    raise ValueError(f"unsupported matrix file type: {path}")


def _array_field(raw: dict[str, Any], key: str, base: Path) -> np.ndarray:
    if key in raw:
        return np.asarray(raw[key], dtype=float)
    path_key = f"{key}_path"
    if path_key in raw:
        return np.asarray(_load_array(base / raw[path_key]), dtype=float)
    raise ValueError(f"problem section needs '{key}' or '{path_key}'")


def _parse_problem(raw: dict[str, Any], base: Path) -> ProblemConfig:
    c = _array_field(raw, "c", base).reshape(-1)
    A = _array_field(raw, "A", base)
    b = _array_field(raw, "b", base).reshape(-1)

    if A.ndim == 1:
        A = A.reshape(1, -1)
    if A.ndim != 2:
        raise ValueError("constraint matrix A must be 2-D")
    if A.shape[1] != c.size:
        raise ValueError(
            f"objective has {c.size} entries but A has {A.shape[1]} columns"
        )
    if A.shape[0] != b.size:
        raise ValueError(f"b has {b.size} entries but A has {A.shape[0]} rows")

    slack_count = raw.get("slack_count")
    return ProblemConfig(
        c=c,
        A=A,
        b=b,
        add_slack=bool(raw.get("add_slack", False)),
        slack_count=int(slack_count) if slack_count is not None else None,
    )


def load_config(path: str | Path) -> Config:
    cfg_path = Path(path).expanduser().resolve()
    with cfg_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    base = cfg_path.parent

    problem_raw = raw.get("problem") or {}
    solver_raw = raw.get("solver") or {}
    run_raw = raw.get("run") or {}

    problem = _parse_problem(problem_raw, base)

    max_iterations = solver_raw.get("max_iterations")
    solver = SolverConfig(
        tol=float(solver_raw.get("tol", DEFAULT_TOL)),
        max_iterations=int(max_iterations) if max_iterations is not None else None,
    )
    if solver.max_iterations is not None and solver.max_iterations < 0:
        raise ValueError("max_iterations must be non-negative")

    run = RunConfig(
        log_level=str(run_raw.get("log_level", "INFO")).upper(),
        verify=bool(run_raw.get("verify", False)),
        trace=bool(run_raw.get("trace", True)),
        plots=bool(run_raw.get("plots", False)),
    )

    return Config(problem=problem, solver=solver, run=run, base_path=base)
