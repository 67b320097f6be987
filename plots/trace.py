"""Plotting utilities for the pivot trace."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np

from simplex import PivotRecord


def generate_plots(history: Iterable[PivotRecord], out_dir: str | Path) -> Optional[Path]:
    records = list(history)
    if not records:
        return None
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    # iteration 0 is the initial tableau at the origin
    t = np.array([0] + [rec.iteration for rec in records], dtype=float)
    objective = np.array([0.0] + [rec.objective for rec in records], dtype=float)
    pivots = np.array([abs(rec.pivot_value) for rec in records], dtype=float)

    plt.figure(figsize=(6, 4))
    plt.step(t, objective, where="post", label="objective")
    plt.xlabel("pivot")
    plt.ylabel("objective value")
    plt.legend()
    plt.tight_layout()
    target = out_path / "objective_trace.png"
    plt.savefig(target, dpi=150)
    plt.close()

    plt.figure(figsize=(6, 4))
    plt.semilogy(t[1:], pivots, marker="o", linestyle="none")
    plt.xlabel("pivot")
    plt.ylabel("|pivot element|")
    plt.tight_layout()
    plt.savefig(out_path / "pivot_magnitude.png", dpi=150)
    plt.close()

    return target
