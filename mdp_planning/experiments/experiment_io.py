"""Output of solver experiments.

A run produces one JSON document holding a provenance block (when, where
and from which revision the run was made, with the full config) next to
the solver results, plus a tidy CSV with one row per state comparing the
analytic utility with its Monte Carlo estimate.
"""

import csv
import json
import os
import platform
import subprocess
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
from statsmodels.stats.proportion import proportion_confint

from .. import __version__
from ..MonteCarlo import UtilityDiscrepancy, UtilityEstimate

# Column order of the per-state CSV
UTILITY_COLUMNS = [
    "case_study",
    "state",
    "analytic",
    "mc_mean",
    "mc_ci_low",
    "mc_ci_high",
    "mc_trials",
    "mc_discarded",
    "abs_error",
    "within_tolerance",
]


# ============================================================
# Provenance
# ============================================================

def git_revision() -> Optional[str]:
    """Short hash of the checked-out commit, None outside a git work tree."""
    try:
        out = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            stderr=subprocess.DEVNULL, text=True, timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out.strip() or None


def run_provenance(config: Any) -> Dict[str, Any]:
    """Describe a run: timestamp, revision, interpreter, versions and config."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "git_revision": git_revision(),
        "host": platform.node(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "numpy": np.__version__,
        "mdp_planning": __version__,
        "config": config_record(config),
    }


def config_record(config: Any) -> Dict[str, Any]:
    """Flatten an experiment config into JSON values.

    Builder functions are recorded by dotted name so a run can be traced
    back to the case study that produced it.
    """
    if is_dataclass(config):
        items = {f.name: getattr(config, f.name) for f in fields(config)}
    else:
        items = dict(vars(config))
    return {name: to_json(value) for name, value in items.items()}


def to_json(value: Any) -> Any:
    """Convert solver output (states, actions, numpy scalars) to JSON values.

    Dict keys become strings since states and actions may be tuples or
    None.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if is_dataclass(value):
        return config_record(value)
    if callable(value):
        return f"{value.__module__}.{getattr(value, '__qualname__', repr(value))}"
    return repr(value)


# ============================================================
# Terminal outcome rates
# ============================================================

def absorption_interval(count: int, trials: int, alpha: float = 0.05) -> Tuple[float, float]:
    """Clopper-Pearson interval on the rate of rollouts ending in a terminal.

    Parameters
    ----------
    count : int
        Rollouts absorbed in the terminal
    trials : int
        Completed rollouts
    alpha : float
        Significance level (0.05 -> 95% interval)

    Returns
    -------
    (lower, upper)
    """
    if trials == 0:
        return (0.0, 1.0)
    lower, upper = proportion_confint(count, trials, alpha=alpha, method="beta")
    return (float(lower), float(upper))


# ============================================================
# Per-state utility table
# ============================================================

def utility_rows(
    case_study: str,
    report: Dict[Any, UtilityDiscrepancy],
    estimates: Dict[Any, UtilityEstimate],
    label: Callable[[Any], str] = repr,
) -> List[Dict[str, Any]]:
    """One tidy row per state of a Monte Carlo cross-check."""
    rows = []
    for s, row in report.items():
        est = estimates[s]
        rows.append({
            "case_study": case_study,
            "state": label(s),
            "analytic": row.analytic,
            "mc_mean": row.empirical,
            "mc_ci_low": est.ci_low,
            "mc_ci_high": est.ci_high,
            "mc_trials": est.num_trials,
            "mc_discarded": est.num_discarded,
            "abs_error": row.abs_error,
            "within_tolerance": row.within_tolerance,
        })
    return rows


def write_results(
    path: str,
    config: Any,
    results: Dict[str, Any],
    rows: Optional[List[Dict[str, Any]]] = None,
) -> List[str]:
    """Write the JSON document and, if rows are given, the per-state CSV.

    The CSV goes next to the JSON as ``<name>_utilities.csv``.

    Returns
    -------
    list of str
        Paths of the files written
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    document = {
        "provenance": run_provenance(config),
        "results": to_json(results),
    }
    with open(path, "w") as f:
        json.dump(document, f, indent=2)
    written = [path]

    if rows:
        csv_path = os.path.splitext(path)[0] + "_utilities.csv"
        with open(csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=UTILITY_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
        written.append(csv_path)

    return written
