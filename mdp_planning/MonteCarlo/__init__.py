"""Monte Carlo utility estimation.

Simulates rollouts of a fixed policy and averages discounted returns to
cross-check the utilities computed by the analytic solvers.

Modules
-------
simulation
    Rollout and aggregation functions
evaluator
    MonteCarloUtilityEvaluator for per-state cross-checks
data_structures
    RolloutResult and UtilityEstimate dataclasses
visualization
    Return histograms and analytic vs empirical bar charts
"""

# Data structures
from .data_structures import RolloutResult, UtilityEstimate

# Core simulation
from .simulation import (
    DEFAULT_MAX_STEPS,
    sample_successor,
    run_single_rollout,
    run_monte_carlo_rollouts,
    compute_utility_estimate,
    estimate,
    estimate_utility,
)

# High-level API
from .evaluator import MonteCarloUtilityEvaluator, UtilityDiscrepancy

__all__ = [
    # Data structures
    "RolloutResult",
    "UtilityEstimate",
    # Core simulation
    "DEFAULT_MAX_STEPS",
    "sample_successor",
    "run_single_rollout",
    "run_monte_carlo_rollouts",
    "compute_utility_estimate",
    "estimate",
    "estimate_utility",
    # High-level API
    "MonteCarloUtilityEvaluator",
    "UtilityDiscrepancy",
]
