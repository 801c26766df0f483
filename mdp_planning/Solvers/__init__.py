"""Analytic MDP solvers.

Modules
-------
bellman
    Q values, greedy actions and synchronous Bellman sweeps
value_iteration
    Value iteration with an epsilon-optimal stopping rule
policy_evaluation
    Bounded-sweep evaluation of a fixed policy
policy_iteration
    Modified policy iteration
data_structures
    ValueIterationResult and PolicyIterationRound
visualization
    Convergence and utility-history plots
"""

from .bellman import (
    UtilityVector,
    Policy,
    QTable,
    q_value,
    best_action,
    state_value,
    q_table,
    bellman_sweep,
    greedy_policy,
    max_norm,
)
from .data_structures import ValueIterationResult, PolicyIterationRound
from .value_iteration import value_iteration, stopping_threshold, DEFAULT_EPSILON
from .policy_evaluation import policy_evaluation, DEFAULT_EVALUATION_SWEEPS
from .policy_iteration import policy_iteration, random_policy

__all__ = [
    "UtilityVector",
    "Policy",
    "QTable",
    "q_value",
    "best_action",
    "state_value",
    "q_table",
    "bellman_sweep",
    "greedy_policy",
    "max_norm",
    "ValueIterationResult",
    "PolicyIterationRound",
    "value_iteration",
    "stopping_threshold",
    "DEFAULT_EPSILON",
    "policy_evaluation",
    "DEFAULT_EVALUATION_SWEEPS",
    "policy_iteration",
    "random_policy",
]
