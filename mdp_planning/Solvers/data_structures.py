"""Result records returned by the analytic solvers."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ValueIterationResult:
    """Output of value iteration.

    Unpacks as ``utility, policy, iterations = value_iteration(...)``.

    Attributes
    ----------
    utility : dict
        Converged utility vector, state -> float
    policy : dict
        Greedy policy extracted from `utility`, state -> action
    iterations : int
        Number of Bellman sweeps performed
    deltas : list of float
        Max-norm change produced by each sweep
    history : list of dict
        Utility vector after each sweep (empty unless requested)
    """
    utility: Dict[Any, float]
    policy: Dict[Any, Any]
    iterations: int
    deltas: List[float] = field(default_factory=list)
    history: List[Dict[Any, float]] = field(default_factory=list)

    def __iter__(self):
        return iter((self.utility, self.policy, self.iterations))


@dataclass
class PolicyIterationRound:
    """Snapshot taken at the end of one policy iteration round.

    Attributes
    ----------
    round_index : int
        1-based round counter
    policy : dict
        Policy after the improvement step of this round
    utility : dict
        Utility of the policy that entered this round
    changed : bool
        Whether any state's action changed in this round
    """
    round_index: int
    policy: Dict[Any, Any]
    utility: Dict[Any, float]
    changed: bool
