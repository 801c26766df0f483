"""Data structures for Monte Carlo utility estimation."""

from dataclasses import dataclass, field
from typing import Any, List, Tuple


@dataclass
class RolloutResult:
    """Result from a single Monte Carlo rollout.

    Attributes
    ----------
    trial_id : int
        Trial identifier
    total_return : float
        Discounted return sum_t gamma^t r_t
    steps : int
        Number of transitions taken
    terminated : bool
        Whether the rollout ended in a terminal state
    final_state : any
        State the rollout ended in
    trajectory : list of (state, action, next_state, reward) tuples
        Complete trajectory (empty unless requested)
    """
    trial_id: int
    total_return: float
    steps: int
    terminated: bool
    final_state: Any
    trajectory: List[Tuple[Any, Any, Any, float]] = field(default_factory=list)


@dataclass
class UtilityEstimate:
    """Aggregated Monte Carlo estimate of a state's utility.

    Attributes
    ----------
    mean : float
        Empirical expected discounted return
    samples : list of float
        Per-trial discounted returns
    std : float
        Sample standard deviation of the returns
    ci_low : float
        Lower bound of the confidence interval on the mean
    ci_high : float
        Upper bound of the confidence interval on the mean
    num_trials : int
        Number of completed trials
    num_discarded : int
        Number of trials dropped for exceeding the step bound
    """
    mean: float
    samples: List[float] = field(default_factory=list)
    std: float = 0.0
    ci_low: float = 0.0
    ci_high: float = 0.0
    num_trials: int = 0
    num_discarded: int = 0

    @property
    def ci_half_width(self) -> float:
        return (self.ci_high - self.ci_low) / 2.0

    def __str__(self) -> str:
        """Format estimate for display."""
        lines = [
            "Monte Carlo Utility Estimate",
            "=" * 40,
            f"Trials: {self.num_trials}",
            f"Discarded: {self.num_discarded}",
            f"Mean: {self.mean:.4f}",
            f"Std: {self.std:.4f}",
            f"CI: [{self.ci_low:.4f}, {self.ci_high:.4f}]",
        ]
        return "\n".join(lines)
