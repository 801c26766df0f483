"""High-level Monte Carlo cross-check of analytic utilities.

This module provides the MonteCarloUtilityEvaluator class, which estimates
the utility of a fixed policy from several start states and compares the
estimates against a utility vector produced by an analytic solver.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from ..Models.mdp import MDP
from ..Solvers.policy_evaluation import check_policy
from .data_structures import UtilityEstimate
from .simulation import DEFAULT_MAX_STEPS, run_monte_carlo_rollouts, compute_utility_estimate

logger = logging.getLogger(__name__)


@dataclass
class UtilityDiscrepancy:
    """Analytic vs empirical utility for one state."""
    state: Any
    analytic: float
    empirical: float
    abs_error: float
    within_tolerance: bool


class MonteCarloUtilityEvaluator:
    """Estimate a policy's utility by simulation and compare with analytics.

    The evaluator never solves anything; it only validates the output of
    value iteration or policy iteration.
    """

    def __init__(self, mdp: MDP, policy: Dict[Any, Any]):
        """Initialize evaluator.

        Parameters
        ----------
        mdp : MDP
            The model to simulate
        policy : dict
            Policy to evaluate, state -> action
        """
        check_policy(mdp, policy)
        self.mdp = mdp
        self.policy = policy

    def evaluate(
        self,
        states: Optional[Iterable[Any]] = None,
        num_trials: int = 1000,
        max_steps: int = DEFAULT_MAX_STEPS,
        on_max_steps: str = "raise",
        seed: Optional[int] = None,
        alpha: float = 0.05
    ) -> Dict[Any, UtilityEstimate]:
        """Estimate the utility of the policy from each start state.

        Parameters
        ----------
        states : iterable, optional
            Start states; defaults to all non-terminal states
        num_trials : int
            Rollouts per start state
        max_steps : int
            Step bound per rollout
        on_max_steps : str
            "raise" or "discard", see run_monte_carlo_rollouts
        seed : int, optional
            Base seed; start state i uses seed + i
        alpha : float
            Significance level of the confidence intervals

        Returns
        -------
        dict
            Mapping from start state to UtilityEstimate
        """
        if states is None:
            states = [s for s in self.mdp.states if not self.mdp.is_terminal(s)]

        estimates = {}
        for i, s in enumerate(states):
            results, num_discarded = run_monte_carlo_rollouts(
                mdp=self.mdp,
                policy=self.policy,
                num_trials=num_trials,
                start=s,
                max_steps=max_steps,
                on_max_steps=on_max_steps,
                seed=None if seed is None else seed + i
            )
            estimates[s] = compute_utility_estimate(results, num_discarded, alpha)
            logger.debug("state %r: mean=%.4f over %d trials",
                         s, estimates[s].mean, estimates[s].num_trials)

        return estimates

    @staticmethod
    def compare(
        utility: Dict[Any, float],
        estimates: Dict[Any, UtilityEstimate],
        tolerance: float = 0.0
    ) -> Dict[Any, UtilityDiscrepancy]:
        """Compare analytic utilities with Monte Carlo estimates.

        A state passes when the analytic value lies within `tolerance` plus
        the confidence-interval half-width of the empirical mean.

        Parameters
        ----------
        utility : dict
            Analytic utility vector
        estimates : dict
            Output of `evaluate`
        tolerance : float
            Extra slack added to the CI half-width

        Returns
        -------
        dict
            Mapping from state to UtilityDiscrepancy
        """
        report = {}
        for s, est in estimates.items():
            err = abs(utility[s] - est.mean)
            report[s] = UtilityDiscrepancy(
                state=s,
                analytic=utility[s],
                empirical=est.mean,
                abs_error=err,
                within_tolerance=err <= tolerance + est.ci_half_width
            )
        return report
