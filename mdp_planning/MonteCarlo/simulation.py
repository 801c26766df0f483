"""Core Monte Carlo rollout functions for utility estimation.

This module provides the low-level functions for simulating a policy in
an MDP and aggregating discounted returns into an empirical utility.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from statsmodels.stats.weightstats import DescrStatsW

from ..Models.mdp import MDP
from ..errors import InvalidConfigurationError, MaxStepsExceededError
from ..Solvers.policy_evaluation import check_policy
from .data_structures import RolloutResult, UtilityEstimate

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 1000
ON_MAX_STEPS_MODES = ("raise", "discard")


def sample_successor(dist: Dict[Any, float], rng: np.random.Generator) -> Any:
    """Draw s' from {s' -> p} by inverse CDF over the declared order."""
    u = rng.random()
    cumulative = 0.0
    last = None
    for s_next, p in dist.items():
        if p <= 0:
            continue
        cumulative += p
        last = s_next
        if u < cumulative:
            return s_next
    # u fell in the rounding gap below 1.0
    return last


def run_single_rollout(
    trial_id: int,
    mdp: MDP,
    policy: Dict[Any, Any],
    start: Any,
    rng: np.random.Generator,
    max_steps: int = DEFAULT_MAX_STEPS,
    store_trajectory: bool = False
) -> RolloutResult:
    """Run a single rollout of `policy` from `start` until a terminal state.

    Parameters
    ----------
    trial_id : int
        Trial identifier
    mdp : MDP
        The model to simulate
    policy : dict
        state -> action
    start : any
        Starting state
    rng : numpy.random.Generator
        Source of randomness for successor sampling
    max_steps : int
        Step bound; exceeding it raises MaxStepsExceededError
    store_trajectory : bool
        Whether to store the full trajectory (memory intensive)

    Returns
    -------
    RolloutResult
        Complete rollout result

    Raises
    ------
    MaxStepsExceededError
        If no terminal state is reached within `max_steps` steps.
    """
    gamma = mdp.discount
    state = start
    total = 0.0
    weight = 1.0
    trajectory = []

    steps = 0
    while not mdp.is_terminal(state):
        if steps >= max_steps:
            raise MaxStepsExceededError(trial_id, max_steps, state)

        action = policy[state]
        next_state = sample_successor(mdp.transition(state, action), rng)
        reward = mdp.reward(state, action, next_state)
        total += weight * reward

        if store_trajectory:
            trajectory.append((state, action, next_state, reward))

        weight *= gamma
        state = next_state
        steps += 1

    return RolloutResult(
        trial_id=trial_id,
        total_return=total,
        steps=steps,
        terminated=True,
        final_state=state,
        trajectory=trajectory
    )


def run_monte_carlo_rollouts(
    mdp: MDP,
    policy: Dict[Any, Any],
    num_trials: int,
    start: Optional[Any] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    on_max_steps: str = "raise",
    store_trajectories: bool = False,
    seed: Optional[int] = None
) -> Tuple[List[RolloutResult], int]:
    """Run independent rollouts of `policy`.

    Parameters
    ----------
    mdp : MDP
        The model to simulate
    policy : dict
        state -> action
    num_trials : int
        Number of rollouts to run
    start : any, optional
        Starting state, defaults to mdp.initial_state
    max_steps : int
        Step bound per rollout
    on_max_steps : str
        "raise" to fail the whole call on a non-terminating rollout,
        "discard" to drop that rollout and continue
    store_trajectories : bool
        Whether to store full trajectories (memory intensive)
    seed : int, optional
        Random seed for reproducibility

    Returns
    -------
    tuple
        (results, num_discarded)

    Raises
    ------
    InvalidConfigurationError
        If a count or mode is invalid, or the policy misses a state.
    InvalidActionError
        If the policy maps a state to an illegal action.
    MaxStepsExceededError
        In "raise" mode, on the first rollout that exceeds `max_steps`.
    """
    if num_trials <= 0:
        raise InvalidConfigurationError(f"num_trials must be positive, got: {num_trials}")
    if max_steps <= 0:
        raise InvalidConfigurationError(f"max_steps must be positive, got: {max_steps}")
    if on_max_steps not in ON_MAX_STEPS_MODES:
        raise InvalidConfigurationError(
            f"on_max_steps must be one of {ON_MAX_STEPS_MODES}, got: {on_max_steps!r}"
        )
    check_policy(mdp, policy)

    if start is None:
        start = mdp.initial_state
    rng = np.random.default_rng(seed)

    results = []
    num_discarded = 0

    for trial_id in range(num_trials):
        try:
            result = run_single_rollout(
                trial_id=trial_id,
                mdp=mdp,
                policy=policy,
                start=start,
                rng=rng,
                max_steps=max_steps,
                store_trajectory=store_trajectories
            )
        except MaxStepsExceededError as e:
            if on_max_steps == "raise":
                raise
            num_discarded += 1
            logger.warning("Discarding rollout: %s", e)
            continue

        results.append(result)

    return results, num_discarded


def compute_utility_estimate(
    results: List[RolloutResult],
    num_discarded: int = 0,
    alpha: float = 0.05
) -> UtilityEstimate:
    """Aggregate rollout returns into an empirical utility.

    Parameters
    ----------
    results : list of RolloutResult
        Completed rollouts
    num_discarded : int
        Number of rollouts dropped by the caller
    alpha : float
        Significance level of the t-interval on the mean (0.05 -> 95% CI)

    Returns
    -------
    UtilityEstimate
        Mean, samples, spread and confidence interval
    """
    if not results:
        return UtilityEstimate(
            mean=float("nan"),
            samples=[],
            std=float("nan"),
            ci_low=float("nan"),
            ci_high=float("nan"),
            num_trials=0,
            num_discarded=num_discarded
        )

    samples = [r.total_return for r in results]
    n = len(samples)
    mean = float(np.mean(samples))

    if n > 1:
        std = float(np.std(samples, ddof=1))
        ci_low, ci_high = DescrStatsW(np.asarray(samples, dtype=float)).tconfint_mean(alpha=alpha)
    else:
        std = 0.0
        ci_low = ci_high = mean

    return UtilityEstimate(
        mean=mean,
        samples=samples,
        std=std,
        ci_low=float(ci_low),
        ci_high=float(ci_high),
        num_trials=n,
        num_discarded=num_discarded
    )


def estimate(
    mdp: MDP,
    policy: Dict[Any, Any],
    s0: Optional[Any] = None,
    trials: int = 10000,
    max_steps: int = DEFAULT_MAX_STEPS,
    on_max_steps: str = "raise",
    seed: Optional[int] = None
) -> Tuple[float, List[float]]:
    """Return (mean, per-trial returns) of `policy` from `s0`.

    Raises MaxStepsExceededError if no trial terminates, also in
    "discard" mode.
    """
    results, num_discarded = run_monte_carlo_rollouts(
        mdp, policy, trials,
        start=s0, max_steps=max_steps, on_max_steps=on_max_steps, seed=seed
    )
    if not results:
        raise MaxStepsExceededError(None, max_steps)
    summary = compute_utility_estimate(results, num_discarded)
    return summary.mean, summary.samples


def estimate_utility(
    mdp: MDP,
    policy: Dict[Any, Any],
    state: Optional[Any] = None,
    trials: int = 10000,
    max_steps: int = DEFAULT_MAX_STEPS,
    on_max_steps: str = "raise",
    seed: Optional[int] = None
) -> float:
    """Empirical expected utility of `policy` from `state`.

    This is an approximate cross-check for the analytic solvers, never a
    solver of record.
    """
    mean, _ = estimate(
        mdp, policy, state, trials,
        max_steps=max_steps, on_max_steps=on_max_steps, seed=seed
    )
    return mean
