"""Value iteration with a max-norm stopping rule.

Starting from U = 0, apply synchronous Bellman optimality sweeps

    U'(s) = max_a sum_{s'} P(s'|s,a) [R(s,a,s') + gamma U(s')]

until the change delta = ||U' - U||_inf satisfies

    delta <= epsilon (1 - gamma) / gamma.

Because the Bellman operator is a gamma-contraction, this guarantees the
returned utility is within `epsilon` of the optimal utility in max-norm.
With gamma = 0 the first sweep is already exact and the loop stops
immediately.
"""

import logging

from ..Models.mdp import MDP
from ..errors import InvalidConfigurationError
from .bellman import bellman_sweep, check_discount, greedy_policy, max_norm
from .data_structures import ValueIterationResult

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.001


def stopping_threshold(epsilon: float, gamma: float) -> float:
    """Delta below which value iteration is epsilon-optimal."""
    if gamma == 0:
        return float("inf")
    return epsilon * (1 - gamma) / gamma


def value_iteration(
    mdp: MDP,
    epsilon: float = DEFAULT_EPSILON,
    record_history: bool = False,
) -> ValueIterationResult:
    """Solve `mdp` for its optimal utility and greedy policy.

    Parameters
    ----------
    mdp : MDP
        The model to solve
    epsilon : float
        Maximum allowed max-norm error of the returned utility
    record_history : bool
        Keep a copy of the utility vector after every sweep

    Returns
    -------
    ValueIterationResult
        Utility, greedy policy, sweep count and convergence trace

    Raises
    ------
    InvalidConfigurationError
        If gamma is outside [0, 1) or epsilon is not positive.
    """
    check_discount(mdp)
    if epsilon <= 0:
        raise InvalidConfigurationError(f"epsilon must be positive, got: {epsilon}")

    threshold = stopping_threshold(epsilon, mdp.discount)
    U = {s: 0.0 for s in mdp.states}
    deltas = []
    history = []

    iterations = 0
    while True:
        iterations += 1
        U_next = bellman_sweep(mdp, U)
        delta = max_norm(U_next, U)
        U = U_next

        deltas.append(delta)
        if record_history:
            history.append(dict(U))
        logger.debug("value iteration sweep %d: delta=%.3g", iterations, delta)

        if delta <= threshold:
            break

    logger.info(
        "Value iteration converged in %d iterations (delta=%.3g, threshold=%.3g)",
        iterations, delta, threshold,
    )
    return ValueIterationResult(
        utility=U,
        policy=greedy_policy(mdp, U),
        iterations=iterations,
        deltas=deltas,
        history=history,
    )
