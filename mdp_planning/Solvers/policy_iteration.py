"""Modified policy iteration.

Alternates bounded-sweep policy evaluation with greedy improvement. An
action is only replaced when the greedy action is strictly better (by more
than IMPROVEMENT_TOLERANCE); the loop ends after a round with no change.

There is no iteration cap. Termination relies on the policy improvement
argument: there are finitely many deterministic policies and every
accepted change strictly increases the evaluated utility of at least one
state without decreasing any other, so no policy can repeat.
"""

import logging
from typing import Callable, Optional

import numpy as np

from ..Models.mdp import MDP
from ..errors import InvalidConfigurationError
from .bellman import Policy, best_action, check_discount, expected_value
from .data_structures import PolicyIterationRound
from .policy_evaluation import DEFAULT_EVALUATION_SWEEPS, check_policy, policy_evaluation

logger = logging.getLogger(__name__)

IMPROVEMENT_TOLERANCE = 1e-12


def random_policy(mdp: MDP, seed: Optional[int] = None) -> Policy:
    """Choose a uniformly random legal action for every state."""
    rng = np.random.default_rng(seed)
    policy = {}
    for s in mdp.states:
        acts = mdp.actions(s)
        policy[s] = acts[int(rng.integers(len(acts)))]
    return policy


def policy_iteration(
    mdp: MDP,
    sweeps_per_eval: int = DEFAULT_EVALUATION_SWEEPS,
    seed: Optional[int] = None,
    initial_policy: Optional[Policy] = None,
    on_round: Optional[Callable[[PolicyIterationRound], None]] = None,
) -> Policy:
    """Compute an optimal policy by modified policy iteration.

    Parameters
    ----------
    mdp : MDP
        The model to solve
    sweeps_per_eval : int
        Evaluation sweeps per round (see `policy_evaluation`)
    seed : int, optional
        Seed for the random initial policy
    initial_policy : dict, optional
        Starting policy; overrides the random initialization
    on_round : callable, optional
        Called with a PolicyIterationRound after every round

    Returns
    -------
    dict
        The final policy, state -> action

    Raises
    ------
    InvalidConfigurationError
        If sweeps_per_eval <= 0, gamma is out of range or the initial
        policy is incomplete.
    InvalidActionError
        If the initial policy contains an illegal action.
    """
    check_discount(mdp)
    if sweeps_per_eval <= 0:
        raise InvalidConfigurationError(
            f"sweeps_per_eval must be positive, got: {sweeps_per_eval}"
        )

    if initial_policy is None:
        policy = random_policy(mdp, seed)
    else:
        check_policy(mdp, initial_policy)
        policy = {s: initial_policy[s] for s in mdp.states}

    U = None
    round_index = 0
    while True:
        round_index += 1
        U = policy_evaluation(mdp, policy, sweeps_per_eval, U)

        changed = 0
        for s in mdp.states:
            a_best, q_best = best_action(mdp, s, U)
            if q_best > expected_value(mdp, s, policy[s], U) + IMPROVEMENT_TOLERANCE:
                policy[s] = a_best
                changed += 1

        logger.debug("policy iteration round %d: %d action(s) changed", round_index, changed)
        if on_round is not None:
            on_round(PolicyIterationRound(
                round_index=round_index,
                policy=dict(policy),
                utility=dict(U),
                changed=changed > 0,
            ))

        if not changed:
            break

    logger.info("Policy iteration converged in %d rounds", round_index)
    return policy
