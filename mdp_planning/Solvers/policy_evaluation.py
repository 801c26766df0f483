"""Approximate policy evaluation by a fixed number of Jacobi sweeps."""

from typing import Optional

from ..Models.mdp import MDP
from ..errors import InvalidActionError, InvalidConfigurationError
from .bellman import Policy, UtilityVector, check_discount, q_value

DEFAULT_EVALUATION_SWEEPS = 20


def check_policy(mdp: MDP, policy: Policy) -> None:
    """Check that `policy` picks a legal action in every state.

    Raises
    ------
    InvalidConfigurationError
        If the policy has no entry for some state.
    InvalidActionError
        If the policy maps a state to an action outside `mdp.actions(s)`.
    """
    missing = [s for s in mdp.states if s not in policy]
    if missing:
        raise InvalidConfigurationError(
            f"Policy has no action for {len(missing)} state(s), e.g. {missing[0]!r}"
        )
    for s in mdp.states:
        if policy[s] not in mdp.actions(s):
            raise InvalidActionError(s, policy[s])


def policy_evaluation(
    mdp: MDP,
    policy: Policy,
    sweeps: int = DEFAULT_EVALUATION_SWEEPS,
    U: Optional[UtilityVector] = None,
) -> UtilityVector:
    """Approximate the utility of a fixed policy.

    Performs exactly `sweeps` passes of

        U_k+1(s) = sum_{s'} P(s'|s,pi(s)) [R(s,pi(s),s') + gamma U_k(s')]

    each pass reading only the previous pass. There is no convergence
    test: the error of the result shrinks like gamma^sweeps.

    Parameters
    ----------
    mdp : MDP
        The model
    policy : dict
        state -> action; every action must be legal
    sweeps : int
        Number of passes, default 20
    U : dict, optional
        Starting utility vector (zeros if omitted); not modified

    Returns
    -------
    dict
        The approximate utility vector of `policy`

    Raises
    ------
    InvalidConfigurationError
        If sweeps <= 0, gamma is out of range or the policy is incomplete.
    InvalidActionError
        If the policy maps a state to an illegal action.
    """
    check_discount(mdp)
    if sweeps <= 0:
        raise InvalidConfigurationError(f"sweeps must be positive, got: {sweeps}")
    check_policy(mdp, policy)

    if U is None:
        U = {s: 0.0 for s in mdp.states}
    else:
        U = dict(U)

    for _ in range(sweeps):
        U = {s: q_value(mdp, s, policy[s], U) for s in mdp.states}
    return U
