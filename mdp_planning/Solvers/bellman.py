"""Bellman backups: action values, greedy actions and synchronous sweeps.

Every function here is a pure function of (mdp, utility). Utility vectors
are plain dicts mapping each state to a float; they are read, never
mutated.

Tie-breaking
------------
When several actions share the maximal Q value, the first one in
`mdp.actions(s)` wins. A later action only replaces the incumbent if its
value is strictly greater, so the derived policy is deterministic for a
given model.
"""

from typing import Dict, Tuple

from ..Models.mdp import MDP, State, Action
from ..errors import InvalidActionError, InvalidConfigurationError

UtilityVector = Dict[State, float]
Policy = Dict[State, Action]
QTable = Dict[Tuple[State, Action], float]


def check_discount(mdp: MDP) -> None:
    """Raise InvalidConfigurationError unless 0 <= gamma < 1."""
    if not 0.0 <= mdp.discount < 1.0:
        raise InvalidConfigurationError(
            f"Discount factor must be in [0, 1), got: {mdp.discount}"
        )


def expected_value(mdp: MDP, s: State, a: Action, U: UtilityVector) -> float:
    """Sum over s' of P(s'|s,a) * (R(s,a,s') + gamma * U[s']), unchecked."""
    gamma = mdp.discount
    total = 0.0
    for s_next, p in mdp.transition(s, a).items():
        if p == 0:
            continue
        total += p * (mdp.reward(s, a, s_next) + gamma * U[s_next])
    return total


def q_value(mdp: MDP, s: State, a: Action, U: UtilityVector) -> float:
    """Q(s, a) under utility vector U.

    Raises
    ------
    InvalidActionError
        If `a` is not in `mdp.actions(s)`.
    """
    if a not in mdp.actions(s):
        raise InvalidActionError(s, a)
    return expected_value(mdp, s, a, U)


def best_action(mdp: MDP, s: State, U: UtilityVector) -> Tuple[Action, float]:
    """Return (argmax_a Q(s, a), max_a Q(s, a)), first action wins ties."""
    best_a = None
    best_q = float("-inf")
    for a in mdp.actions(s):
        q = expected_value(mdp, s, a, U)
        if q > best_q:
            best_a, best_q = a, q
    return best_a, best_q


def state_value(mdp: MDP, s: State, U: UtilityVector) -> float:
    """max_a Q(s, a) under U."""
    return best_action(mdp, s, U)[1]


def q_table(mdp: MDP, U: UtilityVector) -> QTable:
    """Q value of every legal (state, action) pair."""
    return {
        (s, a): expected_value(mdp, s, a, U)
        for s in mdp.states
        for a in mdp.actions(s)
    }


def bellman_sweep(mdp: MDP, U: UtilityVector) -> UtilityVector:
    """One synchronous Bellman optimality sweep.

    Every new value reads only the previous vector `U`; the result is a
    new dict.
    """
    return {s: state_value(mdp, s, U) for s in mdp.states}


def greedy_policy(mdp: MDP, U: UtilityVector) -> Policy:
    """Policy choosing argmax_a Q(s, a) in every state."""
    return {s: best_action(mdp, s, U)[0] for s in mdp.states}


def max_norm(U1: UtilityVector, U2: UtilityVector) -> float:
    """Largest absolute per-state difference between two utility vectors."""
    return max((abs(U1[s] - U2[s]) for s in U1), default=0.0)
