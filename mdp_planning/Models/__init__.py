"""Model definitions for finite, fully observable MDPs."""

from .mdp import (
    MDP,
    State,
    Action,
    PROB_TOLERANCE,
    check_distribution,
    check_absorbing,
    absorbing_transitions,
)

__all__ = [
    'MDP', 'State', 'Action', 'PROB_TOLERANCE',
    'check_distribution', 'check_absorbing', 'absorbing_transitions',
]
