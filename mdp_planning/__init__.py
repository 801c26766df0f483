"""
MDP Planning Library

Solvers for finite, fully observable Markov decision processes, with a
Monte Carlo estimator to cross-check their output.

Modules:
- Models: The MDP model contract
- Solvers: Bellman backups, value iteration, policy evaluation, policy iteration
- MonteCarlo: Rollout-based utility estimation
- CaseStudies: Example applications (GridWorld, Chain)
- errors: Error conditions raised by models and solvers
"""

from . import Models
from . import Solvers
from . import MonteCarlo
from . import CaseStudies

from .errors import (
    MDPError,
    InvalidActionError,
    InvalidConfigurationError,
    MalformedModelError,
    MaxStepsExceededError,
)
from .Models import MDP
from .Solvers import value_iteration, policy_iteration, policy_evaluation
from .MonteCarlo import estimate_utility

__all__ = [
    'Models', 'Solvers', 'MonteCarlo', 'CaseStudies',
    'MDPError', 'InvalidActionError', 'InvalidConfigurationError',
    'MalformedModelError', 'MaxStepsExceededError',
    'MDP',
    'value_iteration', 'policy_iteration', 'policy_evaluation', 'estimate_utility',
]
__version__ = '0.1.0'
