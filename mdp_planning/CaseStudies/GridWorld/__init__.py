"""Grid world case study (the classic 4x3 stochastic navigation problem)."""

from .gridworld import (
    GridWorldConfig,
    GridLayout,
    build_gridworld_mdp,
    UP,
    RIGHT,
    DOWN,
    LEFT,
    NOOP,
)

__all__ = [
    'GridWorldConfig',
    'GridLayout',
    'build_gridworld_mdp',
    'UP',
    'RIGHT',
    'DOWN',
    'LEFT',
    'NOOP',
]
