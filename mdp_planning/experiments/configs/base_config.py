"""Base configuration classes for experiments."""

from dataclasses import dataclass
from typing import Callable


@dataclass
class SolverExperimentConfig:
    """Configuration for solver cross-check experiments."""

    # Case study
    case_study_name: str
    build_mdp_fn: Callable

    # Analytic solvers
    epsilon: float
    sweeps_per_eval: int

    # Monte Carlo cross-check
    seed: int
    num_trials: int
    max_steps: int
    on_max_steps: str

    # Output
    results_path: str
    figures_dir: str

    # Extra slack allowed between analytic and Monte Carlo utilities
    mc_tolerance: float = 0.05

    # Optional build_mdp kwargs
    mdp_kwargs: dict = None

    def __post_init__(self):
        if self.mdp_kwargs is None:
            self.mdp_kwargs = {}
