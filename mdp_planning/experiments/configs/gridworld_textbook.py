"""Textbook 4x3 grid world: gamma 0.9, epsilon 0.001."""

from .base_config import SolverExperimentConfig
from ...CaseStudies.GridWorld import build_gridworld_mdp


config = SolverExperimentConfig(
    case_study_name="gridworld",
    build_mdp_fn=build_gridworld_mdp,
    epsilon=0.001,
    sweeps_per_eval=20,
    seed=42,
    num_trials=10000,
    max_steps=1000,
    on_max_steps="raise",
    results_path="./data/gridworld/gridworld_results.json",
    figures_dir="./data/gridworld/figures",
)
