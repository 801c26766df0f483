"""Preliminary chain experiment configuration."""

from .base_config import SolverExperimentConfig
from ...CaseStudies.Chain import build_chain_mdp


config = SolverExperimentConfig(
    case_study_name="chain",
    build_mdp_fn=build_chain_mdp,
    epsilon=0.001,
    sweeps_per_eval=20,
    seed=7,
    num_trials=1000,  # Reduced for prelim
    max_steps=500,
    on_max_steps="discard",
    results_path="./data/prelim/chain_results.json",
    figures_dir="./data/prelim/chain_figures",
)
