"""Experiment configurations."""

from .base_config import SolverExperimentConfig

__all__ = ['SolverExperimentConfig']
