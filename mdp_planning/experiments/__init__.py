"""Experiment configurations and runners."""
