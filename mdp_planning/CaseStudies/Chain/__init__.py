"""Three-state chain case study with a known closed-form utility."""

from .chain import ChainConfig, build_chain_mdp, chain_closed_form_utility, ADVANCE

__all__ = ['ChainConfig', 'build_chain_mdp', 'chain_closed_form_utility', 'ADVANCE']
