"""Three-state chain with a closed-form utility.

    s0 --advance--> s1 with prob p (reward advance_reward)
    s0 --advance--> s0 with prob 1-p (reward stay_reward)
    s1 --advance--> s2 with prob 1 (reward exit_reward)
    s2 is absorbing.
"""

from dataclasses import dataclass
from typing import Dict

from ...Models import MDP, absorbing_transitions

ADVANCE = "advance"
NOOP = None


@dataclass(frozen=True)
class ChainConfig:
    """Parameters of the three-state chain."""
    advance_prob: float = 0.5
    advance_reward: float = 1.0
    stay_reward: float = 0.0
    exit_reward: float = 2.0
    discount: float = 0.9

    def __post_init__(self):
        if not 0.0 < self.advance_prob <= 1.0:
            raise ValueError(f"advance_prob must be in (0, 1], got: {self.advance_prob}")


def build_chain_mdp(config: ChainConfig = None) -> MDP:
    """Create the chain MDP; the start state is 0 and state 2 is terminal."""
    cfg = config or ChainConfig()
    p = cfg.advance_prob

    A, T = absorbing_transitions([2], NOOP)
    A[0] = [ADVANCE]
    A[1] = [ADVANCE]
    T[(0, ADVANCE)] = {1: p, 0: 1.0 - p}
    T[(1, ADVANCE)] = {2: 1.0}

    rewards = {
        (0, 1): cfg.advance_reward,
        (0, 0): cfg.stay_reward,
        (1, 2): cfg.exit_reward,
    }

    def reward(s, a, s_next):
        return rewards.get((s, s_next), 0.0)

    return MDP(
        states=[0, 1, 2],
        A=A,
        T=T,
        R=reward,
        discount=cfg.discount,
        initial_state=0,
        terminals=frozenset([2]),
        noop=NOOP,
    )


def chain_closed_form_utility(config: ChainConfig = None) -> Dict[int, float]:
    """Exact utility of every chain state.

    U(1) = exit_reward and, solving the self-loop at s0,
    U(0) = (p (advance_reward + gamma U(1)) + (1-p) stay_reward) / (1 - (1-p) gamma).
    """
    cfg = config or ChainConfig()
    p, gamma = cfg.advance_prob, cfg.discount
    u1 = cfg.exit_reward
    u0 = (p * (cfg.advance_reward + gamma * u1) + (1 - p) * cfg.stay_reward) / (1 - (1 - p) * gamma)
    return {0: u0, 1: u1, 2: 0.0}
