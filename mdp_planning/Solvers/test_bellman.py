"""Tests for Bellman backups."""

from dataclasses import replace

import pytest

from .bellman import (
    q_value,
    best_action,
    state_value,
    q_table,
    bellman_sweep,
    greedy_policy,
    max_norm,
)
from ..Models import MDP, absorbing_transitions
from ..errors import InvalidActionError
from ..CaseStudies.Chain import ChainConfig, build_chain_mdp, ADVANCE


def tie_mdp(order, loops=()):
    """State 0 has actions that all pay the same reward.

    Actions in `loops` return to state 0, every other action reaches
    terminal 1.
    """
    A, T = absorbing_transitions([1])
    A[0] = list(order)
    for a in order:
        T[(0, a)] = {0: 1.0} if a in loops else {1: 1.0}
    return MDP(
        states=[0, 1],
        A=A,
        T=T,
        R=lambda s, a, s2: 0.0 if s == 1 else 5.0,
        discount=0.5,
        initial_state=0,
        terminals=frozenset([1]),
    )


class TestQValue:

    def test_matches_hand_computation(self):
        mdp = build_chain_mdp(ChainConfig(advance_prob=0.5, discount=0.9))
        U = {0: 1.0, 1: 2.0, 2: 0.0}
        # 0.5 * (1 + 0.9 * 2) + 0.5 * (0 + 0.9 * 1)
        assert q_value(mdp, 0, ADVANCE, U) == pytest.approx(1.85)
        assert q_value(mdp, 1, ADVANCE, U) == pytest.approx(2.0)

    def test_terminal_noop_is_zero(self):
        mdp = build_chain_mdp()
        U = {0: 3.0, 1: 4.0, 2: 0.0}
        assert q_value(mdp, 2, None, U) == 0.0

    def test_illegal_action_raises(self):
        mdp = build_chain_mdp()
        U = {s: 0.0 for s in mdp.states}
        with pytest.raises(InvalidActionError):
            q_value(mdp, 0, "jump", U)
        with pytest.raises(InvalidActionError):
            q_value(mdp, 2, ADVANCE, U)

    def test_does_not_mutate_utility(self):
        mdp = build_chain_mdp()
        U = {0: 1.0, 1: 2.0, 2: 0.0}
        q_value(mdp, 0, ADVANCE, U)
        assert U == {0: 1.0, 1: 2.0, 2: 0.0}


class TestTieBreaking:

    def test_first_declared_action_wins(self):
        mdp = tie_mdp(["left", "right", "up"])
        U = {0: 0.0, 1: 0.0}
        assert best_action(mdp, 0, U) == ("left", 5.0)

    def test_follows_declared_order(self):
        mdp = tie_mdp(["up", "right", "left"])
        U = {0: 0.0, 1: 0.0}
        assert best_action(mdp, 0, U)[0] == "up"
        assert greedy_policy(mdp, U) == {0: "up", 1: None}

    def test_strictly_better_later_action_wins(self):
        mdp = tie_mdp(["left", "right"], loops=["right"])
        U = {0: 100.0, 1: 0.0}
        # right loops to state 0, worth 5 + 0.5 * 100
        assert best_action(mdp, 0, U) == ("right", 55.0)
        assert state_value(mdp, 0, U) == 55.0


class TestSweep:

    def test_synchronous_update(self):
        mdp = build_chain_mdp(ChainConfig(advance_prob=0.5, discount=0.9))
        # State 1 is swept before state 0; state 0 must still read U_prev[1] = 0.
        reordered = replace(mdp, states=[1, 0, 2])
        U = {s: 0.0 for s in mdp.states}
        U_next = bellman_sweep(reordered, U)
        assert U_next[1] == pytest.approx(2.0)
        assert U_next[0] == pytest.approx(0.5)
        assert U == {0: 0.0, 1: 0.0, 2: 0.0}

    def test_q_table_covers_legal_pairs(self):
        mdp = build_chain_mdp()
        U = {s: 0.0 for s in mdp.states}
        table = q_table(mdp, U)
        assert set(table) == {(0, ADVANCE), (1, ADVANCE), (2, None)}
        assert table[(1, ADVANCE)] == pytest.approx(2.0)

    def test_max_norm(self):
        assert max_norm({0: 1.0, 1: -2.0}, {0: 1.5, 1: 1.0}) == pytest.approx(3.0)
        assert max_norm({}, {}) == 0.0
