"""Tests for Monte Carlo utility estimation."""

import math

import numpy as np
import pytest

from .simulation import (
    sample_successor,
    run_single_rollout,
    run_monte_carlo_rollouts,
    compute_utility_estimate,
    estimate,
    estimate_utility,
)
from .data_structures import RolloutResult, UtilityEstimate
from .evaluator import MonteCarloUtilityEvaluator
from ..Models import MDP, absorbing_transitions
from ..errors import (
    InvalidActionError,
    InvalidConfigurationError,
    MalformedModelError,
    MaxStepsExceededError,
)
from ..CaseStudies.Chain import build_chain_mdp, chain_closed_form_utility, ADVANCE


def chain_policy():
    return {0: ADVANCE, 1: ADVANCE, 2: None}


def looping_mdp():
    """State 0 can either loop forever or exit to terminal 1."""
    A, T = absorbing_transitions([1])
    A[0] = ["stay", "leave"]
    T[(0, "stay")] = {0: 1.0}
    T[(0, "leave")] = {1: 1.0}
    return MDP(
        states=[0, 1],
        A=A,
        T=T,
        R=lambda s, a, s2: 0.0 if s == 1 else 1.0,
        discount=0.5,
        initial_state=0,
        terminals=frozenset([1]),
    )


class TestSampling:

    def test_degenerate_distribution(self):
        rng = np.random.default_rng(0)
        assert all(sample_successor({3: 1.0}, rng) == 3 for _ in range(50))

    def test_zero_probability_never_drawn(self):
        rng = np.random.default_rng(0)
        draws = {sample_successor({"a": 0.0, "b": 0.3, "c": 0.7}, rng) for _ in range(500)}
        assert "a" not in draws
        assert draws == {"b", "c"}

    def test_frequencies_follow_distribution(self):
        rng = np.random.default_rng(1)
        draws = [sample_successor({0: 0.8, 1: 0.2}, rng) for _ in range(5000)]
        assert draws.count(0) / 5000 == pytest.approx(0.8, abs=0.03)


class TestRollouts:

    def test_chain_matches_closed_form(self):
        mean = estimate_utility(build_chain_mdp(), chain_policy(), trials=10000, seed=42)
        assert mean == pytest.approx(chain_closed_form_utility()[0], abs=0.05)

    def test_estimate_returns_samples(self):
        mean, samples = estimate(build_chain_mdp(), chain_policy(), trials=200, seed=0)
        assert len(samples) == 200
        assert mean == pytest.approx(float(np.mean(samples)))

    def test_from_other_start_state(self):
        mean = estimate_utility(build_chain_mdp(), chain_policy(), state=1, trials=50, seed=0)
        # s1 exits deterministically
        assert mean == pytest.approx(2.0)

    def test_start_in_terminal(self):
        mdp = build_chain_mdp()
        result = run_single_rollout(0, mdp, chain_policy(), 2, np.random.default_rng(0))
        assert result.total_return == 0.0
        assert result.steps == 0
        assert result.final_state == 2

    def test_discounting(self):
        mdp = looping_mdp()
        policy = {0: "leave", 1: None}
        result = run_single_rollout(0, mdp, policy, 0, np.random.default_rng(0),
                                    store_trajectory=True)
        assert result.total_return == 1.0
        assert result.trajectory == [(0, "leave", 1, 1.0)]

    def test_seed_is_reproducible(self):
        mdp = build_chain_mdp()
        _, a = estimate(mdp, chain_policy(), trials=100, seed=7)
        _, b = estimate(mdp, chain_policy(), trials=100, seed=7)
        assert a == b


class TestMaxSteps:

    def test_non_terminating_rollout_raises(self):
        mdp = looping_mdp()
        policy = {0: "stay", 1: None}
        with pytest.raises(MaxStepsExceededError) as excinfo:
            estimate_utility(mdp, policy, trials=5, max_steps=25, seed=0)
        assert excinfo.value.max_steps == 25
        assert excinfo.value.trial_id == 0

    def test_discard_drops_rollouts(self):
        mdp = looping_mdp()
        policy = {0: "stay", 1: None}
        results, num_discarded = run_monte_carlo_rollouts(
            mdp, policy, 5, max_steps=25, on_max_steps="discard", seed=0
        )
        assert results == []
        assert num_discarded == 5
        summary = compute_utility_estimate(results, num_discarded)
        assert math.isnan(summary.mean)
        assert summary.num_discarded == 5

    def test_estimate_with_every_trial_discarded_raises(self):
        mdp = looping_mdp()
        policy = {0: "stay", 1: None}
        with pytest.raises(MaxStepsExceededError) as excinfo:
            estimate_utility(mdp, policy, trials=5, max_steps=25,
                             on_max_steps="discard", seed=0)
        assert excinfo.value.trial_id is None
        assert excinfo.value.max_steps == 25

    def test_estimate_with_some_trials_discarded(self):
        A, T = absorbing_transitions([1])
        A[0] = ["flip"]
        T[(0, "flip")] = {0: 0.9, 1: 0.1}
        mdp = MDP(states=[0, 1], A=A, T=T,
                  R=lambda s, a, s2: 0.0 if s == 1 else 1.0,
                  discount=0.5, initial_state=0, terminals=frozenset([1]))
        mean, samples = estimate(mdp, {0: "flip", 1: None}, trials=200, max_steps=3,
                                 on_max_steps="discard", seed=0)
        assert 0 < len(samples) < 200
        assert mean == pytest.approx(float(np.mean(samples)))

    def test_terminating_within_bound_is_kept(self):
        mdp = build_chain_mdp()
        results, num_discarded = run_monte_carlo_rollouts(
            mdp, chain_policy(), 50, on_max_steps="discard", seed=0
        )
        assert num_discarded == 0
        assert all(r.terminated for r in results)


class TestConfiguration:

    @pytest.mark.parametrize("kwargs", [
        {"num_trials": 0},
        {"num_trials": 10, "max_steps": 0},
        {"num_trials": 10, "on_max_steps": "ignore"},
    ])
    def test_rejected(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            run_monte_carlo_rollouts(build_chain_mdp(), chain_policy(), **kwargs)

    def test_incomplete_policy(self):
        with pytest.raises(InvalidConfigurationError):
            estimate_utility(build_chain_mdp(), {0: ADVANCE, 2: None}, trials=10, seed=0)

    def test_illegal_action(self):
        policy = {0: "jump", 1: ADVANCE, 2: None}
        with pytest.raises(InvalidActionError) as excinfo:
            estimate_utility(build_chain_mdp(), policy, trials=10, seed=0)
        assert not isinstance(excinfo.value, MalformedModelError)
        assert excinfo.value.state == 0
        assert excinfo.value.action == "jump"


class TestUtilityEstimate:

    def test_confidence_interval_brackets_mean(self):
        results = [RolloutResult(i, float(r), 1, True, 2) for i, r in enumerate([1, 2, 3, 4])]
        summary = compute_utility_estimate(results)
        assert summary.mean == pytest.approx(2.5)
        assert summary.std == pytest.approx(np.std([1, 2, 3, 4], ddof=1))
        assert summary.ci_low < 2.5 < summary.ci_high
        assert summary.ci_half_width == pytest.approx((summary.ci_high - summary.ci_low) / 2)

    def test_single_sample(self):
        summary = compute_utility_estimate([RolloutResult(0, 3.0, 1, True, 2)])
        assert summary.ci_low == summary.ci_high == 3.0
        assert summary.std == 0.0

    def test_str(self):
        text = str(UtilityEstimate(mean=1.5, num_trials=10))
        assert "Mean: 1.5000" in text
        assert "Trials: 10" in text


class TestEvaluator:

    def test_estimates_every_live_state(self):
        mdp = build_chain_mdp()
        evaluator = MonteCarloUtilityEvaluator(mdp, chain_policy())
        estimates = evaluator.evaluate(num_trials=2000, seed=0)
        assert set(estimates) == {0, 1}
        report = evaluator.compare(chain_closed_form_utility(), estimates, tolerance=0.05)
        assert all(row.within_tolerance for row in report.values())

    def test_compare_flags_disagreement(self):
        estimates = {0: UtilityEstimate(mean=1.0, ci_low=0.9, ci_high=1.1)}
        report = MonteCarloUtilityEvaluator.compare({0: 2.0}, estimates, tolerance=0.05)
        assert report[0].abs_error == pytest.approx(1.0)
        assert not report[0].within_tolerance

    def test_incomplete_policy_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            MonteCarloUtilityEvaluator(build_chain_mdp(), {0: ADVANCE})
