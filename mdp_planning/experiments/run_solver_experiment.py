"""Solver Experiment: solve a case study analytically and cross-check it.

Runs value iteration and modified policy iteration on the configured MDP,
checks that both agree, and validates the analytic utilities with Monte
Carlo rollouts of the optimal policy.

Usage:
    python -m mdp_planning.experiments.run_solver_experiment <config_module>

Example:
    python -m mdp_planning.experiments.run_solver_experiment configs.gridworld_textbook
"""

import importlib
import logging
import os
import sys
import time
from collections import Counter

from ..MonteCarlo import (
    MonteCarloUtilityEvaluator,
    run_monte_carlo_rollouts,
    compute_utility_estimate,
)
from ..MonteCarlo.visualization import plot_return_distribution, plot_utility_comparison
from ..Solvers import (
    value_iteration,
    policy_iteration,
    policy_evaluation,
    stopping_threshold,
    max_norm,
)
from ..Solvers.visualization import plot_utility_history, plot_convergence
from .experiment_io import absorption_interval, utility_rows, write_results

# Sweeps used to evaluate the policy-iteration policy for comparison
COMPARISON_SWEEPS = 500


# ============================================================
# Setup
# ============================================================

def load_case_study(config):
    """Build the MDP; returns (mdp, layout) where layout may be None."""
    built = config.build_mdp_fn(**config.mdp_kwargs)
    if isinstance(built, tuple):
        mdp, layout = built
    else:
        mdp, layout = built, None
    mdp.validate()
    return mdp, layout


def state_label(layout, s):
    return repr(layout.coordinates(s)) if layout is not None else repr(s)


# ============================================================
# Analytic solvers
# ============================================================

def run_value_iteration(mdp, layout, config):
    print("\n" + "=" * 70)
    print("VALUE ITERATION")
    print("=" * 70)

    t0 = time.time()
    result = value_iteration(mdp, config.epsilon, record_history=True)
    elapsed = time.time() - t0

    print(f"Converged in {result.iterations} iterations ({elapsed:.3f}s)")
    print(f"Final delta: {result.deltas[-1]:.3g}  "
          f"threshold: {stopping_threshold(config.epsilon, mdp.discount):.3g}")
    if layout is not None:
        print("\nUtilities:")
        print(layout.render_utilities(result.utility))
        print("\nPolicy:")
        print(layout.render_policy(result.policy))
    else:
        for s in mdp.states:
            print(f"  {s!r}: U={result.utility[s]:.4f}  pi={result.policy[s]!r}")
    return result


def run_policy_iteration(mdp, layout, vi_result, config):
    print("\n" + "=" * 70)
    print("POLICY ITERATION")
    print(f"Sweeps per evaluation: {config.sweeps_per_eval}")
    print("=" * 70)

    rounds = []
    t0 = time.time()
    policy = policy_iteration(
        mdp, config.sweeps_per_eval, seed=config.seed, on_round=rounds.append
    )
    elapsed = time.time() - t0
    print(f"Converged in {len(rounds)} rounds ({elapsed:.3f}s)")

    disagreements = [s for s in mdp.states if policy[s] != vi_result.policy[s]]
    U_pi = policy_evaluation(mdp, policy, sweeps=COMPARISON_SWEEPS)
    gap = max_norm(U_pi, vi_result.utility)

    print(f"States where policies differ: {len(disagreements)}")
    for s in disagreements:
        print(f"  {state_label(layout, s)}: PI={policy[s]!r}  VI={vi_result.policy[s]!r}")
    print(f"Max-norm gap between PI policy utility and VI utility: {gap:.3g}")

    return policy, rounds, U_pi, gap


# ============================================================
# Monte Carlo cross-check
# ============================================================

def run_cross_check(mdp, layout, vi_result, config):
    print("\n" + "=" * 70)
    print("MONTE CARLO CROSS-CHECK")
    print(f"Trials per state: {config.num_trials}, Seed: {config.seed}")
    print("=" * 70)

    evaluator = MonteCarloUtilityEvaluator(mdp, vi_result.policy)
    estimates = evaluator.evaluate(
        num_trials=config.num_trials,
        max_steps=config.max_steps,
        on_max_steps=config.on_max_steps,
        seed=config.seed,
    )
    report = evaluator.compare(vi_result.utility, estimates, tolerance=config.mc_tolerance)

    header = f"{'State':<12} {'Analytic':>10} {'MC mean':>10} {'|err|':>8} {'CI +/-':>8}  OK"
    print(header)
    print("-" * len(header))
    for s, row in report.items():
        print(f"{state_label(layout, s):<12} {row.analytic:>10.4f} {row.empirical:>10.4f} "
              f"{row.abs_error:>8.4f} {estimates[s].ci_half_width:>8.4f}  "
              f"{'yes' if row.within_tolerance else 'NO'}")

    return estimates, report


def terminal_outcomes(mdp, policy, config):
    """Fraction of rollouts from the initial state absorbed in each terminal."""
    results, num_discarded = run_monte_carlo_rollouts(
        mdp, policy, config.num_trials,
        max_steps=config.max_steps,
        on_max_steps=config.on_max_steps,
        seed=config.seed,
    )
    counts = Counter(r.final_state for r in results)
    n = len(results)
    outcomes = {}
    for s in sorted(mdp.terminals, key=repr):
        lo, hi = absorption_interval(counts[s], n)
        outcomes[s] = {
            "rate": counts[s] / n if n else 0.0,
            "ci_low": lo,
            "ci_high": hi,
        }
    return compute_utility_estimate(results, num_discarded), outcomes


# ============================================================
# Output
# ============================================================

def save_results(mdp, layout, config, vi_result, pi_policy, pi_rounds, pi_gap,
                 estimates, report, start_estimate, outcomes):
    results = {
        "value_iteration": {
            "iterations": vi_result.iterations,
            "deltas": vi_result.deltas,
            "utility": {state_label(layout, s): vi_result.utility[s] for s in mdp.states},
            "policy": {state_label(layout, s): vi_result.policy[s] for s in mdp.states},
        },
        "policy_iteration": {
            "rounds": len(pi_rounds),
            "max_norm_gap": pi_gap,
            "policy": {state_label(layout, s): pi_policy[s] for s in mdp.states},
        },
        "monte_carlo": {
            "start_state": state_label(layout, mdp.initial_state),
            "start_mean": start_estimate.mean,
            "start_ci": [start_estimate.ci_low, start_estimate.ci_high],
            "discarded": start_estimate.num_discarded,
            "terminal_outcomes": {state_label(layout, s): o for s, o in outcomes.items()},
        },
    }

    rows = utility_rows(config.case_study_name, report, estimates,
                        label=lambda s: state_label(layout, s))

    for path in write_results(config.results_path, config, results, rows):
        print(f"Saved {path}")


def plot_results(mdp, layout, config, vi_result, estimates, start_estimate):
    import matplotlib
    matplotlib.use('Agg')

    os.makedirs(config.figures_dir, exist_ok=True)
    labels = {s: state_label(layout, s) for s in mdp.states}
    non_terminal = [s for s in mdp.states if not mdp.is_terminal(s)]

    plot_utility_history(
        vi_result.history, non_terminal, labels,
        save_path=os.path.join(config.figures_dir, "utility_history.png"), show=False
    )
    plot_convergence(
        vi_result.deltas, stopping_threshold(config.epsilon, mdp.discount),
        save_path=os.path.join(config.figures_dir, "convergence.png"), show=False
    )
    plot_utility_comparison(
        vi_result.utility, estimates, labels,
        save_path=os.path.join(config.figures_dir, "utility_comparison.png"), show=False
    )
    plot_return_distribution(
        start_estimate, vi_result.utility[mdp.initial_state],
        title=f"Returns from {labels[mdp.initial_state]}",
        save_path=os.path.join(config.figures_dir, "start_returns.png"), show=False
    )


# ============================================================
# Main
# ============================================================

def main():
    if len(sys.argv) < 2:
        print("Usage: python -m mdp_planning.experiments.run_solver_experiment <config_module>")
        print("Example: python -m mdp_planning.experiments.run_solver_experiment configs.gridworld_textbook")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config_module_name = sys.argv[1]
    try:
        config_module = importlib.import_module(f".{config_module_name}", package="mdp_planning.experiments")
        config = config_module.config
    except (ImportError, AttributeError) as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    print("=" * 70)
    print(f"SOLVER EXPERIMENT - {config.case_study_name.upper()}")
    print(f"Epsilon: {config.epsilon}, Sweeps/eval: {config.sweeps_per_eval}, "
          f"Trials: {config.num_trials}, Seed: {config.seed}")
    print("=" * 70)

    print(f"\nLoading {config.case_study_name.upper()} MDP...")
    mdp, layout = load_case_study(config)
    print(f"  States: {len(mdp.states)}, Terminals: {len(mdp.terminals)}, "
          f"Discount: {mdp.discount}")

    t0 = time.time()
    vi_result = run_value_iteration(mdp, layout, config)
    pi_policy, pi_rounds, _, pi_gap = run_policy_iteration(mdp, layout, vi_result, config)
    estimates, report = run_cross_check(mdp, layout, vi_result, config)
    start_estimate, outcomes = terminal_outcomes(mdp, vi_result.policy, config)
    total_time = time.time() - t0

    print(f"\nFrom start state {state_label(layout, mdp.initial_state)}:")
    print(start_estimate)
    for s, o in outcomes.items():
        print(f"  absorbed in {state_label(layout, s)}: {o['rate']:.1%} "
              f"[{o['ci_low']:.1%}, {o['ci_high']:.1%}]")

    save_results(mdp, layout, config, vi_result, pi_policy, pi_rounds, pi_gap,
                 estimates, report, start_estimate, outcomes)

    print("\nGenerating figures...")
    plot_results(mdp, layout, config, vi_result, estimates, start_estimate)

    print(f"\nTotal experiment time: {total_time:.1f}s")
    print("=" * 70)
    print("EXPERIMENT COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
