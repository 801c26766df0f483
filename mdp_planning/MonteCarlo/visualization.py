"""Visualization functions for Monte Carlo utility estimates."""

from typing import Any, Dict, Optional
import numpy as np
import matplotlib.pyplot as plt

from .data_structures import UtilityEstimate


def plot_return_distribution(
    estimate: UtilityEstimate,
    analytic_value: Optional[float] = None,
    title: str = "Discounted Return Distribution",
    save_path: Optional[str] = None,
    show: bool = True
):
    """Histogram of per-trial returns with the mean, its CI and the analytic value.

    Parameters
    ----------
    estimate : UtilityEstimate
        Output of compute_utility_estimate
    analytic_value : float, optional
        Utility from value or policy iteration, drawn for reference
    title : str
        Figure title
    save_path : str, optional
        Path to save figure (e.g., "figures/returns.png")
    show : bool
        Whether to display the figure

    Returns
    -------
    matplotlib.figure.Figure or None
    """
    if not estimate.samples:
        print("No samples to plot")
        return None

    fig, ax = plt.subplots(figsize=(8, 5))

    ax.hist(estimate.samples, bins=40, color='steelblue', alpha=0.7)
    ax.axvline(estimate.mean, color='black', linewidth=2,
               label=f'MC mean = {estimate.mean:.3f}')
    ax.axvspan(estimate.ci_low, estimate.ci_high, color='gray', alpha=0.3,
               label='Confidence interval')

    if analytic_value is not None:
        ax.axvline(analytic_value, color='red', linestyle='--', linewidth=2,
                   label=f'Analytic = {analytic_value:.3f}')

    ax.set_xlabel('Discounted Return')
    ax.set_ylabel('Trial Count')
    ax.set_title(f"{title}\n({estimate.num_trials} trials)")
    ax.legend()
    ax.grid(axis='y', alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Figure saved to {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig


def plot_utility_comparison(
    utility: Dict[Any, float],
    estimates: Dict[Any, UtilityEstimate],
    labels: Optional[Dict[Any, str]] = None,
    save_path: Optional[str] = None,
    show: bool = True
):
    """Bar chart of analytic utilities next to Monte Carlo means with CIs.

    Parameters
    ----------
    utility : dict
        Analytic utility vector
    estimates : dict
        Mapping from state to UtilityEstimate
    labels : dict, optional
        Tick label per state; defaults to repr(state)
    save_path : str, optional
        Path to save figure
    show : bool
        Whether to display the figure

    Returns
    -------
    matplotlib.figure.Figure or None
    """
    if not estimates:
        print("No estimates to plot")
        return None

    labels = labels or {}
    states = list(estimates.keys())
    x = np.arange(len(states))
    width = 0.35

    analytic = [utility[s] for s in states]
    empirical = [estimates[s].mean for s in states]
    errors = [estimates[s].ci_half_width for s in states]

    fig, ax = plt.subplots(figsize=(max(8, len(states)), 5))
    ax.bar(x - width / 2, analytic, width, label='Analytic', color='red', alpha=0.7)
    ax.bar(x + width / 2, empirical, width, yerr=errors, capsize=3,
           label='Monte Carlo', color='steelblue', alpha=0.7)

    ax.set_xticks(x)
    ax.set_xticklabels([labels.get(s, repr(s)) for s in states], rotation=45, ha='right')
    ax.set_ylabel('Utility')
    ax.set_title('Analytic vs Monte Carlo Utility')
    ax.legend()
    ax.grid(axis='y', alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Figure saved to {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig
