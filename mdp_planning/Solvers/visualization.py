"""Plots of solver convergence."""

from typing import Any, Dict, List, Optional, Sequence
import numpy as np
import matplotlib.pyplot as plt


def plot_utility_history(
    history: List[Dict[Any, float]],
    states: Optional[Sequence[Any]] = None,
    labels: Optional[Dict[Any, str]] = None,
    save_path: Optional[str] = None,
    show: bool = True
):
    """Plot per-state utility estimates against value iteration sweeps.

    Parameters
    ----------
    history : list of dict
        Utility vector after each sweep (ValueIterationResult.history)
    states : sequence, optional
        States to plot; defaults to every state in the first snapshot
    labels : dict, optional
        Legend label per state; defaults to repr(state)
    save_path : str, optional
        Path to save figure (e.g., "figures/utility_history.png")
    show : bool
        Whether to display the figure

    Returns
    -------
    matplotlib.figure.Figure or None
    """
    if not history:
        print("No utility history to plot")
        return None

    if states is None:
        states = list(history[0].keys())
    labels = labels or {}

    fig, ax = plt.subplots(figsize=(10, 6))
    sweeps = np.arange(1, len(history) + 1)

    for s in states:
        values = [U[s] for U in history]
        ax.plot(sweeps, values, label=labels.get(s, repr(s)))

    ax.set_xlabel('Iteration')
    ax.set_ylabel('Utility')
    ax.set_title('Utility Estimates by Iteration')
    ax.legend(loc='best', fontsize=7)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Figure saved to {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig


def plot_convergence(
    deltas: List[float],
    threshold: Optional[float] = None,
    save_path: Optional[str] = None,
    show: bool = True
):
    """Plot the max-norm change of each sweep on a log scale.

    Parameters
    ----------
    deltas : list of float
        ValueIterationResult.deltas
    threshold : float, optional
        Stopping threshold, drawn as a horizontal line
    save_path : str, optional
        Path to save figure
    show : bool
        Whether to display the figure

    Returns
    -------
    matplotlib.figure.Figure or None
    """
    if not deltas:
        print("No deltas to plot")
        return None

    fig, ax = plt.subplots(figsize=(8, 5))
    sweeps = np.arange(1, len(deltas) + 1)
    # zero deltas cannot be drawn on a log axis
    ax.semilogy(sweeps, np.maximum(deltas, 1e-300), marker='o', markersize=3,
                color='steelblue', label='max |U\' - U|')

    if threshold is not None and np.isfinite(threshold):
        ax.axhline(threshold, color='red', linestyle='--', label='Stopping threshold')

    ax.set_xlabel('Iteration')
    ax.set_ylabel('Delta (log scale)')
    ax.set_title('Value Iteration Convergence')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Figure saved to {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig
