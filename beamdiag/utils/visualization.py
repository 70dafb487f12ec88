"""Simple visualization utilities for diagnostic files."""

import logging

import numpy as np
import matplotlib.pyplot as plt

from beamdiag.diagnostics.readers import load_diagnostic

logger = logging.getLogger(__name__)


def _as_data(data):
    """Accept either loaded columns or a path to a diagnostic file."""
    if isinstance(data, dict):
        return data
    return load_diagnostic(data)


def _finish(fig, save_path):
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info("Saved: %s", save_path)
    else:
        plt.show()

    plt.close(fig)


def plot_phase_space(
    data,
    title: str = 'Transverse Phase Space',
    save_path: str = None,
):
    """Scatter plots x-px, y-py and t-pt of a particle dump.

    Args:
        data: Columns from load_diagnostic, or path to an 'id x y t px py pt' file
        title: Figure title
        save_path: If provided, save to file
    """
    data = _as_data(data)

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    for ax, (q, p) in zip(axes, (('x', 'px'), ('y', 'py'), ('t', 'pt'))):
        ax.scatter(data[q], data[p], s=2, alpha=0.5)
        ax.set_xlabel(q)
        ax.set_ylabel(p)
        ax.grid(True, alpha=0.3)
    fig.suptitle(title)

    _finish(fig, save_path)


def plot_invariants(
    data,
    bins: int = 50,
    title: str = 'Nonlinear Lens Invariants',
    save_path: str = None,
):
    """Histograms of the invariants H and I.

    Args:
        data: Columns from load_diagnostic, or path to an 'id H I' file
        bins: Number of histogram bins
        title: Figure title
        save_path: If provided, save to file
    """
    data = _as_data(data)

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    for ax, name in zip(axes, ('H', 'I')):
        values = data[name][np.isfinite(data[name])]
        ax.hist(values, bins=bins, histtype='step', linewidth=2)
        ax.set_xlabel(name)
        ax.set_ylabel('Particles')
        ax.grid(True, alpha=0.3)
    fig.suptitle(title)

    _finish(fig, save_path)


def plot_ref_particle(
    data,
    title: str = 'Reference Particle',
    save_path: str = None,
):
    """Plot reference particle energy pt and position along the path length s.

    Args:
        data: Columns from load_diagnostic, or path to a 'step s x y z t ...' file
        title: Figure title
        save_path: If provided, save to file
    """
    data = _as_data(data)
    order = np.argsort(data['s'], kind='stable')

    fig, (ax_pos, ax_pt) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    for name in ('x', 'y'):
        ax_pos.plot(data['s'][order], data[name][order], linewidth=2, label=name)
    ax_pos.set_ylabel('Position')
    ax_pos.legend()
    ax_pos.grid(True, alpha=0.3)

    ax_pt.plot(data['s'][order], data['pt'][order], linewidth=2)
    ax_pt.set_xlabel('s')
    ax_pt.set_ylabel('pt')
    ax_pt.grid(True, alpha=0.3)
    fig.suptitle(title)

    _finish(fig, save_path)
