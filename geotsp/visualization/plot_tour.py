import math
from typing import Dict, Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from ..utils.tour import Tour


def plot_tour(tour: Tour, ax=None, title: Optional[str] = None, color: str = '#1f77b4'):
    """Draw a closed tour on ``ax`` (a new figure if None) and return the axes."""
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    coords = tour.to_array()
    if len(coords) > 0:
        closed = np.vstack([coords, coords[:1]])
        ax.plot(closed[:, 0], closed[:, 1], '-', color=color, linewidth=1.2)
        ax.plot(coords[:, 0], coords[:, 1], 'o', color='black', markersize=3)
        ax.plot(coords[0, 0], coords[0, 1], 's', color='#d62728', markersize=6)

    if title is None:
        title = f'n={len(tour)}, length={tour.length():.4f}'
    ax.set_title(title)
    ax.set_aspect('equal', adjustable='datalim')
    return ax


def plot_tours(tours: Dict[str, Tour], path: str, ncols: int = 2):
    """Save one subplot per named tour into ``path``."""
    if not tours:
        return
    ncols = min(ncols, len(tours))
    nrows = math.ceil(len(tours) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(6 * ncols, 6 * nrows), squeeze=False)

    colors = ['#1f77b4', '#ff7f0e', '#2ca02c', '#9467bd', '#8c564b', '#e377c2']
    for k, (name, tour) in enumerate(tours.items()):
        ax = axes[k // ncols][k % ncols]
        plot_tour(tour, ax=ax, title=f'{name}: {tour.length():.4f}', color=colors[k % len(colors)])
    for k in range(len(tours), nrows * ncols):
        axes[k // ncols][k % ncols].axis('off')

    plt.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
