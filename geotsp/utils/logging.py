import datetime
import json
import os
from typing import Any, Dict, Sequence

import numpy as np
import yaml

from .geometry import Point
from .tour import tour_length


def setup_directories(output_dir: str, prefix: str = "") -> str:
    """Create a timestamped run directory under ``output_dir``."""
    timestamp = datetime.datetime.now().strftime('%b%d_%H-%M-%S')
    run_name = f'{timestamp}_{prefix}' if prefix else timestamp
    log_dir = os.path.join(output_dir, run_name)
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


def _to_builtin(value):
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    raise TypeError(f'Object of type {type(value).__name__} is not JSON serializable')


def save_results(results: Dict[str, Any], path: str):
    """Save run results to a JSON file."""
    with open(path, 'w') as f:
        json.dump(results, f, indent=2, default=_to_builtin)


def save_config(config: Dict[str, Any], path: str):
    """Save the effective configuration to a YAML file."""
    with open(path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False)


def save_tour(points: Sequence[Point], tour: Sequence[Point], path: str):
    """
    Write a tour as text: header, point count, length, then one line per position.

    Args:
        points (Sequence[Point]): The instance point set.
        tour (Sequence[Point]): Points in visiting order.
        path (str): Output file.
    """
    with open(path, 'w') as f:
        f.write('TSP Optimization Results\n')
        f.write(f'Points: {len(points)}\n')
        f.write(f'Best Tour Length: {tour_length(list(tour)):.6f}\n')
        f.write('\nBest Tour Sequence:\n')
        for i, p in enumerate(tour):
            f.write(f'{i}: ({p.x:.6f}, {p.y:.6f}) ID:{p.id}\n')
