"""
Planar TSP instances and initial tours.

- Uniform random and clustered point sets in the unit square (seeded).
- TSPLIB EUC_2D files through tsplib95.
- Nearest-neighbour tour construction, single start or best of several.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np
import tsplib95
from scipy.spatial.distance import pdist

from ..utils.geometry import Point, points_to_array
from ..utils.tour import Tour

logger = logging.getLogger(__name__)


def generate_random_points(n: int, seed: int = 42) -> List[Point]:
    """Uniform points in [0, 1] x [0, 1] with ids 0..n-1."""
    if n < 0:
        raise ValueError(f'n must be non-negative, got {n}')
    rng = np.random.default_rng(seed)
    coords = rng.random((n, 2))
    return [Point(i, float(x), float(y)) for i, (x, y) in enumerate(coords)]


def generate_clustered_points(n: int, num_clusters: int = 5, seed: int = 42) -> List[Point]:
    """
    Points scattered around random cluster centres, clipped to the unit square.

    Args:
        n (int): Number of points.
        num_clusters (int): Number of centres, drawn uniformly in [0.1, 0.9]^2.
        seed (int): RNG seed.

    Returns:
        list: n points; each picks a centre uniformly and deviates N(0, 0.05) per axis.
    """
    if n < 0:
        raise ValueError(f'n must be non-negative, got {n}')
    if num_clusters < 1:
        raise ValueError(f'num_clusters must be >= 1, got {num_clusters}')
    rng = np.random.default_rng(seed)
    centres = rng.uniform(0.1, 0.9, size=(num_clusters, 2))
    which = rng.integers(0, num_clusters, size=n)
    coords = np.clip(centres[which] + rng.normal(0.0, 0.05, size=(n, 2)), 0.0, 1.0)
    return [Point(i, float(x), float(y)) for i, (x, y) in enumerate(coords)]


@dataclass
class TSPInstance:
    name: str
    points: List[Point] = field(default_factory=list)
    kind: str = 'random'

    def __len__(self):
        return len(self.points)

    # ---------- Construction ----------

    @classmethod
    def from_random(cls, n: int, seed: int = 42) -> 'TSPInstance':
        return cls(name=f'random{n}_s{seed}', points=generate_random_points(n, seed), kind='random')

    @classmethod
    def from_clustered(cls, n: int, num_clusters: int = 5, seed: int = 42) -> 'TSPInstance':
        points = generate_clustered_points(n, num_clusters, seed)
        return cls(name=f'clustered{n}_c{num_clusters}_s{seed}', points=points, kind='clustered')

    @classmethod
    def from_tsplib_file(cls, file_path: os.PathLike) -> 'TSPInstance':
        """
        Load a TSPLIB problem with NODE_COORD_SECTION.

        Node ids are re-based to 0..n-1 in ascending TSPLIB id order.
        """
        problem = tsplib95.load(str(file_path))
        coords: Dict[int, Sequence[float]] = problem.node_coords
        if not coords:
            raise ValueError(f'{file_path} has no node coordinates')
        if problem.edge_weight_type not in (None, 'EUC_2D'):
            logger.warning(f'{file_path}: edge weight type {problem.edge_weight_type} '
                           f'treated as planar Euclidean')

        points = []
        for i, node in enumerate(sorted(coords)):
            x, y = coords[node][:2]
            points.append(Point(i, float(x), float(y)))
        name = problem.name or os.path.splitext(os.path.basename(str(file_path)))[0]
        return cls(name=name, points=points, kind='tsplib')

    @classmethod
    def create(cls, kind: str, n_points: int = 100, seed: int = 42, num_clusters: int = 5,
               tsplib_path: str = None) -> 'TSPInstance':
        if kind == 'random':
            return cls.from_random(n_points, seed)
        if kind == 'clustered':
            return cls.from_clustered(n_points, num_clusters, seed)
        if kind == 'tsplib':
            if not tsplib_path:
                raise ValueError('tsplib instances need --tsplib_path')
            return cls.from_tsplib_file(tsplib_path)
        raise ValueError(f'Unknown instance kind: {kind}')

    def to_array(self) -> np.ndarray:
        return points_to_array(self.points)


def nearest_neighbor_tour(points: Sequence[Point], start: int = 0) -> Tour:
    """
    Greedy tour: always move to the closest unvisited point.

    Args:
        points (Sequence[Point]): Points to visit.
        start (int): Index into ``points`` of the first city.

    Returns:
        Tour: The constructed tour (empty for no points).
    """
    n = len(points)
    if n == 0:
        return Tour([])

    coords = points_to_array(points)
    visited = np.zeros(n, dtype=bool)
    order = [start]
    visited[start] = True
    current = start
    for _ in range(n - 1):
        d = np.hypot(coords[:, 0] - coords[current, 0], coords[:, 1] - coords[current, 1])
        d[visited] = np.inf
        current = int(np.argmin(d))
        visited[current] = True
        order.append(current)
    return Tour([points[i] for i in order])


def best_nearest_neighbor_tour(points: Sequence[Point], num_starts: int = 10) -> Tour:
    """Shortest nearest-neighbour tour over the first ``num_starts`` start points."""
    if len(points) == 0:
        return Tour([])

    best_tour, best_length = None, np.inf
    for start in range(min(num_starts, len(points))):
        tour = nearest_neighbor_tour(points, start)
        length = tour.length()
        if length < best_length or best_tour is None:
            best_tour, best_length = tour, length
    return best_tour


def describe_instance(points: Sequence[Point]) -> Dict[str, float]:
    """Point count and min / max / mean pairwise distance."""
    summary = {'n_points': len(points), 'min_distance': 0.0, 'max_distance': 0.0, 'mean_distance': 0.0}
    if len(points) < 2:
        return summary
    d = pdist(points_to_array(points))
    summary.update(min_distance=float(d.min()), max_distance=float(d.max()), mean_distance=float(d.mean()))
    return summary
