import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Point:
    """A city: integer identity plus planar coordinates."""
    id: int = 0
    x: float = 0.0
    y: float = 0.0


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def distance_squared(a: Point, b: Point) -> float:
    """Squared Euclidean distance, enough for comparisons."""
    dx = a.x - b.x
    dy = a.y - b.y
    return dx * dx + dy * dy


def bounding_box(points: Iterable[Point]) -> Tuple[float, float, float, float]:
    """
    Axis-aligned bounding box of a point set.

    Returns:
        tuple: (min_x, min_y, max_x, max_y), all zero for an empty set.
    """
    points = list(points)
    if not points:
        return 0.0, 0.0, 0.0, 0.0
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def points_to_array(points: Sequence[Point]) -> np.ndarray:
    """Stack point coordinates into an (n, 2) float array."""
    if len(points) == 0:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([(p.x, p.y) for p in points], dtype=np.float64)
