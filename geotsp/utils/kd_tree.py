import heapq
import itertools
import math
from typing import List, Optional, Sequence

import numpy as np

from .geometry import Point, distance_squared, bounding_box, points_to_array


class KDNode:
    """Node of the 2-d tree. Children are owned by their parent only."""

    __slots__ = ('point', 'depth', 'left', 'right')

    def __init__(self, point: Point, depth: int):
        self.point = point
        self.depth = depth
        self.left: Optional['KDNode'] = None
        self.right: Optional['KDNode'] = None

    def split_diff(self, query: Point) -> float:
        # even depth splits on x, odd depth on y
        if self.depth % 2 == 0:
            return query.x - self.point.x
        return query.y - self.point.y


class KDTree:
    """
    Balanced 2-d tree over a snapshot of point coordinates.

    The tree indexes coordinates, not tour positions: callers resolve a hit
    to a position through the tour's own identity index. ``nodes_visited``
    counts visited nodes across queries until ``reset_nodes_visited`` is
    called, which callers do before each batch of queries.
    """

    def __init__(self, points: Optional[Sequence[Point]] = None):
        self.root: Optional[KDNode] = None
        self.size = 0
        self.nodes_visited = 0
        self._diagonal = 0.0
        if points is not None:
            self.build(points)

    def __len__(self):
        return self.size

    # ---------- Construction ----------

    def build(self, points: Sequence[Point]):
        """
        (Re)build the tree from a copy of ``points``, discarding any previous tree.

        Args:
            points (Sequence[Point]): Points to index.
        """
        snapshot = list(points)
        self.root = None
        self.size = len(snapshot)
        self.nodes_visited = 0
        if not snapshot:
            self._diagonal = 0.0
            return

        min_x, min_y, max_x, max_y = bounding_box(snapshot)
        self._diagonal = math.hypot(max_x - min_x, max_y - min_y)

        coords = points_to_array(snapshot)
        idx = np.arange(len(snapshot))
        self.root = self._build(snapshot, coords, idx, 0)

    def _build(self, points, coords, idx, depth) -> Optional[KDNode]:
        if idx.size == 0:
            return None

        axis = depth % 2
        mid = idx.size // 2
        # nth-element: everything left of mid is <= the median, right is >=
        order = np.argpartition(coords[idx, axis], mid)
        idx = idx[order]

        node = KDNode(points[idx[mid]], depth)
        node.left = self._build(points, coords, idx[:mid], depth + 1)
        node.right = self._build(points, coords, idx[mid + 1:], depth + 1)
        return node

    def depth(self) -> int:
        """Height of the tree (0 when empty)."""
        def _height(node):
            if node is None:
                return 0
            return 1 + max(_height(node.left), _height(node.right))
        return _height(self.root)

    def reset_nodes_visited(self):
        self.nodes_visited = 0

    # ---------- Queries ----------

    def find_nearest(self, query: Point) -> Point:
        """
        Nearest indexed point to ``query``.

        Returns:
            Point: The nearest point, or ``Point()`` if the tree is empty.
        """
        if self.root is None:
            return Point()

        best = [self.root.point, distance_squared(query, self.root.point)]
        self._nearest(self.root, query, best)
        return best[0]

    def _nearest(self, node, query, best):
        if node is None:
            return
        self.nodes_visited += 1

        dist_sq = distance_squared(node.point, query)
        if dist_sq < best[1]:
            best[0], best[1] = node.point, dist_sq

        diff = node.split_diff(query)
        near, far = (node.left, node.right) if diff <= 0 else (node.right, node.left)
        self._nearest(near, query, best)
        if diff * diff < best[1]:
            self._nearest(far, query, best)

    def find_k_nearest(self, query: Point, k: int) -> List[Point]:
        """
        The ``k`` indexed points closest to ``query``, nearest first.

        Args:
            query (Point): Query location.
            k (int): Number of neighbours wanted.

        Returns:
            list: Up to ``k`` points ordered by increasing distance.
        """
        if k <= 0 or self.root is None:
            return []

        # max-heap on distance via negated keys; the counter keeps ties stable
        heap = []
        counter = itertools.count()
        self._k_nearest(self.root, query, k, heap, counter)

        ordered = sorted((-neg_d, seq, p) for neg_d, seq, p in heap)
        return [p for _, _, p in ordered]

    def _k_nearest(self, node, query, k, heap, counter):
        if node is None:
            return
        self.nodes_visited += 1

        dist_sq = distance_squared(node.point, query)
        if len(heap) < k:
            heapq.heappush(heap, (-dist_sq, next(counter), node.point))
        elif dist_sq < -heap[0][0]:
            heapq.heapreplace(heap, (-dist_sq, next(counter), node.point))

        diff = node.split_diff(query)
        near, far = (node.left, node.right) if diff <= 0 else (node.right, node.left)
        self._k_nearest(near, query, k, heap, counter)
        worst = -heap[0][0] if len(heap) == k else math.inf
        if diff * diff < worst:
            self._k_nearest(far, query, k, heap, counter)

    def find_neighbors(self, query: Point, radius: float) -> List[Point]:
        """
        Fixed-radius near neighbours: every indexed point within ``radius``.

        A radius of zero returns only points with the exact query coordinates.
        """
        if radius < 0:
            raise ValueError(f'radius must be non-negative, got {radius}')
        neighbors: List[Point] = []
        self._frnn(self.root, query, radius * radius, neighbors)
        return neighbors

    def _frnn(self, node, query, radius_sq, out):
        if node is None:
            return
        self.nodes_visited += 1

        if distance_squared(node.point, query) <= radius_sq:
            out.append(node.point)

        diff = node.split_diff(query)
        near, far = (node.left, node.right) if diff <= 0 else (node.right, node.left)
        self._frnn(near, query, radius_sq, out)
        if diff * diff <= radius_sq:
            self._frnn(far, query, radius_sq, out)

    def find_neighbors_adaptive(self, query: Point, base_radius: float, min_neighbors: int = 5,
                                growth: float = 1.5, max_radius: Optional[float] = None) -> List[Point]:
        """
        FRNN with a radius that grows geometrically until enough neighbours are found.

        Args:
            query (Point): Query location.
            base_radius (float): Starting radius.
            min_neighbors (int): Stop growing once this many points are found.
            growth (float): Radius multiplier per step, must exceed 1.
            max_radius (float): Upper radius bound; defaults to the diagonal of
                the indexed bounding box, at which every point is reachable.

        Returns:
            list: Points from the last query; fewer than ``min_neighbors`` when
            the bound was reached first.
        """
        if growth <= 1.0:
            raise ValueError(f'growth must be > 1, got {growth}')
        if max_radius is None:
            max_radius = self._diagonal

        radius = base_radius
        neighbors = self.find_neighbors(query, radius)
        while len(neighbors) < min_neighbors and radius < max_radius:
            radius = radius * growth if radius > 0 else max_radius / 1024
            neighbors = self.find_neighbors(query, radius)
        return neighbors
