from typing import Dict, FrozenSet, Iterator, List, Sequence, Tuple, Union

import numpy as np

from .geometry import Point, points_to_array


class Tour:
    """
    Cyclic visiting order over a set of points.

    Keeps an identity -> position index next to the order so that a point
    returned by a spatial query can be located in O(1). The index is kept
    current by ``reverse``, the single mutator, which only the segment
    reversal operator calls.
    """

    def __init__(self, points: Sequence[Point]):
        self._order: List[Point] = list(points)
        self._position: Dict[int, int] = {p.id: i for i, p in enumerate(self._order)}

    def __len__(self):
        return len(self._order)

    def __getitem__(self, i: int) -> Point:
        return self._order[i]

    def __iter__(self) -> Iterator[Point]:
        return iter(self._order)

    def __repr__(self):
        return f'Tour(n={len(self)}, length={self.length():.6f})'

    def successor(self, i: int) -> int:
        return (i + 1) % len(self._order)

    def predecessor(self, i: int) -> int:
        return (i - 1) % len(self._order)

    def position_of(self, point: Union[Point, int]) -> int:
        """Current position of a point (or point id) in the tour."""
        key = point.id if isinstance(point, Point) else point
        return self._position[key]

    def points(self) -> List[Point]:
        return list(self._order)

    def ids(self) -> List[int]:
        return [p.id for p in self._order]

    def copy(self) -> 'Tour':
        return Tour(self._order)

    def to_array(self) -> np.ndarray:
        return points_to_array(self._order)

    def length(self) -> float:
        """
        Total length of the closed tour.

        Returns:
            float: Sum of edge lengths including the closing edge; 0 for n <= 1.
        """
        if len(self._order) < 2:
            return 0.0
        coords = self.to_array()
        step = np.roll(coords, -1, axis=0) - coords
        return float(np.sum(np.hypot(step[:, 0], step[:, 1])))

    def edges(self) -> FrozenSet[Tuple[int, int]]:
        """Undirected edge set as sorted id pairs, independent of direction and rotation."""
        n = len(self._order)
        if n < 2:
            return frozenset()
        return frozenset(
            tuple(sorted((self._order[i].id, self._order[(i + 1) % n].id)))
            for i in range(n)
        )

    def reverse(self, start: int, end: int):
        """
        Reverse the arc from ``start`` to ``end`` inclusive, in place.

        When ``start > end`` the arc wraps around the end of the sequence.
        The position index is updated for every entry that moves.

        Args:
            start (int): First position of the arc.
            end (int): Last position of the arc.
        """
        n = len(self._order)
        if n == 0:
            return
        order = self._order
        position = self._position
        span = (end - start) % n + 1
        lo, hi = start % n, end % n
        for _ in range(span // 2):
            order[lo], order[hi] = order[hi], order[lo]
            position[order[lo].id] = lo
            position[order[hi].id] = hi
            lo = (lo + 1) % n
            hi = (hi - 1) % n


def is_valid_permutation(tour: Sequence[Point], reference_points: Sequence[Point]) -> bool:
    """
    Check that ``tour`` visits every reference point exactly once.

    Args:
        tour (Sequence[Point]): Tour (or any point sequence) to check.
        reference_points (Sequence[Point]): The instance point set.

    Returns:
        bool: True if same size, no duplicate ids and no missing ids.
    """
    if len(tour) != len(reference_points):
        return False

    seen = set()
    for p in tour:
        if p.id in seen:
            return False
        seen.add(p.id)

    return all(p.id in seen for p in reference_points)


def tour_length(points: Sequence[Point]) -> float:
    """Length of the closed tour through ``points`` in the given order."""
    return Tour(points).length()
