from typing import List, Optional, Tuple

from .geometry import distance, distance_squared
from .tour import Tour


def is_valid_move(n, i, j):
    """
    Check whether (i, j) denotes a proper 2-opt exchange on a tour of size n.

    Args:
        n (int): Tour size.
        i (int): First position.
        j (int): Second position.

    Returns:
        bool: False for adjacent positions and for the full wraparound pair.
    """
    if j < i:
        i, j = j, i
    if i < 0 or j >= n:
        return False
    return j > i + 1 and not (i == 0 and j == n - 1)


def _endpoints(tour, i, j):
    n = len(tour)
    return tour[i], tour[(i + 1) % n], tour[j], tour[(j + 1) % n]


def two_opt_gain(tour: Tour, i: int, j: int) -> float:
    """
    Calculate the length reduction of a 2-opt exchange without applying it.

    Removes edges (i, i+1) and (j, j+1) and adds (i, j) and (i+1, j+1).

    Args:
        tour (Tour): The current tour.
        i (int): First index.
        j (int): Second index.

    Returns:
        float: old - new edge length; positive means improving, 0.0 for
        invalid pairs.
    """
    if j < i:
        i, j = j, i
    if not is_valid_move(len(tour), i, j):
        return 0.0

    a, b, c, d = _endpoints(tour, i, j)
    old = distance(a, b) + distance(c, d)
    new = distance(a, c) + distance(b, d)
    return old - new


def two_opt_gain_squared(tour: Tour, i: int, j: int) -> float:
    """
    Squared-distance analogue of ``two_opt_gain``.

    Only meaningful for ranking candidates against each other; never compare
    it with exact gains or use it to decide whether a move improves the tour.
    """
    if j < i:
        i, j = j, i
    if not is_valid_move(len(tour), i, j):
        return 0.0

    a, b, c, d = _endpoints(tour, i, j)
    old = distance_squared(a, b) + distance_squared(c, d)
    new = distance_squared(a, c) + distance_squared(b, d)
    return old - new


evaluate_gain = two_opt_gain
evaluate_gain_squared = two_opt_gain_squared


def reverse_segment(tour: Tour, start: int, end: int):
    """
    Reverse positions start..end, or the complementary arc if that is shorter.

    Reversing the complement gives the same cycle traversed the other way
    over that arc, so length and edge set are identical.

    Args:
        tour (Tour): The tour, modified in place.
        start (int): First position of the segment.
        end (int): Last position of the segment (start <= end).
    """
    n = len(tour)
    direct = end - start + 1
    if direct <= n - direct:
        tour.reverse(start, end)
    else:
        tour.reverse(end + 1, start - 1)


def apply_move(tour: Tour, i: int, j: int) -> bool:
    """
    Commit the 2-opt exchange (i, j) in place.

    Args:
        tour (Tour): The current tour.
        i (int): First index.
        j (int): Second index.

    Returns:
        bool: True if applied, False for an invalid pair (tour untouched).
    """
    if j < i:
        i, j = j, i
    if not is_valid_move(len(tour), i, j):
        return False
    reverse_segment(tour, i + 1, j)
    return True


def find_best_move(tour: Tour, start: int = 0, end: Optional[int] = None,
                   min_gain: float = 0.0) -> Optional[Tuple[int, int, float]]:
    """
    Best 2-opt exchange with both positions in [start, end).

    Returns:
        tuple: (i, j, gain) of the best move above ``min_gain``, or None.
    """
    if end is None:
        end = len(tour)
    best = None
    best_gain = min_gain
    for i in range(start, end):
        for j in range(i + 2, end):
            gain = two_opt_gain(tour, i, j)
            if gain > best_gain:
                best_gain = gain
                best = (i, j, gain)
    return best


def find_all_improvements(tour: Tour, min_gain: float = 1e-9) -> List[Tuple[int, int, float]]:
    """
    Every improving 2-opt exchange, largest gain first.

    An empty result certifies that the tour is a 2-opt local optimum.
    """
    n = len(tour)
    improvements = []
    for i in range(n - 2):
        for j in range(i + 2, n):
            gain = two_opt_gain(tour, i, j)
            if gain > min_gain:
                improvements.append((i, j, gain))
    improvements.sort(key=lambda m: m[2], reverse=True)
    return improvements
