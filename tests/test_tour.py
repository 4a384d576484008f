import pytest

from geotsp.utils.geometry import Point
from geotsp.utils.tour import Tour, is_valid_permutation, tour_length


def make_line(n):
    return [Point(i, float(i), 0.0) for i in range(n)]


def test_length_of_square(crossing_square):
    assert crossing_square.length() == pytest.approx(2 + 2 * 2 ** 0.5)


def test_length_of_trivial_tours():
    assert Tour([]).length() == 0.0
    assert Tour([Point(0, 3.0, 4.0)]).length() == 0.0
    assert Tour([Point(0, 0.0, 0.0), Point(1, 3.0, 4.0)]).length() == pytest.approx(10.0)
    assert tour_length([]) == 0.0


def test_successor_and_predecessor_wrap():
    tour = Tour(make_line(5))
    assert tour.successor(4) == 0
    assert tour.predecessor(0) == 4
    assert tour.successor(2) == 3


def test_position_index():
    points = make_line(6)
    tour = Tour(points[::-1])
    assert tour.position_of(points[0]) == 5
    assert tour.position_of(2) == 3


def test_copy_is_independent():
    tour = Tour(make_line(6))
    other = tour.copy()
    other.reverse(1, 3)
    assert tour.ids() == [0, 1, 2, 3, 4, 5]
    assert other.ids() == [0, 3, 2, 1, 4, 5]


def test_reverse_with_wraparound_updates_positions():
    tour = Tour(make_line(7))
    tour.reverse(5, 1)  # arc 5, 6, 0, 1
    assert tour.ids() == [6, 5, 2, 3, 4, 1, 0]
    for i, p in enumerate(tour):
        assert tour.position_of(p) == i


def test_edges_ignore_direction_and_rotation():
    points = make_line(5)
    forward = Tour(points)
    backward = Tour(points[::-1])
    rotated = Tour(points[2:] + points[:2])
    assert forward.edges() == backward.edges() == rotated.edges()
    assert len(forward.edges()) == 5


def test_valid_permutation():
    points = make_line(5)
    assert is_valid_permutation(Tour(points[::-1]), points)
    assert is_valid_permutation([], [])


def test_duplicate_is_invalid():
    points = make_line(5)
    assert not is_valid_permutation(points[:4] + [points[0]], points)


def test_missing_or_extra_is_invalid():
    points = make_line(5)
    assert not is_valid_permutation(points[:4], points)
    assert not is_valid_permutation(points + [Point(9, 0.0, 0.0)], points)
    assert not is_valid_permutation(points[:4] + [Point(9, 4.0, 0.0)], points)
