import math

import numpy as np
import pytest

from geotsp.data.instance_generator import generate_random_points, generate_clustered_points
from geotsp.utils.geometry import Point, distance, distance_squared
from geotsp.utils.kd_tree import KDTree


def brute_force_neighbors(points, q, r):
    return {p.id for p in points if distance(p, q) <= r}


def test_distance_helpers():
    a, b = Point(0, 0.0, 0.0), Point(1, 3.0, 4.0)
    assert distance(a, b) == pytest.approx(5.0)
    assert distance_squared(a, b) == pytest.approx(25.0)


def test_point_equality_is_value_based():
    assert Point(3, 0.5, 0.25) == Point(3, 0.5, 0.25)
    assert len({Point(3, 0.5, 0.25), Point(3, 0.5, 0.25)}) == 1


def test_build_is_balanced():
    points = generate_random_points(255, seed=3)
    tree = KDTree(points)
    assert len(tree) == 255
    assert tree.depth() == 8
    assert tree.nodes_visited == 0


@pytest.mark.parametrize('seed', [0, 1, 2])
def test_frnn_matches_brute_force(seed):
    points = generate_random_points(300, seed=seed)
    tree = KDTree(points)
    rng = np.random.default_rng(seed + 100)
    for _ in range(25):
        q = Point(-1, float(rng.random()), float(rng.random()))
        r = float(rng.uniform(0.0, 0.3))
        found = [p.id for p in tree.find_neighbors(q, r)]
        assert len(found) == len(set(found))
        assert set(found) == brute_force_neighbors(points, q, r)


def test_frnn_on_clustered_points_with_duplicates():
    points = generate_clustered_points(200, num_clusters=3, seed=5)
    # clipping piles points on the border; add exact duplicates as well
    points += [Point(200 + i, p.x, p.y) for i, p in enumerate(points[:20])]
    tree = KDTree(points)
    for q in points[::17]:
        assert {p.id for p in tree.find_neighbors(q, 0.08)} == brute_force_neighbors(points, q, 0.08)


def test_zero_radius_returns_exact_matches():
    points = [Point(0, 0.5, 0.5), Point(1, 0.5, 0.5), Point(2, 0.5, 0.50001), Point(3, 0.1, 0.9)]
    tree = KDTree(points)
    assert {p.id for p in tree.find_neighbors(Point(-1, 0.5, 0.5), 0.0)} == {0, 1}


def test_negative_radius_rejected():
    with pytest.raises(ValueError):
        KDTree([Point(0, 0.0, 0.0)]).find_neighbors(Point(), -1.0)


def test_nearest_matches_brute_force():
    points = generate_random_points(200, seed=11)
    tree = KDTree(points)
    rng = np.random.default_rng(4)
    for _ in range(30):
        q = Point(-1, float(rng.random()), float(rng.random()))
        best = tree.find_nearest(q)
        expected = min(distance(p, q) for p in points)
        assert distance(best, q) == pytest.approx(expected)


def test_k_nearest_sorted_nearest_first():
    points = generate_random_points(150, seed=2)
    tree = KDTree(points)
    q = Point(-1, 0.4, 0.6)
    result = tree.find_k_nearest(q, 7)
    expected = sorted(distance(p, q) for p in points)[:7]
    assert [distance(p, q) for p in result] == pytest.approx(expected)


def test_k_nearest_edge_cases():
    points = generate_random_points(5, seed=2)
    tree = KDTree(points)
    assert tree.find_k_nearest(Point(), 0) == []
    assert len(tree.find_k_nearest(Point(), 10)) == 5


def test_empty_index_defaults():
    tree = KDTree([])
    assert len(tree) == 0
    assert tree.find_nearest(Point(-1, 0.3, 0.3)) == Point()
    assert tree.find_k_nearest(Point(), 3) == []
    assert tree.find_neighbors(Point(), 1.0) == []
    assert tree.find_neighbors_adaptive(Point(), 0.1, 5) == []


def test_adaptive_grows_until_enough_neighbors():
    points = generate_random_points(400, seed=9)
    tree = KDTree(points)
    q = points[0]
    result = tree.find_neighbors_adaptive(q, 0.001, min_neighbors=10)
    assert len(result) >= 10
    # the final radius is a power of 1.5 times the base radius
    r = max(distance(p, q) for p in result)
    steps = math.ceil(math.log(r / 0.001, 1.5))
    assert {p.id for p in result} == brute_force_neighbors(points, q, 0.001 * 1.5 ** steps)


def test_adaptive_stops_at_bound():
    points = generate_random_points(20, seed=9)
    tree = KDTree(points)
    result = tree.find_neighbors_adaptive(points[3], 0.01, min_neighbors=50)
    assert {p.id for p in result} == {p.id for p in points}

    capped = tree.find_neighbors_adaptive(points[3], 0.01, min_neighbors=50, max_radius=0.02)
    assert len(capped) < 20


def test_adaptive_from_zero_radius():
    points = generate_random_points(50, seed=1)
    tree = KDTree(points)
    assert len(tree.find_neighbors_adaptive(points[0], 0.0, min_neighbors=5)) >= 5


def test_nodes_visited_accumulates_until_reset():
    points = generate_random_points(100, seed=6)
    tree = KDTree(points)
    tree.find_neighbors(points[0], 0.1)
    first = tree.nodes_visited
    assert first > 0
    tree.find_neighbors(points[1], 0.1)
    assert tree.nodes_visited > first
    tree.reset_nodes_visited()
    assert tree.nodes_visited == 0
    tree.build(points)
    assert tree.nodes_visited == 0


def test_frnn_prunes_subtrees():
    points = generate_random_points(1000, seed=6)
    tree = KDTree(points)
    tree.find_neighbors(points[0], 0.02)
    assert tree.nodes_visited < len(points) // 2
