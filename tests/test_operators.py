import random

import pytest

from geotsp.utils.operators import (
    apply_move,
    evaluate_gain,
    evaluate_gain_squared,
    find_all_improvements,
    find_best_move,
    is_valid_move,
    reverse_segment,
    two_opt_gain,
)
from geotsp.utils.tour import Tour, is_valid_permutation


def test_square_gain(crossing_square):
    gain = evaluate_gain(crossing_square, 0, 2)
    assert gain == pytest.approx(2 * 2 ** 0.5 - 2)


def test_square_single_move_gives_perimeter(crossing_square):
    assert apply_move(crossing_square, 0, 2)
    assert crossing_square.length() == pytest.approx(4.0)
    perimeter = {(0, 2), (1, 2), (1, 3), (0, 3)}
    assert crossing_square.edges() == frozenset(perimeter)


def test_index_order_is_normalised(crossing_square):
    assert evaluate_gain(crossing_square, 2, 0) == evaluate_gain(crossing_square, 0, 2)
    assert evaluate_gain_squared(crossing_square, 2, 0) == evaluate_gain_squared(crossing_square, 0, 2)


@pytest.mark.parametrize('i,j', [(0, 1), (2, 3), (0, 3), (1, 1), (3, 2)])
def test_invalid_pairs_have_zero_gain(crossing_square, i, j):
    assert evaluate_gain(crossing_square, i, j) == 0.0
    assert evaluate_gain_squared(crossing_square, i, j) == 0.0


def test_is_valid_move():
    assert is_valid_move(10, 0, 2)
    assert is_valid_move(10, 7, 2)
    assert is_valid_move(10, 1, 9)
    assert not is_valid_move(10, 0, 9)
    assert not is_valid_move(10, 4, 5)
    assert not is_valid_move(10, 4, 10)


def test_invalid_move_leaves_tour_untouched(nn_tour):
    before = nn_tour.ids()
    assert not apply_move(nn_tour, 0, len(nn_tour) - 1)
    assert not apply_move(nn_tour, 3, 4)
    assert nn_tour.ids() == before


def test_squared_gain_sign_is_only_a_ranking(crossing_square):
    # crossing diagonals: both variants agree the move improves
    assert evaluate_gain_squared(crossing_square, 0, 2) == pytest.approx(2.0)


def test_gain_equals_length_difference(nn_tour, random_points):
    rng = random.Random(1)
    n = len(nn_tour)
    for _ in range(200):
        i, j = sorted(rng.sample(range(n), 2))
        if not is_valid_move(n, i, j):
            continue
        before = nn_tour.length()
        gain = two_opt_gain(nn_tour, i, j)
        apply_move(nn_tour, i, j)
        assert before - nn_tour.length() == pytest.approx(gain, abs=1e-9)
        assert is_valid_permutation(nn_tour, random_points)


def test_both_arcs_give_same_cycle(nn_tour):
    n = len(nn_tour)
    rng = random.Random(5)
    for _ in range(50):
        i, j = sorted(rng.sample(range(n), 2))
        if not is_valid_move(n, i, j):
            continue
        direct = nn_tour.copy()
        direct.reverse(i + 1, j)
        complement = nn_tour.copy()
        complement.reverse(j + 1, i)
        assert direct.edges() == complement.edges()
        assert direct.length() == pytest.approx(complement.length())

        smart = nn_tour.copy()
        reverse_segment(smart, i + 1, j)
        assert smart.edges() == direct.edges()


def test_reversal_moves_the_shorter_arc():
    from geotsp.utils.geometry import Point
    points = [Point(i, float(i), float(i % 2)) for i in range(10)]

    short = Tour(points)
    reverse_segment(short, 2, 4)
    assert short.ids()[:2] == [0, 1] and short.ids()[5:] == [5, 6, 7, 8, 9]

    long = Tour(points)
    reverse_segment(long, 1, 8)
    # only positions 9 and 0 are swapped; the long arc stays in place
    assert long.ids() == [9, 1, 2, 3, 4, 5, 6, 7, 8, 0]
    for i, p in enumerate(long):
        assert long.position_of(p) == i


def test_find_best_move_and_improvements(crossing_square):
    assert find_best_move(crossing_square)[:2] == (0, 2)
    improvements = find_all_improvements(crossing_square)
    assert [(i, j) for i, j, _ in improvements] == [(0, 2)]
    apply_move(crossing_square, 0, 2)
    assert find_best_move(crossing_square) is None
    assert find_all_improvements(crossing_square) == []
