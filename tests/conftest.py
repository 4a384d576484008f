import pytest

from geotsp.data.instance_generator import generate_random_points, nearest_neighbor_tour
from geotsp.utils.geometry import Point
from geotsp.utils.tour import Tour


@pytest.fixture
def crossing_square():
    # visits (0,0) -> (1,1) -> (1,0) -> (0,1): both diagonals cross
    return Tour([Point(0, 0.0, 0.0), Point(1, 1.0, 1.0), Point(2, 1.0, 0.0), Point(3, 0.0, 1.0)])


@pytest.fixture
def random_points():
    return generate_random_points(60, seed=7)


@pytest.fixture
def nn_tour(random_points):
    return nearest_neighbor_tour(random_points)
