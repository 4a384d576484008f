from .instance_generator import (
    TSPInstance,
    generate_random_points,
    generate_clustered_points,
    nearest_neighbor_tour,
    best_nearest_neighbor_tour,
    describe_instance,
)
