from .geometry import Point, distance, distance_squared, bounding_box, points_to_array
from .kd_tree import KDNode, KDTree
from .tour import Tour, is_valid_permutation, tour_length
from .operators import (
    is_valid_move,
    two_opt_gain,
    two_opt_gain_squared,
    evaluate_gain,
    evaluate_gain_squared,
    reverse_segment,
    apply_move,
    find_best_move,
    find_all_improvements,
)
from .activation import ActivationTracker


def fix_seed(seed=42):
    import os
    os.environ['PYTHONHASHSEED'] = str(seed)
    import random
    random.seed(seed)
    import numpy as np
    np.random.seed(seed)
    return np.random.default_rng(seed)
