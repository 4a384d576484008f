from .utils.geometry import Point, distance, distance_squared
from .utils.kd_tree import KDTree
from .utils.tour import Tour, is_valid_permutation
from .utils.operators import evaluate_gain, evaluate_gain_squared, apply_move
from .utils.activation import ActivationTracker
from .solvers.stats import RunStatistics, SearchState
from .solvers.two_opt import (
    ExhaustiveTwoOpt,
    IndexTwoOpt,
    ActivationTwoOpt,
    HybridTwoOpt,
    STRATEGIES,
    run,
)

__version__ = '0.1.0'
