from .stats import RunStatistics, SearchState, improvement_ratio
from .two_opt import (
    SearchDriver,
    ExhaustiveTwoOpt,
    IndexTwoOpt,
    ActivationTwoOpt,
    HybridTwoOpt,
    STRATEGIES,
    get_strategy,
    make_driver,
    run,
)
