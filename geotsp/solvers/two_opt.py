"""
2-opt local search drivers.

All four strategies share one loop (scan, commit the best move, repeat) and
differ only in how the candidate pairs of a scan are generated:

- ExhaustiveTwoOpt: every valid pair, O(n^2) per iteration.
- IndexTwoOpt: pairs whose new edge joins fixed-radius neighbours found
  through a 2-d tree.
- ActivationTwoOpt: every pair of currently active positions.
- HybridTwoOpt: neighbour pairs restricted to active positions.

Moves are committed only when their exact Euclidean gain exceeds
``min_improvement``, so no strategy ever lengthens the tour. Among equal
gains the first pair met in scan order wins.
"""
import inspect
import logging
import time
from typing import Iterator, Optional, Sequence, Tuple, Type, Union

import numpy as np

from ..utils.activation import ActivationTracker
from ..utils.geometry import Point, bounding_box, distance
from ..utils.kd_tree import KDTree
from ..utils.operators import apply_move, is_valid_move, two_opt_gain
from ..utils.tour import Tour
from .stats import RunStatistics, SearchState

logger = logging.getLogger(__name__)

MIN_IMPROVEMENT = 1e-9
MAX_ITERATIONS = 1000

NO_MOVE = (0.0, -1, -1)


class SearchDriver:
    """Base driver: owns the iteration state machine, subclasses supply the scan."""

    name = 'base'

    def __init__(self, max_iterations: int = MAX_ITERATIONS, min_improvement: float = MIN_IMPROVEMENT,
                 log_interval: int = 100):
        if max_iterations < 0:
            raise ValueError(f'max_iterations must be non-negative, got {max_iterations}')
        self.max_iterations = int(max_iterations)
        self.min_improvement = float(min_improvement)
        self.log_interval = int(log_interval)

    def run(self, tour: Tour) -> RunStatistics:
        """
        Improve ``tour`` in place until converged or out of iterations.

        Args:
            tour (Tour): Tour owned by this run; mutated only through apply_move.

        Returns:
            RunStatistics: Counters of the run, ``state`` holding the terminal state.
        """
        stats = RunStatistics(strategy=self.name, initial_length=tour.length())
        start_time = time.perf_counter()

        if len(tour) < 4:
            # no pair of non-adjacent edges exists
            state = SearchState.CONVERGED
        else:
            self._start(tour, stats)
            state = SearchState.SCANNING

        while state is SearchState.SCANNING:
            if stats.iteration_count >= self.max_iterations:
                state = SearchState.EXHAUSTED
                break

            stats.iteration_count += 1
            gain, i, j = self._scan(tour, stats)

            if gain > self.min_improvement:
                state = SearchState.COMMITTING
                apply_move(tour, i, j)
                stats.accepted_move_count += 1
                self._accept(tour, i, j, stats)
                state = SearchState.SCANNING
            elif not self._stall(tour, stats):
                state = SearchState.CONVERGED

            if self.log_interval and stats.iteration_count % self.log_interval == 0:
                logger.info(f'{self.name}: iter {stats.iteration_count}, moves {stats.accepted_move_count}, '
                            f'active {stats.active_node_count}, length {tour.length():.4f}')

        stats.state = state
        stats.final_length = tour.length()
        stats.elapsed_time = time.perf_counter() - start_time
        logger.debug(f'{self.name}: {state.value} after {stats.iteration_count} iterations, '
                     f'{stats.accepted_move_count} moves, length {stats.final_length:.6f}')
        return stats

    # ---------- Hooks ----------

    def _start(self, tour: Tour, stats: RunStatistics):
        pass

    def _scan(self, tour: Tour, stats: RunStatistics) -> Tuple[float, int, int]:
        raise NotImplementedError

    def _accept(self, tour: Tour, i: int, j: int, stats: RunStatistics):
        pass

    def _stall(self, tour: Tour, stats: RunStatistics) -> bool:
        """Called when a scan found nothing; True means the candidate set grew, scan again."""
        return False


def _neighbor_pairs(n: int, i: int, p: int) -> Iterator[Tuple[int, int]]:
    # both exchanges that create the edge tour[i] - tour[p]
    for a, b in ((i, p), ((i - 1) % n, (p - 1) % n)):
        if a > b:
            a, b = b, a
        if is_valid_move(n, a, b):
            yield a, b


def _default_min_radius(points: Sequence[Point]) -> float:
    min_x, min_y, max_x, max_y = bounding_box(points)
    return 0.1 * max(max_x - min_x, max_y - min_y)


class ExhaustiveTwoOpt(SearchDriver):
    """Best-improvement 2-opt over every valid pair."""

    name = 'exhaustive'

    def _scan(self, tour, stats):
        n = len(tour)
        best_gain, best_i, best_j = self.min_improvement, -1, -1
        for i in range(n - 2):
            for j in range(i + 2, n):
                if i == 0 and j == n - 1:
                    continue
                gain = two_opt_gain(tour, i, j)
                stats.total_comparisons += 1
                if gain > best_gain:
                    best_gain, best_i, best_j = gain, i, j
        if best_i < 0:
            return NO_MOVE
        return best_gain, best_i, best_j


class IndexTwoOpt(SearchDriver):
    """
    2-opt restricted to pairs whose new edge joins fixed-radius neighbours.

    The query radius around each position is ``radius_factor`` times the mean
    of its two incident edges, floored at ``min_radius``, and doubled once if
    fewer than ``min_neighbors`` points come back. The 2-d tree is rebuilt
    from scratch every ``rebuild_interval`` accepted moves.
    """

    name = 'index'

    def __init__(self, radius_factor: float = 3.0, min_radius: Optional[float] = None,
                 min_neighbors: int = 5, rebuild_interval: int = 25, **kwargs):
        super().__init__(**kwargs)
        if rebuild_interval < 1:
            raise ValueError(f'rebuild_interval must be >= 1, got {rebuild_interval}')
        self.radius_factor = radius_factor
        self.min_radius = min_radius
        self.min_neighbors = min_neighbors
        self.rebuild_interval = rebuild_interval
        self.index: Optional[KDTree] = None
        self._min_radius = 0.0

    def _start(self, tour, stats):
        self.index = KDTree(tour.points())
        self._min_radius = self.min_radius if self.min_radius is not None else _default_min_radius(tour)

    def _query_radius(self, tour, i):
        n = len(tour)
        prev_edge = distance(tour[(i - 1) % n], tour[i])
        next_edge = distance(tour[i], tour[(i + 1) % n])
        return max(self.radius_factor * (prev_edge + next_edge) / 2.0, self._min_radius)

    def _neighbors(self, tour, i):
        radius = self._query_radius(tour, i)
        neighbors = self.index.find_neighbors(tour[i], radius)
        if len(neighbors) < self.min_neighbors:
            neighbors = self.index.find_neighbors(tour[i], radius * 2.0)
        return neighbors

    def _candidate_positions(self, tour):
        return range(len(tour))

    def _accepts_neighbor(self, p):
        return True

    def _scan(self, tour, stats):
        n = len(tour)
        best_gain, best_i, best_j = self.min_improvement, -1, -1
        seen = set()
        self.index.reset_nodes_visited()

        for i in self._candidate_positions(tour):
            for q in self._neighbors(tour, i):
                # the tree may predate recent moves, so re-resolve the position
                p = tour.position_of(q)
                if p == i or not self._accepts_neighbor(p):
                    continue
                for a, b in _neighbor_pairs(n, i, p):
                    if (a, b) in seen:
                        continue
                    seen.add((a, b))
                    gain = two_opt_gain(tour, a, b)
                    stats.total_comparisons += 1
                    if gain > best_gain:
                        best_gain, best_i, best_j = gain, a, b

        stats.index_nodes_visited += self.index.nodes_visited
        if best_i < 0:
            return NO_MOVE
        return best_gain, best_i, best_j

    def _accept(self, tour, i, j, stats):
        if stats.accepted_move_count % self.rebuild_interval == 0:
            self.index.build(tour.points())
            stats.index_rebuilds += 1


class ActivationTwoOpt(SearchDriver):
    """
    2-opt over pairs of active positions only.

    After a move only the positions within ``focus_radius`` of the two
    exchanged edges stay active; a fruitless scan activates more positions.
    The run converges only once every position is active and still nothing
    improves, so the final tour is a 2-opt local optimum.
    """

    name = 'activation'

    def __init__(self, focus_radius: int = 2, relax_batch: int = 10, seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None, **kwargs):
        super().__init__(**kwargs)
        self.focus_radius = focus_radius
        self.relax_batch = relax_batch
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.tracker: Optional[ActivationTracker] = None

    def _start(self, tour, stats):
        self.tracker = ActivationTracker(len(tour), rng=self.rng, relax_batch=self.relax_batch)

    def _scan(self, tour, stats):
        n = len(tour)
        active = self.tracker.active_positions().tolist()
        stats.active_node_count = len(active)

        best_gain, best_i, best_j = self.min_improvement, -1, -1
        for a, i in enumerate(active):
            for j in active[a + 1:]:
                if j <= i + 1 or (i == 0 and j == n - 1):
                    continue
                gain = two_opt_gain(tour, i, j)
                stats.total_comparisons += 1
                if gain > best_gain:
                    best_gain, best_i, best_j = gain, i, j
        if best_i < 0:
            return NO_MOVE
        return best_gain, best_i, best_j

    def _accept(self, tour, i, j, stats):
        self.tracker.focus((i, j), self.focus_radius)

    def _stall(self, tour, stats):
        return self.tracker.relax() > 0


class HybridTwoOpt(IndexTwoOpt):
    """
    Neighbour-pair 2-opt evaluated from active positions only.

    Radii come from the outgoing edge, grown geometrically until
    ``min_neighbors`` points are found; a neighbour is used only if its own
    position is active too.
    """

    name = 'hybrid'

    def __init__(self, radius_factor: float = 4.0, min_radius: Optional[float] = None,
                 min_neighbors: int = 8, rebuild_interval: int = 30, focus_radius: int = 4,
                 relax_batch: int = 15, seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None, **kwargs):
        super().__init__(radius_factor=radius_factor, min_radius=min_radius, min_neighbors=min_neighbors,
                         rebuild_interval=rebuild_interval, **kwargs)
        self.focus_radius = focus_radius
        self.relax_batch = relax_batch
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.tracker: Optional[ActivationTracker] = None

    def _start(self, tour, stats):
        super()._start(tour, stats)
        self.tracker = ActivationTracker(len(tour), rng=self.rng, relax_batch=self.relax_batch)

    def _neighbors(self, tour, i):
        next_edge = distance(tour[i], tour[(i + 1) % len(tour)])
        radius = max(self.radius_factor * next_edge, self._min_radius)
        return self.index.find_neighbors_adaptive(tour[i], radius, self.min_neighbors)

    def _candidate_positions(self, tour):
        active = self.tracker.active_positions().tolist()
        return active

    def _accepts_neighbor(self, p):
        return self.tracker.is_active(p)

    def _scan(self, tour, stats):
        stats.active_node_count = self.tracker.count
        return super()._scan(tour, stats)

    def _accept(self, tour, i, j, stats):
        self.tracker.focus((i, j), self.focus_radius)
        super()._accept(tour, i, j, stats)

    def _stall(self, tour, stats):
        return self.tracker.relax() > 0


STRATEGIES = {
    'exhaustive': ExhaustiveTwoOpt,
    'index': IndexTwoOpt,
    'activation': ActivationTwoOpt,
    'hybrid': HybridTwoOpt,
}

ALIASES = {
    'basic': 'exhaustive',
    'geometric': 'index',
    'approximate': 'activation',
}


def get_strategy(name: str) -> Type[SearchDriver]:
    key = ALIASES.get(name.lower(), name.lower())
    if key not in STRATEGIES:
        raise ValueError(f'Unknown strategy: {name} (expected one of {sorted(STRATEGIES)})')
    return STRATEGIES[key]


def _init_parameters(cls):
    names = set()
    for klass in cls.__mro__:
        if '__init__' not in vars(klass) or klass is object:
            continue
        for pname, param in inspect.signature(klass.__init__).parameters.items():
            if pname != 'self' and param.kind not in (param.VAR_KEYWORD, param.VAR_POSITIONAL):
                names.add(pname)
    return names


def make_driver(strategy: Union[str, Type[SearchDriver]], **options) -> SearchDriver:
    """
    Instantiate a driver, passing only the options its constructors accept.

    Args:
        strategy (str | type): Registry name, alias or SearchDriver subclass.
        **options: Candidate keyword arguments, e.g. a whole config section.

    Returns:
        SearchDriver: The configured driver.
    """
    cls = get_strategy(strategy) if isinstance(strategy, str) else strategy
    accepted = _init_parameters(cls)
    kwargs = {k: v for k, v in options.items() if k in accepted}
    return cls(**kwargs)


def run(strategy: Union[str, Type[SearchDriver], SearchDriver], initial_tour: Union[Tour, Sequence[Point]],
        **options) -> Tuple[Tour, RunStatistics]:
    """
    Run one strategy on a private copy of ``initial_tour``.

    Args:
        strategy: Registry name, driver class or configured driver instance.
        initial_tour: Starting tour; never mutated.
        **options: Driver options when ``strategy`` is a name or class.

    Returns:
        tuple: (final_tour, RunStatistics)
    """
    if isinstance(strategy, SearchDriver):
        driver = strategy
    else:
        driver = make_driver(strategy, **options)

    tour = initial_tour.copy() if isinstance(initial_tour, Tour) else Tour(initial_tour)
    stats = driver.run(tour)
    return tour, stats
