import logging
import os
import sys
from typing import Any, Dict, List, Optional

import tqdm

from ..data.instance_generator import TSPInstance, best_nearest_neighbor_tour, describe_instance
from ..solvers.stats import RunStatistics
from ..solvers.two_opt import get_strategy, make_driver
from ..utils import fix_seed
from ..utils.logging import setup_directories, save_results, save_config, save_tour
from ..utils.operators import find_all_improvements
from ..utils.tour import Tour, is_valid_permutation
from .args import parse_args
from .report import separator, format_stats, comparison_table, efficiency_analysis, format_analysis

logger = logging.getLogger("geotsp")


def run_benchmark(args) -> Dict[str, Any]:
    """
    Build the instance, construct the initial tour and run every requested
    strategy on its own copy of it.

    Returns:
        dict: instance summary, per-strategy statistics and final tours.
    """
    rng = fix_seed(args.seed)
    instance = TSPInstance.create(args.instance, n_points=args.n_points, seed=args.seed,
                                  num_clusters=args.num_clusters, tsplib_path=args.tsplib_path)
    logger.info(f'Instance {instance.name}: {len(instance)} points')

    initial_tour = best_nearest_neighbor_tour(instance.points, args.nn_starts)
    if not is_valid_permutation(initial_tour, instance.points):
        raise RuntimeError('initial nearest-neighbour tour is not a permutation of the instance')

    summary = describe_instance(instance.points)
    summary['initial_length'] = initial_tour.length()
    print(separator('2-OPT LOCAL SEARCH'), flush=True)
    print(f'Instance: {instance.name} ({instance.kind})', flush=True)
    for key, value in summary.items():
        print(f'- {key}: {value:.6f}' if isinstance(value, float) else f'- {key}: {value}', flush=True)

    common = {
        'max_iterations': args.max_iterations,
        'min_improvement': args.min_improvement,
        'log_interval': args.log_interval,
        'rng': rng,
    }

    all_stats: Dict[str, RunStatistics] = {}
    final_tours: Dict[str, Tour] = {}
    residual: Dict[str, int] = {}

    pbar = tqdm.tqdm(args.strategies, desc='Strategies')
    for name in pbar:
        key = get_strategy(name).name
        options = dict(common)
        options.update(args.strategy_options.get(key, {}) or {})
        driver = make_driver(key, **options)

        tour = initial_tour.copy()
        stats = driver.run(tour)
        if not is_valid_permutation(tour, instance.points):
            raise RuntimeError(f'{key} produced an invalid tour')

        all_stats[key] = stats
        final_tours[key] = tour
        if args.check_local_optimum:
            residual[key] = len(find_all_improvements(tour))
        pbar.set_postfix({'strategy': key, 'length': f'{stats.final_length:.4f}'})

        print(separator(key.upper()), flush=True)
        print(format_stats(stats), flush=True)

    analysis = efficiency_analysis(all_stats)
    print(separator('COMPARISON'), flush=True)
    print(comparison_table(all_stats), flush=True)
    for line in format_analysis(analysis):
        print(line, flush=True)
    if residual:
        for key, count in residual.items():
            print(f'{key} improving moves left: {count}', flush=True)

    return {
        'instance': {'name': instance.name, 'kind': instance.kind, **summary},
        'initial_tour': initial_tour,
        'instance_points': instance.points,
        'stats': all_stats,
        'tours': final_tours,
        'analysis': analysis,
        'residual_moves': residual,
    }


def save_benchmark(args, outcome: Dict[str, Any]) -> str:
    run_dir = setup_directories(args.output_dir, prefix=outcome['instance']['name'])
    results = {
        'instance': outcome['instance'],
        'strategies': {k: s.as_dict() for k, s in outcome['stats'].items()},
        'analysis': outcome['analysis'],
        'residual_moves': outcome['residual_moves'],
        'tours': {k: t.ids() for k, t in outcome['tours'].items()},
    }
    save_results(results, os.path.join(run_dir, 'results.json'))
    save_config({k: v for k, v in vars(args).items()}, os.path.join(run_dir, 'config.yaml'))

    if outcome['tours']:
        best = outcome['analysis']['best_algorithm']
        save_tour(outcome['instance_points'], outcome['tours'][best], os.path.join(run_dir, 'best_tour.txt'))

    if args.plot:
        from ..visualization.plot_tour import plot_tours
        tours = {'initial': outcome['initial_tour'], **outcome['tours']}
        plot_tours(tours, os.path.join(run_dir, 'tours.png'))

    logger.info(f'Results saved to {run_dir}')
    return run_dir


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    try:
        outcome = run_benchmark(args)
        if not args.no_save:
            save_benchmark(args, outcome)
    except Exception as e:
        logger.exception(f'Optimization failed: {e}')
        return 1

    print(separator(), flush=True)
    print('Optimization completed.', flush=True)
    return 0


if __name__ == '__main__':
    sys.exit(main())
