import argparse
from typing import Any, Dict, List, Optional

import yaml

from ..solvers.two_opt import STRATEGIES, ALIASES


def base_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)

    # Infra
    parser.add_argument('--config', type=str, default=None, help='YAML config file to load')
    parser.add_argument('--seed', type=int, default=42)
    parser.add_argument('--output_dir', type=str, default='./runs',
                        help='Directory for results, tours and plots')
    parser.add_argument('--log_level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--log_interval', type=int, default=100,
                        help='Log search progress every N iterations (0 disables)')

    return parser


def benchmark_parser() -> argparse.ArgumentParser:
    """Parser for the strategy comparison benchmark."""
    parent = base_parser()

    parser = argparse.ArgumentParser(parents=[parent],
                                     description='Geometric 2-opt local search benchmark')

    # Instance
    parser.add_argument('--instance', type=str, choices=['random', 'clustered', 'tsplib'], default='random')
    parser.add_argument('--n_points', type=int, default=100)
    parser.add_argument('--num_clusters', type=int, default=5)
    parser.add_argument('--tsplib_path', type=str, default=None,
                        help='TSPLIB file with NODE_COORD_SECTION (instance=tsplib)')
    parser.add_argument('--nn_starts', type=int, default=10,
                        help='Nearest-neighbour start points tried for the initial tour')

    # Search
    parser.add_argument('--strategies', nargs='+', default=list(STRATEGIES),
                        choices=list(STRATEGIES) + list(ALIASES))
    parser.add_argument('--max_iterations', type=int, default=1000)
    parser.add_argument('--min_improvement', type=float, default=1e-9)
    parser.add_argument('--strategy_options', type=yaml.safe_load, default=None,
                        help='Per-strategy options as a YAML mapping, '
                             'e.g. "{hybrid: {focus_radius: 6}}"')

    # Output
    parser.add_argument('--plot', action='store_true', help='Save a plot of every final tour')
    parser.add_argument('--check_local_optimum', action='store_true',
                        help='Count improving 2-opt moves left in each final tour')
    parser.add_argument('--no_save', action='store_true', help='Do not write any files')

    return parser


def load_config(config_path: str) -> Dict[str, Any]:
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def merge_config_args(args: argparse.Namespace, cfg: Dict[str, Any]) -> argparse.Namespace:
    """
    Update args with config values.
    Config values always win over parser defaults so that a YAML file fully
    describes a reproducible experiment.
    """
    for k, v in cfg.items():
        setattr(args, k, v)
    return args


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = benchmark_parser()
    args = parser.parse_args(argv)

    if getattr(args, 'config', None):
        cfg = load_config(args.config)
        args = merge_config_args(args, cfg)

    if args.strategy_options is None:
        args.strategy_options = {}
    return args
