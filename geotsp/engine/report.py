from typing import Dict, List

from ..solvers.stats import RunStatistics

SEPARATOR_WIDTH = 70


def separator(title: str = "") -> str:
    line = '=' * SEPARATOR_WIDTH
    if not title:
        return f'\n{line}'
    padding = max((SEPARATOR_WIDTH - len(title)) // 2, 0)
    return f'\n{line}\n{" " * padding}{title}\n{line}'


def format_stats(stats: RunStatistics) -> str:
    """Detailed per-strategy block."""
    lines = [
        f'{stats.strategy} results:',
        f'  initial length:      {stats.initial_length:.6f}',
        f'  final length:        {stats.final_length:.6f}',
        f'  improvement:         {stats.improvement * 100:.2f}%',
        f'  accepted moves:      {stats.accepted_move_count}',
        f'  iterations:          {stats.iteration_count} ({stats.state.value})',
        f'  index nodes visited: {stats.index_nodes_visited}',
        f'  comparisons:         {stats.total_comparisons}',
        f'  elapsed:             {stats.elapsed_time:.4f} s',
    ]
    if stats.active_node_count > 0:
        lines.append(f'  active nodes:        {stats.active_node_count}')
    if stats.index_rebuilds > 0:
        lines.append(f'  index rebuilds:      {stats.index_rebuilds}')
    lines.append(f'  moves per second:    {stats.moves_per_second:.2f}')
    return '\n'.join(lines)


def comparison_table(all_stats: Dict[str, RunStatistics]) -> str:
    header = (f'{"Algorithm":<12}{"Final":>12}{"Improv.":>10}{"Moves":>8}{"Iters":>8}'
              f'{"Time(s)":>10}{"Moves/s":>11}{"Comparisons":>14}')
    rows = [header, '-' * len(header)]
    for name, s in all_stats.items():
        rows.append(f'{name:<12}{s.final_length:>12.4f}{s.improvement * 100:>9.2f}%'
                    f'{s.accepted_move_count:>8}{s.iteration_count:>8}{s.elapsed_time:>10.3f}'
                    f'{s.moves_per_second:>11.1f}{s.total_comparisons:>14}')
    return '\n'.join(rows)


def efficiency_analysis(all_stats: Dict[str, RunStatistics], baseline: str = 'exhaustive') -> Dict[str, object]:
    """
    Best / fastest / busiest strategy, plus speedup and comparison reduction
    of every other strategy relative to ``baseline`` when it was run.
    """
    if not all_stats:
        return {}

    best = min(all_stats, key=lambda k: all_stats[k].final_length)
    fastest = min(all_stats, key=lambda k: all_stats[k].elapsed_time)
    most_moves = max(all_stats, key=lambda k: all_stats[k].accepted_move_count)
    analysis = {
        'best_algorithm': best,
        'best_length': all_stats[best].final_length,
        'fastest_algorithm': fastest,
        'fastest_time': all_stats[fastest].elapsed_time,
        'most_moves': most_moves,
        'speedup': {},
        'comparison_reduction': {},
    }

    base = all_stats.get(baseline)
    if base is None:
        return analysis
    for name, s in all_stats.items():
        if name == baseline:
            continue
        if base.elapsed_time > 0 and s.elapsed_time > 0:
            analysis['speedup'][name] = base.elapsed_time / s.elapsed_time
        if base.total_comparisons > 0:
            analysis['comparison_reduction'][name] = 1.0 - s.total_comparisons / base.total_comparisons
    return analysis


def format_analysis(analysis: Dict[str, object]) -> List[str]:
    if not analysis:
        return []
    lines = [
        f'best algorithm: {analysis["best_algorithm"]} (length {analysis["best_length"]:.6f})',
        f'fastest algorithm: {analysis["fastest_algorithm"]} ({analysis["fastest_time"]:.3f}s)',
        f'most moves: {analysis["most_moves"]}',
    ]
    for name, speedup in analysis['speedup'].items():
        lines.append(f'{name} speedup: {speedup:.2f}x')
    for name, reduction in analysis['comparison_reduction'].items():
        lines.append(f'{name} comparison reduction: {reduction * 100:.1f}%')
    return lines
