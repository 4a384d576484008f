import enum
from dataclasses import dataclass, asdict
from typing import Any, Dict


class SearchState(enum.Enum):
    SCANNING = 'scanning'
    COMMITTING = 'committing'
    CONVERGED = 'converged'
    EXHAUSTED = 'exhausted'


def improvement_ratio(initial_length: float, final_length: float) -> float:
    """Relative length reduction; 0.0 when the initial length is zero."""
    if initial_length <= 0:
        return 0.0
    return (initial_length - final_length) / initial_length


@dataclass
class RunStatistics:
    """Counters accumulated by a search driver over one run."""
    strategy: str = ''
    initial_length: float = 0.0
    final_length: float = 0.0
    accepted_move_count: int = 0
    index_nodes_visited: int = 0
    total_comparisons: int = 0
    iteration_count: int = 0
    active_node_count: int = 0
    elapsed_time: float = 0.0
    index_rebuilds: int = 0
    state: SearchState = SearchState.SCANNING

    @property
    def improvement(self) -> float:
        return improvement_ratio(self.initial_length, self.final_length)

    @property
    def length_reduction(self) -> float:
        return self.initial_length - self.final_length

    @property
    def moves_per_second(self) -> float:
        if self.elapsed_time <= 0:
            return 0.0
        return self.accepted_move_count / self.elapsed_time

    def as_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['state'] = self.state.value
        result['improvement'] = self.improvement
        result['length_reduction'] = self.length_reduction
        result['moves_per_second'] = self.moves_per_second
        return result
