from typing import Iterable, Optional

import numpy as np


class ActivationTracker:
    """
    Activation bits over tour positions.

    Positions marked active are the only ones a pruned search evaluates.
    After an accepted move the set shrinks to a neighbourhood of the touched
    positions; after a fruitless iteration it grows, strictly, until every
    position is active again.
    """

    def __init__(self, n: int, rng: Optional[np.random.Generator] = None, relax_batch: int = 10):
        if n < 0:
            raise ValueError(f'n must be non-negative, got {n}')
        if relax_batch < 1:
            raise ValueError(f'relax_batch must be >= 1, got {relax_batch}')
        self.n = n
        self.relax_batch = relax_batch
        self.rng = rng if rng is not None else np.random.default_rng()
        self.active = np.ones(n, dtype=bool)

    @property
    def count(self) -> int:
        return int(self.active.sum())

    @property
    def all_active(self) -> bool:
        return bool(self.active.all())

    def is_active(self, position: int) -> bool:
        return bool(self.active[position])

    def active_positions(self) -> np.ndarray:
        return np.flatnonzero(self.active)

    def activate_all(self):
        self.active[:] = True

    def focus(self, positions: Iterable[int], radius: int):
        """
        Clear every bit, then activate offsets -radius..radius around each position.

        Args:
            positions (Iterable[int]): Positions touched by the last move.
            radius (int): Neighbourhood half-width, wrapping modulo n.
        """
        self.active[:] = False
        if self.n == 0:
            return
        offsets = np.arange(-radius, radius + 1)
        for p in positions:
            self.active[(p + offsets) % self.n] = True

    def relax(self) -> int:
        """
        Grow the active set with randomly chosen inactive positions.

        Adds max(relax_batch, count // 2) positions, capped by how many are
        still inactive.

        Returns:
            int: Number of newly activated positions (0 once all are active).
        """
        inactive = np.flatnonzero(~self.active)
        if inactive.size == 0:
            return 0
        batch = min(inactive.size, max(self.relax_batch, self.count // 2))
        chosen = self.rng.choice(inactive, size=batch, replace=False)
        self.active[chosen] = True
        return int(batch)
