
"""Shuffle-bag tile dispenser"""
import logging
import random
from typing import Dict, List, MutableSequence, Optional

logger = logging.getLogger(__name__)

VALUES = list(range(1, 10))


def fisher_yates(seq: MutableSequence, rng: random.Random) -> MutableSequence:
    """Shuffle seq in place; every permutation is equally likely."""
    for i in range(len(seq) - 1, 0, -1):
        j = rng.randrange(i + 1)
        seq[i], seq[j] = seq[j], seq[i]
    return seq


class ShuffleBag:
    """
    Reusable bag of pending tile values.

    Two refill policies:
      • uniform  : N complete cycles of 1..9
      • weighted : each value replicated by its weight, smaller values
                   weighted higher so large values are less often stranded

    The bag is regenerated only when empty and always holds at least
    `min_size` values after a refill, so a full board never forces a
    reshuffle midway.
    """

    def __init__(self, policy: str = "weighted", weights: Optional[Dict[int, int]] = None,
                 min_size: int = 160, rng: Optional[random.Random] = None):
        if policy not in ("weighted", "uniform"):
            raise ValueError(f"unknown bag policy: {policy!r}")
        self.policy = policy
        self.weights = dict(weights) if weights else {v: 1 for v in VALUES}
        for v, w in self.weights.items():
            if v not in VALUES or w < 0:
                raise ValueError(f"bad weight {v}: {w}")
        if sum(self.weights.values()) <= 0:
            raise ValueError("bag weights sum to zero")
        self.min_size = max(1, int(min_size))
        self.rng = rng if rng is not None else random.Random()
        self.pending: List[int] = []
        self.refills = 0

    def _fill_order(self) -> List[int]:
        if self.policy == "uniform":
            cycles = -(-self.min_size // len(VALUES))
            return VALUES * cycles
        one = [v for v in VALUES for _ in range(self.weights.get(v, 0))]
        copies = -(-self.min_size // len(one))
        return one * copies

    def refill(self):
        self.pending = fisher_yates(self._fill_order(), self.rng)
        self.refills += 1
        logger.debug("[bag] refill #%d policy=%s size=%d", self.refills, self.policy, len(self.pending))

    def next(self) -> int:
        if not self.pending:
            self.refill()
        return self.pending.pop()

    def remaining(self) -> int:
        return len(self.pending)


def make_bag(config: dict, rng: random.Random) -> ShuffleBag:
    return ShuffleBag(
        policy=config["BAG_POLICY"],
        weights=config["BAG_WEIGHTS"],
        min_size=config["ROWS"] * config["COLS"],
        rng=rng,
    )
