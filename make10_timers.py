
"""Frame-driven deferred callbacks guarded by a session epoch"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)


@dataclass
class _Pending:
    remaining_ms: float
    callback: Callable[[], None]
    epoch: int


class Timers:
    """
    One pending callback per key. Time only moves when the owner calls
    advance(), so a paused or stopped frame loop also stops the timers.

    Each timer remembers the epoch it was scheduled in; when it comes due
    under a different epoch (the session was restarted) it is dropped
    instead of fired.
    """

    def __init__(self):
        self._pending: Dict[str, _Pending] = {}

    def set(self, key: str, delay_ms: float, callback: Callable[[], None], epoch: int):
        self._pending[key] = _Pending(float(delay_ms), callback, epoch)
        logger.debug("[timer-set] key=%s delay=%sms epoch=%d", key, delay_ms, epoch)

    def cancel(self, key: str) -> bool:
        return self._pending.pop(key, None) is not None

    def clear(self):
        self._pending.clear()

    def pending(self, key: str) -> bool:
        return key in self._pending

    def advance(self, dt_ms: float, epoch: int) -> int:
        """Count down all timers; fire the due ones. Returns how many fired."""
        due = []
        for key, p in list(self._pending.items()):
            p.remaining_ms -= dt_ms
            if p.remaining_ms <= 0:
                due.append((key, p))
        fired = 0
        for key, p in due:
            # a callback fired earlier in this loop may have rescheduled the key
            if self._pending.get(key) is not p:
                continue
            del self._pending[key]
            if p.epoch != epoch:
                logger.debug("[timer-abort] key=%s epoch=%d current=%d", key, p.epoch, epoch)
                continue
            logger.debug("[timer-fire] key=%s epoch=%d", key, epoch)
            p.callback()
            fired += 1
        return fired
