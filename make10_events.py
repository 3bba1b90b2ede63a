
"""Named core events for renderers, audio and other listeners"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

COUNTDOWN_STARTED = "countdown_started"
COUNTDOWN_BEAT = "countdown_beat"
SESSION_ACTIVE = "session_active"
TILE_MATCHED = "tile_matched"
PERFECT_CLEAR = "perfect_clear"
COMBO_MILESTONE = "combo_milestone"
COMBO_ENDED = "combo_ended"
REWARD = "reward"
ABILITY_USED = "ability_used"
SHUFFLED = "shuffled"
REFILLED = "refilled"
PAUSED = "paused"
RESUMED = "resumed"
SESSION_ENDED = "session_ended"
FEEDBACK = "feedback"


@dataclass(frozen=True)
class GameEvent:
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[GameEvent], None]


class EventBus:
    def __init__(self):
        self._listeners: List[Listener] = []
        self.history: List[GameEvent] = []
        self.keep_history = False

    def subscribe(self, fn: Listener):
        if fn not in self._listeners:
            self._listeners.append(fn)

    def unsubscribe(self, fn: Listener):
        if fn in self._listeners:
            self._listeners.remove(fn)

    def emit(self, kind: str, **payload) -> GameEvent:
        ev = GameEvent(kind, payload)
        if self.keep_history:
            self.history.append(ev)
        for fn in list(self._listeners):
            fn(ev)
        return ev

    def kinds(self) -> List[str]:
        return [e.kind for e in self.history]
