
"""
Session state machine for Make 10.

Idle -> Countdown -> Active <-> Paused -> Ended

The session owns the grid, the tile bag, the clock, the combo, the
reward ladder, ability charges and the audit logs. Everything else (the
pygame adapter, audio, the leaderboard client) reads snapshots or listens
to events and never changes session fields directly.

Ability misuse (no charge left, wrong state) is a silent no-op: the
ability methods return False instead of raising.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

import make10_events as ev
from make10_config import session_config
from make10_errors import ValidationError
from make10_events import EventBus
from make10_gravity import bulk_refill, compact_and_drop, fresh_board
from make10_grid import Coordinate, Grid
from make10_rng import fisher_yates, make_bag
from make10_solver import find_match, has_match
from make10_timers import Timers

logger = logging.getLogger(__name__)


class State(Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class EndReason(Enum):
    TIME_UP = "time_up"
    DEADLOCK = "deadlock"
    EXIT = "exit"


@dataclass(frozen=True)
class MatchEntry:
    timestamp: int              # ms since epoch
    points: int
    values: Tuple[int, ...]
    kind: str                   # "match" | "perfect_clear"

    def to_dict(self):
        d = asdict(self)
        d['values'] = list(self.values)
        return d


@dataclass(frozen=True)
class SkillEntry:
    timestamp: int
    ability: str                # hint | shuffle | delete | wipe | freeze
    detail: str = ""

    def to_dict(self):
        return asdict(self)


# -------------------------------------------------------------
# SCORING
# -------------------------------------------------------------

def base_points(count: int, cfg: dict) -> int:
    return count * cfg["BASE_POINTS_PER_TILE"]


def size_multiplier(count: int, cfg: dict) -> int:
    """Doubles for every tile beyond SIZE_MULT_FROM."""
    return 2 ** max(0, count - cfg["SIZE_MULT_FROM"])


def combo_bonus(combo: int, cfg: dict) -> int:
    if combo < cfg["COMBO_MIN"]:
        return 0
    return cfg["COMBO_BONUS_STEP"] * (combo - cfg["COMBO_MIN"] + 1)


def match_points(count: int, combo: int, perfect: bool, cfg: dict) -> int:
    if count <= 0:
        return 0
    raw = base_points(count, cfg) * size_multiplier(count, cfg) + combo_bonus(combo, cfg)
    if perfect:
        raw *= cfg["PERFECT_CLEAR_MULT"]
    return min(cfg["MAX_MATCH_POINTS"], raw)


# -------------------------------------------------------------
# SESSION
# -------------------------------------------------------------

class Session:
    def __init__(self, config: Optional[dict] = None, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None, events: Optional[EventBus] = None):
        self.cfg = dict(config) if config is not None else session_config()
        if self.cfg["REWARD_FIRST_GAP"] <= 0 or self.cfg["REWARD_GAP_GROWTH"] <= 0:
            raise ValueError("reward gap and gap growth must be positive")
        self.rng = rng if rng is not None else random.Random(self.cfg["SEED"])
        self.clock = clock or time.time
        self.events = events if events is not None else EventBus()
        self.timers = Timers()
        self.epoch = 0
        self.state = State.IDLE
        self.name = ""
        self.practice = False
        self.grid: Optional[Grid] = None
        self.bag = make_bag(self.cfg, self.rng)
        self._reset_fields()

    def _reset_fields(self):
        cfg = self.cfg
        self.score = 0
        self.time_left = cfg["START_TIME_S"]
        self.combo = 0
        self.combo_timer_ms = 0.0
        self.hint_charges = cfg["HINT_CHARGES"]
        self.shuffle_charges = cfg["SHUFFLE_CHARGES"]
        self.delete_available = True
        self.wipe_available = True
        self.freeze_available = True
        self.delete_mode = False
        self.next_reward_score = cfg["REWARD_FIRST_SCORE"]
        self.reward_gap = cfg["REWARD_FIRST_GAP"]
        self.reward_gaps: List[int] = []
        self.match_log: List[MatchEntry] = []
        self.skill_log: List[SkillEntry] = []
        self.refill_pending = False
        self.countdown_ms = 0.0
        self._second_acc = 0.0
        self.started_at: Optional[int] = None
        self.ended_at: Optional[int] = None
        self.end_reason: Optional[EndReason] = None

    # ---------- helpers ----------
    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _set_state(self, new: State):
        logger.info("[session] %s -> %s", self.state.value, new.value)
        self.state = new

    @property
    def playable(self) -> bool:
        return self.state in (State.ACTIVE, State.PAUSED)

    @property
    def target(self) -> int:
        return self.cfg["TARGET_SUM"]

    def _log_skill(self, ability: str, detail: str = "") -> SkillEntry:
        entry = SkillEntry(self._now_ms(), ability, detail)
        self.skill_log.append(entry)
        return entry

    # ---------- lifecycle ----------
    def start(self, name: str, practice: bool = False):
        """Reset everything and enter the countdown with a fresh board."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("player name is required")
        if len(name) > self.cfg["NAME_MAX_LEN"]:
            raise ValidationError(f"player name longer than {self.cfg['NAME_MAX_LEN']} characters")

        # invalidates hint/freeze/respawn timers of a previous session
        self.epoch += 1
        self.timers.clear()
        self._reset_fields()
        self.name = name
        self.practice = practice
        self.bag = make_bag(self.cfg, self.rng)
        cfg = self.cfg
        self.grid = fresh_board(cfg["ROWS"], cfg["COLS"], self.bag, self.rng, mode=cfg["INITIAL_FILL"],
                                target=self.target, attempts=cfg["GENERATE_ATTEMPTS"])
        self._set_state(State.COUNTDOWN)
        beats = max(1, cfg["COUNTDOWN_MS"] // cfg["COUNTDOWN_BEAT_MS"])
        self.events.emit(ev.COUNTDOWN_STARTED, name=name, beats=beats)

    def _activate(self):
        self.started_at = self._now_ms()
        self._second_acc = 0.0
        self._set_state(State.ACTIVE)
        self.events.emit(ev.SESSION_ACTIVE, time_left=self.time_left)

    def end(self, reason: EndReason = EndReason.EXIT) -> bool:
        """Terminal transition. Only the first call has any effect."""
        if self.state in (State.IDLE, State.ENDED):
            return False
        self.end_reason = reason
        self.ended_at = self._now_ms()
        self.timers.clear()
        self.delete_mode = False
        if self.grid is not None:
            self.grid.clear_selected()
        self._set_state(State.ENDED)
        logger.info("[session] ended reason=%s score=%d matches=%d", reason.value, self.score, len(self.match_log))
        self.events.emit(ev.SESSION_ENDED, reason=reason.value, score=self.score)
        return True

    def exit(self) -> bool:
        return self.end(EndReason.EXIT)

    def schedule(self, key: str, delay_ms: float, callback: Callable[[], None]):
        """Run callback after delay_ms of session time unless the session restarts first."""
        self.timers.set(key, delay_ms, callback, self.epoch)

    # ---------- frame tick ----------
    def tick(self, dt_ms: float):
        if self.state in (State.IDLE, State.ENDED):
            return
        self.grid.settle(dt_ms / 1000.0 * self.cfg["FALL_SPEED_ROWS_PER_S"])
        self.timers.advance(dt_ms, self.epoch)

        if self.state == State.COUNTDOWN:
            beat = self.cfg["COUNTDOWN_BEAT_MS"]
            total = self.cfg["COUNTDOWN_MS"]
            before = int(self.countdown_ms // beat)
            self.countdown_ms += dt_ms
            after = int(self.countdown_ms // beat)
            for b in range(before + 1, after + 1):
                if b * beat < total:
                    self.events.emit(ev.COUNTDOWN_BEAT, remaining=int((total - b * beat) // beat))
            if self.countdown_ms >= total:
                self._activate()
            return

        if self.state != State.ACTIVE:
            return

        self._advance_combo(dt_ms)
        self._second_acc += dt_ms
        while self._second_acc >= 1000 and self.state == State.ACTIVE:
            self._second_acc -= 1000
            self.time_left -= 1
            if self.time_left <= 0:
                self.time_left = 0
                self.end(EndReason.TIME_UP)

    def _advance_combo(self, dt_ms: float):
        if self.combo <= 0:
            return
        self.combo_timer_ms -= dt_ms
        if self.combo_timer_ms <= 0:
            self._break_combo()

    def _break_combo(self):
        logger.debug("[combo] ended at %d", self.combo)
        self.events.emit(ev.COMBO_ENDED, combo=self.combo)
        self.combo = 0
        self.combo_timer_ms = 0.0
        if self.refill_pending:
            self.refill_pending = False
            n = bulk_refill(self.grid, self.bag)
            self.events.emit(ev.REFILLED, count=n, reason="combo_end")
            self._resolve_deadlock()

    def _extend_combo(self):
        if self.combo > 0:
            self.combo_timer_ms = float(self.cfg["COMBO_WINDOW_MS"])

    @property
    def combo_pct(self) -> float:
        if self.combo <= 0:
            return 0.0
        return max(0.0, min(1.0, self.combo_timer_ms / self.cfg["COMBO_WINDOW_MS"]))

    # ---------- selection ----------
    def _selectable(self, coords: Iterable[Coordinate]) -> List[Coordinate]:
        out = []
        for r, c in coords:
            if not self.grid.in_bounds(r, c):
                continue
            t = self.grid.tile(r, c)
            if t.active and t.settled:
                out.append((r, c))
        return out

    def begin_selection(self):
        if not self.playable:
            return
        self.grid.clear_hinted()
        self.timers.cancel("hint")

    def preview_selection(self, coords: Iterable[Coordinate]) -> List[Coordinate]:
        if not self.playable or self.delete_mode:
            return []
        valid = self._selectable(coords)
        self.grid.set_selected(valid)
        return valid

    def resolve_selection(self, coords: Optional[Iterable[Coordinate]] = None) -> Optional[MatchEntry]:
        """Pointer-up: the selected tiles match when they sum to exactly TARGET_SUM."""
        if not self.playable or self.delete_mode:
            if self.grid is not None:
                self.grid.clear_selected()
            return None
        if coords is not None:
            self.preview_selection(coords)
        sel = self._selectable(self.grid.selected_coords())
        self.grid.clear_selected()
        values = [self.grid.tile(r, c).value for r, c in sel]
        if not sel or sum(values) != self.target:
            return None
        return self._apply_match(sel, values)

    def _apply_match(self, sel: List[Coordinate], values: List[int]) -> MatchEntry:
        cfg = self.cfg
        self.grid.mark_removed(sel)
        perfect = self.grid.is_cleared()
        self.combo += 1
        self.combo_timer_ms = float(cfg["COMBO_WINDOW_MS"])
        points = match_points(len(sel), self.combo, perfect, cfg)
        self.score += points
        self.time_left += cfg["MATCH_TIME_BONUS_S"]

        entry = MatchEntry(self._now_ms(), points, tuple(values), "perfect_clear" if perfect else "match")
        self.match_log.append(entry)
        logger.debug("[match] tiles=%d combo=%d points=%d score=%d", len(sel), self.combo, points, self.score)

        self.events.emit(ev.TILE_MATCHED, cells=list(sel), values=list(values), points=points, combo=self.combo)
        self.events.emit(ev.FEEDBACK, cells=list(sel), text=f"+{points}",
                         color="combo" if self.combo >= cfg["COMBO_MIN"] else "score")
        if self.combo % cfg["COMBO_MILESTONE_EVERY"] == 0:
            self.events.emit(ev.COMBO_MILESTONE, combo=self.combo)
        self._check_rewards()

        if perfect:
            self.events.emit(ev.PERFECT_CLEAR, points=points)
            self.combo = 0
            self.combo_timer_ms = 0.0
            self.refill_pending = False
            n = bulk_refill(self.grid, self.bag, target=self.target, attempts=cfg["GENERATE_ATTEMPTS"])
            self.events.emit(ev.REFILLED, count=n, reason="perfect_clear")
        else:
            self._gravity()
            self._resolve_deadlock()
        return entry

    def _gravity(self):
        defer = self.cfg["DEFER_REFILL_DURING_COMBO"] and self.combo > 0
        compact_and_drop(self.grid, self.bag, refill=not defer)
        if defer and self.grid.has_holes():
            self.refill_pending = True

    # ---------- reward ladder ----------
    def _check_rewards(self):
        cfg = self.cfg
        while self.score >= self.next_reward_score:
            threshold = self.next_reward_score
            self.reward_gaps.append(self.reward_gap)
            self.time_left += cfg["REWARD_TIME_S"]
            self.hint_charges += cfg["REWARD_HINT_CHARGES"]
            self.next_reward_score += self.reward_gap
            self.reward_gap += cfg["REWARD_GAP_GROWTH"]
            logger.info("[reward] crossed %d, next at %d", threshold, self.next_reward_score)
            self.events.emit(ev.REWARD, threshold=threshold, time_bonus=cfg["REWARD_TIME_S"],
                             hint_charges=cfg["REWARD_HINT_CHARGES"], next_score=self.next_reward_score)

    # ---------- deadlock ----------
    def _resolve_deadlock(self):
        """
        After a removal: refill a cleared board, wait for a pending combo
        refill, auto-shuffle while charges last, otherwise end the session.
        Each pass either returns or spends a charge, so this terminates.
        """
        while self.playable:
            if self.grid.is_cleared():
                self.refill_pending = False
                n = bulk_refill(self.grid, self.bag, target=self.target, attempts=self.cfg["GENERATE_ATTEMPTS"])
                self.events.emit(ev.REFILLED, count=n, reason="cleared")
                continue
            if has_match(self.grid, self.target):
                return
            if self.combo > 0 and self.refill_pending:
                logger.debug("[deadlock] deferred until combo refill")
                return
            if self.shuffle_charges > 0:
                self.shuffle_charges -= 1
                self._log_skill("shuffle", "auto")
                self.events.emit(ev.ABILITY_USED, ability="shuffle", auto=True)
                logger.info("[deadlock] no move, auto shuffle (%d charge(s) left)", self.shuffle_charges)
                self._shuffle_values()
                continue
            logger.info("[deadlock] no move and no shuffle charge left")
            self.end(EndReason.DEADLOCK)
            return

    def _shuffle_values(self) -> bool:
        values = [t.value for t in self.grid if t.active]
        attempts = self.cfg["SHUFFLE_ATTEMPTS"]
        solved = False
        tries = 0
        while tries < attempts and not solved:
            tries += 1
            fisher_yates(values, self.rng)
            self.grid.permute_values(values)
            solved = has_match(self.grid, self.target)
        self.grid.clear_hinted()
        self.timers.cancel("hint")
        logger.debug("[shuffle] attempts=%d solved=%s", tries, solved)
        self.events.emit(ev.SHUFFLED, attempts=tries, solved=solved)
        return solved

    # ---------- abilities ----------
    def use_hint(self) -> bool:
        if not self.playable or self.hint_charges <= 0:
            return False
        rect = find_match(self.grid, self.target)
        if rect is None:
            return False
        self.hint_charges -= 1
        self._log_skill("hint")
        self.grid.clear_hinted()
        self.grid.set_hinted(rect.cells)
        self.schedule("hint", self.cfg["HINT_MS"], self.grid.clear_hinted)
        self.events.emit(ev.ABILITY_USED, ability="hint", cells=list(rect.cells))
        return True

    def use_shuffle(self) -> bool:
        if not self.playable or self.shuffle_charges <= 0:
            return False
        self.shuffle_charges -= 1
        self._log_skill("shuffle", "manual")
        self.events.emit(ev.ABILITY_USED, ability="shuffle", auto=False)
        if not self._shuffle_values():
            self._resolve_deadlock()
        return True

    def toggle_delete_mode(self) -> bool:
        if not self.playable or not self.delete_available:
            return False
        self.delete_mode = not self.delete_mode
        self.grid.clear_selected()
        return True

    def use_delete(self, coord: Coordinate) -> bool:
        """Remove one settled tile without scoring; keeps the combo alive."""
        if not self.playable or not self.delete_available:
            return False
        r, c = coord
        if not self._selectable([(r, c)]):
            return False
        self.delete_available = False
        self.delete_mode = False
        self.grid.mark_removed([(r, c)])
        self._log_skill("delete", f"{r},{c}")
        self._extend_combo()
        self.events.emit(ev.ABILITY_USED, ability="delete", cells=[(r, c)])
        self.events.emit(ev.FEEDBACK, cells=[(r, c)], text="", color="delete")
        self._gravity()
        self._resolve_deadlock()
        return True

    def use_wipe(self) -> bool:
        """Clear the whole board without scoring, then refill it."""
        if not self.playable or not self.wipe_available:
            return False
        self.wipe_available = False
        cells = self.grid.active_coords()
        self.grid.mark_removed(cells)
        self._log_skill("wipe", str(len(cells)))
        self._extend_combo()
        self.events.emit(ev.ABILITY_USED, ability="wipe", removed=len(cells))
        self.events.emit(ev.FEEDBACK, cells=cells, text="", color="delete")
        self.refill_pending = False
        n = bulk_refill(self.grid, self.bag, target=self.target, attempts=self.cfg["GENERATE_ATTEMPTS"])
        self.events.emit(ev.REFILLED, count=n, reason="wipe")
        self._resolve_deadlock()
        return True

    def use_freeze(self) -> bool:
        """Stop the clock and combo timer for FREEZE_MS."""
        if self.state != State.ACTIVE or not self.freeze_available:
            return False
        self.freeze_available = False
        self._log_skill("freeze")
        self._set_state(State.PAUSED)
        self.schedule("freeze", self.cfg["FREEZE_MS"], self._resume)
        self.events.emit(ev.ABILITY_USED, ability="freeze")
        self.events.emit(ev.PAUSED, duration_ms=self.cfg["FREEZE_MS"])
        return True

    def _resume(self):
        if self.state == State.PAUSED:
            self._set_state(State.ACTIVE)
            self.events.emit(ev.RESUMED)

    # ---------- read-only views ----------
    def snapshot(self) -> dict:
        countdown_left = 0
        if self.state == State.COUNTDOWN:
            countdown_left = max(0, int(self.cfg["COUNTDOWN_MS"] - self.countdown_ms))
        return {
            'state': self.state.value,
            'name': self.name,
            'score': self.score,
            'time_left': self.time_left,
            'combo': self.combo,
            'combo_pct': self.combo_pct,
            'hint_charges': self.hint_charges,
            'shuffle_charges': self.shuffle_charges,
            'delete_available': self.delete_available,
            'wipe_available': self.wipe_available,
            'freeze_available': self.freeze_available,
            'delete_mode': self.delete_mode,
            'next_reward_score': self.next_reward_score,
            'countdown_left_ms': countdown_left,
            'countdown_beat_ms': self.cfg["COUNTDOWN_BEAT_MS"],
            'end_reason': self.end_reason.value if self.end_reason else None,
            'tiles': self.grid.snapshot() if self.grid is not None else [],
        }

    def get_audit_summary(self) -> dict:
        return {
            'name': self.name,
            'score': self.score,
            'timestamp': self.ended_at if self.ended_at is not None else self._now_ms(),
            'match_log': [e.to_dict() for e in self.match_log],
            'skill_log': [e.to_dict() for e in self.skill_log],
            'practice': self.practice,
            'end_reason': self.end_reason.value if self.end_reason else None,
        }
