
"""Decorative boss: soaks up match points, respawns stronger after a delay"""
import logging

import make10_events as ev

logger = logging.getLogger(__name__)


class BossOverlay:
    """
    Purely cosmetic. Damage equals the points of each match; a defeated
    boss disappears and comes back with more HP after BOSS_RESPAWN_MS. The
    respawn goes through the session timers, so a restart drops it.
    """

    def __init__(self, session):
        self.session = session
        self.base_hp = session.cfg["BOSS_BASE_HP"]
        self.respawn_ms = session.cfg["BOSS_RESPAWN_MS"]
        self.reset()
        session.events.subscribe(self.on_event)

    def reset(self):
        self.level = 1
        self.max_hp = self.base_hp
        self.hp = self.max_hp
        self.alive = True
        self.defeated = 0
        self.hit_flash = 0.0

    @property
    def hp_pct(self) -> float:
        return self.hp / self.max_hp if self.max_hp else 0.0

    def on_event(self, e: ev.GameEvent):
        if e.kind == ev.COUNTDOWN_STARTED:
            self.reset()
        elif e.kind == ev.TILE_MATCHED and self.alive:
            self.hit(e.payload.get("points", 0))

    def hit(self, damage: int):
        self.hp = max(0, self.hp - damage)
        self.hit_flash = 1.0
        if self.hp == 0:
            self.alive = False
            self.defeated += 1
            logger.debug("[boss] level %d defeated", self.level)
            self.session.schedule("boss-respawn", self.respawn_ms, self.respawn)

    def respawn(self):
        self.level += 1
        self.max_hp = self.base_hp * self.level
        self.hp = self.max_hp
        self.alive = True

    def update(self, dt_ms: float):
        self.hit_flash = max(0.0, self.hit_flash - dt_ms / 250.0)
