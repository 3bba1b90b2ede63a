
"""Background music and match effects on pygame.mixer"""
import logging
import random
from pathlib import Path
from typing import List, Optional

import pygame

import make10_events as ev

logger = logging.getLogger(__name__)

BGM_FILES = ["bgmusic01.ogg", "bgmusic02.ogg", "bgmusic03.ogg"]
SFX_MATCH = "effect-expball.wav"
POOL_SIZE = 5  # overlapping effects before the oldest is cut


class SoundBoard:
    """
    Plays a random looping BGM track per session and the match effect on
    a small pool of reserved channels. Without a mixer or the sound files
    every call is a no-op.
    """

    def __init__(self, sound_dir: Path, bgm_volume: float = 0.5, sfx_volume: float = 0.5,
                 rng: Optional[random.Random] = None):
        self.sound_dir = Path(sound_dir)
        self.bgm_volume = bgm_volume
        self.sfx_volume = sfx_volume
        self.rng = rng or random.Random()
        self.enabled = False
        self.effect = None
        self.channels: List = []
        self.playing_bgm = False
        self._init_mixer()

    def _init_mixer(self):
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            pygame.mixer.set_reserved(POOL_SIZE)
            self.channels = [pygame.mixer.Channel(i) for i in range(POOL_SIZE)]
        except pygame.error as e:
            logger.warning("Audio disabled, mixer unavailable: %s", e)
            return
        sfx = self.sound_dir / SFX_MATCH
        if sfx.exists():
            try:
                self.effect = pygame.mixer.Sound(str(sfx))
            except pygame.error as e:
                logger.warning("Could not load %s: %s", sfx, e)
        else:
            logger.warning("Missing sound effect %s", sfx)
        self.enabled = True

    def set_volumes(self, bgm: float, sfx: float):
        self.bgm_volume = max(0.0, min(1.0, bgm))
        self.sfx_volume = max(0.0, min(1.0, sfx))
        if not self.enabled:
            return
        pygame.mixer.music.set_volume(self.bgm_volume)
        for ch in self.channels:
            ch.set_volume(self.sfx_volume)

    def play_bgm(self):
        if not self.enabled:
            return
        self.stop_bgm()
        tracks = [self.sound_dir / f for f in BGM_FILES if (self.sound_dir / f).exists()]
        if not tracks:
            logger.warning("No background music found in %s", self.sound_dir)
            return
        track = self.rng.choice(tracks)
        try:
            pygame.mixer.music.load(str(track))
            pygame.mixer.music.set_volume(self.bgm_volume)
            pygame.mixer.music.play(loops=-1)
            self.playing_bgm = True
        except pygame.error as e:
            logger.warning("Could not play %s: %s", track, e)

    def stop_bgm(self):
        if self.enabled and self.playing_bgm:
            pygame.mixer.music.stop()
        self.playing_bgm = False

    def play_match(self):
        if not self.enabled or self.effect is None:
            return
        ch = next((c for c in self.channels if not c.get_busy()), self.channels[0])
        ch.set_volume(self.sfx_volume)
        ch.play(self.effect)

    # ---------- event wiring ----------
    def attach(self, bus: ev.EventBus):
        bus.subscribe(self.on_event)

    def detach(self, bus: ev.EventBus):
        bus.unsubscribe(self.on_event)

    def on_event(self, e: ev.GameEvent):
        if e.kind == ev.COUNTDOWN_STARTED:
            self.play_bgm()
        elif e.kind in (ev.TILE_MATCHED, ev.PERFECT_CLEAR):
            self.play_match()
        elif e.kind == ev.ABILITY_USED and e.payload.get("ability") in ("delete", "wipe"):
            self.play_match()
        elif e.kind == ev.SESSION_ENDED:
            self.stop_bgm()
