
import pygame
from make10_config import CONFIG


class Overlay:
    """
    Settings overlay (F1). Volumes are stored in prefs and pushed to the
    sound board right away; gameplay toggles edit CONFIG and apply from
    the next session on.
    """
    def __init__(self, prefs=None, on_volume=None):
        self.active = False
        self.prefs = prefs
        self.on_volume = on_volume
        self.items = [
            ("BGM_VOLUME", "Music volume", 0.0, 1.0, 0.1),
            ("SFX_VOLUME", "Effects volume", 0.0, 1.0, 0.1),
            ("START_TIME_S", "Session seconds", 30, 180, 10),
            ("DEFER_REFILL_DURING_COMBO", "Hold refill during combo", False, True, None),
            ("BAG_POLICY", "Weighted tile bag", "uniform", "weighted", None),
        ]
        self.index = 0

    def toggle(self): self.active = not self.active

    def handle(self, e):
        if e.key in (pygame.K_ESCAPE, pygame.K_F1): self.toggle(); return
        if e.key == pygame.K_UP: self.index = (self.index - 1) % len(self.items); return
        if e.key == pygame.K_DOWN: self.index = (self.index + 1) % len(self.items); return
        key, label, lo, hi, step = self.items[self.index]
        val = CONFIG[key]
        if step is not None:
            if e.key == pygame.K_LEFT: CONFIG[key] = type(val)(round(max(lo, val - step), 2))
            if e.key == pygame.K_RIGHT: CONFIG[key] = type(val)(round(min(hi, val + step), 2))
        elif e.key in (pygame.K_RETURN, pygame.K_LEFT, pygame.K_RIGHT):
            CONFIG[key] = hi if val == lo else lo
        if key in ("BGM_VOLUME", "SFX_VOLUME"):
            if self.prefs is not None:
                self.prefs.set(key.lower(), CONFIG[key])
            if self.on_volume is not None:
                self.on_volume(CONFIG["BGM_VOLUME"], CONFIG["SFX_VOLUME"])

    def draw(self, screen, font, w, h):
        if not self.active: return
        s = pygame.Surface((w - 80, h - 80), pygame.SRCALPHA); s.fill((20, 25, 40, 230))
        screen.blit(s, (40, 40))
        screen.blit(font.render("SETTINGS (F1/Esc to close)", True, (230, 240, 255)), (60, 60))
        y = 100
        for i, (key, label, lo, hi, step) in enumerate(self.items):
            col = (255, 255, 255) if i == self.index else (200, 210, 235)
            v = CONFIG[key]
            txt = f"{label}: {v:.1f}" if isinstance(v, float) else f"{label}: {v}"
            screen.blit(font.render(txt, True, col), (60, y)); y += 30
