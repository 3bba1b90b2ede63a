
"""
Rendering helpers for Make 10.

- Pre-render one tile Surface per (visual state, value) and blit them.
- Pre-render the static background (board frame + panel).
- Cache HUD text surfaces; re-render only when values change.
- Particles and floating score text are spawned from core "feedback" events.
"""
from __future__ import annotations
import math
import random
import pygame
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import make10_events as ev
from make10_layout import Dims

Color = Tuple[int, int, int]

BG: Color = (236, 240, 245)
BOARD_BG: Color = (222, 228, 236)
PANEL: Color = (44, 62, 80)
PANEL_EDGE: Color = (70, 92, 115)
TEXT: Color = (44, 62, 80)
TEXT_LIGHT: Color = (236, 240, 245)

TILE_FILL: Dict[str, Color] = {
    "normal": (255, 255, 255),
    "selected": (255, 190, 118),
    "hinted": (184, 233, 148),
    "delete": (250, 177, 160),
    "delete_selected": (255, 118, 117),
}
EDGE_PLAIN: Color = (241, 243, 245)
EDGE_LIT: Color = (230, 126, 34)
SELECT_BOX: Color = (52, 152, 219)
PARTICLE_COLORS: List[Color] = [(241, 196, 15), (230, 126, 34), (231, 76, 60), (52, 152, 219), (46, 204, 113)]
FEEDBACK_COLORS: Dict[str, Color] = {
    "score": (230, 126, 34),
    "combo": (231, 76, 60),
    "delete": (255, 118, 117),
}


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    life: float
    size: float
    color: Color


@dataclass
class FloatingText:
    x: float
    y: float
    text: str
    color: Color
    life: float = 45.0


@dataclass
class HudCache:
    score: int = -1
    time_left: int = -1
    combo: int = -1
    charges: tuple = ()
    title: Optional[pygame.Surface] = None
    score_s: Optional[pygame.Surface] = None
    time_s: Optional[pygame.Surface] = None
    combo_s: Optional[pygame.Surface] = None
    charges_s: List[pygame.Surface] = field(default_factory=list)
    controls: Optional[list] = None


def tile_state(tile: dict, delete_mode: bool) -> str:
    if delete_mode:
        return "delete_selected" if tile["selected"] else "delete"
    if tile["selected"]:
        return "selected"
    if tile["hinted"]:
        return "hinted"
    return "normal"


def countdown_digit(snap: dict) -> int:
    """Beats left in the countdown, rounded up; never shows 0."""
    return max(1, math.ceil(snap["countdown_left_ms"] / snap["countdown_beat_ms"]))


class RenderAssets:
    """Holds all pre-rendered assets for fast blitting."""
    def __init__(self, dims: Dims, font: pygame.font.Font, big_font: pygame.font.Font,
                 rng: Optional[random.Random] = None):
        self.dims = dims
        self.font = font
        self.big_font = big_font
        self.rng = rng or random.Random()
        self.tile_font = pygame.font.SysFont("arial", max(12, dims.cell // 2), bold=True)
        self._make_static()
        self._make_tiles()
        self.hud = HudCache()
        self.particles: List[Particle] = []
        self.texts: List[FloatingText] = []
        self.board_rect = dims.board_rect

    # ---------- Static background (board + panel) ----------
    def _make_static(self):
        d = self.dims
        self.bg = pygame.Surface((d.total_w, d.total_h))
        self.bg.fill(BG)
        pygame.draw.rect(self.bg, BOARD_BG, (d.board_x, d.board_y, d.board_w, d.board_h), border_radius=8)
        panel = d.panel_rect
        pygame.draw.rect(self.bg, PANEL, panel, border_radius=8)
        pygame.draw.rect(self.bg, PANEL_EDGE, panel, 1, border_radius=8)

    # ---------- Tile sprites per state and value ----------
    def _make_tiles(self):
        self.tile_surf: Dict[Tuple[str, int], pygame.Surface] = {}
        s = self.dims.cell - self.dims.cell_margin * 2
        for state, fill in TILE_FILL.items():
            lit = state != "normal"
            for v in range(1, 10):
                surf = pygame.Surface((s, s), pygame.SRCALPHA)
                pygame.draw.rect(surf, fill, (0, 0, s, s), border_radius=6)
                pygame.draw.rect(surf, EDGE_LIT if lit else EDGE_PLAIN, (0, 0, s, s), 2, border_radius=6)
                label = self.tile_font.render(str(v), True, (255, 255, 255) if lit else TEXT)
                surf.blit(label, label.get_rect(center=(s // 2, s // 2)))
                self.tile_surf[(state, v)] = surf

    def redraw_static(self, screen: pygame.Surface):
        screen.blit(self.bg, (0, 0))

    # ---------- Board ----------
    def draw_board(self, screen: pygame.Surface, snap: dict):
        d = self.dims
        m = d.cell_margin
        delete_mode = snap["delete_mode"]
        screen.set_clip(self.board_rect)
        for r, row in enumerate(snap["tiles"]):
            for c, tile in enumerate(row):
                if tile["removed"]:
                    continue
                x = d.board_x + c * d.cell + m
                y = d.board_y + (r + tile["fall_offset"]) * d.cell + m
                screen.blit(self.tile_surf[(tile_state(tile, delete_mode), tile["value"])], (x, int(y)))
        screen.set_clip(None)

    def draw_drag_box(self, screen: pygame.Surface, box: Optional[pygame.Rect]):
        if box is None:
            return
        shade = pygame.Surface((max(1, box.w), max(1, box.h)), pygame.SRCALPHA)
        shade.fill((*SELECT_BOX, 26))
        screen.blit(shade, box.topleft)
        pygame.draw.rect(screen, SELECT_BOX, box, 1)

    # ---------- Feedback effects ----------
    def on_event(self, e: ev.GameEvent):
        if e.kind != ev.FEEDBACK or not e.payload.get("cells"):
            return
        cells = e.payload["cells"]
        xs, ys = zip(*(self.dims.cell_center(r, c) for r, c in cells))
        cx, cy = sum(xs) / len(xs), sum(ys) / len(ys)
        self.spawn_boom(cx, cy)
        if e.payload.get("text"):
            color = FEEDBACK_COLORS.get(e.payload.get("color"), FEEDBACK_COLORS["score"])
            self.texts.append(FloatingText(cx, cy, e.payload["text"], color))

    def spawn_boom(self, x: float, y: float, count: int = 20):
        for _ in range(count):
            ang = self.rng.random() * math.pi * 2
            spd = self.rng.random() * 4 + 2
            self.particles.append(Particle(
                x, y, math.cos(ang) * spd, math.sin(ang) * spd,
                life=30 + self.rng.random() * 20, size=2 + self.rng.random() * 3,
                color=self.rng.choice(PARTICLE_COLORS)))

    def draw_effects(self, screen: pygame.Surface):
        # iterate backwards so removal doesn't skip entries
        for i in range(len(self.particles) - 1, -1, -1):
            p = self.particles[i]
            p.x += p.vx
            p.y += p.vy
            p.vy += 0.1
            p.life -= 1
            if p.life <= 0:
                del self.particles[i]
                continue
            alpha = max(0, min(255, int(255 * p.life / 60)))
            dot = pygame.Surface((int(p.size * 2) + 1, int(p.size * 2) + 1), pygame.SRCALPHA)
            pygame.draw.circle(dot, (*p.color, alpha), (int(p.size), int(p.size)), int(p.size))
            screen.blit(dot, (p.x - p.size, p.y - p.size))
        for i in range(len(self.texts) - 1, -1, -1):
            t = self.texts[i]
            t.y -= 1
            t.life -= 1
            if t.life <= 0:
                del self.texts[i]
                continue
            surf = self.big_font.render(t.text, True, t.color)
            surf.set_alpha(int(255 * min(1.0, t.life / 20)))
            screen.blit(surf, surf.get_rect(center=(int(t.x), int(t.y))))

    # ---------- HUD / Panel ----------
    def draw_panel_hud(self, screen: pygame.Surface, snap: dict, boss=None):
        d = self.dims
        f = self.font
        x = d.panel_x + 12
        if self.hud.title is None:
            self.hud.title = self.big_font.render("Make 10", True, TEXT_LIGHT)
        if snap["score"] != self.hud.score:
            self.hud.score = snap["score"]
            self.hud.score_s = f.render(f"Score: {snap['score']}", True, TEXT_LIGHT)
        if snap["time_left"] != self.hud.time_left:
            self.hud.time_left = snap["time_left"]
            self.hud.time_s = f.render(f"Time: {snap['time_left']}", True, TEXT_LIGHT)
        if snap["combo"] != self.hud.combo:
            self.hud.combo = snap["combo"]
            self.hud.combo_s = f.render(f"Combo: {snap['combo']}", True, TEXT_LIGHT)
        charges = (snap["hint_charges"], snap["shuffle_charges"], snap["delete_available"],
                   snap["wipe_available"], snap["freeze_available"])
        if charges != self.hud.charges:
            self.hud.charges = charges
            self.hud.charges_s = [
                f.render(f"[H] Hint x{charges[0]}", True, TEXT_LIGHT),
                f.render(f"[S] Shuffle x{charges[1]}", True, TEXT_LIGHT),
                f.render(f"[D] Delete {'ready' if charges[2] else 'used'}", True, TEXT_LIGHT),
                f.render(f"[W] Wipe {'ready' if charges[3] else 'used'}", True, TEXT_LIGHT),
                f.render(f"[F] Freeze {'ready' if charges[4] else 'used'}", True, TEXT_LIGHT),
            ]
        screen.blit(self.hud.title, (x, d.board_y + 12))
        screen.blit(self.hud.score_s, (x, d.board_y + 56))
        screen.blit(self.hud.time_s, (x, d.board_y + 80))
        screen.blit(self.hud.combo_s, (x, d.board_y + 104))

        # combo fuse
        bar = pygame.Rect(x, d.board_y + 128, d.panel_w - 24, 8)
        pygame.draw.rect(screen, PANEL_EDGE, bar, border_radius=4)
        if snap["combo_pct"] > 0:
            fill = bar.copy()
            fill.w = max(1, int(bar.w * snap["combo_pct"]))
            pygame.draw.rect(screen, FEEDBACK_COLORS["combo"], fill, border_radius=4)

        y = d.board_y + 150
        for surf in self.hud.charges_s:
            screen.blit(surf, (x, y)); y += 22
        if snap["state"] == "paused":
            screen.blit(f.render("FROZEN", True, SELECT_BOX), (x, y + 4))

        if boss is not None:
            self.draw_boss(screen, boss, pygame.Rect(x, d.board_y + 300, d.panel_w - 24, 90))

        if not self.hud.controls:
            self.hud.controls = [
                f.render("Drag: select", True, (165, 175, 215)),
                f.render("Esc: quit session", True, (165, 175, 215)),
                f.render("F1: settings", True, (165, 175, 215)),
            ]
        y = d.board_y + d.board_h - 80
        for surf in self.hud.controls:
            screen.blit(surf, (x, y)); y += 20

    def draw_boss(self, screen: pygame.Surface, boss, area: pygame.Rect):
        label = self.font.render(f"Boss Lv.{boss.level}" if boss.alive else "Boss defeated!", True, TEXT_LIGHT)
        screen.blit(label, area.topleft)
        if not boss.alive:
            return
        body = pygame.Rect(area.x, area.y + 24, 40, 40)
        tint = int(155 * boss.hit_flash)
        pygame.draw.rect(screen, (100 + tint, 60, 140 - tint // 2), body, border_radius=10)
        bar = pygame.Rect(area.x + 50, area.y + 40, area.w - 50, 10)
        pygame.draw.rect(screen, PANEL_EDGE, bar, border_radius=4)
        fill = bar.copy()
        fill.w = int(bar.w * boss.hp_pct)
        if fill.w:
            pygame.draw.rect(screen, (231, 76, 60), fill, border_radius=4)

    def draw_countdown(self, screen: pygame.Surface, snap: dict):
        if snap["state"] != "countdown":
            return
        msg = self.big_font.render(str(countdown_digit(snap)), True, TEXT)
        screen.blit(msg, msg.get_rect(center=self.board_rect.center))

    def draw_center_text(self, screen: pygame.Surface, lines: List[str], top: Optional[int] = None):
        y = top if top is not None else self.dims.total_h // 2 - len(lines) * 18
        for i, line in enumerate(lines):
            font = self.big_font if i == 0 else self.font
            surf = font.render(line, True, TEXT)
            screen.blit(surf, surf.get_rect(center=(self.dims.total_w // 2, y)))
            y += 48 if i == 0 else 28
