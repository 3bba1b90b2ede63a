import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pygame

from make10_audio import SoundBoard
from make10_boss import BossOverlay
from make10_config import CONFIG, session_config
from make10_errors import NetworkError, UploadRejected, ValidationError
from make10_input import PointerGesture
from make10_layout import compute_dims
from make10_overlay import Overlay
from make10_render import RenderAssets
from make10_session import Session, State
from make10_store import Prefs
from make10_upload import LeaderboardClient, top_rows

logger = logging.getLogger(__name__)

SOUND_DIR = Path(__file__).resolve().parent / "sound"


def setup_logging(log_file="make10.log"):
    fmt = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    file_handler = RotatingFileHandler(log_file, maxBytes=512 * 1024, backupCount=5)
    file_handler.setFormatter(fmt)
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(file_handler)
    root.addHandler(console)

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        root.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
    sys.excepthook = handle_exception


def recreate_window(dims, flags=pygame.DOUBLEBUF):
    try:
        return pygame.display.set_mode((dims.total_w, dims.total_h), flags, vsync=1)
    except TypeError:
        return pygame.display.set_mode((dims.total_w, dims.total_h), flags)


class Background:
    """Fire-and-forget network work; the frame loop only polls `status`."""
    def __init__(self):
        self.status = "idle"
        self.message = ""
        self.rows = []
        self.thread = None

    def run(self, fn, busy_text):
        if self.status == "busy":
            return
        self.status, self.message = "busy", busy_text

        def worker():
            try:
                self.rows = top_rows(fn(), CONFIG["LEADERBOARD_SIZE"])
                self.status, self.message = "done", ""
            except UploadRejected as e:
                self.status, self.message = "error", f"Upload failed: {e.message}"
            except ValidationError as e:
                self.status, self.message = "error", str(e)
            except NetworkError as e:
                logger.warning("Network task failed: %s", e)
                self.status, self.message = "error", "Network error, press U to retry"
            except Exception:
                logger.exception("Background task crashed")
                self.status, self.message = "error", "Something went wrong, press U to retry"
        self.thread = threading.Thread(target=worker, daemon=True)
        self.thread.start()


def main():
    setup_logging()
    pygame.init()
    pygame.event.set_allowed([pygame.QUIT, pygame.KEYDOWN, pygame.TEXTINPUT,
                              pygame.MOUSEBUTTONDOWN, pygame.MOUSEMOTION, pygame.MOUSEBUTTONUP])

    prefs = Prefs()
    CONFIG["BGM_VOLUME"] = float(prefs.get("bgm_volume"))
    CONFIG["SFX_VOLUME"] = float(prefs.get("sfx_volume"))

    dims = compute_dims()
    screen = recreate_window(dims)
    pygame.display.set_caption("Make 10")
    font = pygame.font.SysFont("arial", 20)
    big_font = pygame.font.SysFont("arial", 34, bold=True)
    render = RenderAssets(dims, font, big_font)
    clock = pygame.time.Clock()

    sounds = SoundBoard(SOUND_DIR, CONFIG["BGM_VOLUME"], CONFIG["SFX_VOLUME"])
    overlay = Overlay(prefs, on_volume=sounds.set_volumes)
    client = LeaderboardClient(CONFIG["LEADERBOARD_URL"], CONFIG["UPLOAD_SECRET"], prefs=prefs,
                               timeout=CONFIG["UPLOAD_TIMEOUT_S"])
    net = Background()

    session = None
    boss = None
    gesture = None
    screen_id = "home"
    name = prefs.get("player_name") or ""
    notice = ""
    practice = False

    def new_session():
        nonlocal session, boss, gesture
        if session is not None:
            session.exit()
            sounds.detach(session.events)
            session.events.unsubscribe(render.on_event)
        cfg = session_config()
        session = Session(cfg)
        session.events.subscribe(render.on_event)
        sounds.attach(session.events)
        boss = BossOverlay(session)
        gesture = PointerGesture(session, compute_dims(cfg))

    pygame.key.start_text_input()
    while True:
        dt = clock.tick_busy_loop(CONFIG["FPS"])

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                if session is not None:
                    session.exit()
                pygame.quit(); sys.exit()
            if e.type == pygame.KEYDOWN and e.key == pygame.K_F1:
                overlay.toggle(); continue
            if overlay.active:
                if e.type == pygame.KEYDOWN:
                    overlay.handle(e)
                continue

            if screen_id == "home":
                if e.type == pygame.TEXTINPUT and len(name) < CONFIG["NAME_MAX_LEN"]:
                    name += e.text
                elif e.type == pygame.KEYDOWN:
                    if e.key == pygame.K_BACKSPACE:
                        name = name[:-1]
                    elif e.key == pygame.K_RETURN:
                        new_session()
                        try:
                            session.start(name, practice=practice)
                        except ValidationError as err:
                            notice = str(err)
                            continue
                        prefs.set("player_name", session.name)
                        notice = ""
                        net.status = "idle"
                        screen_id = "game"
                    elif e.key == pygame.K_TAB:
                        net.run(client.fetch_leaderboard, "Syncing...")
                        screen_id = "rank"
                    elif e.key == pygame.K_F2:
                        practice = not practice

            elif screen_id == "game":
                if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                    gesture.down(e.pos)
                elif e.type == pygame.MOUSEMOTION:
                    gesture.move(e.pos)
                elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
                    gesture.up()
                elif e.type == pygame.KEYDOWN:
                    if e.key == pygame.K_ESCAPE:
                        gesture.cancel()
                        session.exit()
                        screen_id = "home"
                    elif e.key == pygame.K_h:
                        session.use_hint()
                    elif e.key == pygame.K_s:
                        session.use_shuffle()
                    elif e.key == pygame.K_d:
                        session.toggle_delete_mode()
                    elif e.key == pygame.K_w:
                        session.use_wipe()
                    elif e.key == pygame.K_f:
                        session.use_freeze()

            elif screen_id == "result":
                if e.type == pygame.KEYDOWN:
                    if e.key == pygame.K_u and net.status != "done" and not session.practice:
                        summary = session.get_audit_summary()
                        net.run(lambda: client.upload(summary), "Verifying...")
                    elif e.key == pygame.K_r:
                        new_session()
                        session.start(name, practice=practice)
                        net.status = "idle"
                        screen_id = "game"
                    elif e.key in (pygame.K_h, pygame.K_ESCAPE):
                        screen_id = "home"
                    elif e.key == pygame.K_TAB:
                        net.run(client.fetch_leaderboard, "Syncing...")
                        screen_id = "rank"

            elif screen_id == "rank":
                if e.type == pygame.KEYDOWN and e.key in (pygame.K_ESCAPE, pygame.K_RETURN, pygame.K_h):
                    screen_id = "home"

        # ---------- update ----------
        if screen_id == "game":
            session.tick(dt)
            boss.update(dt)
            if session.state == State.ENDED:
                gesture.cancel()
                screen_id = "result"

        # ---------- draw ----------
        render.redraw_static(screen)
        if session is not None and screen_id in ("game", "result"):
            snap = session.snapshot()
            render.draw_board(screen, snap)
            render.draw_drag_box(screen, gesture.box())
            render.draw_effects(screen)
            render.draw_panel_hud(screen, snap, boss)
            render.draw_countdown(screen, snap)
            if screen_id == "result":
                status = {"busy": net.message, "error": net.message,
                          "done": "Uploaded!"}.get(net.status, "U: upload score")
                if session.practice:
                    status = "Practice run, not uploaded"
                render.draw_center_text(screen, [
                    f"Score {snap['score']}",
                    f"Player: {snap['name']}",
                    status,
                    "R: again   H: home   Tab: leaderboard",
                ])
        elif screen_id == "home":
            render.draw_center_text(screen, [
                "Make 10",
                "Drag a box around numbers that sum to 10",
                f"Name: {name}_",
                f"Practice: {'on' if practice else 'off'} (F2)",
                notice or "Enter: start   Tab: leaderboard   F1: settings",
            ])
        elif screen_id == "rank":
            lines = ["Leaderboard"]
            if net.status == "busy":
                lines.append(net.message)
            elif not net.rows:
                lines.append("No records yet")
            for i, row in enumerate(net.rows):
                lines.append(f"{i + 1}. {row.get('name') or '-'}   {row.get('score') or 0}")
            render.draw_center_text(screen, lines, top=80)
        overlay.draw(screen, font, dims.total_w, dims.total_h)
        pygame.display.flip()


if __name__ == '__main__':
    main()
