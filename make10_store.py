
"""Local key-value persistence: player name, volumes, leaderboard cache"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path.home() / ".make10" / "prefs.json"

DEFAULTS = {
    "player_name": "",
    "bgm_volume": 0.5,
    "sfx_volume": 0.5,
    "leaderboard_cache": [],
}


class Prefs:
    """
    Shared by the frame loop and the leaderboard worker thread; every
    update and file write happens under one lock.
    """
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEFAULT_PATH
        self.data = dict(DEFAULTS)
        self._lock = threading.RLock()
        self.load()

    def load(self):
        if not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, using defaults: %s", self.path, e)
            return
        if isinstance(raw, dict):
            self.data.update(raw)
        else:
            logger.warning("Ignoring %s: expected a JSON object", self.path)

    def save(self):
        with self._lock:
            text = json.dumps(self.data, ensure_ascii=False, indent=2)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(text, encoding="utf-8")
            except OSError as e:
                logger.warning("Could not write %s: %s", self.path, e)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, DEFAULTS.get(key, default))

    def set(self, key: str, value: Any):
        with self._lock:
            self.data[key] = value
            self.save()
