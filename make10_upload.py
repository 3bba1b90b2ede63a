
"""
Leaderboard client: signs and posts a finished session, fetches the board.

The signature is SHA-256 over "name|score|timestamp|secret" with a secret
shipped in the client. It only catches casual tampering; anyone holding
the client can forge it.
"""
import hashlib
import logging
from typing import List, Optional

import requests

from make10_errors import NetworkError, UploadRejected, ValidationError

logger = logging.getLogger(__name__)


def sign(name: str, score: int, timestamp: int, secret: str) -> str:
    msg = f"{name}|{score}|{timestamp}|{secret}"
    return hashlib.sha256(msg.encode("utf-8")).hexdigest()


def _score_of(row: dict) -> int:
    try:
        return int(row.get("score") or 0)
    except (TypeError, ValueError):
        return 0


def top_rows(rows, n: int = 10) -> List[dict]:
    """Best n rows by score; a row with an unreadable score ranks as 0."""
    clean = [r for r in (rows or []) if isinstance(r, dict)]
    clean.sort(key=_score_of, reverse=True)
    return clean[:n]


def _rows_from(result) -> List[dict]:
    if isinstance(result, list):
        return result
    if isinstance(result, dict):
        for key in ("rows", "leaderboard", "data"):
            if isinstance(result.get(key), list):
                return result[key]
    return []


class LeaderboardClient:
    def __init__(self, url: str, secret: str, prefs=None, http: Optional[requests.Session] = None,
                 timeout: float = 10):
        self.url = url
        self.secret = secret
        self.prefs = prefs
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _json(self, resp):
        try:
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise NetworkError(f"leaderboard request failed: {e}") from e
        except ValueError as e:
            raise NetworkError("leaderboard sent a non-JSON response") from e

    def payload(self, summary: dict) -> dict:
        return {
            "name": summary["name"],
            "score": summary["score"],
            "timestamp": summary["timestamp"],
            "sign": sign(summary["name"], summary["score"], summary["timestamp"], self.secret),
            "audit_skills": summary["skill_log"],
            "match_log": summary["match_log"],
        }

    def upload(self, summary: dict) -> List[dict]:
        """Post the audit summary; returns (and caches) the updated leaderboard rows."""
        if summary.get("practice"):
            raise ValidationError("practice sessions are not uploaded")
        data = self.payload(summary)
        try:
            resp = self.http.post(self.url, json=data, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Upload failed: %s", e)
            raise NetworkError(f"upload failed: {e}") from e
        result = self._json(resp)
        if isinstance(result, dict) and result.get("status") == "error":
            message = result.get("message") or "upload rejected"
            logger.warning("Upload rejected: %s", message)
            raise UploadRejected(message)
        rows = _rows_from(result)
        logger.info("Uploaded score %s for %s", summary["score"], summary["name"])
        self._cache(rows)
        return rows

    def fetch_leaderboard(self) -> List[dict]:
        """Current rows, or the cached rows when the server can't be reached."""
        try:
            try:
                resp = self.http.get(self.url, timeout=self.timeout)
            except requests.RequestException as e:
                raise NetworkError(f"fetch failed: {e}") from e
            rows = _rows_from(self._json(resp))
        except NetworkError as e:
            logger.warning("Leaderboard fetch failed, using cache: %s", e)
            return self.cached()
        self._cache(rows)
        return rows

    def cached(self) -> List[dict]:
        if self.prefs is None:
            return []
        return list(self.prefs.get("leaderboard_cache") or [])

    def _cache(self, rows):
        if self.prefs is not None and rows:
            self.prefs.set("leaderboard_cache", rows)
