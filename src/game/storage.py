# src/game/storage.py
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_SAVE_FILE = Path.home() / ".barkour" / "save.json"
HIGH_SCORE_KEY = "barkour_highscore"
CHARACTER_KEY = "barkour_character"


class LocalStore:
    """
    Tiny key/value save file (JSON). Survives across sessions on one machine.
    A missing or corrupt file reads as empty; write errors are logged, never raised,
    so a read-only home directory can't stop a round from ending.
    """
    def __init__(self, path: str | Path = DEFAULT_SAVE_FILE):
        self.path = Path(path)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable save file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring save file %s: expected an object", self.path)
            return {}
        return data

    def _write(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not write save file %s: %s", self.path, e)

    def _get_int(self, key: str) -> int:
        try:
            return int(self._data.get(key, 0))
        except (TypeError, ValueError):
            return 0

    def get_high_score(self) -> int:
        return self._get_int(HIGH_SCORE_KEY)

    def set_high_score(self, score: int):
        self._data[HIGH_SCORE_KEY] = int(score)
        self._write()

    def get_selected_character(self) -> int:
        return self._get_int(CHARACTER_KEY)

    def set_selected_character(self, index: int):
        self._data[CHARACTER_KEY] = int(index)
        self._write()


class MemoryStore(LocalStore):
    """Same interface, nothing touches disk."""
    def __init__(self, high_score: int = 0, character: int = 0):
        self.path = Path("<memory>")
        self._data = {HIGH_SCORE_KEY: high_score, CHARACTER_KEY: character}
        self.writes = 0

    def _write(self):
        self.writes += 1
