"""High score and sound preference kept in a small JSON file."""

import json
import os
from pathlib import Path

from internal.errors import StorageError
from internal.logging import get_logger

HIGH_SCORE_KEY = "high_score"
SOUND_KEY = "sound_enabled"


class PreferenceStore:
    """File-backed preferences. Read failures mean "nothing stored", never an exception."""

    def __init__(self, path):
        self.path = Path(path)
        self._log = get_logger()

    def _read(self):
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            self._log.warn("preferences unreadable", error=exc, path=str(self.path))
            return {}
        if not isinstance(data, dict):
            self._log.warn("preferences malformed", path=str(self.path))
            return {}
        return data

    def _write(self, key, value):
        data = self._read()
        data[key] = value
        try:
            if self.path.parent:
                os.makedirs(self.path.parent, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StorageError("could not write preferences", path=self.path, cause=exc) from exc

    def load_high_score(self):
        try:
            return max(0, int(self._read().get(HIGH_SCORE_KEY, 0)))
        except (TypeError, ValueError):
            return 0

    def save_high_score(self, score):
        try:
            self._write(HIGH_SCORE_KEY, int(score))
        except StorageError as exc:
            self._log.warn("high score not saved", error=exc, score=score)

    def load_sound_enabled(self):
        value = self._read().get(SOUND_KEY, True)
        return value if isinstance(value, bool) else True

    def save_sound_enabled(self, enabled):
        try:
            self._write(SOUND_KEY, bool(enabled))
        except StorageError as exc:
            self._log.warn("sound preference not saved", error=exc)
