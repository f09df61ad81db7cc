"""
Favorites persisted as a JSON array of symbols in a single file.
"""
import json
import os
from pathlib import Path

from libs.logger import get_logger

logger = get_logger(__name__)

FAVORITES_PATH = os.getenv("FAVORITES_PATH", ".favorites.json")


class FavoritesStore:

    def __init__(self, path: str | os.PathLike = FAVORITES_PATH):
        self.path = Path(path)
        self._symbols: list[str] = []

    def load(self) -> list[str]:
        """Read the stored favorites. Missing or malformed file → empty set."""
        if not self.path.exists():
            self._symbols = []
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read favorites from %s: %s", self.path, e)
            self._symbols = []
            return []

        if not isinstance(data, list):
            logger.warning("Favorites file %s is not a JSON array — ignoring", self.path)
            data = []
        # dedupe, keep order
        self._symbols = list(dict.fromkeys(str(s) for s in data))
        return self.symbols

    def toggle(self, symbol: str) -> bool:
        """Add or remove a symbol and persist. Returns True if it is now a favorite."""
        if symbol in self._symbols:
            self._symbols = [s for s in self._symbols if s != symbol]
            now_favorite = False
        else:
            self._symbols = [*self._symbols, symbol]
            now_favorite = True
        self._save()
        return now_favorite

    def contains(self, symbol: str) -> bool:
        return symbol in self._symbols

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    def as_set(self) -> frozenset[str]:
        return frozenset(self._symbols)

    def _save(self) -> None:
        # sibling write + swap: the store file is never left truncated
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(self._symbols), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error("Could not write favorites to %s: %s", self.path, e)
            tmp.unlink(missing_ok=True)
