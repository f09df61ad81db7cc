"""
Owned state for one scanner session.

Single writer per field:
  tickers            → snapshot fetcher (populate) and live feed (replace_tickers)
  selection fields   → analysis orchestrator
  is_live            → dashboard service
Everything runs on one event loop, so no locking.
"""
import os
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from libs.domain_models import AnalysisResult, TickerSnapshot
from libs.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SYMBOL = os.getenv("DEFAULT_SYMBOL", "BTCUSDT")


class DashboardState:

    def __init__(self, selected_symbol: str = DEFAULT_SYMBOL):
        self._tickers: dict[str, TickerSnapshot] = {}
        self._populated = False
        self.last_update: datetime = datetime.now(timezone.utc)

        # Selection
        self.selected_symbol: str = selected_symbol
        self.analysis: Optional[AnalysisResult] = None
        self.loading_analysis: bool = False
        self.generation: int = 0   # bumped on every selection change

        self.is_live: bool = False

    # ── Canonical ticker set ─────────────────────────────────────

    @property
    def tickers(self) -> Mapping[str, TickerSnapshot]:
        return MappingProxyType(self._tickers)

    @property
    def populated(self) -> bool:
        return self._populated

    def get(self, symbol: str) -> Optional[TickerSnapshot]:
        return self._tickers.get(symbol)

    def populate(self, snapshots: Iterable[TickerSnapshot]) -> int:
        """Fix the canonical symbol set. Only the first call has any effect."""
        if self._populated:
            logger.warning("Canonical ticker set already populated — ignoring repopulate")
            return len(self._tickers)
        self._tickers = {s.symbol: s for s in snapshots}
        self._populated = True
        self.touch()
        return len(self._tickers)

    def replace_tickers(self, mapping: dict[str, TickerSnapshot]) -> None:
        """Swap in a whole new mapping; readers see either the old or the new one."""
        self._tickers = mapping
        self.touch()

    def touch(self) -> None:
        self.last_update = datetime.now(timezone.utc)
