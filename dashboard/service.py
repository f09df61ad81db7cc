"""
Dashboard service — composition root for one scanner session.

startup:  favorites → REST snapshot → auto analysis → live feed (if LIVE_ON_START)
shutdown: live feed off → cancel analysis → close HTTP client
"""
import os
from typing import Optional

from agents.orchestrator.workflow import AnalysisOrchestrator, Advisor
from dashboard.favorites import FavoritesStore
from dashboard.state import DashboardState
from libs.domain_models import FilterType, translate_sentiment, sentiment_tone
from libs.logger import get_logger
from market_data.binance_client import BinanceFuturesClient, load_initial_snapshot
from market_data.live_feed import LiveFeedReconciler
from scanner.filters import scanner_rows

logger = get_logger(__name__)


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class DashboardService:

    def __init__(
        self,
        state: Optional[DashboardState] = None,
        favorites: Optional[FavoritesStore] = None,
        client: Optional[BinanceFuturesClient] = None,
        reconciler: Optional[LiveFeedReconciler] = None,
        orchestrator: Optional[AnalysisOrchestrator] = None,
        advisor: Optional[Advisor] = None,
        live_on_start: Optional[bool] = None,
    ):
        self.state = state or DashboardState()
        self.favorites = favorites or FavoritesStore()
        self.client = client or BinanceFuturesClient()
        self.reconciler = reconciler or LiveFeedReconciler(self.state)
        self.orchestrator = orchestrator or AnalysisOrchestrator(self.state, advisor=advisor)
        self.live_on_start = _env_flag("LIVE_ON_START") if live_on_start is None else live_on_start

    # ── Lifecycle ────────────────────────────────────────────────

    async def startup(self) -> None:
        self.favorites.load()
        await load_initial_snapshot(self.state, self.client)
        self.orchestrator.ensure_analysis()
        if self.live_on_start:
            await self.set_live(True)

    async def shutdown(self) -> None:
        await self.set_live(False)
        await self.orchestrator.aclose()
        await self.client.close()
        logger.info("Dashboard service stopped")

    async def set_live(self, enabled: bool) -> bool:
        if enabled:
            await self.reconciler.start()
        else:
            await self.reconciler.stop()
        self.state.is_live = enabled
        logger.info("Live mode %s", "on" if enabled else "off")
        return enabled

    # ── Actions ──────────────────────────────────────────────────

    def toggle_favorite(self, symbol: str) -> bool:
        return self.favorites.toggle(symbol.upper())

    def select(self, symbol: str) -> bool:
        return self.orchestrator.select(symbol.upper())

    def reanalyze(self) -> bool:
        return self.orchestrator.request_analysis()

    # ── Views ────────────────────────────────────────────────────

    def rows(self, search: str = "", filter_type: FilterType = FilterType.ALL) -> list[dict]:
        return scanner_rows(
            self.state.tickers,
            self.favorites.as_set(),
            selected_symbol=self.state.selected_symbol,
            search=search,
            filter_type=filter_type,
        )

    def selection_view(self) -> dict:
        s = self.state
        sentiment = s.analysis.sentiment if s.analysis else None
        return {
            "symbol": s.selected_symbol,
            "ticker": s.get(s.selected_symbol).model_dump() if s.get(s.selected_symbol) else None,
            "analysis": s.analysis.model_dump(by_alias=True) if s.analysis else None,
            "loading": s.loading_analysis,
            "sentiment_label": translate_sentiment(sentiment),
            "tone": sentiment_tone(sentiment),
        }
