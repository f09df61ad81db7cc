"""
Analysis Orchestrator — single-flight trend analysis for the selected symbol.

  select(symbol)        → clear result, bump generation, auto-trigger
  ensure_analysis()     → auto-trigger: only if no result and nothing in flight
  request_analysis()    → manual re-trigger: ignores stored result, respects in-flight

Each request is tagged with the generation and symbol it was issued for; a
completion is stored only while both still match the current selection. At most one request is in flight at any time.
No timeout and no retry on the advisory call.
"""
import asyncio
from typing import Awaitable, Callable, Optional

from agents.trend_analyst.workflow import run_trend_analysis
from dashboard.state import DashboardState
from libs.domain_models import AnalysisResult, TickerSnapshot
from libs.logger import get_logger

logger = get_logger(__name__)

Advisor = Callable[[TickerSnapshot], Awaitable[AnalysisResult]]


async def default_advisor(snapshot: TickerSnapshot) -> AnalysisResult:
    # LangGraph invoke is blocking; keep the event loop free
    return await asyncio.to_thread(run_trend_analysis, snapshot)


class AnalysisOrchestrator:

    def __init__(self, state: DashboardState, advisor: Optional[Advisor] = None):
        self.state = state
        self.advisor = advisor or default_advisor
        self._tasks: set[asyncio.Task] = set()
        self.calls_issued = 0

    # ── Selection ────────────────────────────────────────────────

    def select(self, symbol: str) -> bool:
        """Change the inspected symbol. Returns False when it is already selected."""
        if symbol == self.state.selected_symbol:
            return False
        self.state.selected_symbol = symbol
        self.state.analysis = None
        self.state.generation += 1
        logger.debug("Selected %s (generation %d)", symbol, self.state.generation)
        self.ensure_analysis()
        return True

    # ── Triggers ─────────────────────────────────────────────────

    def ensure_analysis(self) -> bool:
        """Auto-trigger for the current selection."""
        s = self.state
        if not s.populated or s.analysis is not None or s.loading_analysis:
            return False
        return self.request_analysis()

    def request_analysis(self, symbol: Optional[str] = None) -> bool:
        """
        Start an analysis in the background.

        Returns:
            True if a call was issued; False if one is already in flight
            or the symbol is not in the canonical set.
        """
        symbol = symbol or self.state.selected_symbol
        if self.state.loading_analysis:
            logger.debug("Analysis already in flight — ignoring request for %s", symbol)
            return False

        snapshot = self.state.get(symbol)
        if snapshot is None:
            logger.debug("No ticker data for %s — analysis skipped", symbol)
            return False

        self.state.loading_analysis = True
        self.calls_issued += 1
        task = asyncio.create_task(self._run(snapshot, self.state.generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _run(self, snapshot: TickerSnapshot, generation: int) -> None:
        try:
            result = await self.advisor(snapshot)
        except Exception as e:
            logger.error("Trend analysis for %s failed: %s", snapshot.symbol, e)
            result = None
        finally:
            self.state.loading_analysis = False

        stale = (generation != self.state.generation
                 or snapshot.symbol != self.state.selected_symbol)
        if stale:
            logger.debug("Discarding stale analysis for %s", snapshot.symbol)
        elif result is not None:
            self.state.analysis = result

        if stale:
            # the new selection was blocked while this call ran
            self.ensure_analysis()

    # ── Lifecycle ────────────────────────────────────────────────

    async def wait_idle(self) -> None:
        """Wait until no analysis task is pending (including chained auto-triggers)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
        self.state.loading_analysis = False
