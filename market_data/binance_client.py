"""
Async client for the Binance USDT-M futures REST API.
One-shot 24h ticker snapshot; no retry.
"""
import os
from typing import Iterable, Optional

import httpx
from pydantic import ValidationError

from libs.domain_models import TickerSnapshot
from libs.logger import get_logger

logger = get_logger(__name__)


BINANCE_REST_URL = os.getenv("BINANCE_REST_URL", "https://fapi.binance.com")
TICKER_24H_PATH = "/fapi/v1/ticker/24hr"
QUOTE_ASSET = os.getenv("QUOTE_ASSET", "USDT")


class SnapshotFetchError(Exception):
    """The 24h snapshot could not be fetched or decoded."""


class BinanceFuturesClient:
    """
    Thin async wrapper around the public futures endpoints.
    Pass `http` to share (or mock) an httpx.AsyncClient; otherwise one is created lazily.
    """

    def __init__(self, base_url: str = BINANCE_REST_URL, http: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url
        self._http = http
        self._owns_http = http is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(base_url=self.base_url, timeout=15.0)
            self._owns_http = True
        return self._http

    async def fetch_24h_tickers(self) -> list[dict]:
        """Raw 24h statistics for every listed symbol."""
        client = await self._get_client()
        try:
            resp = await client.get(TICKER_24H_PATH)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise SnapshotFetchError(f"GET {TICKER_24H_PATH} failed: {e}") from e
        except ValueError as e:
            raise SnapshotFetchError(f"GET {TICKER_24H_PATH} returned invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise SnapshotFetchError(f"expected a JSON array, got {type(data).__name__}")
        return data

    async def close(self):
        if self._owns_http and self._http and not self._http.is_closed:
            await self._http.aclose()


def filter_quote_asset(rows: Iterable[dict], quote: str = QUOTE_ASSET) -> list[TickerSnapshot]:
    """Keep only pairs quoted in `quote`. Rows that don't validate are skipped."""
    snapshots = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        symbol = row.get("symbol")
        if not isinstance(symbol, str) or not symbol.endswith(quote):
            continue
        try:
            snapshots.append(TickerSnapshot.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping malformed ticker %s: %s", symbol, e.errors()[0].get("msg"))
    return snapshots


async def load_initial_snapshot(state, client: BinanceFuturesClient, quote: str = QUOTE_ASSET) -> int:
    """
    Populate the canonical ticker set once from the REST snapshot.
    On failure the set stays empty and the error is logged.

    Returns:
        Number of symbols loaded.
    """
    try:
        rows = await client.fetch_24h_tickers()
    except SnapshotFetchError as e:
        logger.error("Initial snapshot failed: %s", e)
        return 0

    snapshots = filter_quote_asset(rows, quote=quote)
    count = state.populate(snapshots)
    logger.info("Loaded %d %s pairs (of %d listed)", count, quote, len(rows))
    return count
