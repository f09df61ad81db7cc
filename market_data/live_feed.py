"""
Live feed reconciler for the Binance all-symbols ticker stream.

  reader task    websocket frames → parse → asyncio.Queue
  consumer task  queue → apply_batch → state.replace_tickers

Only symbols already in the canonical set are updated; the set never grows.
No automatic reconnect: stop() then start() is the recovery path.
"""
import asyncio
import json
import os
from typing import Callable, Mapping, Optional

import websockets
from pydantic import ValidationError
from websockets.exceptions import WebSocketException

from libs.domain_models import StreamTicker, TickerSnapshot
from libs.logger import get_logger

logger = get_logger(__name__)


BINANCE_STREAM_URL = os.getenv("BINANCE_STREAM_URL", "wss://fstream.binance.com/ws/!ticker@arr")


def parse_stream_message(raw: str | bytes) -> Optional[list[TickerSnapshot]]:
    """
    Decode one stream frame into snapshots.
    Returns None for frames that are not a JSON array; bad records inside a batch are skipped.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Dropping malformed stream frame: %s", e)
        return None

    if not isinstance(data, list):
        logger.warning("Dropping stream frame that is not an array (%s)", type(data).__name__)
        return None

    batch = []
    for record in data:
        try:
            batch.append(StreamTicker.model_validate(record).to_snapshot())
        except ValidationError:
            logger.debug("Skipping malformed stream record: %r", record)
    return batch


def apply_batch(
    tickers: Mapping[str, TickerSnapshot], updates: list[TickerSnapshot]
) -> dict[str, TickerSnapshot]:
    """
    Return a new mapping with `updates` applied to symbols already present.
    Unknown symbols are ignored. Last write wins within a batch.
    """
    merged = dict(tickers)
    for update in updates:
        if update.symbol in merged:
            merged[update.symbol] = update
    return merged


class LiveFeedReconciler:
    """
    Keeps the state's ticker mapping current while live mode is on.

    `connect` must behave like `websockets.connect`: called with the URL it returns
    an async context manager yielding an async-iterable connection with `close()`.
    """

    def __init__(self, state, url: str = BINANCE_STREAM_URL, connect: Optional[Callable] = None):
        self.state = state
        self.url = url
        self._connect = connect or websockets.connect
        self._queue: Optional[asyncio.Queue] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._consumer_task: Optional[asyncio.Task] = None
        self._ws = None
        self.batches_applied = 0

    @property
    def running(self) -> bool:
        return self._reader_task is not None and not self._reader_task.done()

    async def start(self) -> None:
        if self.running:
            return
        # drop leftovers from a connection that already ended
        await self.stop()

        self._queue = asyncio.Queue()
        self._consumer_task = asyncio.create_task(self._consume(self._queue))
        self._reader_task = asyncio.create_task(self._read(self._queue))

    async def stop(self) -> None:
        """Release the connection and stop applying updates. Safe to call repeatedly."""
        reader, consumer = self._reader_task, self._consumer_task
        self._reader_task = self._consumer_task = None
        self._queue = None

        ws, self._ws = self._ws, None
        if ws is not None:
            try:
                await ws.close()
            except (WebSocketException, OSError) as e:
                logger.debug("Error while closing live feed: %s", e)

        tasks = [t for t in (reader, consumer) if t is not None]
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    # ── Tasks ────────────────────────────────────────────────────

    async def _read(self, queue: asyncio.Queue) -> None:
        try:
            async with self._connect(self.url) as ws:
                self._ws = ws
                logger.info("Live feed connected: %s", self.url)
                async for raw in ws:
                    batch = parse_stream_message(raw)
                    if batch is not None:
                        queue.put_nowait(batch)
            logger.info("Live feed closed by server")
        except (WebSocketException, OSError) as e:
            logger.error("Live feed connection failed: %s", e)
        except Exception:
            logger.exception("Live feed reader crashed")
        finally:
            self._ws = None
            queue.put_nowait(None)

    async def _consume(self, queue: asyncio.Queue) -> None:
        while True:
            batch = await queue.get()
            if batch is None:
                return
            self.state.replace_tickers(apply_batch(self.state.tickers, batch))
            self.batches_applied += 1
