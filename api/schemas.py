from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SelectRequest(BaseModel):
    """Incoming request to PUT /selection."""
    symbol: str = Field(
        ...,
        description="Pair to inspect, e.g. 'BTCUSDT'.",
        examples=["BTCUSDT", "ETHUSDT"],
    )


class LiveRequest(BaseModel):
    enabled: bool = Field(..., description="Turn the streaming feed on or off.")


class LiveResponse(BaseModel):
    enabled: bool
    connected: bool
    last_update: datetime


class TickerRow(BaseModel):
    symbol: str
    last_price: str
    price_change_percent: str
    quote_volume: str
    high_price: str
    low_price: str
    is_favorite: bool = False
    is_selected: bool = False
    signal: str = "NEUTRO"
    momentum: float = 0.0
    volume_display: str = ""


class TickersResponse(BaseModel):
    count: int
    last_update: datetime
    tickers: list[TickerRow] = Field(default_factory=list)


class FavoritesResponse(BaseModel):
    favorites: list[str] = Field(default_factory=list)
    symbol: Optional[str] = None
    is_favorite: Optional[bool] = None


class SelectionResponse(BaseModel):
    symbol: str
    ticker: Optional[dict] = None
    analysis: Optional[dict] = None
    loading: bool = False
    sentiment_label: str
    tone: str


class RefreshResponse(BaseModel):
    started: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    symbols: int = 0
    live: bool = False
    services: dict = Field(default_factory=dict)
