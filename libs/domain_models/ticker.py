import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


STRONG_MOVE_PCT = 2.5   # 24h change threshold for the strong entry / exit buckets


def to_float(value: str | None) -> float:
    """Decimal string → float. Unparsable or non-finite values read as 0.0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class FilterType(str, Enum):
    ALL = "all"
    STRONG_ENTRY = "entrada-forte"
    STRONG_EXIT = "saida-forte"


class TickerSnapshot(BaseModel):
    """
    24h statistics for one symbol. Identity is the symbol.
    Values stay as the decimal strings the exchange sends.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    symbol: str
    last_price: str = Field(alias="lastPrice")
    price_change_percent: str = Field(alias="priceChangePercent")
    quote_volume: str = Field(alias="quoteVolume")
    high_price: str = Field(alias="highPrice")
    low_price: str = Field(alias="lowPrice")

    @property
    def change_percent(self) -> float:
        return to_float(self.price_change_percent)

    @property
    def volume(self) -> float:
        return to_float(self.quote_volume)


class StreamTicker(BaseModel):
    """Compact record from the all-symbols ticker stream (`!ticker@arr`)."""
    model_config = ConfigDict(extra="ignore")

    s: str   # symbol
    c: str   # last price
    P: str   # 24h change percent
    q: str   # 24h quote volume
    h: str   # 24h high
    l: str   # 24h low

    def to_snapshot(self) -> TickerSnapshot:
        return TickerSnapshot(
            symbol=self.s,
            last_price=self.c,
            price_change_percent=self.P,
            quote_volume=self.q,
            high_price=self.h,
            low_price=self.l,
        )
