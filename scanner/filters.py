"""
Scanner list projection: search → category filter → favorites-first, volume-desc sort.
Everything here is pure.
"""
from enum import Enum
from typing import AbstractSet, Iterable, Mapping

from libs.domain_models import FilterType, TickerSnapshot, STRONG_MOVE_PCT


class RowSignal(str, Enum):
    BUY = "COMPRA"
    SELL = "VENDA"
    NEUTRAL = "NEUTRO"


def matches_search(symbol: str, term: str) -> bool:
    """Case-insensitive substring match on the symbol."""
    return term.lower() in symbol.lower()


def matches_filter(snapshot: TickerSnapshot, filter_type: FilterType | str) -> bool:
    """Strict ±2.5% thresholds: exactly 2.5 falls in neither strong bucket."""
    filter_type = FilterType(filter_type)
    if filter_type is FilterType.ALL:
        return True
    change = snapshot.change_percent
    if filter_type is FilterType.STRONG_ENTRY:
        return change > STRONG_MOVE_PCT
    return change < -STRONG_MOVE_PCT


def filter_and_sort(
    tickers: Mapping[str, TickerSnapshot] | Iterable[TickerSnapshot],
    favorites: AbstractSet[str],
    search: str = "",
    filter_type: FilterType = FilterType.ALL,
) -> list[TickerSnapshot]:
    """
    Ordered display list for the scanner table.

    Favorites come first; within each tier, 24h quote volume descending.
    sorted() is stable, so volume ties keep the input order.
    """
    snapshots = tickers.values() if isinstance(tickers, Mapping) else tickers
    kept = [
        t for t in snapshots
        if matches_search(t.symbol, search) and matches_filter(t, filter_type)
    ]
    return sorted(kept, key=lambda t: (t.symbol not in favorites, -t.volume))


# ── Row presentation ─────────────────────────────────────────────

def row_signal(change: float) -> RowSignal:
    if change > STRONG_MOVE_PCT:
        return RowSignal.BUY
    if change < -STRONG_MOVE_PCT:
        return RowSignal.SELL
    return RowSignal.NEUTRAL


def momentum_width(change: float) -> float:
    """Width (percent) of the momentum bar: 10% per 1% move, capped at 100."""
    return min(abs(change) * 10, 100.0)


def format_volume(value: str | float) -> str:
    try:
        vol = float(value)
    except (TypeError, ValueError):
        return str(value)
    if vol > 1e9:
        return f"{vol / 1e9:.2f}B"
    if vol > 1e6:
        return f"{vol / 1e6:.2f}M"
    return f"{vol:,.0f}"


def scanner_rows(
    tickers: Mapping[str, TickerSnapshot],
    favorites: AbstractSet[str],
    selected_symbol: str = "",
    search: str = "",
    filter_type: FilterType = FilterType.ALL,
) -> list[dict]:
    rows = []
    for t in filter_and_sort(tickers, favorites, search=search, filter_type=filter_type):
        change = t.change_percent
        rows.append({
            **t.model_dump(),
            "is_favorite": t.symbol in favorites,
            "is_selected": t.symbol == selected_symbol,
            "signal": row_signal(change).value,
            "momentum": momentum_width(change),
            "volume_display": format_volume(t.quote_volume),
        })
    return rows
