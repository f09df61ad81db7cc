from .ticker import TickerSnapshot, StreamTicker, FilterType, STRONG_MOVE_PCT
from .analysis import AnalysisResult, PriceLevels, Sentiment, translate_sentiment, sentiment_tone

__all__ = [
    "TickerSnapshot",
    "StreamTicker",
    "FilterType",
    "STRONG_MOVE_PCT",
    "AnalysisResult",
    "PriceLevels",
    "Sentiment",
    "translate_sentiment",
    "sentiment_tone",
]
