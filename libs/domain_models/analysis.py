from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sentiment(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"
    EXTREME_OVERBOUGHT = "EXTREME_OVERBOUGHT"
    EXTREME_OVERSOLD = "EXTREME_OVERSOLD"


SENTIMENT_PLACEHOLDER = "PROCESSANDO CICLOS..."


def translate_sentiment(value: Optional[str]) -> str:
    """Display label for a sentiment. Values outside the enum pass through as-is."""
    if not value:
        return SENTIMENT_PLACEHOLDER
    try:
        sentiment = Sentiment(value)
    except ValueError:
        return value

    if sentiment is Sentiment.BULLISH:
        return "TENDÊNCIA DE ALTA"
    if sentiment is Sentiment.BEARISH:
        return "TENDÊNCIA DE BAIXA"
    if sentiment is Sentiment.NEUTRAL:
        return "CONSOLIDAÇÃO"
    if sentiment is Sentiment.EXTREME_OVERBOUGHT:
        return "EXAUSTÃO DE COMPRA"
    return "EXAUSTÃO DE VENDA"


def sentiment_tone(value: Optional[str]) -> str:
    """Styling bucket for a sentiment: bullish, bearish or neutral."""
    if value and "BULLISH" in value:
        return "bullish"
    if value and "BEARISH" in value:
        return "bearish"
    return "neutral"


class PriceLevels(BaseModel):
    """Display-only price zones. Not validated numerically."""
    model_config = ConfigDict(populate_by_name=True)

    target: str
    resistance: str
    support: str
    stop_loss: str = Field(alias="stopLoss")


class AnalysisResult(BaseModel):
    """Output of the trend advisory call for one symbol."""
    sentiment: str   # normally a Sentiment value; unknown strings are kept
    confidence: int = 0   # 0-100
    insight: str
    levels: PriceLevels
    discrepancies: list[str] = Field(default_factory=list)

    @field_validator("confidence", mode="before")
    @classmethod
    def _round_confidence(cls, v):
        if isinstance(v, float):
            return round(v)
        return v

    @property
    def label(self) -> str:
        return translate_sentiment(self.sentiment)

    @property
    def tone(self) -> str:
        return sentiment_tone(self.sentiment)
