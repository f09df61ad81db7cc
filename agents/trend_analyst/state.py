from typing import TypedDict, Optional


class TrendAnalystState(TypedDict):
    """State for the Trend Analyst sub-graph."""
    snapshot: dict                      # TickerSnapshot.model_dump()
    prompt: str
    raw_result: Optional[dict]          # schema-bound LLM output, alias keys
    result: Optional[dict]              # validated AnalysisResult dump
    error: Optional[str]                # if any step failed
