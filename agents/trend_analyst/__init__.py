from agents.trend_analyst.workflow import run_trend_analysis, trend_analyst_graph, build_prompt, AdvisoryError
from agents.trend_analyst.state import TrendAnalystState

__all__ = ["run_trend_analysis", "trend_analyst_graph", "build_prompt", "AdvisoryError", "TrendAnalystState"]
