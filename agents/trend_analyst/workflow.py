"""
Trend Analyst LangGraph sub-graph.

Nodes:
  build_prompt   → market fields + strategy text + JSON response contract
  llm_analyze    → single Gemini call bound to the AnalysisResult schema, no retry
  parse_result   → AnalysisResult validation
"""
from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.graph import StateGraph, END
from pydantic import ValidationError

from agents.trend_analyst.state import TrendAnalystState
from libs.domain_models import AnalysisResult, Sentiment, TickerSnapshot
from libs.llm import get_llm
from libs.logger import get_logger

logger = get_logger(__name__)


class AdvisoryError(Exception):
    """The trend analysis call failed or returned something unusable."""


_SYSTEM_PROMPT = (
    "Você é um motor de análise de tendência de alta assertividade. "
    "Filtre o ruído de curto prazo e priorize a estrutura multi-timeframe. "
    "Responda sempre em português (PT-BR) e apenas com o JSON pedido."
)

_STRATEGY = """
ESTRATÉGIA (SMART MONEY CONCEPTS):
1. Confluência: 'BULLISH' só quando o 1h está acima da média de 24h e o 4h mantém estrutura de alta.
2. Ciclos 2018-2025: diga se o preço está em zona de acumulação histórica ou em topo de euforia.
3. Volume: volume subindo > 20% com preço estável indica ABSORÇÃO; volume caindo com preço subindo indica EXAUSTÃO.
4. Risco: o stop loss fica abaixo da última zona de liquidez do 4h.
"""

_SENTIMENTS = ", ".join(s.value for s in Sentiment)

_RESPONSE_CONTRACT = f"""
Responda SOMENTE com este JSON:
{{
  "sentiment": um de {_SENTIMENTS},
  "confidence": inteiro de 0 a 100 (força da confluência),
  "insight": "diagnóstico técnico da confluência 1h / 4h / diário",
  "levels": {{"target": "...", "resistance": "...", "support": "...", "stopLoss": "..."}},
  "discrepancies": ["alertas de manipulação ou exaustão"]
}}
Se 1h e diário divergirem, o sentimento deve ser NEUTRAL ou BEARISH (prevalece a tendência maior).
O alvo é o próximo nível de liquidez institucional ainda não testado.
"""


def build_prompt(snapshot: TickerSnapshot) -> str:
    return f"""
ATUE COMO UM ALGORITMO QUANT DE ALTA PRECISÃO.

DADOS DO ATIVO EM TEMPO REAL:
- Símbolo: {snapshot.symbol}
- Último preço: {snapshot.last_price}
- Variação 24h: {snapshot.price_change_percent}%
- Volume (quote) 24h: {snapshot.quote_volume}
- Máxima / Mínima 24h: {snapshot.high_price} / {snapshot.low_price}
{_STRATEGY}
{_RESPONSE_CONTRACT}
"""


# ── Graph Nodes ──────────────────────────────────────────────────

def build_prompt_node(state: TrendAnalystState) -> dict:
    snapshot = TickerSnapshot.model_validate(state["snapshot"])
    return {"prompt": build_prompt(snapshot), "error": None}


def llm_analyze(state: TrendAnalystState) -> dict:
    try:
        # JSON mime type + response schema on the Gemini request
        llm = get_llm(temperature=0.2).with_structured_output(AnalysisResult, method="json_schema")
        output = llm.invoke([
            SystemMessage(content=_SYSTEM_PROMPT),
            HumanMessage(content=state["prompt"]),
        ])
        if output is None:
            return {"raw_result": None, "error": "llm_analyze failed: empty structured output"}
        if isinstance(output, AnalysisResult):
            output = output.model_dump(by_alias=True)
        return {"raw_result": output}
    except Exception as e:
        return {"raw_result": None, "error": f"llm_analyze failed: {e}"}


def parse_result(state: TrendAnalystState) -> dict:
    if state.get("error"):
        return {"result": None}
    try:
        result = AnalysisResult.model_validate(state.get("raw_result") or {})
    except ValidationError as e:
        return {"result": None, "error": f"parse_result failed: {e}"}
    return {"result": result.model_dump(by_alias=True)}


# ── Graph builder ─────────────────────────────────────────────────

def build_trend_analyst_graph():
    g = StateGraph(TrendAnalystState)
    g.add_node("build_prompt", build_prompt_node)
    g.add_node("llm_analyze", llm_analyze)
    g.add_node("parse_result", parse_result)

    g.set_entry_point("build_prompt")
    g.add_edge("build_prompt", "llm_analyze")
    g.add_edge("llm_analyze", "parse_result")
    g.add_edge("parse_result", END)
    return g.compile()


trend_analyst_graph = build_trend_analyst_graph()


def run_trend_analysis(snapshot: TickerSnapshot) -> AnalysisResult:
    """
    Ask the LLM for a trend read on one symbol.

    Raises:
        AdvisoryError: the call failed or the response did not parse.
    """
    initial: TrendAnalystState = {
        "snapshot": snapshot.model_dump(),
        "prompt": "",
        "raw_result": None,
        "result": None,
        "error": None,
    }
    final = trend_analyst_graph.invoke(initial)
    if final.get("error") or not final.get("result"):
        raise AdvisoryError(final.get("error") or f"no analysis returned for {snapshot.symbol}")
    logger.info("Trend analysis for %s: %s", snapshot.symbol, final["result"]["sentiment"])
    return AnalysisResult.model_validate(final["result"])
