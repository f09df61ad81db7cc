"""
Shared LLM factory for the trend advisory call.
Returns Gemini via langchain, or a deterministic fake when MOCK_LLM=true.
"""
import json
import os
import re

from langchain_google_genai import ChatGoogleGenerativeAI

from libs.logger import get_logger

logger = get_logger(__name__)


# Model preference order; the first entry is the default when GEMINI_MODEL is unset
_MODEL_CHAIN = [
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.0-flash",
]

_warned_missing_key = False


class MockResponse:
    def __init__(self, content):
        self.content = content


class FakeLLM:
    """A minimal mock LLM for integration testing. Answers with a fenced JSON analysis."""

    def invoke(self, messages, **kwargs):
        user_msg = str(messages[-1].content) if messages else ""
        match = re.search(r"\b([A-Z0-9]{2,20}USDT)\b", user_msg)
        symbol = match.group(1) if match else "BTCUSDT"

        payload = {
            "sentiment": "NEUTRAL",
            "confidence": 55,
            "insight": f"Mock insight for {symbol}: 1h and 4h structures disagree, daily trend flat.",
            "levels": {
                "target": "1.10",
                "resistance": "1.05",
                "support": "0.95",
                "stopLoss": "0.90",
            },
            "discrepancies": [f"Mock volume anomaly on {symbol}"],
        }
        return MockResponse(f"```json\n{json.dumps(payload)}\n```")

    def with_structured_output(self, schema, **kwargs):
        """Mirror ChatGoogleGenerativeAI: invoke returns a validated `schema` instance."""
        return _StructuredFake(self, schema)


class _StructuredFake:
    def __init__(self, llm, schema):
        self.llm = llm
        self.schema = schema

    def invoke(self, messages, **kwargs):
        text = str(self.llm.invoke(messages, **kwargs).content).strip()
        text = text.replace("```json", "").replace("```", "").strip()
        data = json.loads(text)
        if hasattr(self.schema, "model_validate"):
            return self.schema.model_validate(data)
        return data


def get_llm(temperature: float = 0.2):
    """
    Return a Gemini chat model.
    Override the model with GEMINI_MODEL; the key comes from GEMINI_API_KEY.
    """
    global _warned_missing_key

    if os.getenv("MOCK_LLM") == "true":
        return FakeLLM()

    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key and not _warned_missing_key:
        logger.warning("GEMINI_API_KEY not set, trend analysis calls will fail")
        _warned_missing_key = True

    model = os.getenv("GEMINI_MODEL", _MODEL_CHAIN[0])
    return ChatGoogleGenerativeAI(
        model=model,
        temperature=temperature,
        google_api_key=api_key,
        max_retries=0,   # single attempt
    )
