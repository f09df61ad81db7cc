"""
pytest configuration for the scanner test suite.

Marks:
  @pytest.mark.unit    — fast unit tests, no network, no LLM
  @pytest.mark.llm     — requires a working GEMINI_API_KEY
  @pytest.mark.slow    — exercises the full FastAPI app

Run subsets:
  pytest tests/ -m unit              # fast unit tests only
  pytest tests/ -m "unit or slow"    # everything that runs offline
  pytest tests/ -m llm               # LLM-dependent tests only
"""
import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def pytest_addoption(parser):
    parser.addoption(
        "--skip-llm", action="store_true", default=False,
        help="Skip tests that require a Gemini API key"
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast unit tests, no network or LLM")
    config.addinivalue_line("markers", "llm: requires GEMINI_API_KEY with available quota")
    config.addinivalue_line("markers", "slow: exercises the full FastAPI app")


def pytest_collection_modifyitems(config, items):
    skip_llm = None
    if config.getoption("--skip-llm") or not os.getenv("GEMINI_API_KEY"):
        skip_llm = pytest.mark.skip(reason="--skip-llm passed or GEMINI_API_KEY not set")
    for item in items:
        if skip_llm and "llm" in item.keywords:
            item.add_marker(skip_llm)


@pytest.fixture
def mock_llm(monkeypatch):
    monkeypatch.setenv("MOCK_LLM", "true")
