import sys
from pathlib import Path

# Explicitly add the project root to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from unittest.mock import AsyncMock
import httpx
from openai import RateLimitError, APIError

from ai_analyst.analysis import AnalysisContext
from ai_analyst.config import reset_config
from ai_analyst.conversation import ConversationOrchestrator
from ai_analyst.quota import QuotaGate, QuotaResult
from ai_analyst.raw_data import RawDataClient

API_BASE_URL = "http://usage.test/api"

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("OPENAI_API_KEY", "test_key")
    monkeypatch.setenv("API_BASE_URL", API_BASE_URL)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def bar_reply():
    """Model reply with prose and one fenced bar chart."""
    return (
        "North is ahead of South this quarter.\n\n"
        "```json\n"
        "{\n"
        '  "type": "bar",\n'
        '  "title": "Sales by Region",\n'
        '  "data": [{"region": "North", "sales": 100}, {"region": "South", "sales": 80}]\n'
        "}\n"
        "```\n\n\n\n"
        "Consider focusing on the South."
    )


@pytest.fixture
def analysis_payload():
    """Analysis service payload with insights."""
    return {
        "insights": {
            "category": "retail",
            "kpis": {"total_revenue": 180000, "avg_order_value": 52.5},
            "hypothesis": ["Revenue is concentrated in the North region"],
            "highPerformers": {"top_regions": {"region": ["North", "West"]}},
            "totals": {"by_category": {"Electronics": [120000], "Clothing": [60000]}}
        }
    }


@pytest.fixture
def analysis_context(analysis_payload):
    summary = {
        "sales": {"type": "numeric", "count": 2, "min": 80, "max": 100, "mean": 90, "median": 90, "stddev": 10},
        "region": {"type": "categorical", "unique_count": 2,
                   "top_values": [{"value": "North", "count": 1}, {"value": "South", "count": 1}]}
    }
    return AnalysisContext.from_payload(analysis_payload, summary, "sales.csv")


@pytest.fixture
def raw_records():
    return [
        {"date": "2024-01-02", "region": "North", "units": 2, "revenue": 1398.0},
        {"date": "2024-01-03", "region": "West", "units": 5, "revenue": 125.0}
    ]


@pytest.fixture
def mock_quota_gate():
    """Quota gate that always allows the turn."""
    mock = AsyncMock(spec=QuotaGate)
    mock.attempt_consume = AsyncMock(return_value=QuotaResult(success=True, usage={"aiPromts": 1}))
    return mock


@pytest.fixture
def mock_model_client(bar_reply):
    mock = AsyncMock()
    mock.generate = AsyncMock(return_value=bar_reply)
    return mock


@pytest.fixture
def mock_raw_data_client(raw_records):
    mock = AsyncMock(spec=RawDataClient)
    mock.fetch = AsyncMock(return_value=raw_records)
    return mock


@pytest.fixture
def orchestrator(mock_quota_gate, mock_model_client, mock_raw_data_client, analysis_context):
    return ConversationOrchestrator(
        quota_gate=mock_quota_gate,
        model_client=mock_model_client,
        raw_data_client=mock_raw_data_client,
        analysis=analysis_context,
        file_name="sales.csv",
        user_id="user-1",
        file_id="file-1"
    )


@pytest.fixture
def mock_rate_limit_error():
    """Mock RateLimitError with proper error format."""
    response = httpx.Response(429, request=OPENAI_REQUEST, json={
        "error": {
            "message": "Rate limit exceeded. Please try again in 20s.",
            "type": "rate_limit_error",
            "code": "rate_limit_exceeded"
        }
    })
    return RateLimitError("Rate limit exceeded", response=response, body=None)


@pytest.fixture
def mock_api_error():
    """Mock APIError with proper error format."""
    return APIError("API error occurred", OPENAI_REQUEST, body=None)
