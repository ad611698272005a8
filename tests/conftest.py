"""Pytest configuration and shared fixtures."""

import base64
import json
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from gemex.config import Config
from gemex.exchange.client import GeminiClient


class RecordingHandler:
    """httpx.MockTransport handler returning a canned response and recording requests."""

    def __init__(self, status_code: int = 200, body: Any = None, content: bytes | None = None):
        self.status_code = status_code
        self.body = body
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def payloads(self) -> list[dict[str, Any]]:
        """Decoded X-GEMINI-PAYLOAD of every recorded request."""
        return [
            json.loads(base64.b64decode(r.headers["X-GEMINI-PAYLOAD"]))
            for r in self.requests
        ]


@pytest_asyncio.fixture
async def attach_handler():
    """Route a client's HTTP traffic through a RecordingHandler."""
    opened: list[httpx.AsyncClient] = []

    def _attach(
        client: GeminiClient,
        status_code: int = 200,
        body: Any = None,
        content: bytes | None = None,
    ) -> RecordingHandler:
        handler = RecordingHandler(status_code, body, content)
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        opened.append(http)
        client._get_client = AsyncMock(return_value=http)  # type: ignore[method-assign]
        return handler

    yield _attach
    for http in opened:
        await http.aclose()


@pytest.fixture
def config() -> Config:
    """Config with sandbox credentials."""
    return Config(
        gemini_api_key="test-key",
        gemini_api_secret="test-secret",
        gemini_base_url="https://api.sandbox.gemini.com",
        gemini_timeout=5.0,
        default_pair="btcusd",
    )


@pytest.fixture
def client() -> GeminiClient:
    """GeminiClient instance for tests."""
    return GeminiClient(
        base_url="https://api.sandbox.gemini.com/",
        api_key="test-key",
        api_secret="test-secret",
    )


@pytest.fixture
def sample_ticker() -> dict:
    """Pubticker response."""
    return {
        "bid": "977.59",
        "ask": "977.35",
        "last": "977.65",
        "volume": {"BTC": "2210.505328803", "USD": "2135477.463379586263", "timestamp": 1483018200000},
    }


@pytest.fixture
def sample_orderbook() -> dict:
    """Book response with two levels per side."""
    return {
        "bids": [
            {"price": "3607.85", "amount": "6.643373", "timestamp": "1547147541"},
            {"price": "3607.1", "amount": "0.5", "timestamp": "1547147541"},
        ],
        "asks": [
            {"price": "3607.86", "amount": "14.68205084", "timestamp": "1547147541"},
            {"price": "3608.2", "amount": "1.25", "timestamp": "1547147541"},
        ],
    }


@pytest.fixture
def sample_order() -> dict:
    """Order as returned by order placement."""
    return {
        "order_id": "106817811",
        "id": "106817811",
        "symbol": "btcusd",
        "exchange": "gemini",
        "avg_execution_price": "3632.8508430064554",
        "side": "buy",
        "type": "exchange limit",
        "timestamp": "1547220404",
        "timestampms": 1547220404836,
        "is_live": True,
        "is_cancelled": False,
        "is_hidden": False,
        "was_forced": False,
        "executed_amount": "3.7567928949",
        "remaining_amount": "1.2432071051",
        "client_order_id": "20190110-4738721",
        "options": [],
        "price": "3633.0",
        "original_amount": "5",
    }


@pytest.fixture
def sample_funds() -> list[dict]:
    """Balances response."""
    return [
        {
            "type": "exchange",
            "currency": "BTC",
            "amount": "1154.62034001",
            "available": "1129.10517279",
            "availableForWithdrawal": "1129.10517279",
        },
        {
            "type": "exchange",
            "currency": "USD",
            "amount": "18722.79",
            "available": "14481.62",
            "availableForWithdrawal": "14481.62",
        },
    ]


@pytest.fixture
def mock_gemini_client() -> AsyncMock:
    """Mock GeminiClient for CLI tests."""
    client = AsyncMock(spec=GeminiClient)
    client.close = AsyncMock(return_value=None)
    return client
