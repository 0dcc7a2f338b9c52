import asyncio
import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from chainwatch.config import get_settings
from chainwatch.services.chains import build_chain_catalog


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RpcRecorder:
    """JSON-RPC fake: ``handlers`` maps method name to a result or ``fn(params)``."""

    def __init__(self, handlers: Dict[str, Any]):
        self.handlers = handlers
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.calls.append({"url": str(request.url), **payload})
        handler = self.handlers.get(payload["method"])
        if handler is None:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "error": {"code": -32601}})
        result = handler(payload["params"]) if callable(handler) else handler
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    def methods(self) -> List[str]:
        return [call["method"] for call in self.calls]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return get_settings(
        {
            "alchemy_api_key": "test-key",
            "solana_rpc_url": "https://solana.test/rpc",
            "coingecko_base_url": "https://prices.test/api/v3",
        }
    )


@pytest.fixture
def catalog(test_settings):
    return build_chain_catalog(test_settings)


@pytest.fixture
def rpc() -> Callable[[Dict[str, Any]], RpcRecorder]:
    return RpcRecorder


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the loop until ``predicate`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)
