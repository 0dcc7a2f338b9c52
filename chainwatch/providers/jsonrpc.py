import itertools
import logging
from typing import Any, List, Optional, Sequence

import httpx

from ..errors import ChainUnavailable, ErrorCategory

logger = logging.getLogger(__name__)


class JsonRpcMixin:
    """Shared JSON-RPC POST loop for the chain clients.

    Endpoints are tried in order; transport failures move on to the next one,
    a JSON-RPC ``error`` payload is final.
    """

    name: str
    timeout_s: int
    _transport: Optional[httpx.AsyncBaseTransport] = None

    _ids = itertools.count(1)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)

    async def _post_rpc(self, chain: str, urls: Sequence[str], method: str, params: List[Any]) -> Any:
        if not urls:
            raise ChainUnavailable(
                chain,
                method,
                "No RPC endpoint configured",
                category=ErrorCategory.CONFIGURATION,
                provider=self.name,
            )

        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        last_error: Optional[ChainUnavailable] = None

        async with self._client() as client:
            for url in urls:
                try:
                    response = await client.post(
                        url,
                        json=payload,
                        headers={"Content-Type": "application/json"},
                    )
                    response.raise_for_status()
                    data = response.json()
                except httpx.TimeoutException as exc:
                    last_error = ChainUnavailable(
                        chain, method, f"timeout: {exc}", category=ErrorCategory.TIMEOUT, provider=self.name
                    )
                except httpx.HTTPStatusError as exc:
                    last_error = ChainUnavailable(
                        chain,
                        method,
                        f"HTTP {exc.response.status_code}",
                        provider=self.name,
                        details={"status_code": exc.response.status_code},
                    )
                except (httpx.HTTPError, ValueError) as exc:
                    last_error = ChainUnavailable(chain, method, str(exc) or type(exc).__name__, provider=self.name)
                else:
                    if not isinstance(data, dict):
                        raise ChainUnavailable(
                            chain, method, "Malformed JSON-RPC response", category=ErrorCategory.PROVIDER, provider=self.name
                        )
                    if data.get("error"):
                        raise ChainUnavailable(
                            chain,
                            method,
                            f"RPC error: {data['error']}",
                            category=ErrorCategory.PROVIDER,
                            provider=self.name,
                            details={"error": data["error"]},
                        )
                    return data.get("result")

                logger.warning("%s %s via endpoint %d failed: %s", chain, method, urls.index(url), last_error.message)

        assert last_error is not None
        raise last_error
