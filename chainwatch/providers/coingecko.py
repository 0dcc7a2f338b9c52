import httpx
from typing import Any, Dict, List, Optional
from .base import PriceProvider


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for token prices"""

    name = "coingecko"
    timeout_s = 15

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.coingecko.com/api/v3",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"accept": "application/json"}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def ready(self) -> bool:
        return True  # API key is optional for basic tier

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/ping",
                    headers=self._build_headers(),
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except httpx.HTTPError as e:
            return {"status": "error", "reason": str(e)}

    async def get_simple_prices(self, ids: List[str], vs_currency: str = "usd") -> Dict[str, Dict[str, float]]:
        """Get current prices and 24h change for Coingecko asset ids"""
        if not ids:
            return {}

        params = {
            "ids": ",".join(ids),
            "vs_currencies": vs_currency,
            "include_24hr_change": "true",
        }

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(
                f"{self.base_url}/simple/price",
                headers=self._build_headers(),
                params=params,
                timeout=self.timeout_s
            )
            response.raise_for_status()
            data = response.json()

        prices: Dict[str, Dict[str, float]] = {}
        change_key = f"{vs_currency}_24h_change"
        for coin_id, price_data in (data or {}).items():
            if not isinstance(price_data, dict) or vs_currency not in price_data:
                continue
            prices[coin_id] = {
                vs_currency: float(price_data[vs_currency] or 0),
                change_key: float(price_data.get(change_key) or 0),
            }

        return prices
