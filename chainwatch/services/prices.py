"""
Price Cache Service

USD prices keyed by upper-case symbol, cached for a fixed TTL. Every symbol
that needs a refresh is fetched in one upstream call and the whole batch
shares a single ``fetched_at``.

Availability wins over freshness: provider failures are logged, stale
quotes keep being served, and symbols that were never priced read as 0.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from ..providers.base import PriceProvider

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60
EPOCH = 0.0

COINGECKO_IDS: Dict[str, str] = {
    # Native tokens
    "ETH": "ethereum",
    "MATIC": "matic-network",
    "ARB": "arbitrum",
    "OP": "optimism",
    "SOL": "solana",
    # Stablecoins
    "USDC": "usd-coin",
    "USDT": "tether",
    "DAI": "dai",
    # Popular tokens
    "WETH": "weth",
    "WBTC": "wrapped-bitcoin",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "AAVE": "aave",
    "CRV": "curve-dao-token",
    "LDO": "lido-dao",
    "RPL": "rocket-pool",
    "CBETH": "coinbase-wrapped-staked-eth",
    "RETH": "rocket-pool-eth",
    "STETH": "staked-ether",
    # Wrapped natives and Solana tokens
    "WMATIC": "wmatic",
    "WSOL": "wrapped-solana",
    "JUP": "jupiter-exchange-solana",
    "MSOL": "msol",
    "BONK": "bonk",
}

CHAIN_NATIVE_TOKENS: Dict[str, str] = {
    "ethereum": "ETH",
    "polygon": "MATIC",
    "arbitrum": "ETH",
    "optimism": "ETH",
    "base": "ETH",
    "solana": "SOL",
}


@dataclass(frozen=True)
class PriceQuote:
    symbol: str
    coingecko_id: str
    price_usd: float
    change_24h: float
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_stale(self, now: float, ttl: float = DEFAULT_TTL_SECONDS) -> bool:
        return self.age(now) >= ttl


class PriceService:
    """TTL-cached USD price lookups with batched, de-duplicated refreshes."""

    def __init__(
        self,
        provider: PriceProvider,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        coingecko_ids: Optional[Dict[str, str]] = None,
    ) -> None:
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._ids = {k.upper(): v for k, v in (coingecko_ids or COINGECKO_IDS).items()}
        self._quotes: Dict[str, PriceQuote] = {}
        self.last_fetch: float = EPOCH
        self._lock = asyncio.Lock()

    def get_coingecko_id(self, symbol: str) -> Optional[str]:
        return self._ids.get((symbol or "").upper())

    def get_native_token(self, chain: str) -> Optional[str]:
        return CHAIN_NATIVE_TOKENS.get(chain)

    def _fresh_quote(self, symbol: str, now: float) -> Optional[PriceQuote]:
        quote = self._quotes.get(symbol)
        if quote is None or quote.is_stale(now, self.ttl_seconds):
            return None
        return quote

    def _needs_refresh(self, symbols: Iterable[str]) -> List[str]:
        now = self._clock()
        return [s for s in symbols if s in self._ids and self._fresh_quote(s, now) is None]

    async def _refresh(self, symbols: List[str]) -> None:
        if not self._needs_refresh(symbols):
            return

        async with self._lock:
            # Double-check after acquiring lock
            needed = self._needs_refresh(symbols)
            if not needed:
                return

            ids = sorted({self._ids[s] for s in needed})
            try:
                data = await self.provider.get_simple_prices(ids)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Price refresh failed for %s: %s", ",".join(needed), exc)
                return

            fetched_at = self._clock()
            self.last_fetch = fetched_at
            for symbol in needed:
                coin_id = self._ids[symbol]
                entry = data.get(coin_id)
                if not entry:
                    continue
                self._quotes[symbol] = PriceQuote(
                    symbol=symbol,
                    coingecko_id=coin_id,
                    price_usd=float(entry.get("usd") or 0.0),
                    change_24h=float(entry.get("usd_24h_change") or 0.0),
                    fetched_at=fetched_at,
                )

    async def get_prices(self, symbols: Iterable[str]) -> Dict[str, float]:
        normalized = list(dict.fromkeys((s or "").upper() for s in symbols if s))
        unresolved = [s for s in normalized if s not in self._ids]
        if unresolved:
            logger.debug("No price id for %s, using 0", ",".join(unresolved))

        await self._refresh(normalized)

        prices: Dict[str, float] = {}
        for symbol in normalized:
            quote = self._quotes.get(symbol)
            prices[symbol] = quote.price_usd if quote else 0.0
        return prices

    async def get_price(self, symbol: str) -> float:
        normalized = (symbol or "").upper()
        return (await self.get_prices([normalized])).get(normalized, 0.0)

    async def get_quote(self, symbol: str) -> Optional[PriceQuote]:
        """Latest quote, possibly stale; check ``is_stale`` against ``ttl_seconds``."""
        normalized = (symbol or "").upper()
        await self._refresh([normalized])
        return self._quotes.get(normalized)

    async def get_native_token_price(self, chain: str) -> float:
        native = self.get_native_token(chain)
        if not native:
            return 0.0
        return await self.get_price(native)

    def clear_cache(self) -> None:
        self._quotes.clear()
        self.last_fetch = EPOCH


__all__ = [
    "PriceService",
    "PriceQuote",
    "COINGECKO_IDS",
    "CHAIN_NATIVE_TOKENS",
    "DEFAULT_TTL_SECONDS",
]
