"""
Gas Price Monitor

Per-chain fee snapshots with USD cost of a plain transfer, plus an interval
monitor that emits a ``low`` or ``high`` alert when gwei crosses a threshold.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from ..errors import ConfigurationError, UnsupportedChain
from ..providers.evm import EVMClient
from ..types.chain import GasQuote
from .address import normalize_chain
from .chains import ChainCatalog
from .prices import PriceService
from .subscriptions import Callback, Subscription, poll_forever

logger = logging.getLogger(__name__)

DEFAULT_GAS_CHAINS = ("ethereum", "polygon", "arbitrum", "optimism", "base")
DEFAULT_INTERVAL_SECONDS = 30.0

# Gas above this multiple of the target makes a cheap window unlikely
EXPENSIVE_MULTIPLIER = 2
OFF_PEAK_HINT = "Weekends, early morning UTC"

GasAlertType = Literal["low", "high"]
Likelihood = Literal["high", "medium", "low"]


class GasAlert(BaseModel):
    chain: str
    current_gwei: float
    threshold: float
    type: GasAlertType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OptimalTimeEstimate(BaseModel):
    chain: str
    likelihood: Likelihood
    suggested_time: Optional[str] = None
    current_gwei: float


def gas_alert_for(quote: GasQuote, low_threshold: float, high_threshold: float) -> Optional[GasAlert]:
    """Low wins when both thresholds match."""
    if quote.total_gwei <= low_threshold:
        return GasAlert(chain=quote.chain, current_gwei=quote.total_gwei, threshold=low_threshold, type="low")
    if quote.total_gwei >= high_threshold:
        return GasAlert(chain=quote.chain, current_gwei=quote.total_gwei, threshold=high_threshold, type="high")
    return None


class GasService:
    def __init__(self, catalog: ChainCatalog, evm_client: EVMClient, prices: PriceService) -> None:
        self.catalog = catalog
        self.evm = evm_client
        self.prices = prices

    def _evm_chains(self, chains: Iterable[str]) -> List[str]:
        resolved = []
        for chain in chains:
            chain = normalize_chain(chain)
            if not self.catalog.get(chain).is_evm:
                raise UnsupportedChain(chain)
            resolved.append(chain)
        return resolved

    async def _quotes(self, chains: Sequence[str]) -> List[object]:
        natives = {chain: self.catalog.get(chain).native_symbol for chain in chains}
        prices = await self.prices.get_prices(set(natives.values()))
        return await asyncio.gather(
            *(self.evm.get_gas_price(chain, prices.get(natives[chain], 0.0)) for chain in chains),
            return_exceptions=True,
        )

    async def get_current_gas_prices(self, chains: Iterable[str] = DEFAULT_GAS_CHAINS) -> List[GasQuote]:
        """Quotes for every chain that answered, in request order."""
        resolved = self._evm_chains(chains)
        quotes: List[GasQuote] = []
        for chain, result in zip(resolved, await self._quotes(resolved)):
            if isinstance(result, Exception):
                logger.warning("Gas price unavailable for %s: %s", chain, result)
                continue
            if isinstance(result, BaseException):
                raise result
            quotes.append(result)
        return quotes

    async def check_gas(
        self, low_threshold: float, high_threshold: float, chains: Sequence[str]
    ) -> List[GasAlert]:
        alerts = []
        for quote in await self.get_current_gas_prices(chains):
            alert = gas_alert_for(quote, low_threshold, high_threshold)
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def monitor_gas_prices(
        self,
        low_threshold: float,
        high_threshold: float,
        chains: Iterable[str] = ("ethereum",),
        on_alert: Optional[Callback] = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> Subscription:
        """Run one check immediately, then repeat every ``interval_seconds``."""
        if on_alert is None:
            raise ConfigurationError("on_alert callback is required")
        resolved = self._evm_chains(chains)
        subscription: Subscription = Subscription(on_alert, name=f"gas:{','.join(resolved)}")

        async def tick() -> None:
            for alert in await self.check_gas(low_threshold, high_threshold, resolved):
                if not subscription.publish(alert):
                    return

        await tick()
        subscription.spawn(poll_forever(tick, interval_seconds, label=subscription.name), name=subscription.name)
        logger.info(
            "Monitoring gas on %s (low <= %s gwei, high >= %s gwei, every %ss)",
            ", ".join(resolved),
            low_threshold,
            high_threshold,
            interval_seconds,
        )
        return subscription

    async def get_optimal_transaction_time(self, chain: str = "ethereum", target_gwei: float = 0.0) -> OptimalTimeEstimate:
        chain = self._evm_chains([chain])[0]
        quote = await self.evm.get_gas_price(chain)

        if quote.total_gwei <= target_gwei:
            return OptimalTimeEstimate(chain=chain, likelihood="high", suggested_time="Now", current_gwei=quote.total_gwei)

        likelihood: Likelihood = "low" if quote.total_gwei > target_gwei * EXPENSIVE_MULTIPLIER else "medium"
        return OptimalTimeEstimate(
            chain=chain, likelihood=likelihood, suggested_time=OFF_PEAK_HINT, current_gwei=quote.total_gwei
        )


__all__ = [
    "GasAlert",
    "GasService",
    "OptimalTimeEstimate",
    "gas_alert_for",
    "DEFAULT_GAS_CHAINS",
    "DEFAULT_INTERVAL_SECONDS",
]
