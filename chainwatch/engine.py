"""
Monitoring Engine

Wires the chain clients, caches and services together and exposes the
operations a hosting runtime calls. Every operation returns a ``ToolEnvelope``;
failures become envelope warnings instead of exceptions.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Sequence, Set, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from .config import Settings, settings as default_settings
from .errors import ChainwatchError, ConfigurationError
from .logging_config import setup_logging
from .providers.coingecko import CoingeckoProvider
from .providers.evm import EVMClient
from .providers.solana import SolanaClient
from .services.airdrops import AirdropService
from .services.alerts import Alert, AlertChannelConfig, AlertDispatcher
from .services.chains import ChainCatalog, build_chain_catalog
from .services.events import ContractEventWatcher
from .services.events.watcher import ConfigInput
from .services.gas import DEFAULT_GAS_CHAINS, DEFAULT_INTERVAL_SECONDS, GasService
from .services.known_wallets import KnownWalletRegistry
from .services.portfolio import PortfolioService, WalletInput
from .services.prices import PriceService
from .services.subscriptions import Callback, Subscription
from .services.token_registry import TokenRegistry
from .services.whales import WhaleService
from .types import PortfolioSummary, Source, ToolEnvelope

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], value: Union[M, Mapping[str, Any]], label: str) -> M:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(dict(value))
    except (TypeError, ValueError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid {label}: {exc}") from exc


class MonitoringEngine:
    def __init__(
        self,
        *,
        catalog: ChainCatalog,
        evm: EVMClient,
        solana: SolanaClient,
        price_provider: CoingeckoProvider,
        prices: PriceService,
        tokens: TokenRegistry,
        wallets: KnownWalletRegistry,
        portfolio: PortfolioService,
        whales: WhaleService,
        airdrops: AirdropService,
        events: ContractEventWatcher,
        gas: GasService,
        alerts: AlertDispatcher,
        gas_interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.catalog = catalog
        self.evm = evm
        self.solana = solana
        self.price_provider = price_provider
        self.prices = prices
        self.tokens = tokens
        self.wallets = wallets
        self.portfolio = portfolio
        self.whales = whales
        self.airdrops = airdrops
        self.events = events
        self.gas = gas
        self.alerts = alerts
        self.gas_interval_seconds = gas_interval_seconds
        self._subscriptions: Set[Subscription] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configure_logging: bool = False,
    ) -> "MonitoringEngine":
        """Build an independent engine; nothing is shared between instances.

        ``configure_logging`` installs the structlog handler at ``settings.log_level``;
        leave it off when the host application owns logging.
        """
        settings = settings or default_settings
        if configure_logging:
            setup_logging(settings.log_level)
        catalog = build_chain_catalog(settings)
        tokens = TokenRegistry()
        wallets = KnownWalletRegistry()

        evm = EVMClient(
            catalog,
            timeout_s=settings.request_timeout_seconds,
            poll_interval_s=settings.event_poll_interval_seconds,
            block_window=settings.recent_tx_block_window,
            transport=transport,
        )
        solana = SolanaClient(
            catalog.get("solana").rpc_urls,
            token_registry=tokens,
            timeout_s=settings.request_timeout_seconds,
            poll_interval_s=settings.event_poll_interval_seconds,
            transport=transport,
        )
        price_provider = CoingeckoProvider(
            settings.coingecko_api_key, settings.coingecko_base_url, transport=transport
        )
        prices = PriceService(price_provider, ttl_seconds=settings.price_cache_ttl_seconds)

        return cls(
            catalog=catalog,
            evm=evm,
            solana=solana,
            price_provider=price_provider,
            prices=prices,
            tokens=tokens,
            wallets=wallets,
            portfolio=PortfolioService(catalog, evm, solana, prices, tokens),
            whales=WhaleService(catalog, evm, solana, prices, tokens, wallets),
            airdrops=AirdropService(
                evm,
                solana,
                ttl_seconds=settings.eligibility_cache_ttl_seconds,
                max_cached=settings.eligibility_cache_max_size,
            ),
            events=ContractEventWatcher(
                catalog, evm, solana, prices=prices, tokens=tokens, capacity=settings.event_buffer_capacity
            ),
            gas=GasService(catalog, evm, prices),
            alerts=AlertDispatcher(
                telegram_api_base_url=settings.telegram_api_base_url,
                timeout_s=settings.request_timeout_seconds,
                transport=transport,
            ),
            gas_interval_seconds=settings.gas_poll_interval_seconds,
        )

    # ---------------------------
    # Envelope plumbing
    # ---------------------------
    def _source(self, name: str) -> Source:
        if name == self.price_provider.name:
            return Source(name=name, url=self.price_provider.base_url)
        return Source(name=name)

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[Any]],
        sources: Sequence[str],
        warnings_for: Optional[Callable[[Any], List[str]]] = None,
    ) -> ToolEnvelope:
        fetched_at = datetime.now(timezone.utc)
        started = time.perf_counter()
        warnings: List[str] = []

        try:
            data = await call()
            if warnings_for is not None:
                warnings.extend(warnings_for(data))
        except ConfigurationError as exc:
            logger.info("%s rejected: %s", operation, exc.message)
            data = None
            warnings.append(f"Invalid request: {exc.message}")
        except ChainwatchError as exc:
            logger.warning("%s failed: %s", operation, exc.message)
            data = None
            warnings.append(f"Failed to {operation}: {exc.message}")
        except Exception as exc:
            logger.exception("%s failed unexpectedly", operation)
            data = None
            warnings.append(f"Failed to {operation}: {exc}")

        if isinstance(data, Subscription):
            self._track(data)

        return ToolEnvelope(
            data=data,
            sources=[self._source(name) for name in sources],
            fetched_at=fetched_at,
            latency_ms=int((time.perf_counter() - started) * 1000),
            warnings=warnings,
        )

    def _track(self, subscription: Subscription) -> None:
        self._subscriptions.add(subscription)

    @property
    def subscriptions(self) -> List[Subscription]:
        self._subscriptions = {s for s in self._subscriptions if not s.cancelled}
        return list(self._subscriptions)

    async def aclose(self) -> None:
        """Cancel every live watch and monitor started through this engine."""
        live, self._subscriptions = list(self._subscriptions), set()
        for subscription in live:
            await subscription.aclose()
        if live:
            logger.info("Closed %d subscription(s)", len(live))

    # ---------------------------
    # Operations
    # ---------------------------
    async def get_portfolio_summary(self, wallets: Iterable[WalletInput]) -> ToolEnvelope:
        def failures(summary: PortfolioSummary) -> List[str]:
            return [f"{item.chain}:{item.address}: {item.error}" for item in summary.failed]

        return await self._run(
            "get portfolio summary",
            lambda: self.portfolio.get_portfolio_summary(wallets),
            (self.evm.name, self.solana.name, self.price_provider.name),
            failures,
        )

    async def monitor_whale_transactions(
        self,
        tokens: Iterable[str],
        min_value_usd: float,
        chain: str,
        on_alert: Callback,
    ) -> ToolEnvelope:
        return await self._run(
            "monitor whale transactions",
            lambda: self.whales.monitor_whale_transactions(tokens, min_value_usd, chain, on_alert),
            (self.evm.name, self.price_provider.name),
        )

    async def get_recent_whale_activity(
        self, min_value_usd: float, chain: str = "ethereum", limit: int = 20
    ) -> ToolEnvelope:
        return await self._run(
            "get recent whale activity",
            lambda: self.whales.get_recent_whale_activity(min_value_usd, chain, limit),
            (self.evm.name, self.solana.name, self.price_provider.name),
        )

    async def check_airdrop_eligibility(
        self,
        wallet: str,
        protocols: Optional[Sequence[str]] = None,
        chain: Optional[str] = None,
    ) -> ToolEnvelope:
        return await self._run(
            "check airdrop eligibility",
            lambda: self.airdrops.check_airdrop_eligibility(wallet, protocols, chain),
            (self.evm.name, self.solana.name),
        )

    async def watch_contract_events(self, config: ConfigInput, on_event: Callback) -> ToolEnvelope:
        return await self._run(
            "watch contract events",
            lambda: self.events.watch_contract_events(config, on_event),
            (self.evm.name,),
        )

    async def get_event_summary(self, address: str, chain: str = "ethereum", period_hours: float = 24) -> ToolEnvelope:
        async def summarize() -> Any:
            return self.events.get_event_summary(address, chain, period_hours)

        return await self._run("get event summary", summarize, ())

    async def monitor_gas_prices(
        self,
        low_threshold: float,
        high_threshold: float,
        chains: Iterable[str] = ("ethereum",),
        on_alert: Optional[Callback] = None,
        interval_seconds: Optional[float] = None,
    ) -> ToolEnvelope:
        return await self._run(
            "monitor gas prices",
            lambda: self.gas.monitor_gas_prices(
                low_threshold,
                high_threshold,
                chains,
                on_alert,
                interval_seconds or self.gas_interval_seconds,
            ),
            (self.evm.name, self.price_provider.name),
        )

    async def get_current_gas_prices(self, chains: Iterable[str] = DEFAULT_GAS_CHAINS) -> ToolEnvelope:
        return await self._run(
            "get gas prices",
            lambda: self.gas.get_current_gas_prices(chains),
            (self.evm.name, self.price_provider.name),
        )

    async def send_alert(
        self,
        alert: Union[Alert, Mapping[str, Any]],
        channel_config: Union[AlertChannelConfig, Mapping[str, Any]],
    ) -> ToolEnvelope:
        async def deliver() -> Any:
            return await self.alerts.send_alert(
                _coerce(Alert, alert, "alert"), _coerce(AlertChannelConfig, channel_config, "channel config")
            )

        def delivery_warnings(result: Any) -> List[str]:
            return [] if result.success else [f"Delivery failed: {result.error}"]

        return await self._run("send alert", deliver, (), delivery_warnings)


__all__ = ["MonitoringEngine"]
