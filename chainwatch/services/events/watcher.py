"""
Contract Event Watcher

Registers contract watches on the chain's client, turns every delivered log
into a ``ContractEvent`` with a decoded interpretation, keeps a bounded
history per contract, and forwards each event to the caller.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ...errors import ChainwatchError, ConfigurationError
from ...types.chain import ChainLog
from ..address import is_solana_chain, is_valid_address_for_chain, normalize_chain, short_address
from ..subscriptions import Callback, CompositeSubscription, Subscription
from ..units import format_units, to_float
from .abi import ContractType, KnownContract, get_abi_for_type, get_contract_info
from .decoder import decode_event
from .models import ContractConfig, ContractEvent, DecodedEventData, EventCount, EventSummary
from .store import DEFAULT_CAPACITY, EventStore

if TYPE_CHECKING:
    from ...providers.base import ChainClient
    from ..chains import ChainCatalog
    from ..prices import PriceService
    from ..token_registry import TokenRegistry

logger = logging.getLogger(__name__)

ConfigInput = Union[ContractConfig, Mapping[str, Any]]

TOP_EVENT_COUNT = 5


class ContractEventWatcher:
    def __init__(
        self,
        catalog: "ChainCatalog",
        evm_client: "ChainClient",
        solana_client: "ChainClient",
        *,
        prices: Optional["PriceService"] = None,
        tokens: Optional["TokenRegistry"] = None,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.catalog = catalog
        self.evm = evm_client
        self.solana = solana_client
        self.prices = prices
        self.tokens = tokens
        self.store = EventStore(capacity)
        self._clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    # ---------------------------
    # Contract metadata
    # ---------------------------
    @staticmethod
    def get_contract_info(address: str) -> Optional[KnownContract]:
        return get_contract_info(address)

    @staticmethod
    def get_abi_for_type(contract_type: str) -> List[str]:
        return get_abi_for_type(contract_type)

    def create_contract_config(
        self,
        address: str,
        chain: str = "ethereum",
        contract_type: Optional[ContractType] = None,
        custom_abi: Optional[Iterable[str]] = None,
    ) -> ContractConfig:
        info = get_contract_info(address)
        resolved_type = contract_type or (info.type if info else "erc20")
        return ContractConfig(
            address=address,
            chain=normalize_chain(chain),
            type=resolved_type,
            name=info.name if info else None,
            abi=list(custom_abi) if custom_abi else get_abi_for_type(resolved_type),
        )

    def resolve_config(self, config: ConfigInput) -> ContractConfig:
        """Validate a watch config and fill in its name, type and event ABI.

        The ABI comes from the explicit list, else the declared type, else the
        known-contract type. A custom contract needs an explicit ABI.
        """
        if not isinstance(config, ContractConfig):
            try:
                config = ContractConfig.model_validate(dict(config))
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid contract config: {exc.errors()[0]['msg']}") from exc

        chain = normalize_chain(config.chain)
        self.catalog.get(chain)
        if not is_valid_address_for_chain(config.address, chain):
            raise ConfigurationError(f"Invalid {chain} contract address: {config.address!r}", chain=chain)

        info = get_contract_info(config.address)
        contract_type = config.type or (info.type if info else "custom")
        abi = list(config.abi) or get_abi_for_type(contract_type)
        if not abi and not is_solana_chain(chain):
            raise ConfigurationError(
                f"No event ABI for {contract_type} contract {short_address(config.address)}",
                address=config.address,
                chain=chain,
            )

        return ContractConfig(
            address=config.address,
            chain=chain,
            type=contract_type,
            name=config.name or (info.name if info else None),
            abi=abi,
        )

    def _client_for(self, chain: str) -> "ChainClient":
        return self.evm if self.catalog.get(chain).is_evm else self.solana

    # ---------------------------
    # Watching
    # ---------------------------
    async def _value_usd(self, config: ContractConfig, decoded: DecodedEventData) -> Optional[float]:
        if decoded.type != "transfer" or decoded.amount is None or not self.prices or not self.tokens:
            return None
        token = self.tokens.get_token_by_address(config.chain, config.address)
        if token is None:
            return None
        price = await self.prices.get_price(token.symbol)
        if not price:
            return None
        return to_float(format_units(int(decoded.amount), token.decimals)) * price

    async def to_event(self, log: ChainLog, config: ContractConfig) -> ContractEvent:
        decoded = decode_event(log.event_name, log.args)
        value_usd = await self._value_usd(config, decoded)
        if value_usd is not None:
            decoded = decoded.model_copy(update={"value_usd": value_usd})

        return ContractEvent(
            contract_address=config.address,
            contract_name=config.name,
            event_name=log.event_name,
            args=dict(log.args),
            transaction_hash=log.transaction_hash,
            block_number=log.block_number,
            log_index=log.log_index,
            timestamp=log.timestamp or self._now(),
            chain=config.chain,
            decoded=decoded,
        )

    async def watch_contract_events(self, config: ConfigInput, on_event: Callback) -> Subscription:
        resolved = self.resolve_config(config)
        events: Subscription = Subscription(
            on_event, name=f"contract-events:{resolved.chain}:{short_address(resolved.address)}"
        )

        async def on_log(log: ChainLog) -> None:
            if not events.active:
                return
            event = await self.to_event(log, resolved)
            await self.store.append(event)
            events.publish(event)

        watch = await self._client_for(resolved.chain).watch_contract_events(
            resolved.address, resolved.abi, resolved.chain, on_log
        )
        events.attach(watch)
        logger.info(
            "Watching %s (%s) on %s for %d event type(s)",
            resolved.name or short_address(resolved.address),
            resolved.type,
            resolved.chain,
            len(resolved.abi),
        )
        return events

    async def watch_multiple_contracts(
        self, configs: Iterable[ConfigInput], on_event: Callback
    ) -> CompositeSubscription:
        """Every config is validated up front; a watch that fails to register is skipped."""
        resolved = [self.resolve_config(config) for config in configs]

        watches: List[Subscription] = []
        for config in resolved:
            try:
                watches.append(await self.watch_contract_events(config, on_event))
            except ChainwatchError as exc:
                logger.warning("Skipping watch for %s on %s: %s", short_address(config.address), config.chain, exc)
        return CompositeSubscription(watches, name="contract-events:multi")

    # ---------------------------
    # History
    # ---------------------------
    def get_event_summary(self, address: str, chain: str = "ethereum", period_hours: float = 24) -> EventSummary:
        chain = normalize_chain(chain)
        end = self._now()
        start = end - timedelta(hours=period_hours)
        events = self.store.in_period(address, chain, start, end)

        counts = Counter(event.event_name for event in events)
        info = get_contract_info(address)
        return EventSummary(
            contract_address=address,
            contract_name=info.name if info else None,
            chain=chain,
            event_counts=dict(counts),
            period_start=start,
            period_end=end,
            total_events=len(events),
            top_events=[EventCount(event_name=name, count=count) for name, count in counts.most_common(TOP_EVENT_COUNT)],
        )

    def get_stored_events(self, address: str, chain: str = "ethereum", limit: int = 100) -> List[ContractEvent]:
        return self.store.recent(address, normalize_chain(chain), limit)

    def clear_stored_events(self, address: Optional[str] = None, chain: Optional[str] = None) -> None:
        self.store.clear(address, normalize_chain(chain) if chain else None)


__all__ = ["ContractEventWatcher", "ConfigInput", "TOP_EVENT_COUNT"]
