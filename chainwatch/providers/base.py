from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List

from ..services.subscriptions import Subscription
from ..types.chain import ChainLog, TokenBalance, TransactionRecord


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class ChainClient(Provider):
    """Uniform balance, transaction and event access for one chain family.

    Failed RPC calls raise ``ChainUnavailable``; implementations never turn a
    failure into a zero balance.
    """

    @abstractmethod
    async def get_native_balance(self, address: str, chain: str) -> str:
        """Native balance formatted in whole units"""
        pass

    @abstractmethod
    async def get_token_balance(self, wallet: str, token_address: str, chain: str) -> TokenBalance:
        """Balance of a single fungible token"""
        pass

    @abstractmethod
    async def get_recent_transactions(self, address: str, chain: str, limit: int = 10) -> List[TransactionRecord]:
        """Recent transactions touching ``address``, newest first"""
        pass

    @abstractmethod
    async def watch_contract_events(
        self,
        address: str,
        event_signatures: Iterable[str],
        chain: str,
        on_event: Callable[[ChainLog], Any],
    ) -> Subscription:
        """Deliver contract events to ``on_event`` until the handle is cancelled"""
        pass


class PriceProvider(Provider):
    """Provider for token price data"""

    @abstractmethod
    async def get_simple_prices(self, ids: List[str], vs_currency: str = "usd") -> Dict[str, Dict[str, float]]:
        """Current prices keyed by provider asset id"""
        pass
