"""
Whale Transaction Classifier

Live mode watches ERC-20 ``Transfer`` events (or known Solana wallets) and
emits a ``WhaleAlert`` for every transfer whose USD value meets the caller's
threshold. Historical mode samples recent transactions of known wallets.

Transaction ``type`` is a best-effort heuristic over the known-wallet labels,
not ground truth: a protocol counterparty whose label carries a bridge marker
is a bridge, one carrying a DEX marker is a swap, and everything else is a
plain transfer.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel

from ..errors import ChainwatchError, ConfigurationError, UnsupportedChain
from ..providers.evm import EVMClient
from ..providers.solana import LAMPORTS_PER_SOL, SolanaClient, lamport_change
from ..types.chain import ChainLog, TransactionRecord, TransactionType
from .address import is_solana_chain, normalize_chain, short_address
from .chains import ChainCatalog
from .known_wallets import KnownWallet, KnownWalletRegistry
from .prices import PriceService
from .subscriptions import Callback, Subscription
from .token_registry import TokenRegistry
from .units import format_units, to_float

logger = logging.getLogger(__name__)

# Significance tiers (USD, inclusive lower bounds)
HIGH_SIGNIFICANCE_USD = 10_000_000
MEDIUM_SIGNIFICANCE_USD = 1_000_000

BRIDGE_MARKERS = ("Bridge", "Wormhole")
DEX_MARKERS = ("Uniswap", "Raydium", "Jupiter", "Orca", "Serum")

TRANSFER_EVENT = "event Transfer(address indexed from, address indexed to, uint256 value)"
DEFAULT_TOKEN_DECIMALS = 18

HISTORICAL_WALLET_COUNT = 10
HISTORICAL_TX_PER_WALLET = 5

Significance = Literal["high", "medium", "low"]


class WhaleAlert(BaseModel):
    transaction: TransactionRecord
    wallet_label: Optional[str] = None
    significance: Significance


def classify_significance(value_usd: float) -> Significance:
    if value_usd >= HIGH_SIGNIFICANCE_USD:
        return "high"
    if value_usd >= MEDIUM_SIGNIFICANCE_USD:
        return "medium"
    return "low"


def classify_transaction_type(
    from_address: Optional[str],
    to_address: Optional[str],
    chain: str,
    registry: KnownWalletRegistry,
) -> TransactionType:
    """Label-marker heuristic; see module docstring."""
    counterparties = (registry.lookup(from_address, chain), registry.lookup(to_address, chain))
    labels = [w.label for w in counterparties if w is not None and w.category == "protocol"]

    if any(marker in label for label in labels for marker in BRIDGE_MARKERS):
        return "bridge"
    if any(marker in label for label in labels for marker in DEX_MARKERS):
        return "swap"
    return "transfer"


class WhaleService:
    def __init__(
        self,
        catalog: ChainCatalog,
        evm_client: EVMClient,
        solana_client: SolanaClient,
        prices: PriceService,
        tokens: TokenRegistry,
        wallets: KnownWalletRegistry,
    ) -> None:
        self.catalog = catalog
        self.evm = evm_client
        self.solana = solana_client
        self.prices = prices
        self.tokens = tokens
        self.wallets = wallets

    def build_alert(self, record: TransactionRecord) -> WhaleAlert:
        label = self.wallets.label_for(record.from_address, record.chain) or self.wallets.label_for(
            record.to_address, record.chain
        )
        return WhaleAlert(
            transaction=record,
            wallet_label=label,
            significance=classify_significance(record.value_usd),
        )

    def _token_symbol(self, token_address: str, chain: str) -> str:
        info = self.tokens.get_token_by_address(chain, token_address)
        if info:
            return info.symbol
        return self.prices.get_native_token(chain) or self.catalog.get(chain).native_symbol

    async def evaluate_transfer(
        self,
        log: ChainLog,
        *,
        decimals: int,
        symbol: str,
        min_value_usd: float,
    ) -> Optional[WhaleAlert]:
        value = log.args.get("value")
        sender = log.args.get("from")
        receiver = log.args.get("to")
        if value is None or not sender:
            return None

        formatted = format_units(int(value), decimals)
        value_usd = to_float(formatted) * await self.prices.get_price(symbol)
        if value_usd < min_value_usd:
            return None

        record = TransactionRecord(
            hash=log.transaction_hash,
            from_address=sender,
            to_address=receiver,
            value=formatted,
            value_usd=value_usd,
            chain=log.chain,
            timestamp=log.timestamp or datetime.now(timezone.utc),
            type=classify_transaction_type(sender, receiver, log.chain, self.wallets),
            token_symbol=symbol,
            block_number=log.block_number,
        )
        return self.build_alert(record)

    # ---------------------------
    # Live watches
    # ---------------------------
    async def monitor_whale_transactions(
        self,
        tokens: Iterable[str],
        min_value_usd: float,
        chain: str,
        on_alert: Callback,
    ) -> Subscription:
        chain = normalize_chain(chain)
        if is_solana_chain(chain):
            return await self.monitor_solana_whale_transactions(min_value_usd, on_alert)
        if not self.catalog.get(chain).is_evm:
            raise UnsupportedChain(chain)
        token_addresses = [t for t in tokens if t]
        if not token_addresses:
            raise ConfigurationError("At least one token address is required", chain=chain)

        alerts: Subscription = Subscription(on_alert, name=f"whales:{chain}")

        try:
            for token_address in token_addresses:
                info = self.tokens.get_token_by_address(chain, token_address)
                decimals = info.decimals if info else DEFAULT_TOKEN_DECIMALS
                symbol = self._token_symbol(token_address, chain)

                async def on_transfer(log: ChainLog, decimals: int = decimals, symbol: str = symbol) -> None:
                    alert = await self.evaluate_transfer(
                        log, decimals=decimals, symbol=symbol, min_value_usd=min_value_usd
                    )
                    if alert is not None:
                        alerts.publish(alert)

                watch = await self.evm.watch_contract_events(token_address, [TRANSFER_EVENT], chain, on_transfer)
                alerts.attach(watch)
        except ChainwatchError:
            alerts.cancel()
            raise

        logger.info("Watching %d token(s) on %s for transfers >= $%s", len(token_addresses), chain, min_value_usd)
        return alerts

    async def monitor_solana_whale_transactions(self, min_value_usd: float, on_alert: Callback) -> Subscription:
        """Poll known Solana wallets and value each new transaction by its SOL balance change."""
        alerts: Subscription = Subscription(on_alert, name="whales:solana")

        for wallet in self.wallets.get_by_chain("solana"):

            async def on_signature(log: ChainLog, wallet: KnownWallet = wallet) -> None:
                alert = await self._evaluate_solana_signature(wallet.address, log, min_value_usd)
                if alert is not None:
                    alerts.publish(alert)

            try:
                watch = await self.solana.watch_account(wallet.address, on_signature)
            except ChainwatchError as exc:
                logger.warning("Skipping Solana whale %s: %s", wallet.label, exc)
                continue
            alerts.attach(watch)

        return alerts

    async def _solana_value(self, address: str, signature: str) -> Optional[int]:
        transaction = await self.solana.get_transaction(signature)
        return lamport_change(transaction, address)

    async def _evaluate_solana_signature(
        self, address: str, log: ChainLog, min_value_usd: float
    ) -> Optional[WhaleAlert]:
        delta = await self._solana_value(address, log.transaction_hash)
        if not delta:
            return None

        sol_amount = abs(delta) / LAMPORTS_PER_SOL
        value_usd = sol_amount * await self.prices.get_price("SOL")
        if value_usd < min_value_usd:
            return None

        sending = delta < 0
        sender = address if sending else "unknown"
        receiver = None if sending else address
        record = TransactionRecord(
            hash=log.transaction_hash,
            from_address=sender,
            to_address=receiver,
            value=format_units(abs(delta), 9),
            value_usd=value_usd,
            chain="solana",
            timestamp=log.timestamp or datetime.now(timezone.utc),
            type=classify_transaction_type(sender, receiver, "solana", self.wallets),
            token_symbol="SOL",
            block_number=log.block_number,
        )
        return self.build_alert(record)

    # ---------------------------
    # Historical scan
    # ---------------------------
    async def _wallet_history(self, wallet: KnownWallet, chain: str) -> List[TransactionRecord]:
        if not is_solana_chain(chain):
            return await self.evm.get_recent_transactions(wallet.address, chain, HISTORICAL_TX_PER_WALLET)

        records = await self.solana.get_recent_transactions(wallet.address, chain, HISTORICAL_TX_PER_WALLET)
        valued = []
        for record in records:
            delta = await self._solana_value(wallet.address, record.hash)
            if not delta:
                continue
            sending = delta < 0
            valued.append(
                record.model_copy(
                    update={
                        "value": format_units(abs(delta), 9),
                        "from_address": wallet.address if sending else "unknown",
                        "to_address": None if sending else wallet.address,
                    }
                )
            )
        return valued

    async def get_recent_whale_activity(
        self,
        min_value_usd: float,
        chain: str = "ethereum",
        limit: int = 20,
    ) -> List[TransactionRecord]:
        """Large transactions of the first known wallets for the chain, largest first."""
        chain = normalize_chain(chain)
        native_symbol = self.catalog.get(chain).native_symbol
        price = await self.prices.get_price(native_symbol)

        found: List[TransactionRecord] = []
        for wallet in self.wallets.get_by_chain(chain)[:HISTORICAL_WALLET_COUNT]:
            try:
                history = await self._wallet_history(wallet, chain)
            except Exception as exc:
                logger.debug("Skipping whale %s (%s): %s", wallet.label, short_address(wallet.address), exc)
                continue

            for record in history:
                value_usd = to_float(record.value) * price
                if value_usd < min_value_usd:
                    continue
                found.append(
                    record.model_copy(
                        update={
                            "value_usd": value_usd,
                            "token_symbol": native_symbol,
                            "type": classify_transaction_type(
                                record.from_address, record.to_address, chain, self.wallets
                            ),
                        }
                    )
                )

        found.sort(key=lambda item: item.value_usd, reverse=True)
        return found[:limit]


__all__ = [
    "WhaleAlert",
    "WhaleService",
    "Significance",
    "classify_significance",
    "classify_transaction_type",
    "HIGH_SIGNIFICANCE_USD",
    "MEDIUM_SIGNIFICANCE_USD",
    "BRIDGE_MARKERS",
    "DEX_MARKERS",
    "TRANSFER_EVENT",
]
