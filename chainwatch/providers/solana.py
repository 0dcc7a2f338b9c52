"""Solana JSON-RPC client."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Sequence

import httpx

from ..errors import ChainUnavailable, ConfigurationError, ErrorCategory, UnsupportedChain
from ..services.address import is_valid_solana_address, short_address
from ..services.subscriptions import Subscription, poll_forever
from ..services.units import format_units, to_float
from ..types.chain import ChainLog, SolanaBalance, SolanaTokenBalance, TokenBalance, TransactionRecord
from .base import ChainClient
from .jsonrpc import JsonRpcMixin

if TYPE_CHECKING:
    from ..services.token_registry import TokenRegistry

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000
SOL_DECIMALS = 9
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SIGNATURE_PAGE_SIZE = 100
MAX_SIGNATURE_PAGES = 10


def _from_block_time(block_time: Any) -> Optional[datetime]:
    if block_time is None:
        return None
    return datetime.fromtimestamp(int(block_time), tz=timezone.utc)


class SolanaClient(JsonRpcMixin, ChainClient):
    """Balances, signatures and account polling over Solana JSON-RPC."""

    name = "solana-rpc"
    timeout_s = 20
    chain = "solana"

    def __init__(
        self,
        rpc_urls: Sequence[str],
        *,
        token_registry: Optional["TokenRegistry"] = None,
        commitment: str = "confirmed",
        timeout_s: Optional[int] = None,
        poll_interval_s: float = 12.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc_urls = tuple(url for url in rpc_urls if url)
        self.token_registry = token_registry
        self.commitment = commitment
        if timeout_s is not None:
            self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self._transport = transport

    async def ready(self) -> bool:
        return bool(self.rpc_urls)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Solana RPC URL not configured"}
        try:
            slot = await self.get_current_slot()
            return {"status": "healthy", "slot": slot}
        except ChainUnavailable as e:
            return {"status": "error", "reason": e.message}

    async def _rpc(self, method: str, params: List[Any]) -> Any:
        return await self._post_rpc(self.chain, self.rpc_urls, method, params)

    def _check(self, address: str, chain: str = "solana") -> None:
        if chain != self.chain:
            raise UnsupportedChain(chain)
        if not is_valid_solana_address(address):
            raise ConfigurationError(f"Invalid Solana address: {address!r}", address=address)

    # ---------------------------
    # Balances
    # ---------------------------
    async def get_balance(self, address: str) -> SolanaBalance:
        self._check(address)
        result = await self._rpc("getBalance", [address, {"commitment": self.commitment}])
        lamports = (result or {}).get("value") if isinstance(result, dict) else result
        if not isinstance(lamports, int):
            raise ChainUnavailable(self.chain, "getBalance", f"Unexpected result {result!r}", category=ErrorCategory.PROVIDER)
        return SolanaBalance(sol=lamports / LAMPORTS_PER_SOL, lamports=lamports)

    async def get_native_balance(self, address: str, chain: str = "solana") -> str:
        self._check(address, chain)
        balance = await self.get_balance(address)
        return format_units(balance.lamports, SOL_DECIMALS)

    async def _token_accounts(self, owner: str, filter_: Dict[str, str]) -> List[Dict[str, Any]]:
        result = await self._rpc(
            "getTokenAccountsByOwner",
            [owner, filter_, {"encoding": "jsonParsed", "commitment": self.commitment}],
        )
        accounts = (result or {}).get("value") if isinstance(result, dict) else None
        if accounts is None:
            raise ChainUnavailable(
                self.chain, "getTokenAccountsByOwner", "Missing account list", category=ErrorCategory.PROVIDER
            )

        parsed: List[Dict[str, Any]] = []
        for account in accounts:
            info = (((account.get("account") or {}).get("data") or {}).get("parsed") or {}).get("info") or {}
            if info.get("mint") and info.get("tokenAmount"):
                parsed.append(info)
        return parsed

    def _symbol_for_mint(self, mint: str) -> str:
        if self.token_registry is None:
            return ""
        token = self.token_registry.get_token_by_address(self.chain, mint)
        return token.symbol if token else ""

    async def get_token_balances(self, address: str) -> List[SolanaTokenBalance]:
        self._check(address)
        balances: List[SolanaTokenBalance] = []
        for info in await self._token_accounts(address, {"programId": TOKEN_PROGRAM_ID}):
            amount = info["tokenAmount"]
            decimals = int(amount.get("decimals") or 0)
            raw = int(amount.get("amount") or 0)
            balances.append(
                SolanaTokenBalance(
                    mint=info["mint"],
                    raw_amount=raw,
                    decimals=decimals,
                    ui_amount=to_float(amount.get("uiAmount")),
                    symbol=self._symbol_for_mint(info["mint"]),
                    formatted_amount=amount.get("uiAmountString") or format_units(raw, decimals),
                )
            )
        return balances

    async def get_token_balance(self, wallet: str, token_address: str, chain: str = "solana") -> TokenBalance:
        self._check(wallet, chain)
        if not is_valid_solana_address(token_address):
            raise ConfigurationError(f"Invalid mint address: {token_address!r}", address=token_address)

        accounts = await self._token_accounts(wallet, {"mint": token_address})
        raw_total = sum(int(info["tokenAmount"].get("amount") or 0) for info in accounts)

        token = self.token_registry.get_token_by_address(self.chain, token_address) if self.token_registry else None
        if accounts:
            decimals = int(accounts[0]["tokenAmount"].get("decimals") or 0)
        else:
            decimals = token.decimals if token else 0

        return TokenBalance(
            token=token.name if token else token_address,
            symbol=token.symbol if token else "",
            decimals=decimals,
            raw_amount=raw_total,
            formatted_amount=format_units(raw_total, decimals),
        )

    # ---------------------------
    # Transactions
    # ---------------------------
    async def get_signatures(
        self, address: str, *, limit: int = 10, until: Optional[str] = None, before: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        options: Dict[str, Any] = {"limit": limit, "commitment": self.commitment}
        if until:
            options["until"] = until
        if before:
            options["before"] = before
        result = await self._rpc("getSignaturesForAddress", [address, options])
        if not isinstance(result, list):
            raise ChainUnavailable(
                self.chain, "getSignaturesForAddress", f"Unexpected result {result!r}", category=ErrorCategory.PROVIDER
            )
        return result

    async def _signatures_since(self, address: str, last_seen: str) -> List[Dict[str, Any]]:
        """Every signature newer than ``last_seen``, newest first, paging backwards with ``before``."""
        collected: List[Dict[str, Any]] = []
        before: Optional[str] = None
        for _ in range(MAX_SIGNATURE_PAGES):
            page = await self.get_signatures(
                address, limit=SIGNATURE_PAGE_SIZE, until=last_seen or None, before=before
            )
            collected.extend(page)
            if len(page) < SIGNATURE_PAGE_SIZE:
                return collected
            before = page[-1].get("signature")
            if not before:
                return collected

        logger.warning(
            "More than %d new signatures for %s since last poll, older ones were skipped",
            len(collected),
            short_address(address),
        )
        return collected

    async def get_recent_transactions(
        self, address: str, chain: str = "solana", limit: int = 10
    ) -> List[TransactionRecord]:
        """Signature-level records, newest first. Values are not resolved here."""
        self._check(address, chain)
        signatures = await self.get_signatures(address, limit=limit)
        return [
            TransactionRecord(
                hash=item.get("signature", ""),
                from_address=address,
                chain=self.chain,
                timestamp=_from_block_time(item.get("blockTime")),
                block_number=item.get("slot"),
                status="error" if item.get("err") else "success",
                token_symbol="SOL",
            )
            for item in signatures
        ]

    async def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        return await self._rpc(
            "getTransaction",
            [signature, {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0, "commitment": self.commitment}],
        )

    async def get_current_slot(self) -> int:
        result = await self._rpc("getSlot", [{"commitment": self.commitment}])
        if not isinstance(result, int):
            raise ChainUnavailable(self.chain, "getSlot", f"Unexpected result {result!r}", category=ErrorCategory.PROVIDER)
        return result

    async def get_block_time(self, slot: int) -> Optional[int]:
        return await self._rpc("getBlockTime", [slot])

    # ---------------------------
    # Account polling
    # ---------------------------
    async def watch_contract_events(
        self,
        address: str,
        event_signatures: Iterable[str],
        chain: str,
        on_event: Callable[[ChainLog], Any],
        *,
        poll_interval_s: Optional[float] = None,
    ) -> Subscription:
        """Deliver each new signature touching ``address`` as a ``Transaction`` event.

        Solana programs have no EVM-style event logs, so ``event_signatures`` is
        accepted for interface parity and ignored.
        """
        self._check(address, chain)
        subscription: Subscription = Subscription(on_event, name=f"solana-account:{short_address(address)}")

        try:
            head = await self.get_signatures(address, limit=1)
            last_seen: Optional[str] = head[0]["signature"] if head else ""
        except ChainUnavailable as exc:
            logger.warning("Could not read latest signature for %s, starting on first poll: %s", short_address(address), exc.message)
            last_seen = None

        async def tick() -> None:
            nonlocal last_seen
            if last_seen is None:
                head = await self.get_signatures(address, limit=1)
                last_seen = head[0]["signature"] if head else ""
                return

            fresh = await self._signatures_since(address, last_seen)
            if not fresh:
                return
            for item in reversed(fresh):
                log = ChainLog(
                    chain=self.chain,
                    address=address,
                    event_name="Transaction",
                    args={
                        "signature": item.get("signature"),
                        "slot": item.get("slot"),
                        "err": item.get("err"),
                        "memo": item.get("memo"),
                    },
                    transaction_hash=item.get("signature", ""),
                    block_number=int(item.get("slot") or 0),
                    timestamp=_from_block_time(item.get("blockTime")),
                )
                if not subscription.publish(log):
                    return
            last_seen = fresh[0].get("signature") or last_seen

        interval = poll_interval_s or self.poll_interval_s
        subscription.spawn(poll_forever(tick, interval, label=subscription.name), name=subscription.name)
        return subscription

    async def watch_account(
        self,
        address: str,
        on_event: Callable[[ChainLog], Any],
        *,
        poll_interval_s: Optional[float] = None,
    ) -> Subscription:
        return await self.watch_contract_events(address, (), self.chain, on_event, poll_interval_s=poll_interval_s)


def lamport_change(transaction: Optional[Dict[str, Any]], account: str) -> Optional[int]:
    """Signed lamport delta of ``account`` in a parsed transaction, if present."""

    if not transaction:
        return None
    meta = transaction.get("meta") or {}
    pre, post = meta.get("preBalances") or [], meta.get("postBalances") or []
    keys = ((transaction.get("transaction") or {}).get("message") or {}).get("accountKeys") or []

    index: Optional[int] = None
    for position, key in enumerate(keys):
        pubkey = key.get("pubkey") if isinstance(key, dict) else key
        if pubkey == account:
            index = position
            break

    if index is None or index >= len(pre) or index >= len(post):
        return None
    return int(post[index]) - int(pre[index])
