import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector, is_address

from ..errors import ChainUnavailable, ConfigurationError, ErrorCategory, UnsupportedChain
from ..services.address import short_address
from ..services.chains import Chain, ChainCatalog
from ..services.events.abi import EventABI, decode_log, index_by_topic, parse_event_abi
from ..services.subscriptions import Subscription, poll_forever
from ..services.units import format_units, parse_hex_int
from ..types.chain import ChainLog, GasQuote, TokenBalance, TransactionRecord
from .base import ChainClient
from .jsonrpc import JsonRpcMixin

logger = logging.getLogger(__name__)

STANDARD_TRANSFER_GAS = 21_000
MAX_LOG_BLOCK_SPAN = 1_000

_SELECTORS = {
    "balanceOf": function_signature_to_4byte_selector("balanceOf(address)"),
    "decimals": function_signature_to_4byte_selector("decimals()"),
    "symbol": function_signature_to_4byte_selector("symbol()"),
    "name": function_signature_to_4byte_selector("name()"),
}


def _decode_text(raw: bytes) -> str:
    """ERC-20 string getter; older tokens (MKR, SAI) return bytes32."""
    try:
        (value,) = abi_decode(["string"], raw)
        return str(value).strip()
    except DecodingError:
        return raw[:32].rstrip(b"\x00").decode("ascii", errors="ignore").strip()


def _block_timestamp(block: Dict[str, Any]) -> Optional[datetime]:
    seconds = parse_hex_int(block.get("timestamp"))
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class EVMClient(JsonRpcMixin, ChainClient):
    """JSON-RPC client fanning out over the EVM chains in the catalog"""

    name = "evm-rpc"
    timeout_s = 30

    def __init__(
        self,
        catalog: ChainCatalog,
        *,
        timeout_s: Optional[int] = None,
        poll_interval_s: float = 12.0,
        block_window: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.catalog = catalog
        if timeout_s is not None:
            self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self.block_window = block_window
        self._transport = transport

    async def ready(self) -> bool:
        return any(chain.rpc_urls for chain in self.catalog.evm_chains().values())

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "No EVM RPC endpoints configured"}

        try:
            block = await self.get_block_number("ethereum")
            return {"status": "healthy", "block_number": block}
        except ChainUnavailable as e:
            return {"status": "error", "reason": e.message}

    def _chain(self, chain: str) -> Chain:
        config = self.catalog.get(chain)
        if not config.is_evm:
            raise UnsupportedChain(chain)
        return config

    async def _rpc(self, chain: str, method: str, params: List[Any]) -> Any:
        return await self._post_rpc(chain, self._chain(chain).rpc_urls, method, params)

    # ---------------------------
    # Balances
    # ---------------------------
    async def get_native_balance(self, address: str, chain: str = "ethereum") -> str:
        config = self._chain(chain)
        self._require_address(address)
        result = await self._rpc(chain, "eth_getBalance", [address, "latest"])
        wei = parse_hex_int(result)
        if wei is None:
            raise ChainUnavailable(chain, "eth_getBalance", f"Unexpected result {result!r}", category=ErrorCategory.PROVIDER)
        return format_units(wei, config.native_decimals)

    async def _eth_call(self, chain: str, to: str, data: bytes) -> bytes:
        result = await self._rpc(chain, "eth_call", [{"to": to, "data": encode_hex(data)}, "latest"])
        return decode_hex(result or "0x")

    async def get_token_balance(self, wallet: str, token_address: str, chain: str = "ethereum") -> TokenBalance:
        self._chain(chain)
        self._require_address(wallet)
        self._require_address(token_address)

        balance_raw, decimals_raw, symbol_raw, name_raw = await asyncio.gather(
            self._eth_call(chain, token_address, _SELECTORS["balanceOf"] + abi_encode(["address"], [wallet.lower()])),
            self._eth_call(chain, token_address, _SELECTORS["decimals"]),
            self._eth_call(chain, token_address, _SELECTORS["symbol"]),
            self._eth_call(chain, token_address, _SELECTORS["name"]),
        )

        try:
            (balance,) = abi_decode(["uint256"], balance_raw)
            (decimals,) = abi_decode(["uint256"], decimals_raw)
        except DecodingError as exc:
            raise ChainUnavailable(
                chain,
                "eth_call",
                f"Undecodable ERC-20 response from {short_address(token_address)}: {exc}",
                category=ErrorCategory.PROVIDER,
            ) from exc

        return TokenBalance(
            token=_decode_text(name_raw) or "Unknown Token",
            symbol=_decode_text(symbol_raw) or "UNKNOWN",
            decimals=int(decimals),
            raw_amount=int(balance),
            formatted_amount=format_units(int(balance), int(decimals)),
        )

    # ---------------------------
    # Blocks & transactions
    # ---------------------------
    async def get_block_number(self, chain: str = "ethereum") -> int:
        result = await self._rpc(chain, "eth_blockNumber", [])
        number = parse_hex_int(result)
        if number is None:
            raise ChainUnavailable(chain, "eth_blockNumber", f"Unexpected result {result!r}", category=ErrorCategory.PROVIDER)
        return number

    async def get_recent_transactions(
        self, address: str, chain: str = "ethereum", limit: int = 10
    ) -> List[TransactionRecord]:
        """Scan back from the head block for transactions sent from or to ``address``."""
        config = self._chain(chain)
        self._require_address(address)
        target = address.lower()

        latest = await self.get_block_number(chain)
        floor = latest - self.block_window
        records: List[TransactionRecord] = []

        block_number = latest
        while len(records) < limit and block_number > floor and block_number >= 0:
            block = await self._rpc(chain, "eth_getBlockByNumber", [hex(block_number), True])
            if block:
                timestamp = _block_timestamp(block)
                for tx in reversed(block.get("transactions") or []):
                    if not isinstance(tx, dict):
                        continue
                    sender = str(tx.get("from") or "")
                    receiver = tx.get("to")
                    if sender.lower() != target and str(receiver or "").lower() != target:
                        continue
                    records.append(
                        TransactionRecord(
                            hash=str(tx.get("hash") or ""),
                            from_address=sender,
                            to_address=receiver,
                            value=format_units(parse_hex_int(tx.get("value"), 0), config.native_decimals),
                            chain=chain,
                            timestamp=timestamp,
                            token_symbol=config.native_symbol,
                            block_number=parse_hex_int(tx.get("blockNumber"), block_number),
                        )
                    )
            block_number -= 1

        return records[:limit]

    # ---------------------------
    # Gas
    # ---------------------------
    async def get_gas_price(self, chain: str = "ethereum", native_price_usd: float = 0.0) -> GasQuote:
        block, gas_price = await asyncio.gather(
            self._rpc(chain, "eth_getBlockByNumber", ["latest", False]),
            self._rpc(chain, "eth_gasPrice", []),
        )

        base_fee_wei = parse_hex_int((block or {}).get("baseFeePerGas"), 0)
        gas_price_wei = parse_hex_int(gas_price)
        if gas_price_wei is None:
            raise ChainUnavailable(chain, "eth_gasPrice", f"Unexpected result {gas_price!r}", category=ErrorCategory.PROVIDER)

        base_fee_gwei = base_fee_wei / 1e9
        gas_price_gwei = gas_price_wei / 1e9

        return GasQuote(
            chain=chain,
            base_fee=round(base_fee_gwei, 2),
            priority_fee=round(gas_price_gwei - base_fee_gwei, 2),
            total_gwei=gas_price_gwei,
            usd_cost=gas_price_gwei * STANDARD_TRANSFER_GAS * (native_price_usd or 0.0) / 1e9,
        )

    # ---------------------------
    # Events
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
        """Poll ``eth_getLogs`` for the contract, starting at the current head."""
        self._chain(chain)
        self._require_address(address)
        abis = parse_event_abi(event_signatures)
        if not abis:
            raise ConfigurationError("No event signatures to watch", address=address, chain=chain)
        by_topic = index_by_topic(abis)

        subscription: Subscription = Subscription(on_event, name=f"evm-logs:{chain}:{short_address(address)}")

        try:
            next_block: Optional[int] = await self.get_block_number(chain) + 1
        except ChainUnavailable as exc:
            logger.warning("Could not read head block for %s watch, starting on first poll: %s", chain, exc.message)
            next_block = None

        async def tick() -> None:
            nonlocal next_block
            latest = await self.get_block_number(chain)
            if next_block is None:
                next_block = latest + 1
                return
            if latest < next_block:
                return
            to_block = min(latest, next_block + MAX_LOG_BLOCK_SPAN - 1)

            logs = await self._rpc(
                chain,
                "eth_getLogs",
                [{
                    "address": address,
                    "fromBlock": hex(next_block),
                    "toBlock": hex(to_block),
                    "topics": [list(by_topic)],
                }],
            )
            ordered = sorted(
                (log for log in logs or [] if not log.get("removed")),
                key=lambda log: (parse_hex_int(log.get("blockNumber"), 0), parse_hex_int(log.get("logIndex"), 0)),
            )
            for log in ordered:
                decoded = self._decode_log(chain, log, by_topic)
                if decoded is not None and not subscription.publish(decoded):
                    return
            next_block = to_block + 1

        interval = poll_interval_s or self.poll_interval_s
        subscription.spawn(poll_forever(tick, interval, label=subscription.name), name=subscription.name)
        return subscription

    def _decode_log(self, chain: str, log: Dict[str, Any], by_topic: Dict[str, EventABI]) -> Optional[ChainLog]:
        topics = log.get("topics") or []
        if not topics:
            return None
        abi = by_topic.get(str(topics[0]).lower())
        if abi is None:
            return None

        try:
            args = decode_log(abi, topics, log.get("data") or "0x")
        except (DecodingError, ValueError) as exc:
            logger.warning("Skipping undecodable %s log in tx %s: %s", abi.name, log.get("transactionHash"), exc)
            return None

        timestamp = None
        block_timestamp = parse_hex_int(log.get("blockTimestamp"))
        if block_timestamp is not None:
            timestamp = datetime.fromtimestamp(block_timestamp, tz=timezone.utc)

        return ChainLog(
            chain=chain,
            address=str(log.get("address") or ""),
            event_name=abi.name,
            args=args,
            transaction_hash=str(log.get("transactionHash") or ""),
            block_number=parse_hex_int(log.get("blockNumber"), 0),
            log_index=parse_hex_int(log.get("logIndex"), 0),
            timestamp=timestamp,
        )

    @staticmethod
    def _require_address(address: str) -> None:
        if not address or not is_address(address):
            raise ConfigurationError(f"Invalid EVM address: {address!r}", address=address)
