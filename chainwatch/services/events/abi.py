"""
Event ABIs: common signatures per contract type, known contracts, and
log decoding for human-readable ``event Name(type indexed name, ...)`` strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from eth_abi import decode as abi_decode
from eth_utils import decode_hex, encode_hex, keccak

from ...errors import ConfigurationError

ContractType = Literal[
    "erc20",
    "erc721",
    "erc1155",
    "uniswap-v2",
    "uniswap-v3",
    "aave",
    "compound",
    "custom",
]

COMMON_ABIS: Dict[str, Tuple[str, ...]] = {
    "erc20": (
        "event Transfer(address indexed from, address indexed to, uint256 value)",
        "event Approval(address indexed owner, address indexed spender, uint256 value)",
    ),
    "erc721": (
        "event Transfer(address indexed from, address indexed to, uint256 indexed tokenId)",
        "event Approval(address indexed owner, address indexed approved, uint256 indexed tokenId)",
        "event ApprovalForAll(address indexed owner, address indexed operator, bool approved)",
    ),
    "erc1155": (
        "event TransferSingle(address indexed operator, address indexed from, address indexed to, uint256 id, uint256 value)",
        "event TransferBatch(address indexed operator, address indexed from, address indexed to, uint256[] ids, uint256[] values)",
        "event ApprovalForAll(address indexed account, address indexed operator, bool approved)",
    ),
    "uniswap-v2": (
        "event Swap(address indexed sender, uint256 amount0In, uint256 amount1In, uint256 amount0Out, uint256 amount1Out, address indexed to)",
        "event Mint(address indexed sender, uint256 amount0, uint256 amount1)",
        "event Burn(address indexed sender, uint256 amount0, uint256 amount1, address indexed to)",
        "event Sync(uint112 reserve0, uint112 reserve1)",
    ),
    "uniswap-v3": (
        "event Swap(address indexed sender, address indexed recipient, int256 amount0, int256 amount1, uint160 sqrtPriceX96, uint128 liquidity, int24 tick)",
        "event Mint(address sender, address indexed owner, int24 indexed tickLower, int24 indexed tickUpper, uint128 amount, uint256 amount0, uint256 amount1)",
        "event Burn(address indexed owner, int24 indexed tickLower, int24 indexed tickUpper, uint128 amount, uint256 amount0, uint256 amount1)",
        "event Collect(address indexed owner, address recipient, int24 indexed tickLower, int24 indexed tickUpper, uint128 amount0, uint128 amount1)",
    ),
    "aave": (
        "event Deposit(address indexed reserve, address user, address indexed onBehalfOf, uint256 amount, uint16 indexed referral)",
        "event Withdraw(address indexed reserve, address indexed user, address indexed to, uint256 amount)",
        "event Borrow(address indexed reserve, address user, address indexed onBehalfOf, uint256 amount, uint256 borrowRateMode, uint256 borrowRate, uint16 indexed referral)",
        "event Repay(address indexed reserve, address indexed user, address indexed repayer, uint256 amount)",
        "event LiquidationCall(address indexed collateralAsset, address indexed debtAsset, address indexed user, uint256 debtToCover, uint256 liquidatedCollateralAmount, address liquidator, bool receiveAToken)",
    ),
    "compound": (
        "event Mint(address minter, uint256 mintAmount, uint256 mintTokens)",
        "event Redeem(address redeemer, uint256 redeemAmount, uint256 redeemTokens)",
        "event Borrow(address borrower, uint256 borrowAmount, uint256 accountBorrows, uint256 totalBorrows)",
        "event RepayBorrow(address payer, address borrower, uint256 repayAmount, uint256 accountBorrows, uint256 totalBorrows)",
        "event LiquidateBorrow(address liquidator, address borrower, uint256 repayAmount, address cTokenCollateral, uint256 seizeTokens)",
    ),
    "custom": (),
}


@dataclass(frozen=True)
class KnownContract:
    name: str
    type: str
    chain: str


# Keyed by lower-cased address
KNOWN_CONTRACTS: Dict[str, KnownContract] = {
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": KnownContract("USDC", "erc20", "ethereum"),
    "0xdac17f958d2ee523a2206206994597c13d831ec7": KnownContract("USDT", "erc20", "ethereum"),
    "0x6b175474e89094c44da98b954eedeac495271d0f": KnownContract("DAI", "erc20", "ethereum"),
    "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2": KnownContract("WETH", "erc20", "ethereum"),
    "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640": KnownContract("Uniswap V3 ETH/USDC", "uniswap-v3", "ethereum"),
    "0x0d4a11d5eeaac28ec3f61d100daf4d40471f1852": KnownContract("Uniswap V2 ETH/USDT", "uniswap-v2", "ethereum"),
    "0x87870bca3f3fd6335c3f4ce8392d69350b4fa4e2": KnownContract("Aave V3 Pool", "aave", "ethereum"),
}


def get_contract_info(address: str) -> Optional[KnownContract]:
    if not address:
        return None
    return KNOWN_CONTRACTS.get(address.lower())


def get_abi_for_type(contract_type: str) -> List[str]:
    return list(COMMON_ABIS.get(contract_type, ()))


_EVENT_RE = re.compile(r"^\s*(?:event\s+)?([A-Za-z_]\w*)\s*\((.*)\)\s*(?:anonymous\s*)?;?\s*$")


def _canonical_type(raw: str) -> str:
    # Solidity aliases: uint -> uint256, int -> int256 (also inside array types)
    if raw.startswith("uint") and (len(raw) == 4 or raw[4] == "["):
        return "uint256" + raw[4:]
    if raw.startswith("int") and (len(raw) == 3 or raw[3] == "["):
        return "int256" + raw[3:]
    return raw


@dataclass(frozen=True)
class EventInput:
    name: str
    type: str
    indexed: bool = False

    @property
    def is_dynamic(self) -> bool:
        return self.type in ("string", "bytes") or self.type.endswith("]")


@dataclass(frozen=True)
class EventABI:
    name: str
    inputs: Tuple[EventInput, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(item.type for item in self.inputs)})"

    @property
    def topic(self) -> str:
        return encode_hex(keccak(text=self.signature))


def parse_event_signature(text: str) -> EventABI:
    """Parse ``event Transfer(address indexed from, ...)`` into an EventABI."""

    match = _EVENT_RE.match(text or "")
    if not match:
        raise ConfigurationError(f"Malformed event signature: {text!r}", signature=text)

    name, body = match.group(1), match.group(2)
    inputs: List[EventInput] = []
    for position, raw_param in enumerate(p.strip() for p in body.split(",")):
        if not raw_param:
            continue
        if "(" in raw_param or ")" in raw_param:
            raise ConfigurationError(
                f"Tuple parameters are not supported: {text!r}", signature=text
            )
        parts = raw_param.split()
        indexed = "indexed" in parts[1:]
        names = [p for p in parts[1:] if p != "indexed"]
        inputs.append(
            EventInput(
                name=names[0] if names else f"arg{position}",
                type=_canonical_type(parts[0]),
                indexed=indexed,
            )
        )
    return EventABI(name=name, inputs=tuple(inputs))


def parse_event_abi(signatures: Iterable[str]) -> List[EventABI]:
    return [parse_event_signature(sig) for sig in signatures]


def index_by_topic(abis: Iterable[EventABI]) -> Dict[str, EventABI]:
    return {abi.topic.lower(): abi for abi in abis}


def _normalize_value(value: Any) -> Any:
    if isinstance(value, bytes):
        return encode_hex(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item) for item in value]
    return value


def decode_log(abi: EventABI, topics: Sequence[str], data: str) -> Dict[str, Any]:
    """Decode an ``eth_getLogs`` entry against ``abi``.

    Indexed dynamic values (strings, bytes, arrays) are only present as their
    keccak hash, so the raw topic hex is kept for them.
    """

    indexed_inputs = [item for item in abi.inputs if item.indexed]
    indexed_topics = list(topics[1:])
    if len(indexed_topics) < len(indexed_inputs):
        raise ValueError(
            f"{abi.name}: expected {len(indexed_inputs)} indexed topics, got {len(indexed_topics)}"
        )

    args: Dict[str, Any] = {}
    for item, topic in zip(indexed_inputs, indexed_topics):
        if item.is_dynamic:
            args[item.name] = topic
            continue
        (value,) = abi_decode([item.type], decode_hex(topic))
        args[item.name] = _normalize_value(value)

    plain_inputs = [item for item in abi.inputs if not item.indexed]
    if plain_inputs:
        values = abi_decode([item.type for item in plain_inputs], decode_hex(data or "0x"))
        for item, value in zip(plain_inputs, values):
            args[item.name] = _normalize_value(value)

    return args


__all__ = [
    "ContractType",
    "COMMON_ABIS",
    "KNOWN_CONTRACTS",
    "KnownContract",
    "EventInput",
    "EventABI",
    "get_contract_info",
    "get_abi_for_type",
    "parse_event_signature",
    "parse_event_abi",
    "index_by_topic",
    "decode_log",
]
