"""Helpers for normalizing chain identifiers and comparing wallet addresses."""

from __future__ import annotations

import re
from functools import lru_cache

_BASE58_ALPHABET = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

_CHAIN_ALIASES = {
    "eth": "ethereum",
    "ethereum": "ethereum",
    "mainnet": "ethereum",
    "sol": "solana",
    "solana": "solana",
    "matic": "polygon",
    "polygon": "polygon",
    "arb": "arbitrum",
    "arbitrum": "arbitrum",
    "arbitrum-one": "arbitrum",
    "op": "optimism",
    "optimism": "optimism",
    "base-mainnet": "base",
    "base": "base",
}

EVM_CHAINS = ("ethereum", "polygon", "arbitrum", "optimism", "base")
SOLANA_CHAINS = ("solana",)


def normalize_chain(chain: str | None) -> str:
    """Collapse user-provided chain identifiers into canonical slugs."""

    if not chain:
        return "ethereum"
    canonical = _CHAIN_ALIASES.get(chain.lower().strip())
    return canonical or chain.lower().strip()


def is_supported_chain(chain: str) -> bool:
    """Return True if the chain has a client in this engine."""

    return chain in EVM_CHAINS or chain in SOLANA_CHAINS


def is_solana_chain(chain: str) -> bool:
    return chain in SOLANA_CHAINS


@lru_cache(maxsize=128)
def is_valid_solana_address(address: str) -> bool:
    if not address:
        return False
    length = len(address)
    if length < 32 or length > 44:
        return False
    return all(ch in _BASE58_ALPHABET for ch in address)


def is_valid_evm_address(address: str) -> bool:
    return bool(address) and bool(_EVM_ADDRESS_RE.fullmatch(address))


def is_valid_address_for_chain(address: str, chain: str) -> bool:
    if not address:
        return False
    if is_solana_chain(chain):
        return is_valid_solana_address(address)
    return is_valid_evm_address(address)


def normalize_address(address: str, chain: str) -> str:
    """Canonical lookup key: EVM hex is case-insensitive, Solana base58 is not."""

    if is_solana_chain(chain):
        return address.strip()
    return address.strip().lower()


def addresses_equal(left: str | None, right: str | None, chain: str) -> bool:
    if not left or not right:
        return False
    return normalize_address(left, chain) == normalize_address(right, chain)


def short_address(address: str | None, length: int = 8) -> str:
    if not address:
        return "unknown"
    return f"{address[:length]}..."


__all__ = [
    "EVM_CHAINS",
    "SOLANA_CHAINS",
    "normalize_chain",
    "is_supported_chain",
    "is_solana_chain",
    "is_valid_address_for_chain",
    "is_valid_evm_address",
    "is_valid_solana_address",
    "normalize_address",
    "addresses_equal",
    "short_address",
]
