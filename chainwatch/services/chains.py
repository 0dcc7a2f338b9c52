"""Chain catalog and wallet identity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from ..config import Settings
from ..errors import UnsupportedChain
from .address import normalize_address, normalize_chain


class ChainFamily(str, Enum):
    EVM = "evm"
    SOLANA = "solana"


@dataclass(frozen=True)
class Chain:
    """Immutable chain description, configured once at startup."""

    id: str
    family: ChainFamily
    native_symbol: str
    native_decimals: int
    rpc_urls: Tuple[str, ...] = ()
    chain_id: Optional[int] = None
    network: Optional[str] = None

    @property
    def is_evm(self) -> bool:
        return self.family is ChainFamily.EVM


@dataclass(frozen=True, eq=False)
class WalletAddress:
    """A (chain, address) pair. Equality follows the chain's case rules."""

    chain: str
    address: str

    @property
    def key(self) -> str:
        return normalize_address(self.address, self.chain)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WalletAddress):
            return NotImplemented
        return self.chain == other.chain and self.key == other.key

    def __hash__(self) -> int:
        return hash((self.chain, self.key))

    @classmethod
    def parse(cls, value: "WalletAddress | Mapping[str, str]") -> "WalletAddress":
        if isinstance(value, WalletAddress):
            return value
        return cls(chain=normalize_chain(value.get("chain")), address=str(value.get("address") or ""))


# chain id -> (family, native symbol, decimals, EVM chain id, Alchemy network slug)
_CHAIN_SPECS: Dict[str, Tuple[ChainFamily, str, int, Optional[int], Optional[str]]] = {
    "ethereum": (ChainFamily.EVM, "ETH", 18, 1, "eth-mainnet"),
    "polygon": (ChainFamily.EVM, "MATIC", 18, 137, "polygon-mainnet"),
    "arbitrum": (ChainFamily.EVM, "ETH", 18, 42161, "arb-mainnet"),
    "optimism": (ChainFamily.EVM, "ETH", 18, 10, "opt-mainnet"),
    "base": (ChainFamily.EVM, "ETH", 18, 8453, "base-mainnet"),
    "solana": (ChainFamily.SOLANA, "SOL", 9, None, None),
}


@dataclass(frozen=True)
class ChainCatalog:
    chains: Mapping[str, Chain] = field(default_factory=dict)

    def get(self, chain: str) -> Chain:
        found = self.chains.get(chain)
        if found is None:
            raise UnsupportedChain(chain)
        return found

    def __contains__(self, chain: object) -> bool:
        return chain in self.chains

    def evm_chains(self) -> Dict[str, Chain]:
        return {name: c for name, c in self.chains.items() if c.is_evm}


def build_chain_catalog(settings: Settings) -> ChainCatalog:
    """Resolve RPC endpoints for every known chain from settings."""
    chains: Dict[str, Chain] = {}
    for chain_id, (family, symbol, decimals, evm_id, network) in _CHAIN_SPECS.items():
        if family is ChainFamily.EVM:
            urls = settings.resolve_evm_rpc_urls(network or chain_id, chain_id)
        else:
            urls = settings.resolve_solana_rpc_urls()
        chains[chain_id] = Chain(
            id=chain_id,
            family=family,
            native_symbol=symbol,
            native_decimals=decimals,
            rpc_urls=tuple(urls),
            chain_id=evm_id,
            network=network,
        )
    return ChainCatalog(chains=chains)


__all__ = [
    "ChainFamily",
    "Chain",
    "WalletAddress",
    "ChainCatalog",
    "build_chain_catalog",
]
