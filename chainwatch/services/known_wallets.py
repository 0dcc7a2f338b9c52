"""Labeled exchange, fund, protocol and bridge wallets across chain families."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

from .address import is_solana_chain, normalize_address
from .chains import ChainFamily

WalletCategory = Literal["exchange", "fund", "protocol", "individual"]


@dataclass(frozen=True)
class KnownWallet:
    address: str
    label: str
    category: WalletCategory
    family: ChainFamily


def _evm(address: str, label: str, category: WalletCategory) -> KnownWallet:
    return KnownWallet(address.lower(), label, category, ChainFamily.EVM)


def _sol(address: str, label: str, category: WalletCategory) -> KnownWallet:
    return KnownWallet(address, label, category, ChainFamily.SOLANA)


KNOWN_EVM_WALLETS: Tuple[KnownWallet, ...] = (
    # Market makers
    _evm("0x9507c04b10486547584c37bcbd931b2a4fee9a41", "Jump Trading", "fund"),
    _evm("0x00000000ae347930bd1e7b0f35588b92280f9e75", "Wintermute", "fund"),
    _evm("0xdbf5e9c5206d0db70a90108bf936da60221dc080", "Wintermute 2", "fund"),
    _evm("0x0d0707963952f2fba59dd06f2b425ace40b492fe", "Alameda Research", "fund"),
    # Exchanges
    _evm("0x28c6c06298d514db089934071355e5743bf21d60", "Binance", "exchange"),
    _evm("0x21a31ee1afc51d94c2efccaa2092ad1028285549", "Binance 2", "exchange"),
    _evm("0xdfd5293d8e347dfe59e90efd55b2956a1343963d", "Binance 3", "exchange"),
    _evm("0xa9d1e08c7793af67e9d92fe308d5697fb81d3e43", "Coinbase", "exchange"),
    _evm("0x71660c4005ba85c37ccec55d0c4493e66fe775d3", "Coinbase 2", "exchange"),
    _evm("0x503828976d22510aad0201ac7ec88293211d23da", "Coinbase 3", "exchange"),
    _evm("0x2faf487a4414fe77e2327f0bf4ae2a264a776ad2", "FTX", "exchange"),
    _evm("0xc098b2a3aa256d2140208c3de6543aaef5cd3a94", "FTX 2", "exchange"),
    # DEX pools
    _evm("0x0d4a11d5eeaac28ec3f61d100daf4d40471f1852", "Uniswap V2 ETH/USDT", "protocol"),
    _evm("0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640", "Uniswap V3 ETH/USDC", "protocol"),
    # Bridges
    _evm("0x40ec5b33f54e0e8a33a975908c5ba1c14e5bbbdf", "Polygon Bridge", "protocol"),
    _evm("0x8eb8a3b98659cce290402893d0123abb75e3ab28", "Avalanche Bridge", "protocol"),
    _evm("0x99c9fc46f92e8a1c0dec1b1747d010903e884be1", "Optimism Bridge", "protocol"),
    _evm("0x4dbd4fc535ac27206064b68ffcf827b0a60bab3f", "Arbitrum Bridge", "protocol"),
)

KNOWN_SOLANA_WALLETS: Tuple[KnownWallet, ...] = (
    # Exchanges
    _sol("5tzFkiKscXHK5ZXCGbXZxdw7gTjjD1mBwuoFbhUvuAi9", "Binance", "exchange"),
    _sol("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM", "Binance 2", "exchange"),
    _sol("H8sMJSCQxfKiFTCfDR3DUMLPwcRbM61LGFJ8N4dK3WjS", "Coinbase", "exchange"),
    _sol("GJRs4FwHtemZ5ZE9x3FNvJ8TMwitKTh21yxdRPqn7npE", "Coinbase 2", "exchange"),
    _sol("2ojv9BAiHUrvsm9gxDe7fJSzbNZSJcxZvf8dqmWGHG8S", "Kraken", "exchange"),
    _sol("CuieVDEDtLo7FypA9SbLM9saXFdb1dsshEkyErMqkRQq", "Kraken 2", "exchange"),
    _sol("AobVSwdW9BbpMdJvTqeCN4hPAmh4rHm7vwLnQ5ATSyrS", "OKX", "exchange"),
    # Market makers
    _sol("3yFwqXBfZY4jBVUafQ1YEXw189y2dN3V5KQq9uzBDy1E", "Jump Trading", "fund"),
    # Protocols
    _sol("5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1", "Raydium Authority", "protocol"),
    _sol("JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4", "Jupiter", "protocol"),
    _sol("9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin", "Serum DEX", "protocol"),
    _sol("whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc", "Orca Whirlpool", "protocol"),
    _sol("MarBmsSgKXdrN1egZf5sqe1TMai9K1rChYNDJgjq7aD", "Marinade Finance", "protocol"),
    # Bridges
    _sol("wormDTUJ6AWPNvk59vGQbDvGJmqbDTdgWgAqcLBCgUb", "Wormhole Bridge", "protocol"),
)


class KnownWalletRegistry:
    """Chain-aware lookups; EVM keys are lower-cased, Solana keys are exact."""

    def __init__(
        self,
        evm_wallets: Tuple[KnownWallet, ...] = KNOWN_EVM_WALLETS,
        solana_wallets: Tuple[KnownWallet, ...] = KNOWN_SOLANA_WALLETS,
    ) -> None:
        self._by_family: Dict[ChainFamily, Tuple[KnownWallet, ...]] = {
            ChainFamily.EVM: tuple(evm_wallets),
            ChainFamily.SOLANA: tuple(solana_wallets),
        }
        self._index: Dict[ChainFamily, Dict[str, KnownWallet]] = {
            ChainFamily.EVM: {w.address.lower(): w for w in evm_wallets},
            ChainFamily.SOLANA: {w.address: w for w in solana_wallets},
        }

    @staticmethod
    def _family(chain: str) -> ChainFamily:
        return ChainFamily.SOLANA if is_solana_chain(chain) else ChainFamily.EVM

    def lookup(self, address: Optional[str], chain: str) -> Optional[KnownWallet]:
        if not address:
            return None
        return self._index[self._family(chain)].get(normalize_address(address, chain))

    def label_for(self, address: Optional[str], chain: str) -> Optional[str]:
        wallet = self.lookup(address, chain)
        return wallet.label if wallet else None

    def is_known(self, address: Optional[str], chain: str) -> bool:
        return self.lookup(address, chain) is not None

    def get_by_chain(self, chain: str) -> Tuple[KnownWallet, ...]:
        """Wallets for the chain's family, in registry order."""
        return self._by_family[self._family(chain)]

    def all_wallets(self) -> Tuple[KnownWallet, ...]:
        return self._by_family[ChainFamily.EVM] + self._by_family[ChainFamily.SOLANA]


__all__ = [
    "KnownWallet",
    "KnownWalletRegistry",
    "KNOWN_EVM_WALLETS",
    "KNOWN_SOLANA_WALLETS",
    "WalletCategory",
]
