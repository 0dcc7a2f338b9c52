"""Static catalog of well-known fungible tokens per chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .address import is_solana_chain


@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str
    name: str
    decimals: int


_ETHEREUM: Tuple[TokenInfo, ...] = (
    TokenInfo("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USDC", "USD Coin", 6),
    TokenInfo("0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT", "Tether USD", 6),
    TokenInfo("0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI", "Dai Stablecoin", 18),
    TokenInfo("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "WETH", "Wrapped Ether", 18),
    TokenInfo("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599", "WBTC", "Wrapped BTC", 8),
    TokenInfo("0x514910771AF9Ca656af840dff83E8264EcF986CA", "LINK", "ChainLink Token", 18),
    TokenInfo("0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984", "UNI", "Uniswap", 18),
    TokenInfo("0x7Fc66500c84A76Ad7e9c93437bFc5Ac33E2DDaE9", "AAVE", "Aave Token", 18),
    TokenInfo("0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84", "stETH", "Lido Staked ETH", 18),
    TokenInfo("0xBe9895146f7AF43049ca1c1AE358B0541Ea49704", "cbETH", "Coinbase Wrapped Staked ETH", 18),
    TokenInfo("0xae78736Cd615f374D3085123A210448E74Fc6393", "rETH", "Rocket Pool ETH", 18),
)

_POLYGON: Tuple[TokenInfo, ...] = (
    TokenInfo("0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", "USDC", "USD Coin", 6),
    TokenInfo("0xc2132D05D31c914a87C6611C10748AEb04B58e8F", "USDT", "Tether USD", 6),
    TokenInfo("0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619", "WETH", "Wrapped Ether", 18),
    TokenInfo("0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270", "WMATIC", "Wrapped Matic", 18),
)

_ARBITRUM: Tuple[TokenInfo, ...] = (
    TokenInfo("0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "USDC", "USD Coin", 6),
    TokenInfo("0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "USDT", "Tether USD", 6),
    TokenInfo("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "WETH", "Wrapped Ether", 18),
    TokenInfo("0x912CE59144191C1204E64559FE8253a0e49E6548", "ARB", "Arbitrum", 18),
)

_OPTIMISM: Tuple[TokenInfo, ...] = (
    TokenInfo("0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85", "USDC", "USD Coin", 6),
    TokenInfo("0x94b008aA00579c1307B0EF2c499aD98a8ce58e58", "USDT", "Tether USD", 6),
    TokenInfo("0x4200000000000000000000000000000000000006", "WETH", "Wrapped Ether", 18),
    TokenInfo("0x4200000000000000000000000000000000000042", "OP", "Optimism", 18),
)

_BASE: Tuple[TokenInfo, ...] = (
    TokenInfo("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "USDC", "USD Coin", 6),
    TokenInfo("0x4200000000000000000000000000000000000006", "WETH", "Wrapped Ether", 18),
    TokenInfo("0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", "DAI", "Dai Stablecoin", 18),
)

# SPL mints; addresses are case-sensitive
_SOLANA: Tuple[TokenInfo, ...] = (
    TokenInfo("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "USDC", "USD Coin", 6),
    TokenInfo("Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", "USDT", "Tether USD", 6),
    TokenInfo("So11111111111111111111111111111111111111112", "WSOL", "Wrapped SOL", 9),
    TokenInfo("JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", "JUP", "Jupiter", 6),
    TokenInfo("mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So", "mSOL", "Marinade Staked SOL", 9),
    TokenInfo("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "BONK", "Bonk", 5),
)

TOKEN_REGISTRY: Dict[str, Tuple[TokenInfo, ...]] = {
    "ethereum": _ETHEREUM,
    "polygon": _POLYGON,
    "arbitrum": _ARBITRUM,
    "optimism": _OPTIMISM,
    "base": _BASE,
    "solana": _SOLANA,
}

STABLECOIN_SYMBOLS = frozenset({"USDC", "USDT", "DAI", "BUSD", "FRAX"})

WRAPPED_NATIVE_SYMBOLS: Dict[str, str] = {
    "ethereum": "WETH",
    "polygon": "WMATIC",
    "arbitrum": "WETH",
    "optimism": "WETH",
    "base": "WETH",
    "solana": "WSOL",
}


class TokenRegistry:
    """Read-only lookups over the token catalog."""

    def __init__(self, registry: Optional[Dict[str, Tuple[TokenInfo, ...]]] = None) -> None:
        self._registry = dict(registry if registry is not None else TOKEN_REGISTRY)

    def get_tokens_for_chain(self, chain: str) -> Tuple[TokenInfo, ...]:
        return self._registry.get(chain, ())

    def get_token_by_symbol(self, chain: str, symbol: str) -> Optional[TokenInfo]:
        wanted = (symbol or "").upper()
        for token in self.get_tokens_for_chain(chain):
            if token.symbol.upper() == wanted:
                return token
        return None

    def get_token_by_address(self, chain: str, address: str) -> Optional[TokenInfo]:
        if not address:
            return None
        if is_solana_chain(chain):
            return next((t for t in self.get_tokens_for_chain(chain) if t.address == address), None)
        wanted = address.lower()
        return next((t for t in self.get_tokens_for_chain(chain) if t.address.lower() == wanted), None)

    def get_all_chains(self) -> Tuple[str, ...]:
        return tuple(self._registry)

    def get_stablecoins(self, chain: str) -> Tuple[TokenInfo, ...]:
        return tuple(t for t in self.get_tokens_for_chain(chain) if t.symbol.upper() in STABLECOIN_SYMBOLS)

    def get_wrapped_native_token(self, chain: str) -> Optional[TokenInfo]:
        symbol = WRAPPED_NATIVE_SYMBOLS.get(chain)
        if not symbol:
            return None
        return self.get_token_by_symbol(chain, symbol)


__all__ = [
    "TokenInfo",
    "TokenRegistry",
    "TOKEN_REGISTRY",
    "STABLECOIN_SYMBOLS",
    "WRAPPED_NATIVE_SYMBOLS",
]
