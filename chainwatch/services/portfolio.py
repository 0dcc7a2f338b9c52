"""
Wallet Balance Aggregator

Native balance plus every registry token the wallet holds, priced in USD.
Token lookups that fail are skipped rather than counted as zero; wallets in
a multi-wallet summary are read concurrently and fail independently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Mapping, Union

from ..errors import ChainwatchError, ConfigurationError, UnsupportedChain
from ..providers.evm import EVMClient
from ..providers.solana import SOL_DECIMALS, SolanaClient
from ..types.portfolio import AssetBalance, PortfolioSummary, WalletFailure, WalletPortfolio
from .address import is_valid_address_for_chain, short_address
from .chains import ChainCatalog, WalletAddress
from .prices import PriceService
from .token_registry import TokenRegistry
from .units import format_units, to_float

logger = logging.getLogger(__name__)

WalletInput = Union[WalletAddress, Mapping[str, Any]]


class PortfolioService:
    def __init__(
        self,
        catalog: ChainCatalog,
        evm_client: EVMClient,
        solana_client: SolanaClient,
        prices: PriceService,
        tokens: TokenRegistry,
    ) -> None:
        self.catalog = catalog
        self.evm = evm_client
        self.solana = solana_client
        self.prices = prices
        self.tokens = tokens

    async def get_evm_wallet_balance(self, address: str, chain: str = "ethereum") -> WalletPortfolio:
        config = self.catalog.get(chain)
        if not config.is_evm:
            raise UnsupportedChain(chain)

        native_balance = await self.evm.get_native_balance(address, chain)

        registered = self.tokens.get_tokens_for_chain(chain)
        symbols = [config.native_symbol] + [token.symbol for token in registered]
        prices, *lookups = await asyncio.gather(
            self.prices.get_prices(symbols),
            *(self.evm.get_token_balance(address, token.address, chain) for token in registered),
            return_exceptions=True,
        )
        if isinstance(prices, BaseException):
            raise prices

        holdings: List[AssetBalance] = []
        for token, result in zip(registered, lookups):
            if isinstance(result, Exception):
                logger.debug("Skipping %s on %s for %s: %s", token.symbol, chain, short_address(address), result)
                continue
            if isinstance(result, BaseException):
                raise result
            if result.raw_amount <= 0:
                continue

            price = prices.get(token.symbol.upper(), 0.0)
            holdings.append(
                AssetBalance(
                    token_address=token.address,
                    symbol=token.symbol,
                    name=token.name,
                    decimals=result.decimals,
                    raw_amount=str(result.raw_amount),
                    formatted_amount=result.formatted_amount,
                    price_usd=price,
                    value_usd=to_float(result.formatted_amount) * price,
                )
            )

        native_usd = to_float(native_balance) * prices.get(config.native_symbol, 0.0)
        return WalletPortfolio(
            address=address,
            chain=chain,
            native_symbol=config.native_symbol,
            native_balance=native_balance,
            native_balance_usd=native_usd,
            tokens=holdings,
            total_value_usd=native_usd + sum(item.value_usd for item in holdings),
        )

    async def get_solana_wallet_balance(self, address: str) -> WalletPortfolio:
        balance = await self.solana.get_balance(address)

        try:
            token_balances = await self.solana.get_token_balances(address)
        except ChainwatchError as exc:
            logger.warning("Token accounts unavailable for %s, reporting SOL only: %s", short_address(address), exc)
            token_balances = []

        held = [item for item in token_balances if item.raw_amount > 0]
        prices = await self.prices.get_prices(["SOL"] + [item.symbol for item in held if item.symbol])

        holdings = []
        for item in held:
            price = prices.get(item.symbol.upper(), 0.0) if item.symbol else 0.0
            holdings.append(
                AssetBalance(
                    token_address=item.mint,
                    symbol=item.symbol or "UNKNOWN",
                    name=item.symbol or item.mint,
                    decimals=item.decimals,
                    raw_amount=str(item.raw_amount),
                    formatted_amount=item.formatted_amount,
                    price_usd=price,
                    value_usd=to_float(item.formatted_amount) * price,
                )
            )

        native_usd = balance.sol * prices.get("SOL", 0.0)
        return WalletPortfolio(
            address=address,
            chain="solana",
            native_symbol="SOL",
            native_balance=format_units(balance.lamports, SOL_DECIMALS),
            native_balance_usd=native_usd,
            tokens=holdings,
            total_value_usd=native_usd + sum(item.value_usd for item in holdings),
        )

    async def get_wallet_balance(self, wallet: WalletAddress) -> WalletPortfolio:
        if self.catalog.get(wallet.chain).is_evm:
            return await self.get_evm_wallet_balance(wallet.address, wallet.chain)
        return await self.get_solana_wallet_balance(wallet.address)

    def _validate(self, wallets: Iterable[WalletInput]) -> List[WalletAddress]:
        parsed = []
        for raw in wallets:
            wallet = WalletAddress.parse(raw)
            if not wallet.address:
                raise ConfigurationError("Wallet address is required", chain=wallet.chain)
            self.catalog.get(wallet.chain)
            if not is_valid_address_for_chain(wallet.address, wallet.chain):
                raise ConfigurationError(
                    f"Invalid {wallet.chain} address: {wallet.address!r}", address=wallet.address, chain=wallet.chain
                )
            parsed.append(wallet)
        return parsed

    async def get_portfolio_summary(self, wallets: Iterable[WalletInput]) -> PortfolioSummary:
        """Aggregate every wallet concurrently; failed wallets are listed, not fatal.

        Malformed wallet input raises ``ConfigurationError`` before any network call.
        """
        parsed = self._validate(wallets)
        results = await asyncio.gather(
            *(self.get_wallet_balance(wallet) for wallet in parsed),
            return_exceptions=True,
        )

        summary = PortfolioSummary()
        for wallet, result in zip(parsed, results):
            if isinstance(result, Exception):
                logger.warning("Portfolio lookup failed for %s on %s: %s", short_address(wallet.address), wallet.chain, result)
                summary.failed.append(WalletFailure(address=wallet.address, chain=wallet.chain, error=str(result)))
                continue
            if isinstance(result, BaseException):
                raise result
            summary.wallets.append(result)

        summary.total_value_usd = sum(item.total_value_usd for item in summary.wallets)
        return summary


__all__ = ["PortfolioService", "WalletInput"]
