"""
Tests for the Wallet Balance Aggregator

Chain clients are stubbed; prices come from a real PriceService over a mocked
provider so the cache path is exercised too.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chainwatch.errors import ChainUnavailable, ConfigurationError, UnsupportedChain
from chainwatch.services.chains import WalletAddress
from chainwatch.services.portfolio import PortfolioService
from chainwatch.services.prices import PriceService
from chainwatch.services.token_registry import TokenInfo, TokenRegistry
from chainwatch.types.chain import SolanaBalance, SolanaTokenBalance, TokenBalance

from conftest import FakeClock

EVM_WALLET = "0x1111111111111111111111111111111111111111"
SOL_WALLET = "5tzFkiKscXHK5ZXCGbXZxdw7gTjjD1mBwuoFbhUvuAi9"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
LINK = "0x514910771AF9Ca656af840dff83E8264EcF986CA"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

TWO_TOKENS = TokenRegistry(
    {
        "ethereum": (
            TokenInfo(USDC, "USDC", "USD Coin", 6),
            TokenInfo(LINK, "LINK", "Chainlink", 18),
        )
    }
)


def _prices():
    provider = AsyncMock()
    provider.get_simple_prices.return_value = {
        "ethereum": {"usd": 2500.0},
        "usd-coin": {"usd": 1.0},
        "chainlink": {"usd": 15.0},
        "solana": {"usd": 150.0},
    }
    return PriceService(provider, clock=FakeClock())


def _zero(symbol, decimals=18):
    return TokenBalance(token=symbol, symbol=symbol, decimals=decimals, raw_amount=0, formatted_amount="0")


@pytest.fixture
def evm():
    client = MagicMock()
    client.get_native_balance = AsyncMock(return_value="2")
    client.get_token_balance = AsyncMock(side_effect=lambda wallet, token, chain: _zero("X"))
    return client


@pytest.fixture
def solana():
    client = MagicMock()
    client.get_balance = AsyncMock(return_value=SolanaBalance(sol=3.0, lamports=3_000_000_000))
    client.get_token_balances = AsyncMock(return_value=[])
    return client


# =============================================================================
# Single wallet
# =============================================================================


class TestWalletBalance:
    """Per-wallet aggregation."""

    @pytest.mark.asyncio
    async def test_zero_token_wallet_totals_native_times_price(self, catalog, evm, solana):
        service = PortfolioService(catalog, evm, solana, _prices(), TWO_TOKENS)

        portfolio = await service.get_evm_wallet_balance(EVM_WALLET, "ethereum")

        assert portfolio.tokens == []
        assert portfolio.native_balance == "2"
        assert portfolio.native_balance_usd == 5000.0
        assert portfolio.total_value_usd == 5000.0

    @pytest.mark.asyncio
    async def test_held_tokens_are_priced(self, catalog, evm, solana):
        def token_balance(wallet, token, chain):
            if token == USDC:
                return TokenBalance("USD Coin", "USDC", 6, 250_000_000, "250")
            return _zero("LINK")

        evm.get_token_balance.side_effect = token_balance
        service = PortfolioService(catalog, evm, solana, _prices(), TWO_TOKENS)

        portfolio = await service.get_evm_wallet_balance(EVM_WALLET, "ethereum")

        assert [t.symbol for t in portfolio.tokens] == ["USDC"]
        assert portfolio.tokens[0].value_usd == 250.0
        assert portfolio.tokens[0].raw_amount == "250000000"
        assert portfolio.token_count == 1
        assert portfolio.total_value_usd == 5250.0

    @pytest.mark.asyncio
    async def test_failed_token_lookup_is_skipped_not_zeroed(self, catalog, evm, solana):
        def token_balance(wallet, token, chain):
            if token == USDC:
                raise ChainUnavailable("ethereum", "eth_call", "timeout")
            return TokenBalance("Chainlink", "LINK", 18, 10 * 10**18, "10")

        evm.get_token_balance.side_effect = token_balance
        service = PortfolioService(catalog, evm, solana, _prices(), TWO_TOKENS)

        portfolio = await service.get_evm_wallet_balance(EVM_WALLET, "ethereum")

        assert [t.symbol for t in portfolio.tokens] == ["LINK"]
        assert portfolio.total_value_usd == 5000.0 + 150.0

    @pytest.mark.asyncio
    async def test_solana_wallet_without_token_accounts_reports_sol(self, catalog, evm, solana):
        solana.get_token_balances.side_effect = ChainUnavailable("solana", "getTokenAccountsByOwner")
        service = PortfolioService(catalog, evm, solana, _prices(), TokenRegistry())

        portfolio = await service.get_solana_wallet_balance(SOL_WALLET)

        assert portfolio.native_balance == "3"
        assert portfolio.total_value_usd == 450.0
        assert portfolio.tokens == []

    @pytest.mark.asyncio
    async def test_solana_tokens_priced_by_symbol(self, catalog, evm, solana):
        solana.get_token_balances.return_value = [
            SolanaTokenBalance(USDC_MINT, 5_000_000, 6, 5.0, "USDC", "5"),
            SolanaTokenBalance("Unpriced1111111111111111111111111111111111", 0, 6, 0.0, "", "0"),
        ]
        service = PortfolioService(catalog, evm, solana, _prices(), TokenRegistry())

        portfolio = await service.get_solana_wallet_balance(SOL_WALLET)

        assert [t.symbol for t in portfolio.tokens] == ["USDC"]
        assert portfolio.total_value_usd == 455.0


# =============================================================================
# Multi-wallet summary
# =============================================================================


class TestPortfolioSummary:
    """Concurrent, independently failing wallets."""

    @pytest.mark.asyncio
    async def test_one_wallet_failure_does_not_block_others(self, catalog, evm, solana):
        evm.get_native_balance.side_effect = ChainUnavailable("ethereum", "eth_getBalance", "HTTP 503")
        service = PortfolioService(catalog, evm, solana, _prices(), TWO_TOKENS)

        summary = await service.get_portfolio_summary(
            [
                {"address": EVM_WALLET, "chain": "ethereum"},
                WalletAddress(chain="solana", address=SOL_WALLET),
            ]
        )

        assert [w.chain for w in summary.wallets] == ["solana"]
        assert summary.total_value_usd == 450.0
        assert len(summary.failed) == 1
        assert summary.failed[0].address == EVM_WALLET
        assert "HTTP 503" in summary.failed[0].error

    @pytest.mark.asyncio
    async def test_malformed_wallet_is_rejected_up_front(self, catalog, evm, solana):
        service = PortfolioService(catalog, evm, solana, _prices(), TWO_TOKENS)

        with pytest.raises(ConfigurationError):
            await service.get_portfolio_summary([{"address": "not-an-address", "chain": "ethereum"}])
        with pytest.raises(UnsupportedChain):
            await service.get_portfolio_summary([{"address": EVM_WALLET, "chain": "avalanche"}])

        evm.get_native_balance.assert_not_awaited()
