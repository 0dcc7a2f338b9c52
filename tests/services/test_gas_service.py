"""Tests for the gas price monitor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chainwatch.errors import ChainUnavailable, ConfigurationError, UnsupportedChain
from chainwatch.services.gas import OFF_PEAK_HINT, GasService, gas_alert_for
from chainwatch.types.chain import GasQuote

from conftest import wait_for


def _quote(chain, gwei):
    return GasQuote(chain=chain, base_fee=gwei - 1, priority_fee=1, total_gwei=gwei, usd_cost=0.0)


def _service(catalog, gwei_by_chain):
    evm = MagicMock()

    async def gas_price(chain, native_price_usd=0.0):
        gwei = gwei_by_chain[chain]
        if isinstance(gwei, Exception):
            raise gwei
        return _quote(chain, gwei)

    evm.get_gas_price = AsyncMock(side_effect=gas_price)
    prices = MagicMock()
    prices.get_prices = AsyncMock(return_value={"ETH": 2500.0, "POL": 0.5})
    return GasService(catalog, evm, prices), evm


class TestGasAlertRule:
    def test_thresholds_are_inclusive(self):
        assert gas_alert_for(_quote("ethereum", 15), 15, 50).type == "low"
        assert gas_alert_for(_quote("ethereum", 50), 15, 50).type == "high"
        assert gas_alert_for(_quote("ethereum", 30), 15, 50) is None

    def test_low_wins_on_overlap(self):
        alert = gas_alert_for(_quote("ethereum", 20), 25, 10)

        assert alert.type == "low"
        assert alert.threshold == 25


class TestCurrentGasPrices:
    @pytest.mark.asyncio
    async def test_failed_chain_is_skipped(self, catalog):
        service, _ = _service(
            catalog,
            {"ethereum": 12, "polygon": ChainUnavailable("polygon", "eth_gasPrice", "HTTP 502"), "base": 0.1},
        )

        quotes = await service.get_current_gas_prices(["ethereum", "matic", "base"])

        assert [q.chain for q in quotes] == ["ethereum", "base"]

    @pytest.mark.asyncio
    async def test_native_price_is_passed_through(self, catalog):
        service, evm = _service(catalog, {"ethereum": 12})

        await service.get_current_gas_prices(["ethereum"])

        evm.get_gas_price.assert_awaited_once_with("ethereum", 2500.0)

    @pytest.mark.asyncio
    async def test_non_evm_chain_is_rejected(self, catalog):
        service, _ = _service(catalog, {})

        with pytest.raises(UnsupportedChain):
            await service.get_current_gas_prices(["solana"])


class TestMonitorGasPrices:
    @pytest.mark.asyncio
    async def test_initial_check_runs_before_return(self, catalog):
        service, _ = _service(catalog, {"ethereum": 12})
        received = []

        subscription = await service.monitor_gas_prices(15, 50, ["ethereum"], received.append, interval_seconds=3600)
        await subscription.flush()
        await subscription.aclose()

        assert len(received) == 1
        assert received[0].type == "low"
        assert received[0].current_gwei == 12
        assert received[0].threshold == 15

    @pytest.mark.asyncio
    async def test_repeats_every_interval(self, catalog):
        service, evm = _service(catalog, {"ethereum": 80})
        received = []

        subscription = await service.monitor_gas_prices(15, 50, ["ethereum"], received.append, interval_seconds=0.01)
        try:
            await wait_for(lambda: len(received) >= 3)
        finally:
            await subscription.aclose()

        assert {alert.type for alert in received} == {"high"}
        assert evm.get_gas_price.await_count >= 3

    @pytest.mark.asyncio
    async def test_callback_required(self, catalog):
        service, _ = _service(catalog, {"ethereum": 12})

        with pytest.raises(ConfigurationError):
            await service.monitor_gas_prices(15, 50, ["ethereum"])


class TestOptimalTransactionTime:
    @pytest.mark.parametrize(
        "gwei,likelihood,suggested",
        [
            (10, "high", "Now"),
            (20, "high", "Now"),
            (35, "medium", OFF_PEAK_HINT),
            (40, "medium", OFF_PEAK_HINT),
            (41, "low", OFF_PEAK_HINT),
        ],
    )
    @pytest.mark.asyncio
    async def test_likelihood(self, catalog, gwei, likelihood, suggested):
        service, _ = _service(catalog, {"ethereum": gwei})

        estimate = await service.get_optimal_transaction_time("ethereum", target_gwei=20)

        assert estimate.likelihood == likelihood
        assert estimate.suggested_time == suggested
        assert estimate.current_gwei == gwei
