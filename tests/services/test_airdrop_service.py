"""
Tests for the Airdrop Eligibility Engine
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chainwatch.errors import ChainUnavailable, ConfigurationError
from chainwatch.services.airdrops import (
    AirdropCampaign,
    AirdropRequirement,
    AirdropService,
    derive_status,
)
from chainwatch.types.chain import TransactionRecord

from conftest import FakeClock

EVM_WALLET = "0x1111111111111111111111111111111111111111"
SOL_WALLET = "5tzFkiKscXHK5ZXCGbXZxdw7gTjjD1mBwuoFbhUvuAi9"


def _history(count, chain="ethereum"):
    return [TransactionRecord(hash=f"0x{i}", chain=chain) for i in range(count)]


def _clients(evm_count=0, sol_count=0):
    evm = MagicMock()
    evm.get_recent_transactions = AsyncMock(return_value=_history(evm_count))
    solana = MagicMock()
    solana.get_recent_transactions = AsyncMock(return_value=_history(sol_count, "solana"))
    return evm, solana


# =============================================================================
# Status derivation
# =============================================================================


class TestDeriveStatus:
    """Campaign status plus completed evidence decides the eligibility label."""

    def _campaign(self, status):
        return AirdropCampaign(protocol="Test", chain="ethereum", status=status)

    def test_claiming_needs_evidence(self):
        assert derive_status(self._campaign("claiming"), [], False) == "unknown"
        assert derive_status(self._campaign("claiming"), ["Has on-chain activity"], False) == "eligible"

    def test_completed_campaign_is_claimed(self):
        assert derive_status(self._campaign("completed"), [], False) == "claimed"

    def test_open_campaigns(self):
        campaign = self._campaign("upcoming")

        assert derive_status(campaign, [], True) == "eligible"
        assert derive_status(campaign, ["a", "b"], False) == "eligible"
        assert derive_status(campaign, ["a"], False) == "pending"
        assert derive_status(campaign, [], False) == "unknown"


# =============================================================================
# Eligibility checks
# =============================================================================


class TestEligibility:
    """Wallet evaluation against the built-in catalog."""

    @pytest.mark.asyncio
    async def test_activity_threshold_and_shared_chain_lookup(self):
        evm, solana = _clients(evm_count=12)
        service = AirdropService(evm, solana, clock=FakeClock())

        check = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero", "Eigenlayer"])

        by_protocol = {a.protocol: a for a in check.airdrops}
        assert by_protocol["LayerZero"].status == "eligible"
        assert by_protocol["LayerZero"].completed_requirements == ["Made 12 transactions", "Has on-chain activity"]
        assert by_protocol["Eigenlayer"].status == "pending"
        assert check.chain == "multi-chain"
        evm.get_recent_transactions.assert_awaited_once_with(EVM_WALLET, "ethereum", 50)

    @pytest.mark.asyncio
    async def test_claiming_campaign_on_unmonitored_chain_is_unknown(self):
        evm, solana = _clients(evm_count=30)
        service = AirdropService(evm, solana, clock=FakeClock())

        check = await service.check_airdrop_eligibility(EVM_WALLET, ["starknet"])

        assert len(check.airdrops) == 1
        starknet = check.airdrops[0]
        assert starknet.chain == "starknet"
        assert starknet.status == "unknown"
        assert starknet.completed_requirements == []
        evm.get_recent_transactions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_activity_check_marks_campaign_unknown(self):
        evm, solana = _clients()
        evm.get_recent_transactions.side_effect = ChainUnavailable("ethereum", "eth_getBlockByNumber", "HTTP 503")
        service = AirdropService(evm, solana, clock=FakeClock())

        check = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])

        assert check.airdrops[0].status == "unknown"

    @pytest.mark.asyncio
    async def test_malformed_activity_payload_only_affects_its_campaign(self):
        campaigns = (
            AirdropCampaign("SolThing", "solana", "active", min_tx_count=1),
            AirdropCampaign("Done", "starknet", "completed"),
        )
        evm, solana = _clients()
        solana.get_recent_transactions.side_effect = ValueError("invalid slot 'not-a-slot'")
        service = AirdropService(evm, solana, campaigns=campaigns, clock=FakeClock())

        check = await service.check_airdrop_eligibility(SOL_WALLET)

        assert {a.protocol: a.status for a in check.airdrops} == {"SolThing": "unknown", "Done": "claimed"}

    @pytest.mark.asyncio
    async def test_solana_wallet_skips_evm_activity(self):
        evm, solana = _clients(evm_count=50, sol_count=6)
        service = AirdropService(evm, solana, clock=FakeClock())

        check = await service.check_airdrop_eligibility(SOL_WALLET, ["Jupiter", "LayerZero"])

        by_protocol = {a.protocol: a for a in check.airdrops}
        assert by_protocol["Jupiter"].status == "eligible"
        assert by_protocol["LayerZero"].status == "unknown"
        evm.get_recent_transactions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chain_filter(self):
        evm, solana = _clients(sol_count=1)
        service = AirdropService(evm, solana, clock=FakeClock())

        check = await service.check_solana_airdrop_eligibility(SOL_WALLET)

        assert check.chain == "solana"
        assert {a.chain for a in check.airdrops} == {"solana"}
        assert len(check.airdrops) == 7

    @pytest.mark.asyncio
    async def test_total_potential_value_counts_eligible_only(self):
        campaigns = (
            AirdropCampaign("Alpha", "ethereum", "active", min_tx_count=1, estimated_value_usd=400.0),
            AirdropCampaign("Beta", "ethereum", "active", min_tx_count=100, estimated_value_usd=900.0),
            AirdropCampaign(
                "Gamma",
                "ethereum",
                "upcoming",
                requirements=(AirdropRequirement("Bridge", "bridge"),),
                min_tx_count=2,
                estimated_value_usd=100.0,
            ),
        )
        evm, solana = _clients(evm_count=3)
        service = AirdropService(evm, solana, campaigns=campaigns, clock=FakeClock())

        check = await service.check_airdrop_eligibility(EVM_WALLET)

        assert [a.status for a in check.airdrops] == ["eligible", "pending", "eligible"]
        assert check.total_potential_value == 500.0
        assert check.airdrops[2].requirements == ["Bridge"]

    @pytest.mark.asyncio
    async def test_wallet_required(self):
        evm, solana = _clients()

        with pytest.raises(ConfigurationError):
            await AirdropService(evm, solana).check_airdrop_eligibility("")


# =============================================================================
# Result cache
# =============================================================================


class TestEligibilityCache:
    """Results are memoized for five minutes."""

    @pytest.mark.asyncio
    async def test_cache_hit_returns_identical_result(self):
        clock = FakeClock()
        evm, solana = _clients(evm_count=2)
        service = AirdropService(evm, solana, clock=clock)

        first = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])
        clock.advance(299)
        second = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])

        assert second == first
        assert second.last_checked == first.last_checked
        assert evm.get_recent_transactions.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_recomputed(self):
        clock = FakeClock()
        evm, solana = _clients(evm_count=2)
        service = AirdropService(evm, solana, clock=clock)

        first = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])
        clock.advance(300)
        second = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])

        assert second.last_checked > first.last_checked
        assert evm.get_recent_transactions.await_count == 2

    @pytest.mark.asyncio
    async def test_callers_cannot_mutate_cached_result(self):
        evm, solana = _clients(evm_count=2)
        service = AirdropService(evm, solana, clock=FakeClock())

        first = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])
        first.airdrops.clear()
        second = await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])

        assert len(second.airdrops) == 1

    @pytest.mark.asyncio
    async def test_clear_cache(self):
        evm, solana = _clients(evm_count=2)
        service = AirdropService(evm, solana, clock=FakeClock())

        await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])
        await service.clear_eligibility_cache()
        await service.check_airdrop_eligibility(EVM_WALLET, ["LayerZero"])

        assert evm.get_recent_transactions.await_count == 2


# =============================================================================
# Catalog queries
# =============================================================================


class TestCatalogQueries:
    """Read-only views over the campaign list."""

    def test_lookup_by_protocol_ignores_case(self):
        service = AirdropService(MagicMock(), MagicMock())

        assert service.get_airdrop_by_protocol("JUPITER").token_symbol == "JUP"
        assert service.get_airdrop_by_protocol("nope") is None

    def test_upcoming_listing(self):
        service = AirdropService(MagicMock(), MagicMock())

        listings = {item.protocol: item for item in service.get_upcoming_airdrops("ethereum")}

        assert set(listings) == {"LayerZero", "Eigenlayer"}
        assert listings["LayerZero"].estimated_launch == "TBD"
        assert listings["Eigenlayer"].estimated_launch is None

    def test_active_includes_claiming(self):
        service = AirdropService(MagicMock(), MagicMock())

        assert [c.protocol for c in service.get_active_airdrops("starknet")] == ["Starknet"]

    @pytest.mark.asyncio
    async def test_claimable_and_pending_views(self):
        campaigns = (
            AirdropCampaign("Alpha", "ethereum", "active", min_tx_count=1, claim_url="https://alpha.test/claim"),
            AirdropCampaign("Beta", "ethereum", "active", min_tx_count=1),
            AirdropCampaign("Gamma", "ethereum", "upcoming", min_tx_count=100),
        )
        evm, solana = _clients(evm_count=3)
        service = AirdropService(evm, solana, campaigns=campaigns, clock=FakeClock())

        claimable = await service.get_claimable_airdrops(EVM_WALLET)
        pending = await service.get_pending_airdrops(EVM_WALLET)

        assert [a.protocol for a in claimable] == ["Alpha"]
        assert [a.protocol for a in pending] == ["Gamma"]
        assert evm.get_recent_transactions.await_count == 1
