"""Static airdrop campaign catalog. Extended only by redeploying."""

from datetime import datetime, timezone
from typing import Tuple

from .models import AirdropCampaign, AirdropRequirement as Req


def _date(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


EVM_CAMPAIGNS: Tuple[AirdropCampaign, ...] = (
    # Live claiming
    AirdropCampaign(
        protocol="Starknet",
        chain="starknet",
        status="claiming",
        token_symbol="STRK",
        claim_url="https://provisions.starknet.io/",
        requirements=(
            Req("Bridge to Starknet before snapshot", "bridge"),
            Req("Make transactions on Starknet", "transaction_count", 5),
            Req("Interact with Starknet dApps", "protocol_interaction"),
        ),
        snapshot_date=_date(2024, 2, 14),
        claim_start=_date(2024, 2, 20),
    ),
    # Upcoming / speculative
    AirdropCampaign(
        protocol="LayerZero",
        chain="ethereum",
        status="upcoming",
        token_symbol="ZRO",
        requirements=(
            Req("Use LayerZero bridges (Stargate, etc.)", "bridge", 3),
            Req("Bridge to multiple chains", "protocol_interaction", 5),
            Req("Maintain bridge activity over time", "time_active"),
            Req("Volume > $1,000", "volume", 1000),
        ),
        min_tx_count=10,
        min_volume_usd=1000,
        contract_addresses=("0x8731d54E9D02c286767d56ac03e8037C07e01e98",),  # Stargate Router
    ),
    AirdropCampaign(
        protocol="zkSync Era",
        chain="zksync",
        status="upcoming",
        requirements=(
            Req("Bridge ETH to zkSync Era", "bridge"),
            Req("Make 10+ transactions", "transaction_count", 10),
            Req("Use native DEXs (SyncSwap, Mute)", "protocol_interaction"),
            Req("Deploy a smart contract", "other"),
            Req("Be active across multiple months", "time_active"),
        ),
        min_tx_count=10,
        min_volume_usd=500,
    ),
    AirdropCampaign(
        protocol="Scroll",
        chain="scroll",
        status="upcoming",
        requirements=(
            Req("Bridge to Scroll mainnet", "bridge"),
            Req("Interact with Scroll dApps", "protocol_interaction"),
            Req("Make 5+ transactions", "transaction_count", 5),
            Req("Provide liquidity", "other"),
        ),
        min_tx_count=5,
    ),
    AirdropCampaign(
        protocol="Linea",
        chain="linea",
        status="upcoming",
        requirements=(
            Req("Bridge to Linea", "bridge"),
            Req("Complete Linea Voyage tasks", "protocol_interaction"),
            Req("Use Linea DEXs", "protocol_interaction"),
            Req("Make 10+ transactions", "transaction_count", 10),
        ),
        min_tx_count=10,
    ),
    AirdropCampaign(
        protocol="Base",
        chain="base",
        status="upcoming",
        requirements=(
            Req("Bridge to Base", "bridge"),
            Req("Use native dApps (Aerodrome, etc.)", "protocol_interaction"),
            Req("Hold NFTs on Base", "hold_token"),
            Req("Active user over time", "time_active"),
        ),
        min_tx_count=20,
    ),
    AirdropCampaign(
        protocol="Blast",
        chain="blast",
        status="active",
        token_symbol="BLAST",
        claim_url="https://blast.io/",
        requirements=(
            Req("Bridge ETH/USDB to Blast", "bridge"),
            Req("Earn Blast Points", "protocol_interaction"),
            Req("Earn Gold through dApps", "protocol_interaction"),
            Req("Maintain deposits over time", "time_active"),
        ),
    ),
    AirdropCampaign(
        protocol="Eigenlayer",
        chain="ethereum",
        status="active",
        token_symbol="EIGEN",
        requirements=(
            Req("Restake ETH or LSTs", "protocol_interaction"),
            Req("Earn Eigenlayer points", "other"),
            Req("Delegate to operators", "protocol_interaction"),
        ),
        contract_addresses=("0x858646372CC42E1A627fcE94aa7A7033e7CF075A",),  # Strategy Manager
    ),
)

SOLANA_CAMPAIGNS: Tuple[AirdropCampaign, ...] = (
    AirdropCampaign(
        protocol="Jupiter",
        chain="solana",
        status="active",
        token_symbol="JUP",
        claim_url="https://jup.ag/airdrop",
        requirements=(
            Req("Use Jupiter aggregator for swaps", "protocol_interaction"),
            Req("Swap volume > $1,000", "volume", 1000),
            Req("Active before snapshot date", "time_active"),
        ),
        min_tx_count=5,
        min_volume_usd=1000,
    ),
    AirdropCampaign(
        protocol="Tensor",
        chain="solana",
        status="active",
        token_symbol="TNSR",
        claim_url="https://www.tensor.trade/",
        requirements=(
            Req("Trade NFTs on Tensor", "protocol_interaction"),
            Req("List NFTs on Tensor", "other"),
            Req("Earn Tensor points", "other"),
        ),
        min_tx_count=10,
    ),
    AirdropCampaign(
        protocol="Marinade",
        chain="solana",
        status="active",
        token_symbol="MNDE",
        claim_url="https://marinade.finance/",
        requirements=(
            Req("Stake SOL with Marinade", "protocol_interaction"),
            Req("Hold mSOL", "hold_token"),
            Req("Provide liquidity for mSOL", "other"),
        ),
    ),
    AirdropCampaign(
        protocol="Kamino",
        chain="solana",
        status="active",
        token_symbol="KMNO",
        requirements=(
            Req("Use Kamino vaults", "protocol_interaction"),
            Req("Provide liquidity", "other"),
            Req("Earn Kamino points", "other"),
        ),
        min_volume_usd=500,
    ),
    AirdropCampaign(
        protocol="Parcl",
        chain="solana",
        status="upcoming",
        token_symbol="PRCL",
        requirements=(
            Req("Trade real estate indices on Parcl", "protocol_interaction"),
            Req("Hold positions over time", "time_active"),
            Req("Earn Parcl points", "other"),
        ),
    ),
    AirdropCampaign(
        protocol="Drift",
        chain="solana",
        status="active",
        token_symbol="DRIFT",
        claim_url="https://www.drift.trade/",
        requirements=(
            Req("Trade perpetuals on Drift", "protocol_interaction"),
            Req("Trading volume > $5,000", "volume", 5000),
            Req("Maintain positions", "time_active"),
        ),
        min_tx_count=20,
        min_volume_usd=5000,
    ),
    AirdropCampaign(
        protocol="Marginfi",
        chain="solana",
        status="active",
        token_symbol="MRGN",
        requirements=(
            Req("Lend or borrow on Marginfi", "protocol_interaction"),
            Req("Earn points through activity", "other"),
            Req("Maintain deposits over time", "time_active"),
        ),
    ),
)

ALL_CAMPAIGNS: Tuple[AirdropCampaign, ...] = EVM_CAMPAIGNS + SOLANA_CAMPAIGNS
