"""
Airdrop Eligibility Engine

Evaluates a wallet against the campaign catalog. On-chain evidence is limited
to a recent transaction count on chains we have clients for; everything else
in a campaign's requirement list is informational.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ...cache import TTLCache
from ...errors import ConfigurationError
from ...providers.evm import EVMClient
from ...providers.solana import SolanaClient
from ..address import is_solana_chain, is_valid_address_for_chain, normalize_chain, short_address
from .catalog import ALL_CAMPAIGNS
from .models import AirdropCampaign, AirdropInfo, AirdropListing, EligibilityCheck, EligibilityStatus

logger = logging.getLogger(__name__)

SUPPORTED_ACTIVITY_CHAINS = ("ethereum", "polygon", "arbitrum", "optimism", "base", "solana")
ACTIVITY_TX_LIMIT = 50
ELIGIBILITY_TTL_SECONDS = 300


@dataclass(frozen=True)
class WalletActivity:
    tx_count: int

    @property
    def has_activity(self) -> bool:
        return self.tx_count > 0


def derive_status(campaign: AirdropCampaign, completed: Sequence[str], meets_tx_threshold: bool) -> EligibilityStatus:
    if campaign.status == "claiming":
        return "eligible" if completed else "unknown"
    if campaign.status == "completed":
        return "claimed"
    if meets_tx_threshold or len(completed) >= 2:
        return "eligible"
    if completed:
        return "pending"
    return "unknown"


def _info(campaign: AirdropCampaign, status: EligibilityStatus, completed: List[str]) -> AirdropInfo:
    return AirdropInfo(
        protocol=campaign.protocol,
        status=status,
        chain=campaign.chain,
        estimated_value_usd=campaign.estimated_value_usd,
        claim_deadline=campaign.claim_end,
        claim_url=campaign.claim_url,
        requirements=[r.description for r in campaign.requirements],
        completed_requirements=completed,
        snapshot_date=campaign.snapshot_date,
        token_symbol=campaign.token_symbol,
    )


class AirdropService:
    def __init__(
        self,
        evm_client: EVMClient,
        solana_client: SolanaClient,
        *,
        campaigns: Tuple[AirdropCampaign, ...] = ALL_CAMPAIGNS,
        ttl_seconds: float = ELIGIBILITY_TTL_SECONDS,
        max_cached: int = 1000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.evm = evm_client
        self.solana = solana_client
        self.campaigns = tuple(campaigns)
        self._clock = clock
        self._cache = TTLCache(default_ttl=ttl_seconds, max_size=max_cached, clock=clock)

    # ---------------------------
    # Activity
    # ---------------------------
    async def check_wallet_activity(self, address: str, chain: str) -> WalletActivity:
        if is_solana_chain(chain):
            transactions = await self.solana.get_recent_transactions(address, chain, ACTIVITY_TX_LIMIT)
        else:
            transactions = await self.evm.get_recent_transactions(address, chain, ACTIVITY_TX_LIMIT)
        return WalletActivity(tx_count=len(transactions))

    async def _evaluate(
        self,
        wallet: str,
        campaign: AirdropCampaign,
        activity_by_chain: Dict[str, "asyncio.Future[WalletActivity]"],
    ) -> AirdropInfo:
        completed: List[str] = []
        meets_tx_threshold = False

        if campaign.chain in SUPPORTED_ACTIVITY_CHAINS and is_valid_address_for_chain(wallet, campaign.chain):
            if campaign.chain not in activity_by_chain:
                activity_by_chain[campaign.chain] = asyncio.ensure_future(
                    self.check_wallet_activity(wallet, campaign.chain)
                )
            try:
                activity = await activity_by_chain[campaign.chain]
            except Exception as exc:
                logger.warning(
                    "Activity check failed for %s on %s (%s): %s",
                    short_address(wallet),
                    campaign.chain,
                    campaign.protocol,
                    exc,
                )
                return _info(campaign, "unknown", [])

            if campaign.min_tx_count and activity.tx_count >= campaign.min_tx_count:
                completed.append(f"Made {activity.tx_count} transactions")
                meets_tx_threshold = True
            if activity.has_activity:
                completed.append("Has on-chain activity")

        return _info(campaign, derive_status(campaign, completed, meets_tx_threshold), completed)

    # ---------------------------
    # Eligibility
    # ---------------------------
    def _select(self, protocols: Optional[Sequence[str]], chain: Optional[str]) -> List[AirdropCampaign]:
        selected = list(self.campaigns)
        if chain:
            selected = [c for c in selected if c.chain == chain]
        if protocols is not None:
            wanted = {p.lower() for p in protocols}
            selected = [c for c in selected if c.protocol.lower() in wanted]
        return selected

    async def check_airdrop_eligibility(
        self,
        wallet: str,
        protocols: Optional[Sequence[str]] = None,
        chain: Optional[str] = None,
    ) -> EligibilityCheck:
        """Memoized for the TTL by (wallet, chain filter, protocol filter).

        A cache hit returns the earlier result, ``last_checked`` included.
        """
        if not wallet:
            raise ConfigurationError("Wallet address is required")
        chain = normalize_chain(chain) if chain else None

        cache_key = f"{wallet}:{chain or 'all'}:{','.join(protocols) if protocols is not None else 'all'}"
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached.model_copy(deep=True)

        activity_by_chain: Dict[str, "asyncio.Future[WalletActivity]"] = {}
        airdrops = await asyncio.gather(
            *(self._evaluate(wallet, campaign, activity_by_chain) for campaign in self._select(protocols, chain))
        )

        result = EligibilityCheck(
            wallet=wallet,
            chain=chain or "multi-chain",
            airdrops=list(airdrops),
            last_checked=datetime.fromtimestamp(self._clock(), tz=timezone.utc),
            total_potential_value=sum(a.estimated_value_usd or 0.0 for a in airdrops if a.status == "eligible"),
        )
        await self._cache.set(cache_key, result)
        return result.model_copy(deep=True)

    async def check_solana_airdrop_eligibility(
        self, wallet: str, protocols: Optional[Sequence[str]] = None
    ) -> EligibilityCheck:
        return await self.check_airdrop_eligibility(wallet, protocols, "solana")

    async def get_claimable_airdrops(self, wallet: str) -> List[AirdropInfo]:
        check = await self.check_airdrop_eligibility(wallet)
        return [a for a in check.airdrops if a.status == "eligible" and a.claim_url]

    async def get_pending_airdrops(self, wallet: str) -> List[AirdropInfo]:
        check = await self.check_airdrop_eligibility(wallet)
        return [a for a in check.airdrops if a.status == "pending"]

    async def clear_eligibility_cache(self) -> None:
        await self._cache.clear()

    # ---------------------------
    # Catalog queries
    # ---------------------------
    def _by_chain(self, chain: Optional[str]) -> List[AirdropCampaign]:
        if not chain:
            return list(self.campaigns)
        chain = normalize_chain(chain)
        return [c for c in self.campaigns if c.chain == chain]

    def get_upcoming_airdrops(self, chain: Optional[str] = None) -> List[AirdropListing]:
        return [
            AirdropListing(
                protocol=c.protocol,
                chain=c.chain,
                status=c.status,
                requirements=[r.description for r in c.requirements],
                token_symbol=c.token_symbol,
                estimated_launch="TBD" if c.status == "upcoming" else None,
            )
            for c in self._by_chain(chain)
            if c.status in ("upcoming", "active")
        ]

    def get_active_airdrops(self, chain: Optional[str] = None) -> List[AirdropCampaign]:
        return [c for c in self._by_chain(chain) if c.status in ("active", "claiming")]

    def get_airdrop_by_protocol(self, protocol: str) -> Optional[AirdropCampaign]:
        wanted = (protocol or "").lower()
        return next((c for c in self.campaigns if c.protocol.lower() == wanted), None)


__all__ = [
    "AirdropService",
    "WalletActivity",
    "derive_status",
    "SUPPORTED_ACTIVITY_CHAINS",
    "ACTIVITY_TX_LIMIT",
]
