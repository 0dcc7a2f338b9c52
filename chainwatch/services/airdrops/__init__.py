"""Airdrop campaign catalog and eligibility evaluation"""

from .catalog import ALL_CAMPAIGNS, EVM_CAMPAIGNS, SOLANA_CAMPAIGNS
from .engine import AirdropService, WalletActivity, derive_status
from .models import AirdropCampaign, AirdropInfo, AirdropListing, AirdropRequirement, EligibilityCheck

__all__ = [
    "ALL_CAMPAIGNS",
    "EVM_CAMPAIGNS",
    "SOLANA_CAMPAIGNS",
    "AirdropService",
    "WalletActivity",
    "derive_status",
    "AirdropCampaign",
    "AirdropInfo",
    "AirdropListing",
    "AirdropRequirement",
    "EligibilityCheck",
]
