from dataclasses import dataclass
from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

CampaignStatus = Literal["active", "upcoming", "completed", "claiming"]
EligibilityStatus = Literal["eligible", "not_eligible", "claimed", "pending", "unknown"]
RequirementType = Literal[
    "transaction_count",
    "volume",
    "protocol_interaction",
    "bridge",
    "hold_token",
    "time_active",
    "other",
]


@dataclass(frozen=True)
class AirdropRequirement:
    description: str
    type: RequirementType
    threshold: Optional[float] = None


@dataclass(frozen=True)
class AirdropCampaign:
    protocol: str
    chain: str
    status: CampaignStatus
    requirements: Tuple[AirdropRequirement, ...] = ()
    token_symbol: Optional[str] = None
    snapshot_date: Optional[datetime] = None
    claim_start: Optional[datetime] = None
    claim_end: Optional[datetime] = None
    claim_url: Optional[str] = None
    total_allocation: Optional[float] = None
    min_tx_count: Optional[int] = None
    min_volume_usd: Optional[float] = None
    contract_addresses: Tuple[str, ...] = ()
    estimated_value_usd: Optional[float] = None


class AirdropInfo(BaseModel):
    protocol: str
    status: EligibilityStatus
    chain: str
    estimated_tokens: Optional[float] = None
    estimated_value_usd: Optional[float] = None
    claim_deadline: Optional[datetime] = None
    claim_url: Optional[str] = None
    requirements: List[str] = Field(default_factory=list)
    completed_requirements: List[str] = Field(default_factory=list)
    snapshot_date: Optional[datetime] = None
    token_symbol: Optional[str] = None


class EligibilityCheck(BaseModel):
    wallet: str
    chain: str = Field(description="Chain filter, or multi-chain")
    airdrops: List[AirdropInfo] = Field(default_factory=list)
    last_checked: datetime
    total_potential_value: float = 0.0


class AirdropListing(BaseModel):
    protocol: str
    chain: str
    status: CampaignStatus
    requirements: List[str] = Field(default_factory=list)
    token_symbol: Optional[str] = None
    estimated_launch: Optional[str] = None
