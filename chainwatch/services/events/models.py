"""
Contract Event Models

Decoded contract events, typed per-pattern arguments, and watch configuration.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .abi import ContractType

DecodedType = Literal["transfer", "approval", "swap", "mint", "burn", "deposit", "withdrawal", "other"]


class TransferArgs(BaseModel):
    kind: Literal["transfer"] = "transfer"
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    operator: Optional[str] = None
    value: Optional[str] = None
    token_id: Optional[str] = None


class ApprovalArgs(BaseModel):
    kind: Literal["approval"] = "approval"
    owner: Optional[str] = None
    spender: Optional[str] = None
    value: Optional[str] = None
    token_id: Optional[str] = None
    approved_for_all: Optional[bool] = None


class SwapArgs(BaseModel):
    kind: Literal["swap"] = "swap"
    sender: Optional[str] = None
    recipient: Optional[str] = None
    amount0_in: Optional[str] = None
    amount1_in: Optional[str] = None
    amount0_out: Optional[str] = None
    amount1_out: Optional[str] = None
    amount0: Optional[str] = None
    amount1: Optional[str] = None


class MintArgs(BaseModel):
    kind: Literal["mint"] = "mint"
    minter: Optional[str] = None
    owner: Optional[str] = None
    amount: Optional[str] = None
    amount0: Optional[str] = None
    amount1: Optional[str] = None


class BurnArgs(BaseModel):
    kind: Literal["burn"] = "burn"
    owner: Optional[str] = None
    to_address: Optional[str] = None
    amount: Optional[str] = None
    amount0: Optional[str] = None
    amount1: Optional[str] = None


class DepositArgs(BaseModel):
    kind: Literal["deposit"] = "deposit"
    user: Optional[str] = None
    reserve: Optional[str] = None
    on_behalf_of: Optional[str] = None
    amount: Optional[str] = None


class WithdrawalArgs(BaseModel):
    kind: Literal["withdrawal"] = "withdrawal"
    user: Optional[str] = None
    reserve: Optional[str] = None
    to_address: Optional[str] = None
    amount: Optional[str] = None


class GenericArgs(BaseModel):
    kind: Literal["other"] = "other"
    values: Dict[str, Any] = Field(default_factory=dict)


EventArgs = Annotated[
    Union[TransferArgs, ApprovalArgs, SwapArgs, MintArgs, BurnArgs, DepositArgs, WithdrawalArgs, GenericArgs],
    Field(discriminator="kind"),
]


class DecodedEventData(BaseModel):
    type: DecodedType
    description: str
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    amount: Optional[str] = None
    value_usd: Optional[float] = None
    args: EventArgs = Field(default_factory=GenericArgs)


class ContractConfig(BaseModel):
    address: str
    chain: str = "ethereum"
    type: Optional[ContractType] = None
    name: Optional[str] = None
    abi: List[str] = Field(default_factory=list, description="Human-readable event signatures")


class ContractEvent(BaseModel):
    contract_address: str
    contract_name: Optional[str] = None
    event_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    transaction_hash: str
    block_number: int
    log_index: int = 0
    timestamp: datetime
    chain: str
    decoded: DecodedEventData


class EventCount(BaseModel):
    event_name: str
    count: int


class EventSummary(BaseModel):
    contract_address: str
    contract_name: Optional[str] = None
    chain: str
    event_counts: Dict[str, int] = Field(default_factory=dict)
    period_start: datetime
    period_end: datetime
    total_events: int = 0
    top_events: List[EventCount] = Field(default_factory=list)
