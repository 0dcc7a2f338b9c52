"""Records returned by the chain clients."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

TransactionType = Literal["transfer", "swap", "bridge", "unknown"]


@dataclass(frozen=True)
class TokenBalance:
    token: str
    symbol: str
    decimals: int
    raw_amount: int
    formatted_amount: str


@dataclass(frozen=True)
class SolanaBalance:
    sol: float
    lamports: int


@dataclass(frozen=True)
class SolanaTokenBalance:
    mint: str
    raw_amount: int
    decimals: int
    ui_amount: float
    symbol: str
    formatted_amount: str


class TransactionRecord(BaseModel):
    hash: str = Field(description="Transaction hash or Solana signature")
    from_address: str = Field(default="", description="Sender")
    to_address: Optional[str] = Field(default=None, description="Receiver, None for contract creation")
    value: str = Field(default="0", description="Formatted native or token amount")
    value_usd: float = Field(default=0.0)
    chain: str
    timestamp: Optional[datetime] = None
    type: TransactionType = "transfer"
    token_symbol: Optional[str] = None
    block_number: Optional[int] = None
    status: Optional[str] = Field(default=None, description="success/error where the chain reports it")


class GasQuote(BaseModel):
    chain: str
    base_fee: float = Field(description="Base fee in gwei")
    priority_fee: float = Field(description="Gas price minus base fee, in gwei")
    total_gwei: float = Field(description="Current gas price in gwei")
    usd_cost: float = Field(default=0.0, description="Cost of a 21000-gas transfer in USD")


@dataclass(frozen=True)
class ChainLog:
    """One decoded event as delivered by a chain client watch."""

    chain: str
    address: str
    event_name: str
    args: Dict[str, Any] = field(default_factory=dict)
    transaction_hash: str = ""
    block_number: int = 0
    log_index: int = 0
    timestamp: Optional[datetime] = None
