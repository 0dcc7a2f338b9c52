from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field


class AssetBalance(BaseModel):
    token_address: Optional[str] = Field(default=None, description="Token contract or mint address")
    symbol: str = Field(description="Token symbol (e.g. USDC)")
    name: str = Field(default="", description="Full token name")
    decimals: int = Field(description="Token decimal places")
    raw_amount: str = Field(description="Raw balance in the token's smallest unit")
    formatted_amount: str = Field(description="Human readable balance")
    price_usd: float = Field(default=0.0, description="Price per token in USD")
    value_usd: float = Field(default=0.0, description="Total value in USD")


class WalletPortfolio(BaseModel):
    address: str = Field(description="Wallet address")
    chain: str = Field(description="Blockchain network")
    native_symbol: str = Field(description="Native asset symbol")
    native_balance: str = Field(description="Human readable native balance")
    native_balance_usd: float = Field(description="Native balance value in USD")
    tokens: List[AssetBalance] = Field(default_factory=list, description="Non-zero token balances")
    total_value_usd: float = Field(description="Native plus token value in USD")

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class WalletFailure(BaseModel):
    address: str
    chain: str
    error: str


class PortfolioSummary(BaseModel):
    wallets: List[WalletPortfolio] = Field(default_factory=list)
    total_value_usd: float = Field(default=0.0, description="Sum over successful wallets")
    failed: List[WalletFailure] = Field(default_factory=list, description="Wallets that could not be read")
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
