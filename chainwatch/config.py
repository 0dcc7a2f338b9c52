import os

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the RPC variable names used by older deployments."""

        super().model_post_init(__context)

        if not self.solana_rpc_url:
            fallback = os.getenv("HELIUS_RPC_URL")
            object.__setattr__(
                self,
                "solana_rpc_url",
                fallback or "https://api.mainnet-beta.solana.com",
            )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # EVM RPC
    alchemy_api_key: str = Field(default="", description="Alchemy API key")
    evm_rpc_url_template: str = Field(
        default="https://{network}.g.alchemy.com/v2/{api_key}",
        description="Per-chain RPC URL template; {network} is the Alchemy network slug",
    )
    evm_rpc_extra_urls: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Additional RPC endpoints per chain, tried in order after the templated URL",
    )

    # Solana RPC
    solana_rpc_url: str = Field(
        default="",
        description="Solana JSON-RPC endpoint",
        validation_alias=AliasChoices("solana_rpc_url", "solana_rpc"),
    )

    # Price provider
    coingecko_api_key: str = Field(default="", description="Coingecko API key")
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="Coingecko API base URL",
    )

    # Alert delivery
    telegram_api_base_url: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL",
    )

    # Cache Settings
    price_cache_ttl_seconds: int = Field(default=60, ge=1, description="Price quote TTL in seconds")
    eligibility_cache_ttl_seconds: int = Field(
        default=300,
        ge=1,
        description="Airdrop eligibility result TTL in seconds",
    )
    eligibility_cache_max_size: int = Field(default=1000, description="Maximum cached eligibility results")
    event_buffer_capacity: int = Field(
        default=1000,
        ge=1,
        description="Maximum stored events per (chain, contract)",
    )

    # Polling & timeouts
    request_timeout_seconds: int = Field(default=30, description="Request timeout")
    event_poll_interval_seconds: float = Field(
        default=12.0,
        gt=0,
        description="Seconds between log polls for watched contracts",
    )
    gas_poll_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Default gas monitor interval",
    )
    recent_tx_block_window: int = Field(
        default=100,
        ge=1,
        description="Blocks scanned backwards when listing recent EVM transactions",
    )

    def resolve_evm_rpc_urls(self, network: str, chain: str) -> List[str]:
        """Return the ordered RPC endpoints for an EVM chain."""
        urls: List[str] = []
        if self.evm_rpc_url_template:
            urls.append(self.evm_rpc_url_template.format(network=network, api_key=self.alchemy_api_key))
        for extra in self.evm_rpc_extra_urls.get(chain, []):
            if extra and extra not in urls:
                urls.append(extra)
        return urls

    def resolve_solana_rpc_urls(self) -> List[str]:
        return [self.solana_rpc_url] if self.solana_rpc_url else []


# Global settings instance
settings = Settings()


def get_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Build a fresh Settings instance, optionally with explicit overrides."""
    if not overrides:
        return Settings()
    return Settings(**overrides)
