"""Pydantic settings for the yield router configuration."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from src.core.constants.chains import SUPPORTED_CHAINS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Vault aggregator API
    vault_api_url: str = Field(
        default="https://api.beefy.finance",
        description="Vault aggregator REST base URL",
    )
    supported_chains: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(SUPPORTED_CHAINS),
        description="Chains to pull vaults from",
    )

    # Pool APY API
    pool_apy_api_url: str = Field(
        default="https://yields.llama.fi/pools",
        description="Pool yields endpoint",
    )

    # Arbitrum RPC (lending account reads)
    arb_alchemy_api_key: Optional[str] = Field(default=None, description="Alchemy API key for Arbitrum RPC")
    arbitrum_rpc_endpoint: Optional[str] = Field(
        default=None,
        description="Full Arbitrum RPC URL, takes precedence over the API key",
    )

    # Cache Configuration
    cache_dir: Path = Field(default=Path(".cache/yield-router"), description="Cache directory path")
    cache_ttl_seconds: int = Field(default=300, ge=30, le=3600, description="Catalog cache TTL in seconds")
    request_timeout_seconds: float = Field(default=10.0, gt=0, le=120, description="Per-source fetch timeout")

    # Protocol split
    lending_weight: Decimal = Field(default=Decimal("0.6"), ge=0, le=1, description="Share sent to the lending market")
    pool_weight: Decimal = Field(default=Decimal("0.4"), ge=0, le=1, description="Share sent to liquidity pools")
    platform_fee_percent: Decimal = Field(default=Decimal("10"), ge=0, lt=100, description="Fee taken from gross yield")
    pool_weighting: Literal["fixed", "balances"] = Field(
        default="fixed",
        description="Blend pools with the fixed 60/30/10 split or by the user's pool balances",
    )

    # Risk
    safe_health_factor: Decimal = Field(default=Decimal("1.5"), gt=1, description="Target HF for the MAX button")
    min_health_factor: Decimal = Field(default=Decimal("1.0"), gt=0, description="Hard HF floor")
    default_max_positions: int = Field(default=5, ge=1, le=20, description="Positions per allocation")
    default_borrow_apr: Decimal = Field(default=Decimal("5.2"), ge=0, description="Borrow APR when none is quoted")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("supported_chains", mode="before")
    @classmethod
    def parse_supported_chains(cls, v):
        """Parse comma-separated chain names."""
        if isinstance(v, str):
            if not v.strip():
                return []
            return [chain.strip().lower() for chain in v.split(",") if chain.strip()]
        return v or []

    @field_validator("cache_dir", mode="before")
    @classmethod
    def parse_cache_dir(cls, v):
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v

    @property
    def arbitrum_rpc_url(self) -> Optional[str]:
        """Get Arbitrum RPC URL, from the override or the Alchemy API key."""
        if self.arbitrum_rpc_endpoint:
            return self.arbitrum_rpc_endpoint
        if self.arb_alchemy_api_key:
            return f"https://arb-mainnet.g.alchemy.com/v2/{self.arb_alchemy_api_key}"
        return None

    @property
    def platform_fee(self) -> Decimal:
        """Platform fee as a fraction of gross yield."""
        return self.platform_fee_percent / Decimal("100")

    def ensure_cache_dir(self) -> Path:
        """Ensure cache directory exists and return it."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
