"""Application configuration using pydantic-settings.

Every setting can be overridden with an environment variable of the same
name (upper-case) or through a `.env` file in the working directory.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")
    log_level: str = Field(default="INFO", description="Root log level")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3000, description="API server port")
    cors_origins: str = Field(
        default="http://localhost:3000", description="Comma-separated list of allowed CORS origins"
    )

    # ======================
    # Safety
    # ======================
    dry_run: bool = Field(
        default=True,
        description="Use simulated providers and execution (no real quotes or transactions)",
    )

    # ======================
    # Chain RPC Endpoints
    # ======================
    starknet_network: str = Field(default="sepolia", description="Starknet network name")
    starknet_rpc_url: str = Field(default="", description="Starknet JSON-RPC URL")
    ethereum_rpc_url: str = Field(default="", description="Ethereum RPC URL")
    polygon_rpc_url: str = Field(default="", description="Polygon RPC URL")
    arbitrum_rpc_url: str = Field(default="", description="Arbitrum RPC URL")
    optimism_rpc_url: str = Field(default="", description="Optimism RPC URL")

    # ======================
    # Quote Providers
    # ======================
    avnu_api_url: str = Field(
        default="https://sepolia.api.avnu.fi", description="AVNU API base URL"
    )
    oneinch_api_key: str = Field(default="", description="1inch API key")
    oneinch_api_url: str = Field(
        default="https://api.1inch.dev/swap/v6.0", description="1inch swap API base URL"
    )
    provider_timeout: float = Field(
        default=15.0, description="Timeout in seconds for a single provider request"
    )

    # ======================
    # Storage / Cache
    # ======================
    database_url: str = Field(default="", description="Database URL (reported only)")
    redis_url: str = Field(default="", description="Redis URL used for the cache probe")

    # ======================
    # Routing
    # ======================
    route_validity_seconds: int = Field(
        default=300, gt=0, description="How long a discovered route stays valid (5 minutes)"
    )
    default_swap_slippage: float = Field(
        default=0.005, ge=0, le=1, description="Default slippage for same-chain swaps (0.5%)"
    )
    default_bridge_slippage: float = Field(
        default=0.01, ge=0, le=1, description="Default slippage for cross-chain routes (1%)"
    )
    execution_slippage: float = Field(
        default=0.05, ge=0, le=1, description="Slippage used when executing an intent (5%)"
    )
    reference_currency: str = Field(
        default="USD", description="Unit every route cost is normalised into"
    )
    reference_prices: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "USD": Decimal("1"),
            "USDC": Decimal("1"),
            "USDT": Decimal("1"),
            "DAI": Decimal("1"),
            "ETH": Decimal("3900"),
            "WETH": Decimal("3900"),
            "STRK": Decimal("0.45"),
            "MATIC": Decimal("0.62"),
            "POL": Decimal("0.62"),
        },
        description="Price of each fee currency in the reference currency",
    )

    # ======================
    # Health
    # ======================
    health_check_timeout: float = Field(
        default=5.0, gt=0, description="Timeout in seconds for each dependency probe"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def starknet_chain_id(self) -> str:
        """Namespaced chain id of the configured Starknet network."""
        return f"starknet:{self.starknet_network}"

    @property
    def allowed_origins(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_rpc_url(self, chain_id: str) -> str:
        """Get RPC URL for a chain id (namespaced or bare EVM id)."""
        if chain_id.startswith("starknet:"):
            return self.starknet_rpc_url
        rpc_map = {
            "1": self.ethereum_rpc_url,
            "137": self.polygon_rpc_url,
            "42161": self.arbitrum_rpc_url,
            "10": self.optimism_rpc_url,
        }
        return rpc_map.get(chain_id.removeprefix("eip155:"), "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url) or "(not set)",
            "redis_url": self._redact_url(self.redis_url) or "(not set)",
            "chains": {
                self.starknet_chain_id: {"rpc": self.starknet_rpc_url or "(not set)"},
                "1": {"rpc": self.ethereum_rpc_url or "(not set)"},
                "137": {"rpc": self.polygon_rpc_url or "(not set)"},
                "42161": {"rpc": self.arbitrum_rpc_url or "(not set)"},
                "10": {"rpc": self.optimism_rpc_url or "(not set)"},
            },
            "providers": {
                "avnu": self.avnu_api_url,
                "oneinch": {
                    "url": self.oneinch_api_url,
                    "api_key": "***" if self.oneinch_api_key else "(not set)",
                },
            },
            "routing": {
                "route_validity_seconds": self.route_validity_seconds,
                "reference_currency": self.reference_currency,
                "swap_slippage": self.default_swap_slippage,
                "bridge_slippage": self.default_bridge_slippage,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials in a connection URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
