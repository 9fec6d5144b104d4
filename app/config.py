import json
from decimal import Decimal
from functools import lru_cache
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # chain defaults
    default_chain_id: int = 4202  # Lisk Sepolia
    rpc_urls: str = ""  # JSON: {"1": "https://...", "4202": "https://..."}
    static_gas_estimates: str = ""  # JSON: {"4202": "0.00021"}

    # exchange comparison oracle
    slippage_api_base_url: str = "https://web-production-97230.up.railway.app"
    slippage_timeout_s: float = 15.0

    # guardian thresholds
    low_balance_threshold: Decimal = Decimal("0.01")
    near_zero_balance_threshold: Decimal = Decimal("0.001")

    # chat transport
    conversation_ttl_seconds: int = 1200

    log_level: str = "INFO"
    log_json: bool = False
    log_redact_addresses: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def DEFAULT_CHAIN_ID(self) -> int:
        return self.default_chain_id

    @property
    def SLIPPAGE_API_BASE_URL(self) -> str:
        return self.slippage_api_base_url.rstrip("/")

    @property
    def RPC_URLS(self) -> str:
        return self.rpc_urls

    def static_gas_estimate_for_chain(self, chain_id: int) -> Decimal | None:
        if not self.static_gas_estimates:
            return None
        try:
            data: Dict[str, str] = json.loads(self.static_gas_estimates)
        except Exception as e:
            raise ValueError("STATIC_GAS_ESTIMATES must be valid JSON") from e
        raw = data.get(str(chain_id))
        if raw is None:
            return None
        return Decimal(str(raw))


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader (process-level).
    """
    return Settings()
