"""
Configuration settings for the liquidation bot.
"""

from typing import Any, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import ConfigurationError
from .utils import normalize_address, validate_address, validate_private_key

DEFAULT_APPROVAL_AMOUNT = 100_000 * 10 ** 18


class Settings(BaseSettings):
    """Liquidation bot settings, read from LIQUIDATOR_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="LIQUIDATOR_",
        env_file=".env",
        extra="ignore",
    )

    # Chain
    rpc_url: str = "http://127.0.0.1:8545"
    ledger_address: str
    token_address: str

    # Identity: a local key, otherwise an unlocked node account
    private_key: Optional[str] = None
    signer_index: int = Field(2, ge=0)

    # Scheduling
    poll_interval: float = Field(3.0, gt=0)
    call_timeout: float = Field(10.0, gt=0)
    receipt_timeout: float = Field(60.0, gt=0)

    # Failure reporting
    repeated_failure_threshold: int = Field(3, ge=1)

    # Startup funding
    fund_on_startup: bool = True
    approval_amount: int = Field(DEFAULT_APPROVAL_AMOUNT, ge=0)

    # Monitoring
    metrics_port: Optional[int] = Field(None, ge=1, le=65535)
    log_level: str = "INFO"

    @field_validator("ledger_address", "token_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not validate_address(value):
            raise ValueError(f"not a valid address: {value!r}")
        return normalize_address(value)

    @field_validator("private_key")
    @classmethod
    def _check_private_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not validate_private_key(value):
            raise ValueError("private key must be 32 bytes of hex")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value!r}")
        return level


def load_settings(**overrides: Any) -> Settings:
    """
    Build settings from the environment, with explicit overrides taking
    precedence. Overrides that are None are ignored.

    Raises:
        ConfigurationError: if a required value is missing or invalid
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
