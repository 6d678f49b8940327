"""Application settings and configuration management."""

from pathlib import Path
from typing import Literal

import structlog
import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)

MSOL_MINT = "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"
WHIRLPOOL_PROGRAM_ID = "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc"


class AppSettings(BaseSettings):
    """Scan settings with environment variable support."""

    # Endpoints
    rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com", description="Solana RPC URL"
    )
    whirlpool_list_url: str = Field(
        default="https://api.mainnet.orca.so/v1/whirlpool/list",
        description="Orca whirlpool catalog URL",
    )
    whirlpool_program_id: str = Field(
        default=WHIRLPOOL_PROGRAM_ID, description="Whirlpool program address"
    )

    # Target token
    target_mint: str = Field(default=MSOL_MINT, description="Mint to aggregate")
    target_symbol: str = Field(default="mSOL", description="Symbol used in output")
    target_decimals: int = Field(
        default=9, ge=0, le=19, description="Decimals of the target mint"
    )
    source_name: str = Field(default="Orca", description="DEX name used in output")

    # Transport
    rpc_batch_size: int = Field(
        default=100, ge=1, le=100, description="Addresses per getMultipleAccounts"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="HTTP request timeout in seconds"
    )
    max_attempts: int = Field(
        default=1, ge=1, description="Attempts per network call (1 disables retry)"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings(yaml_path: str | None = None, **overrides) -> AppSettings:
    """Load settings from an optional YAML file and environment variables.

    Args:
        yaml_path: Path to YAML configuration file, or None for defaults
        **overrides: Values that take precedence over the file (e.g. CLI flags)

    Returns:
        AppSettings instance with loaded configuration

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValidationError: If configuration is invalid
        ValueError: If the YAML cannot be parsed
    """
    yaml_config: dict = {}

    if yaml_path is not None:
        yaml_file = Path(yaml_path)
        if not yaml_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        try:
            with open(yaml_file, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML configuration", error=str(e))
            raise ValueError(f"Invalid YAML configuration: {e}") from e

        if not isinstance(yaml_config, dict):
            raise ValueError(
                f"Invalid YAML configuration: expected a mapping in {yaml_path}"
            )

        logger.info("Loading configuration", yaml_path=yaml_path)

    yaml_config.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = AppSettings(**yaml_config)
    except ValidationError as e:
        logger.error("Configuration validation failed", error=str(e))
        raise

    logger.info(
        "Configuration loaded",
        rpc_url=settings.rpc_url[:50] + "..."
        if len(settings.rpc_url) > 50
        else settings.rpc_url,
        target_mint=settings.target_mint,
    )

    return settings
