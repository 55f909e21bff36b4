"""
Runtime Configuration

Market parameters used by the order book when placing orders, plus
logging setup. Order-level parameters are snapshotted into OrderConfig at
placement time and never read live by an order.
"""

from __future__ import annotations

import copy
import logging
import os
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


ONE_HOUR = 60 * 60
ONE_DAY = 24 * ONE_HOUR
ONE_GIB = 1024 * 1024 * 1024

# Config parameter ids of the on-chain registry, keyed to MarketConfig fields
CONFIG_PARAM_IDS: dict[int, str] = {
    0x7BB75940: "min_storage_fee",
    0x2DB7CC48: "min_storage_period",
    0x109258B9: "max_proof_span",
    0x657D4DB3: "min_file_size",
    0x246A7235: "max_file_size",
    0x4E57453D: "treasury_fee_rate",
    0x72AF131F: "max_providers_per_order",
}


@dataclass(frozen=True)
class MarketConfig:
    """
    Parameters the order book validates new orders against and snapshots
    into each order's OrderConfig.

    Amounts are in the smallest transferable unit, durations in seconds.
    """
    min_storage_fee: int = 100_000_000
    min_storage_period: int = 7 * ONE_DAY
    max_proof_span: int = ONE_HOUR
    min_file_size: int = 1
    max_file_size: int = 64 * ONE_GIB
    treasury_fee_rate: int = 100
    max_providers_per_order: int = 30

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{f.name} must be a non-negative integer, got {value!r}")
        if self.min_file_size > self.max_file_size:
            raise ValueError("min_file_size must not exceed max_file_size")
        if self.max_proof_span == 0 or self.max_providers_per_order == 0:
            raise ValueError("max_proof_span and max_providers_per_order must be positive")

    def with_param(self, name: str | int, value: int) -> "MarketConfig":
        """
        Return a copy with one parameter changed.

        Args:
            name: Field name or numeric config-param id

        Raises:
            KeyError: If the parameter is unknown
        """
        if isinstance(name, int):
            name = CONFIG_PARAM_IDS[name]
        if name not in {f.name for f in fields(self)}:
            raise KeyError(f"Unknown market parameter: {name}")
        return replace(self, **{name: value})


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    market: MarketConfig = field(default_factory=MarketConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - BAGSTORE_MIN_STORAGE_FEE, BAGSTORE_MIN_STORAGE_PERIOD
        - BAGSTORE_MAX_PROOF_SPAN
        - BAGSTORE_MIN_FILE_SIZE, BAGSTORE_MAX_FILE_SIZE
        - BAGSTORE_TREASURY_FEE_RATE, BAGSTORE_MAX_PROVIDERS
        - BAGSTORE_LOG_LEVEL, BAGSTORE_LOG_FILE
        """
        overrides: dict[str, Any] = {}

        market_env = {
            "BAGSTORE_MIN_STORAGE_FEE": "min_storage_fee",
            "BAGSTORE_MIN_STORAGE_PERIOD": "min_storage_period",
            "BAGSTORE_MAX_PROOF_SPAN": "max_proof_span",
            "BAGSTORE_MIN_FILE_SIZE": "min_file_size",
            "BAGSTORE_MAX_FILE_SIZE": "max_file_size",
            "BAGSTORE_TREASURY_FEE_RATE": "treasury_fee_rate",
            "BAGSTORE_MAX_PROVIDERS": "max_providers_per_order",
        }
        for env_var, key in market_env.items():
            raw = os.getenv(env_var)
            if raw:
                overrides.setdefault("market", {})[key] = int(raw)

        if os.getenv("BAGSTORE_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("BAGSTORE_LOG_LEVEL")
        if os.getenv("BAGSTORE_LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv("BAGSTORE_LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        market_data = data.get("market", {})
        logging_data = data.get("logging", {})

        market = MarketConfig(**market_data) if market_data else MarketConfig()
        log_config = LoggingConfig(**logging_data) if logging_data else LoggingConfig()

        return cls(
            market=market,
            logging=log_config,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        if "market" in overrides:
            new_config.market = replace(new_config.market, **overrides["market"])
        if "logging" in overrides:
            for key, value in overrides["logging"].items():
                setattr(new_config.logging, key, value)

        return new_config


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure root logging for a host process."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )
