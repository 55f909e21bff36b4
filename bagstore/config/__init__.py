"""
Runtime Configuration Module

Provides market parameters, configuration loading and logging setup.
"""

from .runtime import (
    CONFIG_PARAM_IDS,
    ONE_DAY,
    ONE_GIB,
    ONE_HOUR,
    LoggingConfig,
    MarketConfig,
    RuntimeConfig,
    setup_logging,
)

__all__ = [
    "CONFIG_PARAM_IDS",
    "ONE_DAY",
    "ONE_GIB",
    "ONE_HOUR",
    "LoggingConfig",
    "MarketConfig",
    "RuntimeConfig",
    "setup_logging",
]
