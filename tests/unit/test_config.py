"""
Runtime Configuration Unit Tests
Tests for bagstore/config/runtime.py
"""
import logging

import pytest

from bagstore.config.runtime import (
    CONFIG_PARAM_IDS,
    ONE_DAY,
    ONE_HOUR,
    LoggingConfig,
    MarketConfig,
    RuntimeConfig,
    setup_logging,
)


class TestMarketConfig:
    """Tests for MarketConfig."""

    def test_defaults(self):
        market = MarketConfig()
        assert market.min_storage_period == 7 * ONE_DAY
        assert market.max_proof_span == ONE_HOUR
        assert market.treasury_fee_rate == 100
        assert market.max_providers_per_order == 30

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            MarketConfig(min_storage_fee=-1)
        with pytest.raises(ValueError):
            MarketConfig(min_file_size=10, max_file_size=5)
        with pytest.raises(ValueError):
            MarketConfig(max_proof_span=0)

    def test_with_param_by_name_and_id(self):
        market = MarketConfig()
        assert market.with_param("max_proof_span", 60).max_proof_span == 60
        for param_id, name in CONFIG_PARAM_IDS.items():
            assert getattr(market.with_param(param_id, 5), name) == 5
        assert market.max_proof_span == ONE_HOUR

    def test_with_param_unknown(self):
        with pytest.raises(KeyError):
            MarketConfig().with_param("nope", 1)


class TestRuntimeConfig:
    """Tests for loading RuntimeConfig."""

    def test_from_dict_partial(self):
        config = RuntimeConfig.from_dict({"market": {"max_proof_span": 120}})
        assert config.market.max_proof_span == 120
        assert config.logging == LoggingConfig()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BAGSTORE_MAX_PROVIDERS", "5")
        monkeypatch.setenv("BAGSTORE_LOG_LEVEL", "DEBUG")
        config = RuntimeConfig.from_env()
        assert config.market.max_providers_per_order == 5
        assert config.logging.level == "DEBUG"

    def test_from_yaml_with_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "bagstore.yaml"
        path.write_text(
            "market:\n  min_storage_fee: 42\n  treasury_fee_rate: 50\n"
            "logging:\n  level: WARNING\n"
            "extra:\n  region: eu\n"
        )
        monkeypatch.setenv("BAGSTORE_TREASURY_FEE_RATE", "75")
        monkeypatch.delenv("BAGSTORE_LOG_LEVEL", raising=False)
        config = RuntimeConfig.from_yaml(path).with_env_overrides()
        assert config.market.min_storage_fee == 42
        assert config.market.treasury_fee_rate == 75
        assert config.logging.level == "WARNING"
        assert config.extra == {"region": "eu"}

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "missing.yaml")


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "bagstore.log"
        root = logging.getLogger()
        saved, saved_level = root.handlers[:], root.level
        root.handlers = []
        try:
            setup_logging("DEBUG", str(log_file))
            logging.getLogger("bagstore.test").debug("hello")
            for handler in root.handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
            assert root.level == logging.DEBUG
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved
            root.setLevel(saved_level)
