"""
Module 01 - Order Schema Unit Tests
Tests for bagstore/schemas/order.py
"""
import pytest
from pydantic import ValidationError

from fixtures import make_order_config

from bagstore.merkle.chunking import chunk_size
from bagstore.schemas.order import OrderConfig, ProviderState


def _fields(**overrides):
    fields = dict(
        torrent_hash="0x" + "ab" * 32,
        owner="owner",
        merkle_root=5,
        file_size=10_000,
        storage_period=86_400,
        max_proof_span=3600,
        treasury="treasury",
        max_providers=3,
    )
    fields.update(overrides)
    return fields


class TestOrderConfig:
    """Tests for OrderConfig validation."""

    def test_chunk_size_derived(self):
        config = OrderConfig(**_fields())
        assert config.chunk_size == chunk_size(10_000) == 79
        assert config.chunk_count == 127
        assert config.torrent_hash == int("ab" * 32, 16)

    def test_matching_chunk_size_accepted(self):
        assert OrderConfig(**_fields(chunk_size=79)).chunk_size == 79

    def test_mismatched_chunk_size_rejected(self):
        with pytest.raises(ValidationError, match="chunk_size"):
            OrderConfig(**_fields(chunk_size=80))

    @pytest.mark.parametrize("overrides", [
        {"file_size": 0},
        {"file_size": 1 << 64},
        {"storage_period": 0},
        {"max_proof_span": 0},
        {"treasury_fee_rate": 10_001},
        {"max_providers": 0},
        {"merkle_root": 1 << 256},
        {"owner": ""},
        {"surprise": 1},
        {"schema_version": "v0"},
    ])
    def test_invalid_fields(self, overrides):
        with pytest.raises(ValidationError):
            OrderConfig(**_fields(**overrides))

    def test_frozen(self, order_config):
        with pytest.raises(ValidationError):
            order_config.owner = "someone"

    def test_json_round_trip(self, file_tree):
        config = make_order_config(tree=file_tree, whitelist=frozenset({"b", "a"}))
        data = config.model_dump(mode="json")
        assert data["whitelist"] == ["a", "b"]
        assert data["merkle_root"].startswith("0x") and len(data["merkle_root"]) == 66
        assert OrderConfig.model_validate(data) == config


class TestProviderState:
    """Tests for ProviderState."""

    def test_due_at(self):
        provider = ProviderState(joined_at=10, last_proof_at=10)
        assert provider.next_proof_due_at(3600) == 3610
        assert provider.last_proof_valid
        assert provider.next_chunk_index == 0

    def test_assignment_validated(self):
        provider = ProviderState(joined_at=10, last_proof_at=10)
        with pytest.raises(ValidationError):
            provider.earned = -1
