"""
Module 04 - Provider Registry Unit Tests
Tests for bagstore/order/registry.py
"""
import pytest

from bagstore.order.registry import ProviderRegistry
from bagstore.schemas.errors import (
    AlreadyRegisteredException,
    MaxProvidersExceededException,
    UnregisteredProviderException,
)
from bagstore.schemas.order import ProviderState


def _registry(max_providers=2, whitelist=frozenset()):
    return ProviderRegistry({}, max_providers, lambda pid: pid in whitelist)


def _provider():
    return ProviderState(joined_at=0, last_proof_at=0)


class TestProviderRegistry:
    """Tests for membership rules."""

    def test_add_and_get(self):
        registry = _registry()
        registry.add("alice", _provider())
        assert "alice" in registry
        assert len(registry) == 1
        assert registry.get("alice").joined_at == 0

    def test_duplicate_rejected(self):
        registry = _registry()
        registry.add("alice", _provider())
        with pytest.raises(AlreadyRegisteredException) as exc:
            registry.add("alice", _provider())
        assert exc.value.exit_code == 1006

    def test_cap_enforced(self):
        registry = _registry(max_providers=2)
        registry.add("alice", _provider())
        registry.add("bob", _provider())
        assert registry.is_full
        with pytest.raises(MaxProvidersExceededException) as exc:
            registry.add("carol", _provider())
        assert exc.value.exit_code == 1011

    def test_get_unknown_raises(self):
        with pytest.raises(UnregisteredProviderException):
            _registry().get("nobody")
        assert _registry().find("nobody") is None

    def test_remove(self):
        registry = _registry()
        registry.add("alice", _provider())
        removed = registry.remove("alice")
        assert removed.joined_at == 0
        assert "alice" not in registry
        with pytest.raises(UnregisteredProviderException):
            registry.remove("alice")

    def test_operates_on_given_map(self):
        """The registry writes through to the map it was given."""
        providers = {}
        ProviderRegistry(providers, 5, lambda pid: False).add("alice", _provider())
        assert list(providers) == ["alice"]

    def test_whitelist_lookup(self):
        registry = _registry(whitelist=frozenset({"eve"}))
        assert registry.is_whitelisted("eve")
        assert not registry.is_whitelisted("alice")
