"""
Pytest configuration and shared fixtures for bagstore tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_file_tree = _common.make_file_tree
make_order_config = _common.make_order_config
make_order = _common.make_order


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def file_tree():
    """Provide the Merkle tree of a default 10 000 byte file."""
    return make_file_tree()


@pytest.fixture
def order_config(file_tree):
    """Provide a default OrderConfig over file_tree."""
    return make_order_config(tree=file_tree)


@pytest.fixture
def order_env():
    """Provide (order, tree, recorder) for the walkthrough fee and period."""
    return make_order()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_unchanged():
    """Helper asserting an operation left the order record untouched."""
    def _assert(order, operation, exception):
        before = order.state_digest()
        with pytest.raises(exception):
            operation()
        assert order.state_digest() == before, "Failed operation changed order state"
    return _assert
