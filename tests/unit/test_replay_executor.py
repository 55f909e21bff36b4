"""
Module 08 - Replay Executor Tests

Tests for ReplayExecutor:
- identical logs replay to identical digests
- failed operations are recorded with their error code, not raised
- verify_replay detects a diverging log
"""

import pytest
from pydantic import ValidationError

from bagstore.config.runtime import ONE_HOUR
from bagstore.replay import OrderEvent, ReplayExecutor, verify_replay

from fixtures import T0, WALKTHROUGH_FEE


def _proof_event(tree, actor, index, at):
    return OrderEvent(
        op="submit_proof",
        actor=actor,
        at=at,
        chunk=tree.chunk(index),
        proof_path=tree.proof(index).siblings,
    )


@pytest.fixture
def events(file_tree):
    return [
        OrderEvent(op="register", actor="alice", at=T0),
        OrderEvent(op="register", actor="bob", at=T0 + 60),
        _proof_event(file_tree, "alice", 0, T0 + ONE_HOUR),
        _proof_event(file_tree, "bob", 1, T0 + ONE_HOUR),
        OrderEvent(op="register", actor="alice", at=T0 + ONE_HOUR + 1),
        OrderEvent(op="unregister", actor="alice", at=T0 + 2 * ONE_HOUR),
        OrderEvent(op="claim", actor="alice", at=T0 + 2 * ONE_HOUR),
        OrderEvent(op="recycle", actor="owner", at=T0 + 2 * ONE_HOUR),
    ]


class TestOrderEvent:
    """Tests for OrderEvent validation."""

    def test_hex_fields_parsed(self):
        event = OrderEvent(
            op="submit_proof", actor="a", at=1, chunk_hash="0x10", proof_path=["0x01", 2]
        )
        assert event.chunk_hash == 16
        assert event.proof_path == [1, 2]

    def test_submit_proof_needs_one_chunk_field(self):
        with pytest.raises(ValidationError):
            OrderEvent(op="submit_proof", actor="a", at=1)
        with pytest.raises(ValidationError):
            OrderEvent(op="submit_proof", actor="a", at=1, chunk=b"x", chunk_hash=1)

    def test_other_ops_reject_proof_fields(self):
        with pytest.raises(ValidationError):
            OrderEvent(op="claim", actor="a", at=1, chunk_hash=1)

    def test_unknown_op(self):
        with pytest.raises(ValidationError):
            OrderEvent(op="withdraw", actor="a", at=1)


class TestReplayExecutor:
    """Tests for replay()."""

    def test_outcomes_recorded(self, order_config, events):
        result = ReplayExecutor().replay(order_config, WALKTHROUGH_FEE, events)
        codes = [o.code for o in result.outcomes]
        assert codes == [
            "ok", "ok", "ok",
            "INVALID_PROOF",
            "ALREADY_REGISTERED",
            "ok", "ok",
            "ORDER_UNEXPIRED",
        ]
        assert len(result.failed) == 3
        assert result.outcomes[2].value is True
        assert result.order.total_providers == 1
        assert result.outcomes[3].error.exit_code == 1007
        assert result.outcomes[0].error is None

    def test_deterministic(self, order_config, events):
        first = ReplayExecutor().replay(order_config, WALKTHROUGH_FEE, events)
        second = ReplayExecutor().replay(order_config, WALKTHROUGH_FEE, events)
        assert first.state_digest == second.state_digest
        assert first.state_digest == first.order.state_digest()

    def test_injected_whitelist(self, order_config, events):
        """With bob whitelisted his out-of-schedule proof is accepted."""
        result = ReplayExecutor(is_whitelisted=lambda pid: pid == "bob").replay(
            order_config, WALKTHROUGH_FEE, events
        )
        assert result.outcomes[3].ok


class TestVerifyReplay:
    """Tests for verify_replay()."""

    def test_matching_digest(self, order_config, events):
        expected = ReplayExecutor().replay(order_config, WALKTHROUGH_FEE, events).state_digest
        verification = verify_replay(order_config, WALKTHROUGH_FEE, events, expected)
        assert verification.ok
        assert verification.actual_digest == expected

    def test_diverging_log(self, order_config, events):
        expected = ReplayExecutor().replay(order_config, WALKTHROUGH_FEE, events).state_digest
        tampered = events[:-3] + [OrderEvent(op="unregister", actor="alice", at=T0 + 3 * ONE_HOUR)]
        verification = verify_replay(order_config, WALKTHROUGH_FEE, tampered, expected)
        assert not verification.ok
        assert verification.expected_digest == expected
