"""
Test suite for audit module

Tests hash chaining, tamper detection and event queries.
"""

from datetime import datetime, timezone, timedelta
from decimal import Decimal

import pytest

from wallet_core.storage import InMemoryStorage
from wallet_core.audit import AuditTrail, AuditEvent, AuditEventType


class TestAuditEvent:
    """Test AuditEvent functionality"""

    def test_metadata_serialization(self):
        now = datetime.now(timezone.utc)

        event = AuditEvent(
            id="AUDIT001",
            created_at=now,
            updated_at=now,
            event_type=AuditEventType.TOKEN_ADDED,
            entity_type="user",
            entity_id="U1",
            previous_hash="",
            current_hash="",
            metadata={
                "initial_balance": Decimal('10.5'),
                "when": now,
                "kind": AuditEventType.TOKEN_ADDED,
                "nested": {"amounts": [Decimal('1'), Decimal('2.25')]}
            }
        )

        assert event.metadata["initial_balance"] == "10.5"
        assert event.metadata["when"] == now.isoformat()
        assert event.metadata["kind"] == "token_added"
        assert event.metadata["nested"]["amounts"] == ["1", "2.25"]

    def test_hash_round_trip(self):
        now = datetime.now(timezone.utc)
        event = AuditEvent(
            id="AUDIT002",
            created_at=now,
            updated_at=now,
            event_type=AuditEventType.LOGIN_SUCCESS,
            entity_type="user",
            entity_id="U1",
            previous_hash="",
            current_hash="",
            metadata={"login": "alice"}
        )
        event.current_hash = event.calculate_hash()

        restored = AuditEvent.from_dict(event.to_dict())

        assert restored.event_type == AuditEventType.LOGIN_SUCCESS
        assert restored.verify_hash()


class TestAuditTrail:
    """Test AuditTrail chaining and queries"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.trail = AuditTrail(self.storage)

    def test_events_are_chained(self):
        first = self.trail.log_event(AuditEventType.USER_REGISTERED, "user", "U1", {"login": "alice"})
        second = self.trail.log_event(AuditEventType.LOGIN_SUCCESS, "user", "U1", {"login": "alice"})

        assert first.previous_hash == ""
        assert second.previous_hash == first.current_hash
        assert self.trail.get_latest_hash() == second.current_hash
        assert self.trail.count_events() == 2

    def test_integrity_of_untouched_chain(self):
        for _ in range(5):
            self.trail.log_event(AuditEventType.LOGIN_FAILED, "user", "U1", {"reason": "x"})

        result = self.trail.verify_integrity()

        assert result['valid']
        assert result['total_events'] == 5
        assert result['hash_errors'] == []
        assert result['chain_breaks'] == []

    def test_tampering_is_detected(self):
        self.trail.log_event(AuditEventType.TOKEN_ADDED, "user", "U1", {"initial_balance": "10"})
        event = self.trail.log_event(AuditEventType.TOKEN_ADDED, "user", "U1", {"initial_balance": "20"})

        stored = self.storage.load("audit_events", event.id)
        stored["metadata"]["initial_balance"] = "2000"
        self.storage.save("audit_events", event.id, stored)

        result = self.trail.verify_integrity()

        assert not result['valid']
        assert result['hash_errors'][0]['event_id'] == event.id

    def test_chain_break_is_detected(self):
        self.trail.log_event(AuditEventType.TOKEN_ADDED, "user", "U1")
        event = self.trail.log_event(AuditEventType.TOKEN_ADDED, "user", "U1")

        stored = self.storage.load("audit_events", event.id)
        stored["previous_hash"] = "0" * 64
        self.storage.save("audit_events", event.id, stored)

        result = self.trail.verify_integrity()

        assert not result['valid']
        assert result['chain_breaks'][0]['position'] == 1

    def test_new_trail_resumes_chain(self):
        event = self.trail.log_event(AuditEventType.USER_REGISTERED, "user", "U1")

        resumed = AuditTrail(self.storage)

        assert resumed.get_latest_hash() == event.current_hash

    def test_queries(self):
        self.trail.log_event(AuditEventType.USER_REGISTERED, "user", "U1")
        self.trail.log_event(AuditEventType.USER_REGISTERED, "user", "U2")
        self.trail.log_event(AuditEventType.LOGIN_SUCCESS, "user", "U1")

        u1_events = self.trail.get_events_for_entity("user", "U1")
        assert [e.event_type for e in u1_events] == [
            AuditEventType.USER_REGISTERED, AuditEventType.LOGIN_SUCCESS
        ]
        assert len(self.trail.get_events_for_entity("user", "U1", limit=1)) == 1

        registered = self.trail.get_events_by_type(AuditEventType.USER_REGISTERED)
        assert [e.entity_id for e in registered] == ["U1", "U2"]

        future = datetime.now(timezone.utc) + timedelta(days=1)
        assert self.trail.get_all_events(start_time=future) == []
        assert len(self.trail.get_all_events(limit=2)) == 2

    @pytest.mark.parametrize("event_type", list(AuditEventType))
    def test_every_event_type_round_trips(self, event_type):
        event = self.trail.log_event(event_type, "user", "U1")
        assert self.trail.get_all_events()[-1].event_type == event_type
        assert event.verify_hash()
