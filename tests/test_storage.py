"""
Tests for the in-memory storage backend and record base class
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict

from wallet_core.storage import InMemoryStorage, StorageRecord


@dataclass
class SampleRecord(StorageRecord):
    name: str = ""
    amounts: Dict[str, Decimal] = field(default_factory=dict)


class TestStorageRecord:
    """Test record serialization"""

    def test_to_dict_converts_decimals_and_datetimes(self):
        now = datetime.now(timezone.utc)
        record = SampleRecord(
            id="REC001",
            created_at=now,
            updated_at=now,
            name="sample",
            amounts={"USD": Decimal('10.50')}
        )

        data = record.to_dict()

        assert data['created_at'] == now.isoformat()
        assert data['amounts'] == {"USD": "10.50"}

    def test_from_dict_restores_datetimes(self):
        now = datetime.now(timezone.utc)
        record = SampleRecord(id="REC002", created_at=now, updated_at=now, name="x")

        restored = SampleRecord.from_dict(record.to_dict())

        assert restored.created_at == now
        assert restored.updated_at == now
        assert restored.name == "x"


class TestInMemoryStorage:
    """Test InMemoryStorage operations"""

    def setup_method(self):
        self.storage = InMemoryStorage()

    def test_basic_operations(self):
        """Save, load, exists, count, clear"""
        self.storage.save("users", "u1", {"id": "u1", "login": "alice"})
        self.storage.save("users", "u2", {"id": "u2", "login": "bob"})

        assert self.storage.load("users", "u1") == {"id": "u1", "login": "alice"}
        assert self.storage.load("users", "missing") is None
        assert self.storage.exists("users", "u2")
        assert not self.storage.exists("users", "u3")
        assert self.storage.count("users") == 2

        self.storage.clear_table("users")
        assert self.storage.count("users") == 0

        self.storage.close()

    def test_records_are_copied(self):
        """Mutating a loaded record never changes stored state"""
        data = {"id": "u1", "balance": {"USD": "0"}}
        self.storage.save("users", "u1", data)
        data["balance"]["USD"] = "100"

        loaded = self.storage.load("users", "u1")
        assert loaded["balance"]["USD"] == "0"

        loaded["balance"]["USD"] = "50"
        assert self.storage.load("users", "u1")["balance"]["USD"] == "0"

    def test_decimal_values_stored_as_strings(self):
        self.storage.save("users", "u1", {"id": "u1", "amount": Decimal('1.10')})
        assert self.storage.load("users", "u1")["amount"] == "1.10"

    def test_insertion_order_preserved_on_update(self):
        """Replacing a record keeps its original position"""
        for record_id in ("a", "b", "c"):
            self.storage.save("t", record_id, {"id": record_id, "v": 0})
        self.storage.save("t", "a", {"id": "a", "v": 1})

        assert [r["id"] for r in self.storage.load_all("t")] == ["a", "b", "c"]

    def test_find_and_find_first(self):
        self.storage.save("users", "u1", {"id": "u1", "phone": "555"})
        self.storage.save("users", "u2", {"id": "u2", "phone": "777"})
        self.storage.save("users", "u3", {"id": "u3", "phone": "555"})

        matches = self.storage.find("users", {"phone": "555"})
        assert [m["id"] for m in matches] == ["u1", "u3"]
        assert self.storage.find_first("users", {"phone": "555"})["id"] == "u1"
        assert self.storage.find_first("users", {"phone": "000"}) is None
        assert self.storage.find("users", {"missing_key": "555"}) == []

    def test_concurrent_saves(self):
        def writer(offset):
            for i in range(100):
                record_id = f"{offset}-{i}"
                self.storage.save("t", record_id, {"id": record_id})

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert self.storage.count("t") == 500
