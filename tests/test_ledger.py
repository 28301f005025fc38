import unittest
from datetime import datetime, timedelta, timezone

from core.history_store import HistoryStore
from core.ledger import CommandLedger, history_filter
from core.records import CommandRecord
from storage import MemoryStorage

BASE = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_record(n: int, success: bool = True, command: str = "", text: str = "") -> CommandRecord:
    return CommandRecord(
        id=f"id-{n}",
        command=command or f"command {n}",
        timestamp=BASE + timedelta(minutes=n),
        original_text=text or f"text {n}",
        success=success,
        result=f"result {n}" if success else None,
        error=None if success else f"error {n}",
    )


class TestCommandLedger(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = MemoryStorage()
        self.ledger = CommandLedger(HistoryStore(self.storage))

    def test_append_is_most_recent_first(self) -> None:
        for n in range(3):
            self.ledger.append(make_record(n))
        self.assertEqual([r.id for r in self.ledger.list_all()], ["id-2", "id-1", "id-0"])
        self.assertEqual(self.ledger.latest().id, "id-2")

    def test_cap_keeps_fifty_most_recent(self) -> None:
        for n in range(75):
            self.ledger.append(make_record(n))
        records = self.ledger.list_all()
        self.assertEqual(len(records), 50)
        self.assertEqual([r.id for r in records], [f"id-{n}" for n in range(74, 24, -1)])

    def test_every_append_is_persisted(self) -> None:
        self.ledger.append(make_record(1))
        self.ledger.append(make_record(2))
        reloaded = CommandLedger(HistoryStore(self.storage))
        self.assertEqual([r.id for r in reloaded.list_all()], ["id-2", "id-1"])

    def test_clear_empties_memory_and_storage(self) -> None:
        self.ledger.append(make_record(1))
        self.ledger.clear()
        self.assertEqual(self.ledger.list_all(), [])
        self.assertIsNone(self.storage.get_item("commandHistory"))

    def test_list_all_returns_a_copy(self) -> None:
        self.ledger.append(make_record(1))
        self.ledger.list_all().clear()
        self.assertEqual(len(self.ledger), 1)

    def test_subscribers_see_each_append(self) -> None:
        seen = []
        self.ledger.subscribe(seen.append)
        record = make_record(1)
        self.ledger.append(record)
        self.assertEqual(seen, [record])

    def test_find_does_not_mutate(self) -> None:
        self.ledger.append(make_record(1, success=True))
        self.ledger.append(make_record(2, success=False))
        failed = self.ledger.find(lambda r: not r.success)
        self.assertEqual([r.id for r in failed], ["id-2"])
        self.assertEqual(len(self.ledger), 2)


class TestHistorySearch(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = CommandLedger(HistoryStore(MemoryStorage()))
        self.ledger.append(make_record(1, True, "Make it formal", "Dear team"))
        self.ledger.append(make_record(2, False, "summarize", "Quarterly report"))
        self.ledger.append(make_record(3, True, "Fix typos", "teh report"))

    def test_status_filters(self) -> None:
        self.assertEqual([r.id for r in self.ledger.search(status="success")], ["id-3", "id-1"])
        self.assertEqual([r.id for r in self.ledger.search(status="error")], ["id-2"])
        self.assertEqual(len(self.ledger.search()), 3)

    def test_text_match_is_case_insensitive(self) -> None:
        self.assertEqual([r.id for r in self.ledger.search("FORMAL", search_in="command")], ["id-1"])

    def test_search_fields(self) -> None:
        self.assertEqual([r.id for r in self.ledger.search("report", search_in="command")], [])
        self.assertEqual([r.id for r in self.ledger.search("report", search_in="input")], ["id-3", "id-2"])
        self.assertEqual([r.id for r in self.ledger.search("result 3", search_in="output")], ["id-3"])
        self.assertEqual([r.id for r in self.ledger.search("report")], ["id-3", "id-2"])

    def test_date_range(self) -> None:
        found = self.ledger.search(start=BASE + timedelta(minutes=2), end=BASE + timedelta(minutes=2))
        self.assertEqual([r.id for r in found], ["id-2"])

    def test_combined_filters(self) -> None:
        self.assertEqual([r.id for r in self.ledger.search("report", status="success")], ["id-3"])

    def test_unknown_filter_rejected(self) -> None:
        with self.assertRaises(ValueError):
            history_filter(status="pending")
        with self.assertRaises(ValueError):
            history_filter(search_in="tags")


if __name__ == "__main__":
    unittest.main()
