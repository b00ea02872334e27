from __future__ import annotations

import unittest

from board.exceptions import ValidationError
from board.records import Document
from board.store import ScheduleStore


class TestScheduleStore(unittest.TestCase):
    def setUp(self) -> None:
        self.store = ScheduleStore()
        self.calls = []
        self.store.subscribe(lambda doc, local: self.calls.append(local))

    def test_decrement_floors_at_zero(self) -> None:
        project = self.store.add_project({"name": "Portal", "count": 1})
        self.store.decrement_project(project.id)
        self.store.decrement_project(project.id)
        self.assertEqual(self.store.projects[0].count, 0)
        self.store.increment_project(project.id)
        self.assertEqual(self.store.projects[0].count, 1)

    def test_invalid_input_changes_nothing(self) -> None:
        event = self.store.add_event(
            {"title": "Standup", "dateStarted": "2024-03-04", "timeStart": "09:00", "timeEnd": "09:30"}
        )
        self.calls.clear()
        with self.assertRaises(ValidationError):
            self.store.update_event(event.id, {"timeEnd": "08:00"})
        self.assertEqual(self.store.events, [event])
        self.assertEqual(self.calls, [])

    def test_update_merges_fields(self) -> None:
        event = self.store.add_event(
            {"title": "Standup", "dateStarted": "2024-03-04", "timeStart": "09:00", "timeEnd": "09:30"}
        )
        updated = self.store.update_event(event.id, {"title": "Daily standup"})
        self.assertEqual(updated.id, event.id)
        self.assertEqual((updated.title, updated.time_start), ("Daily standup", "09:00"))

    def test_update_unknown_id(self) -> None:
        with self.assertRaises(KeyError):
            self.store.update_project("missing", {"name": "x"})

    def test_local_and_remote_changes(self) -> None:
        status = self.store.add_personnel_status({"name": "Ana", "type": "CTO", "dateStart": "2024-01-01"})
        self.store.delete_personnel_status(status.id)
        self.store.update_settings({"theme": "dark"})
        self.store.replace(Document())
        self.assertEqual(self.calls, [True, True, True, False])

    def test_lockout_bookkeeping_is_not_local(self) -> None:
        self.assertEqual(self.store.record_failed_attempt(), 1)
        self.store.set_lockout_until("2024-01-01T00:05:00+00:00")
        self.store.reset_failed_attempts()
        self.assertEqual(self.calls, [False, False, False])
        self.assertEqual(self.store.settings.failed_attempts, 0)

    def test_reset_settings(self) -> None:
        self.store.update_settings({"transitionStyle": "fade", "pinEnabled": True, "pin": "1234"})
        settings = self.store.reset_settings()
        self.assertEqual(settings.transition_style, "static")
        self.assertFalse(settings.pin_enabled)

    def test_unsubscribe(self) -> None:
        seen = []
        unsubscribe = self.store.subscribe(lambda doc, local: seen.append(local))
        unsubscribe()
        self.store.add_project({"name": "Portal"})
        self.assertEqual(seen, [])


if __name__ == "__main__":
    unittest.main()
