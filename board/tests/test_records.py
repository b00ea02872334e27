from __future__ import annotations

import unittest
from datetime import date, datetime

from board.exceptions import ValidationError
from board.records import (
    Document,
    PersonnelStatus,
    Project,
    ScheduleEvent,
    Settings,
    active_personnel,
    build_event,
    build_personnel,
    build_project,
    event_status,
    event_time_label,
    events_on,
    format_time_12h,
    month_grid,
    tomorrow_events,
    week_days,
    week_start,
)


def _event(**kw):
    data = {
        "id": "e1",
        "title": "Standup",
        "dateStarted": "2024-03-04",
        "timeStart": "09:00",
        "timeEnd": "09:30",
    }
    data.update(kw)
    return ScheduleEvent.from_dict(data)


class TestBuildEvent(unittest.TestCase):
    def test_end_before_start_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            build_event({"title": "Review", "dateStarted": "2024-03-04", "timeStart": "09:00", "timeEnd": "08:00"})
        self.assertEqual(ctx.exception.message, "End time must be after start time")
        self.assertEqual(ctx.exception.field, "timeEnd")

    def test_equal_times_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            build_event({"title": "Review", "dateStarted": "2024-03-04", "timeStart": "09:00", "timeEnd": "09:00"})

    def test_required_fields(self) -> None:
        cases = [
            ({}, "Event title is required"),
            ({"title": "  "}, "Event title is required"),
            ({"title": "x"}, "Start date is required"),
            ({"title": "x", "dateStarted": "2024-03-04"}, "Start and end time are required"),
            ({"title": "x", "dateStarted": "2024-03-04", "timeStart": "25:00", "timeEnd": "26:00"},
             "Start and end time are required"),
        ]
        for data, message in cases:
            with self.subTest(data=data):
                with self.assertRaises(ValidationError) as ctx:
                    build_event(data)
                self.assertEqual(ctx.exception.message, message)

    def test_all_day_ignores_times(self) -> None:
        event = build_event({"title": "Offsite", "dateStarted": "2024-03-04", "timeStart": "10:00", "timeEnd": "09:00"},
                            all_day=True)
        self.assertEqual((event.time_start, event.time_end), ("00:00", "23:59"))
        self.assertTrue(event.all_day)
        self.assertEqual(event_time_label(event), "All Day")

    def test_end_date_defaults_to_start(self) -> None:
        event = build_event({"title": "x", "dateStarted": "2024-03-04", "timeStart": "09:00", "timeEnd": "10:00"})
        self.assertEqual(event.date_end, "2024-03-04")
        self.assertTrue(event.id)

    def test_times_are_zero_padded(self) -> None:
        event = build_event({"title": "Early", "dateStarted": "2024-03-04", "timeStart": "9:00", "timeEnd": "9:30"})
        self.assertEqual((event.time_start, event.time_end), ("09:00", "09:30"))
        self.assertEqual(event_status(event, datetime(2024, 3, 4, 10, 0)), "completed")

        later = build_event({"title": "Late", "dateStarted": "2024-03-04", "timeStart": "10:00", "timeEnd": "11:00"})
        self.assertEqual([e.title for e in events_on([later, event], date(2024, 3, 4))], ["Early", "Late"])

    def test_stored_times_are_zero_padded_on_load(self) -> None:
        event = _event(timeStart="7:05", timeEnd="8:5")
        self.assertEqual((event.time_start, event.time_end), ("07:05", "08:05"))


class TestBuildPersonnel(unittest.TestCase):
    def test_travel_requires_location(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            build_personnel({"name": "Ana", "type": "TRAVEL", "dateStart": "2024-01-01"})
        self.assertEqual(ctx.exception.message, "Location is required")

    def test_location_dropped_for_other_kinds(self) -> None:
        status = build_personnel({"name": "Ana", "type": "wfh", "dateStart": "2024-01-01", "location": "Cebu"})
        self.assertEqual(status.type, "WFH")
        self.assertEqual(status.location, "")
        self.assertNotIn("location", status.to_dict())

    def test_unknown_kind_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            build_personnel({"name": "Ana", "type": "SICK", "dateStart": "2024-01-01"})

    def test_name_required(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            build_personnel({"type": "CTO", "dateStart": "2024-01-01"})
        self.assertEqual(ctx.exception.message, "Personnel name is required")


class TestBuildProject(unittest.TestCase):
    def test_count_must_be_a_number(self) -> None:
        for bad in ("abc", "-1", "1.5"):
            with self.subTest(count=bad):
                with self.assertRaises(ValidationError) as ctx:
                    build_project({"name": "Portal", "count": bad})
                self.assertEqual(ctx.exception.message, "Please enter a valid number")

    def test_defaults_to_zero(self) -> None:
        self.assertEqual(build_project({"name": "Portal"}).count, 0)

    def test_name_required(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            build_project({"count": 2})
        self.assertEqual(ctx.exception.message, "Project name is required")


class TestPersonnelActivity(unittest.TestCase):
    def test_inclusive_range(self) -> None:
        status = PersonnelStatus.from_dict(
            {"id": "p1", "name": "Ana", "type": "FL", "dateStart": "2024-01-01", "dateEnd": "2024-01-03"}
        )
        self.assertFalse(status.is_active_on(date(2023, 12, 31)))
        self.assertTrue(status.is_active_on(date(2024, 1, 1)))
        self.assertTrue(status.is_active_on(date(2024, 1, 2)))
        self.assertTrue(status.is_active_on(date(2024, 1, 3)))
        self.assertFalse(status.is_active_on(date(2024, 1, 4)))

    def test_grouped_by_kind(self) -> None:
        personnel = [
            PersonnelStatus.from_dict({"id": "a", "name": "Ana", "type": "CTO", "dateStart": "2024-01-02"}),
            PersonnelStatus.from_dict({"id": "b", "name": "Ben", "type": "TRAVEL", "dateStart": "2024-01-01",
                                       "dateEnd": "2024-01-05", "location": "Davao"}),
            PersonnelStatus.from_dict({"id": "c", "name": "Cy", "type": "WFH", "dateStart": "2024-01-09"}),
        ]
        groups = active_personnel(personnel, date(2024, 1, 2))
        self.assertEqual(sorted(groups), ["CTO", "FL", "TRAVEL", "WFH"])
        self.assertEqual([p.id for p in groups["CTO"]], ["a"])
        self.assertEqual([p.id for p in groups["TRAVEL"]], ["b"])
        self.assertEqual(groups["WFH"], [])


class TestEventHelpers(unittest.TestCase):
    def test_format_time_12h(self) -> None:
        self.assertEqual(format_time_12h("00:05"), "12:05 AM")
        self.assertEqual(format_time_12h("12:00"), "12:00 PM")
        self.assertEqual(format_time_12h("17:45"), "5:45 PM")
        self.assertEqual(event_time_label(_event()), "9:00 AM - 9:30 AM")

    def test_status(self) -> None:
        event = _event()
        self.assertEqual(event_status(event, datetime(2024, 3, 4, 8, 59)), "upcoming")
        self.assertEqual(event_status(event, datetime(2024, 3, 4, 9, 0)), "ongoing")
        self.assertEqual(event_status(event, datetime(2024, 3, 4, 9, 30)), "ongoing")
        self.assertEqual(event_status(event, datetime(2024, 3, 4, 9, 31)), "completed")
        self.assertEqual(event_status(event, datetime(2024, 3, 3, 12, 0)), "upcoming")

    def test_events_on_sorted_by_start(self) -> None:
        events = [
            _event(id="late", timeStart="14:00", timeEnd="15:00"),
            _event(id="early", timeStart="08:00", timeEnd="08:30"),
            _event(id="other-day", dateStarted="2024-03-05"),
        ]
        self.assertEqual([e.id for e in events_on(events, date(2024, 3, 4))], ["early", "late"])
        self.assertEqual([e.id for e in tomorrow_events(events, date(2024, 3, 4))], ["other-day"])


class TestDocument(unittest.TestCase):
    def test_personnel_alias_accepted(self) -> None:
        doc = Document.from_dict({
            "personnelStatuses": [{"id": "p", "name": "Ana", "type": "CTO", "dateStart": "2024-01-01"}],
        })
        self.assertEqual([p.id for p in doc.personnel], ["p"])
        self.assertIn("personnel", doc.to_dict())
        self.assertNotIn("personnelStatuses", doc.to_dict())

    def test_legacy_project_number(self) -> None:
        self.assertEqual(Project.from_dict({"id": "x", "name": "P", "number": 4}).count, 4)

    def test_settings_defaults_and_unknown_keys(self) -> None:
        settings = Settings.from_dict({"transitionStyle": "spin", "customTransitionSeconds": "5", "accent": "teal"})
        self.assertEqual(settings.transition_style, "static")
        self.assertEqual(settings.custom_transition_seconds, 5.0)
        self.assertEqual(settings.status_colors["completed"], "#9ca3af")
        out = settings.to_dict()
        self.assertEqual(out["accent"], "teal")
        self.assertIsNone(out["lockoutUntil"])

    def test_settings_update_keeps_other_fields(self) -> None:
        settings = Settings.from_dict({"theme": "dark"}).update({"transitionSpeed": "fast"})
        self.assertEqual((settings.theme, settings.transition_speed), ("dark", "fast"))

    def test_wrongly_typed_collections(self) -> None:
        doc = Document.from_dict({"events": 5, "personnel": "Ana", "projects": [1, {"id": "x", "name": "P"}]})
        self.assertEqual((doc.events, doc.personnel), ([], []))
        self.assertEqual([p.id for p in doc.projects], ["x"])

        with self.assertRaises(ValidationError) as ctx:
            Document.check_shape({"events": 5})
        self.assertEqual(ctx.exception.field, "events")
        Document.check_shape({"events": [], "settings": None})


class TestCalendarViews(unittest.TestCase):
    def test_week_starts_on_monday(self) -> None:
        self.assertEqual(week_start(date(2024, 3, 6)), date(2024, 3, 4))
        self.assertEqual(week_start(date(2024, 3, 4)), date(2024, 3, 4))
        self.assertEqual(week_start(date(2024, 3, 10)), date(2024, 3, 4))

    def test_week_days(self) -> None:
        events = [
            _event(id="mon", dateStarted="2024-03-04"),
            _event(id="sun", dateStarted="2024-03-10"),
            _event(id="next", dateStarted="2024-03-11"),
        ]
        days = week_days(events, date(2024, 3, 7))
        self.assertEqual(days[0].day, date(2024, 3, 4))
        self.assertEqual(len(days), 7)
        self.assertEqual([e.id for e in days[0].events], ["mon"])
        self.assertEqual([e.id for e in days[6].events], ["sun"])
        self.assertEqual([d.is_weekend for d in days], [False] * 5 + [True] * 2)

    def test_month_grid_padded_to_whole_weeks(self) -> None:
        weeks = month_grid([], date(2024, 2, 14))
        self.assertEqual(len(weeks), 5)
        self.assertEqual(weeks[0][0].day, date(2024, 1, 29))
        self.assertEqual(weeks[-1][-1].day, date(2024, 3, 3))
        self.assertTrue(all(len(w) == 7 for w in weeks))
        self.assertFalse(weeks[0][0].in_month)
        self.assertTrue(weeks[0][3].in_month)
        self.assertFalse(weeks[-1][-1].in_month)

    def test_month_cell_overflow(self) -> None:
        events = [_event(id=f"e{i}", dateStarted="2024-03-15", timeStart=f"{8 + i}:00", timeEnd=f"{8 + i}:30")
                  for i in range(5)]
        cell = next(d for w in month_grid(events, date(2024, 3, 1)) for d in w if d.day == date(2024, 3, 15))
        self.assertEqual([e.id for e in cell.shown_events], ["e0", "e1", "e2"])
        self.assertEqual(cell.more_count, 2)


if __name__ == "__main__":
    unittest.main()
