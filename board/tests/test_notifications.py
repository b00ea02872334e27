from __future__ import annotations

import io
import unittest
import wave
from datetime import datetime, timedelta

from board.engine.notifications import ChimePlayer, NotificationEvaluator, chime_wav_bytes, upcoming_events
from board.engine.timers import ManualTimerHost
from board.records import ScheduleEvent


def _event(event_id, start, day="2024-03-04"):
    return ScheduleEvent.from_dict({
        "id": event_id, "title": event_id, "dateStarted": day, "timeStart": start, "timeEnd": "23:00",
    })


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class CountingPlayer:
    def __init__(self):
        self.plays = 0

    def play_alert(self):
        self.plays += 1


class TestUpcomingEvents(unittest.TestCase):
    def test_minutes_until(self) -> None:
        now = datetime(2024, 3, 4, 9, 57)
        result = upcoming_events([_event("a", "10:00")], now)
        self.assertEqual([(n.event.id, n.minutes_until) for n in result], [("a", 3)])

    def test_window_bounds(self) -> None:
        now = datetime(2024, 3, 4, 9, 0)
        events = [
            _event("now", "09:00"),
            _event("five", "09:05"),
            _event("six", "09:06"),
            _event("past", "08:50"),
            _event("tomorrow", "09:02", day="2024-03-05"),
            _event("one", "09:01"),
        ]
        result = upcoming_events(events, now)
        self.assertEqual([n.event.id for n in result], ["one", "five"])

    def test_partial_minutes_truncate(self) -> None:
        now = datetime(2024, 3, 4, 9, 57, 30)
        self.assertEqual(upcoming_events([_event("a", "10:00")], now)[0].minutes_until, 2)
        now = datetime(2024, 3, 4, 9, 59, 30)
        self.assertEqual(upcoming_events([_event("a", "10:00")], now), [])


class TestNotificationEvaluator(unittest.TestCase):
    def setUp(self) -> None:
        self.host = ManualTimerHost()
        self.clock = FakeClock(datetime(2024, 3, 4, 9, 50))
        self.events = [_event("a", "10:00"), _event("b", "10:02")]
        self.player = CountingPlayer()
        self.changes = []
        self.evaluator = NotificationEvaluator(
            self.host, lambda: self.events, clock=self.clock, player=self.player,
            on_change=self.changes.append,
        )

    def test_one_chime_per_new_event(self) -> None:
        self.evaluator.start()
        self.assertEqual(self.evaluator.active, [])

        self.clock.now = datetime(2024, 3, 4, 9, 55)
        self.host.advance(10000)
        self.assertEqual([n.event.id for n in self.evaluator.active], ["a"])
        self.assertEqual(self.player.plays, 1)

        self.clock.now = datetime(2024, 3, 4, 9, 57)
        self.host.advance(10000)
        self.assertEqual([n.event.id for n in self.evaluator.active], ["a", "b"])
        self.assertEqual(self.player.plays, 2)

        self.host.advance(10000)
        self.assertEqual(self.player.plays, 2)

    def test_dismissed_never_returns(self) -> None:
        self.clock.now = datetime(2024, 3, 4, 9, 57)
        self.evaluator.start()
        self.evaluator.dismiss("a")
        self.assertEqual([n.event.id for n in self.evaluator.active], ["b"])

        for minute in (57, 58, 59):
            self.clock.now = datetime(2024, 3, 4, 9, minute)
            self.host.advance(10000)
            self.assertNotIn("a", [n.event.id for n in self.evaluator.active])
        self.assertEqual(self.changes[-1], self.evaluator.active)

    def test_stop_cancels_interval(self) -> None:
        self.evaluator.start()
        self.evaluator.stop()
        self.assertEqual(self.host.pending(), [])


class TestChime(unittest.TestCase):
    def test_wav_is_mono_16bit(self) -> None:
        with wave.open(io.BytesIO(chime_wav_bytes(8000)), "rb") as wav:
            self.assertEqual(wav.getnchannels(), 1)
            self.assertEqual(wav.getsampwidth(), 2)
            self.assertEqual(wav.getnframes(), int(0.6 * 8000))

    def test_player_survives_broken_sink(self) -> None:
        def sink(_data):
            raise OSError("no audio device")

        with self.assertLogs("board.engine.notifications", level="WARNING"):
            ChimePlayer(sink, sample_rate=8000).play_alert()

    def test_player_caches_wav(self) -> None:
        received = []
        player = ChimePlayer(received.append, sample_rate=8000)
        player.play_alert()
        player.play_alert()
        self.assertEqual(len(received), 2)
        self.assertIs(received[0], received[1])


if __name__ == "__main__":
    unittest.main()
