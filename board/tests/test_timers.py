from __future__ import annotations

import unittest

from board.engine.timers import HandleSet, ManualTimerHost, TimerHost


class TestTimerHostInterface(unittest.TestCase):
    def test_incomplete_host_cannot_be_created(self) -> None:
        class NoFrames(TimerHost):
            def now(self):
                return 0.0

            def set_timeout(self, callback, delay_ms):
                return None

            def set_interval(self, callback, delay_ms):
                return None

        with self.assertRaises(TypeError):
            NoFrames()


class TestManualTimerHost(unittest.TestCase):
    def test_due_order_and_frames(self) -> None:
        host = ManualTimerHost()
        fired = []
        host.set_timeout(lambda: fired.append("timeout"), 30)
        host.request_frame(lambda ts: fired.append(("frame", ts)))
        host.set_interval(lambda: fired.append("interval"), 20)

        host.advance(45)
        self.assertEqual(fired, [("frame", 16.0), "interval", "timeout", "interval"])
        self.assertEqual(host.now(), 45)

    def test_failing_callback_is_logged(self) -> None:
        host = ManualTimerHost()
        later = []

        def boom():
            raise RuntimeError("boom")

        host.set_timeout(boom, 10)
        host.set_timeout(lambda: later.append(True), 20)
        with self.assertLogs("board.engine.timers", level="ERROR"):
            host.advance(20)
        self.assertEqual(later, [True])

    def test_handle_set_cancels_only_its_own(self) -> None:
        host = ManualTimerHost()
        mine, theirs = HandleSet(host), HandleSet(host)
        mine.add(host.set_interval(lambda: None, 100))
        theirs.add(host.set_interval(lambda: None, 100))

        mine.cancel_all()
        self.assertEqual(len(mine), 0)
        self.assertEqual(len(theirs), 1)
        self.assertEqual(len(host.pending()), 1)


if __name__ == "__main__":
    unittest.main()
