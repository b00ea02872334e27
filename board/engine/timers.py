"""Timer hosts used by the display engine.

Every engine object schedules its work through a ``TimerHost`` and keeps
the handles it created, so tearing an object down never touches timers that
belong to somebody else. ``ManualTimerHost`` runs on a virtual clock and is
what the tests use; ``AsyncioTimerHost`` drives the real display loop.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

FRAME_MS = 16


class TimerHandle:
    KIND_TIMEOUT = "timeout"
    KIND_INTERVAL = "interval"
    KIND_FRAME = "frame"

    def __init__(self, kind: str, callback, delay_ms: float = 0):
        self.kind = kind
        self.callback = callback
        self.delay_ms = delay_ms
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        if self.cancelled:
            return False
        return self.kind == self.KIND_INTERVAL or not self.fired

    def __repr__(self):
        state = "cancelled" if self.cancelled else ("active" if self.active else "done")
        return f"<TimerHandle {self.kind} {self.delay_ms}ms {state}>"


class TimerHost(ABC):
    """Interface shared by the timer hosts.

    Times are in milliseconds. Frame callbacks receive the frame timestamp.
    """

    @abstractmethod
    def now(self) -> float:
        pass

    @abstractmethod
    def set_timeout(self, callback, delay_ms: float) -> TimerHandle:
        pass

    @abstractmethod
    def set_interval(self, callback, delay_ms: float) -> TimerHandle:
        pass

    @abstractmethod
    def request_frame(self, callback) -> TimerHandle:
        pass

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is not None:
            handle.cancelled = True

    def _run(self, handle: TimerHandle, *args) -> None:
        try:
            handle.callback(*args)
        except Exception:
            logger.exception("Timer callback failed: %r", handle)


class ManualTimerHost(TimerHost):
    """Deterministic virtual clock.

    Nothing runs until ``advance`` is called; due timers then fire in due
    order, ties broken by scheduling order.
    """

    def __init__(self, start_ms: float = 0.0, frame_ms: float = FRAME_MS):
        self._now = float(start_ms)
        self.frame_ms = frame_ms
        self._queue = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def _push(self, due: float, handle: TimerHandle) -> TimerHandle:
        heapq.heappush(self._queue, (due, next(self._seq), handle))
        return handle

    def set_timeout(self, callback, delay_ms: float) -> TimerHandle:
        return self._push(self._now + max(0.0, delay_ms), TimerHandle(TimerHandle.KIND_TIMEOUT, callback, delay_ms))

    def set_interval(self, callback, delay_ms: float) -> TimerHandle:
        delay_ms = max(1.0, delay_ms)
        return self._push(self._now + delay_ms, TimerHandle(TimerHandle.KIND_INTERVAL, callback, delay_ms))

    def request_frame(self, callback) -> TimerHandle:
        # frames land on the next frame boundary of the virtual clock
        next_frame = (int(self._now // self.frame_ms) + 1) * self.frame_ms
        return self._push(next_frame, TimerHandle(TimerHandle.KIND_FRAME, callback, self.frame_ms))

    def pending(self) -> list[TimerHandle]:
        return [h for _, _, h in self._queue if h.active]

    def advance(self, ms: float) -> None:
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            if handle.kind == TimerHandle.KIND_INTERVAL:
                self._push(due + handle.delay_ms, handle)
                self._run(handle)
            elif handle.kind == TimerHandle.KIND_FRAME:
                handle.fired = True
                self._run(handle, self._now)
            else:
                handle.fired = True
                self._run(handle)
        self._now = target


class AsyncioTimerHost(TimerHost):
    """Timer host backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, frame_ms: float = FRAME_MS):
        self.loop = loop or asyncio.get_running_loop()
        self.frame_ms = frame_ms
        self._native = {}

    def now(self) -> float:
        return time.monotonic() * 1000.0

    def _schedule(self, handle: TimerHandle, delay_ms: float) -> TimerHandle:
        self._native[id(handle)] = self.loop.call_later(delay_ms / 1000.0, self._fire, handle)
        return handle

    def _fire(self, handle: TimerHandle) -> None:
        self._native.pop(id(handle), None)
        if handle.cancelled:
            return
        if handle.kind == TimerHandle.KIND_INTERVAL:
            self._schedule(handle, handle.delay_ms)
            self._run(handle)
        elif handle.kind == TimerHandle.KIND_FRAME:
            handle.fired = True
            self._run(handle, self.now())
        else:
            handle.fired = True
            self._run(handle)

    def set_timeout(self, callback, delay_ms: float) -> TimerHandle:
        return self._schedule(TimerHandle(TimerHandle.KIND_TIMEOUT, callback, delay_ms), max(0.0, delay_ms))

    def set_interval(self, callback, delay_ms: float) -> TimerHandle:
        delay_ms = max(1.0, delay_ms)
        return self._schedule(TimerHandle(TimerHandle.KIND_INTERVAL, callback, delay_ms), delay_ms)

    def request_frame(self, callback) -> TimerHandle:
        return self._schedule(TimerHandle(TimerHandle.KIND_FRAME, callback, self.frame_ms), self.frame_ms)

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is None:
            return
        handle.cancelled = True
        native = self._native.pop(id(handle), None)
        if native is not None:
            native.cancel()


class HandleSet:
    """Handles owned by one engine object, cancelled together."""

    def __init__(self, host: TimerHost):
        self.host = host
        self._handles = []

    def add(self, handle: TimerHandle) -> TimerHandle:
        self._handles = [h for h in self._handles if h.active]
        self._handles.append(handle)
        return handle

    def cancel_all(self) -> None:
        handles, self._handles = self._handles, []
        for h in handles:
            self.host.cancel(h)

    def active(self) -> list[TimerHandle]:
        return [h for h in self._handles if h.active]

    def __len__(self):
        return len(self.active())
