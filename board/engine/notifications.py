from __future__ import annotations

import io
import logging
import math
import struct
import wave
from dataclasses import dataclass
from datetime import datetime

from ..records import ScheduleEvent, parse_hhmm
from .timers import HandleSet, TimerHost

logger = logging.getLogger(__name__)

DEFAULT_MINUTES_BEFORE = 5
DEFAULT_CHECK_INTERVAL_MS = 10000

# (frequency Hz, offset s, duration s): C5, E5, G5
CHIME_NOTES = [
    (523.25, 0.0, 0.15),
    (659.25, 0.15, 0.15),
    (783.99, 0.30, 0.30),
]
CHIME_VOLUME = 0.25
CHIME_ATTACK = 0.01


@dataclass(frozen=True)
class EventNotification:
    event: ScheduleEvent
    minutes_until: int


def upcoming_events(events: list[ScheduleEvent], now: datetime, minutes_before: int = DEFAULT_MINUTES_BEFORE) -> list[EventNotification]:
    """Today's events starting within ``minutes_before`` minutes, soonest first."""
    today = now.date().isoformat()
    out = []
    for event in events:
        if event.date_started != today:
            continue
        parsed = parse_hhmm(event.time_start)
        if parsed is None:
            continue
        start = now.replace(hour=parsed[0], minute=parsed[1], second=0, microsecond=0)
        # whole minutes, truncated toward zero
        diff = int((start - now).total_seconds() / 60)
        if 0 < diff <= minutes_before:
            out.append(EventNotification(event=event, minutes_until=diff))
    out.sort(key=lambda n: n.minutes_until)
    return out


def synthesize_chime(sample_rate: int = 22050) -> list[float]:
    total = max(offset + duration for _, offset, duration in CHIME_NOTES)
    samples = [0.0] * int(total * sample_rate)
    for freq, offset, duration in CHIME_NOTES:
        first = int(offset * sample_rate)
        count = int(duration * sample_rate)
        for i in range(count):
            t = i / sample_rate
            if t < CHIME_ATTACK:
                gain = CHIME_VOLUME * t / CHIME_ATTACK
            else:
                # exponential decay from the full volume down to 0.01
                gain = CHIME_VOLUME * (0.01 / CHIME_VOLUME) ** ((t - CHIME_ATTACK) / (duration - CHIME_ATTACK))
            idx = first + i
            if idx < len(samples):
                samples[idx] += gain * math.sin(2 * math.pi * freq * t)
    return samples


def chime_wav_bytes(sample_rate: int = 22050) -> bytes:
    samples = synthesize_chime(sample_rate)
    frames = b"".join(struct.pack("<h", int(max(-1.0, min(1.0, s)) * 32767)) for s in samples)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(frames)
    return buf.getvalue()


class NullAlertPlayer:
    """Used where no audio output is available."""

    def play_alert(self) -> None:
        logger.debug("Audio not supported, alert skipped")


class ChimePlayer:
    """Synthesizes the three-note chime and hands the WAV bytes to ``sink``."""

    def __init__(self, sink, sample_rate: int = 22050):
        self.sink = sink
        self.sample_rate = sample_rate
        self._wav = None

    def play_alert(self) -> None:
        if self._wav is None:
            self._wav = chime_wav_bytes(self.sample_rate)
        try:
            self.sink(self._wav)
        except Exception:
            logger.warning("Audio not supported", exc_info=True)


class NotificationEvaluator:
    """Checks today's events on an interval and sounds the alert for
    events that newly enter the "starting soon" window.

    Dismissed ids are remembered for the life of the evaluator.
    """

    def __init__(self, host: TimerHost, events_source, *, clock=None, player=None,
                 minutes_before: int = DEFAULT_MINUTES_BEFORE, interval_ms: int = DEFAULT_CHECK_INTERVAL_MS,
                 on_change=None):
        self.host = host
        self.events_source = events_source
        self.clock = clock or datetime.now
        self.player = player or NullAlertPlayer()
        self.minutes_before = minutes_before
        self.interval_ms = interval_ms
        self.on_change = on_change

        self.dismissed = set()
        self.active = []
        self._previous_ids = set()
        self._handles = HandleSet(host)

    def start(self) -> None:
        self.stop()
        self.check()
        self._handles.add(self.host.set_interval(self.check, self.interval_ms))

    def stop(self) -> None:
        self._handles.cancel_all()

    def check(self) -> list[EventNotification]:
        upcoming = upcoming_events(self.events_source(), self.clock(), self.minutes_before)
        current = [n for n in upcoming if n.event.id not in self.dismissed]
        ids = {n.event.id for n in current}

        for event_id in sorted(ids - self._previous_ids):
            logger.info("Event %s starts soon", event_id)
            self.player.play_alert()

        self._previous_ids = ids
        changed = current != self.active
        self.active = current
        if changed and self.on_change is not None:
            self.on_change(current)
        return current

    def dismiss(self, event_id: str) -> None:
        self.dismissed.add(event_id)
        self.active = [n for n in self.active if n.event.id != event_id]
        if self.on_change is not None:
            self.on_change(self.active)
