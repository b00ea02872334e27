from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .constants import HINT_AFTER_ATTEMPTS, LOCKOUT_MINUTES, MAX_FAILED_ATTEMPTS
from .exceptions import LockedOutError
from .mail import hint_email, lockout_email, recovery_email

logger = logging.getLogger(__name__)

LOCKOUT_CHECK_INTERVAL_MS = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value) -> datetime | None:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class AttemptResult:
    ok: bool
    message: str = ""
    remaining_attempts: int = MAX_FAILED_ATTEMPTS
    locked: bool = False
    show_hint: bool = False


class SessionMarker:
    """Remembers that the gate was passed for the rest of this session."""

    def __init__(self):
        self.unlocked = False

    def unlock(self) -> None:
        self.unlocked = True

    def clear(self) -> None:
        self.unlocked = False


class AccessGate:
    def __init__(self, store, *, mailer=None, app_name: str = "Schedule Board", clock=None, session: SessionMarker | None = None):
        self.store = store
        self.mailer = mailer
        self.app_name = app_name
        self.clock = clock or _utcnow
        self.session = session or SessionMarker()

    @property
    def settings(self):
        return self.store.settings

    @property
    def requires_password(self) -> bool:
        return bool(self.settings.password_enabled and self.settings.password)

    def needs_prompt(self) -> bool:
        return self.requires_password and not self.session.unlocked

    @property
    def show_hint(self) -> bool:
        return self.settings.failed_attempts >= HINT_AFTER_ATTEMPTS and bool(self.settings.password_hint)

    def lockout_remaining(self, now: datetime | None = None) -> int:
        until = _parse_timestamp(self.settings.lockout_until)
        if until is None:
            return 0
        now = now or self.clock()
        return max(0, math.ceil((until - now).total_seconds()))

    def is_locked_out(self, now: datetime | None = None) -> bool:
        return self.lockout_remaining(now) > 0

    def refresh(self, now: datetime | None = None) -> bool:
        """Clear an expired lockout. Returns True when one was cleared."""
        if self.settings.lockout_until and not self.is_locked_out(now):
            self.store.set_lockout_until(None)
            self.store.reset_failed_attempts()
            logger.info("Lockout expired, failed attempts reset")
            return True
        return False

    def attempt_password(self, secret: str, now: datetime | None = None) -> AttemptResult:
        now = now or self.clock()
        self.refresh(now)
        remaining = self.lockout_remaining(now)
        if remaining > 0:
            raise LockedOutError(remaining)

        if secret == self.settings.password:
            self.store.reset_failed_attempts()
            self.session.unlock()
            return AttemptResult(ok=True)

        failed = self.store.record_failed_attempt()
        if failed >= MAX_FAILED_ATTEMPTS:
            until = now + timedelta(minutes=LOCKOUT_MINUTES)
            self.store.set_lockout_until(until.isoformat())
            logger.warning("Too many failed attempts, locked until %s", until.isoformat())
            if self.settings.recovery_email and self.mailer is not None:
                self.mailer.send(lockout_email(self.settings.recovery_email, self.app_name, failed))
            return AttemptResult(
                ok=False,
                message=f"Too many failed attempts. Account locked for {LOCKOUT_MINUTES} minutes.",
                remaining_attempts=0,
                locked=True,
                show_hint=self.show_hint,
            )

        left = MAX_FAILED_ATTEMPTS - failed
        return AttemptResult(
            ok=False,
            message=f"Incorrect password. {left} attempts remaining.",
            remaining_attempts=left,
            show_hint=self.show_hint,
        )

    def check_pin(self, pin: str) -> AttemptResult:
        if not self.settings.pin_enabled:
            return AttemptResult(ok=True)
        if pin == self.settings.pin:
            self.session.unlock()
            return AttemptResult(ok=True)
        return AttemptResult(ok=False, message="Incorrect PIN")

    def request_recovery(self, email: str) -> bool:
        email = (email or "").strip()
        if not email or self.mailer is None:
            return False
        if not self.mailer.send(recovery_email(email, self.app_name)):
            return False
        if self.settings.password_hint:
            self.mailer.send(hint_email(email, self.app_name, self.settings.password_hint))
        return True


class LockoutWatcher:
    """Re-evaluates the lockout every second while the lock screen is up."""

    def __init__(self, gate: AccessGate, host, *, on_tick=None):
        self.gate = gate
        self.host = host
        self.on_tick = on_tick
        self._handle = None

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> None:
        self.stop()
        if not self.gate.is_locked_out():
            return
        self.tick()
        self._handle = self.host.set_interval(self.tick, LOCKOUT_CHECK_INTERVAL_MS)

    def stop(self) -> None:
        self.host.cancel(self._handle)
        self._handle = None

    def tick(self) -> None:
        remaining = self.gate.lockout_remaining()
        if self.on_tick is not None:
            self.on_tick(remaining)
        if remaining == 0:
            self.gate.refresh()
            self.stop()
