"""Transition scheduler for lists that overflow their container.

One scheduler drives one container and runs at most one of four modes:

* ``STATIC``: nothing moves, the whole list is shown.
* ``PAGED``: fade / slideUp / slideLeft, the page index advances on a
  dwell interval.
* ``STEPPED``: verticalAutoScroll, the offset jumps two rows every two
  seconds and returns to the top after a short pause.
* ``CONTINUOUS``: gentleContinuousScroll, the offset creeps forward every
  frame over a duplicated list and wraps by one list height.

Re-evaluating always cancels every handle of the running mode before the
next mode sets up.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from ..constants import (
    PAGED_STYLES,
    SPEED_CUSTOM,
    SPEED_FAST,
    SPEED_NORMAL,
    SPEED_SLOW,
    SPEED_VERY_SLOW,
    STYLE_GENTLE_CONTINUOUS_SCROLL,
    STYLE_STATIC,
    STYLE_VERTICAL_AUTO_SCROLL,
    TRANSITION_STYLES,
)
from .overflow import DEFAULT_ITEM_HEIGHT, DEFAULT_ITEMS_PER_PAGE, OverflowState
from .timers import HandleSet, TimerHost

logger = logging.getLogger(__name__)

# how long a page stays up; custom speed does not change it
PAGE_DWELL_MS = {
    SPEED_VERY_SLOW: 8000,
    SPEED_SLOW: 5000,
    SPEED_NORMAL: 3000,
    SPEED_FAST: 1500,
    SPEED_CUSTOM: 3000,
}

# enter animation length in seconds; custom uses the configured seconds
ANIMATION_SECONDS = {
    SPEED_VERY_SLOW: 1.5,
    SPEED_SLOW: 1.0,
    SPEED_NORMAL: 0.5,
    SPEED_FAST: 0.25,
}

SCROLL_PX_PER_SECOND = {
    SPEED_VERY_SLOW: 15,
    SPEED_SLOW: 25,
    SPEED_NORMAL: 40,
    SPEED_FAST: 60,
    SPEED_CUSTOM: 40,
}

STEP_INTERVAL_MS = 2000
STEP_RESET_PAUSE_MS = STEP_INTERVAL_MS // 2
STEP_ROWS = 2


def page_dwell_ms(speed: str) -> int:
    return PAGE_DWELL_MS.get(speed, PAGE_DWELL_MS[SPEED_NORMAL])


def animation_seconds(speed: str, custom_seconds: float = 3) -> float:
    if speed == SPEED_CUSTOM:
        return float(custom_seconds)
    return ANIMATION_SECONDS.get(speed, ANIMATION_SECONDS[SPEED_NORMAL])


def exit_seconds(speed: str, custom_seconds: float = 3) -> float:
    return animation_seconds(speed, custom_seconds) / 2


def scroll_px_per_second(speed: str) -> int:
    return SCROLL_PX_PER_SECOND.get(speed, SCROLL_PX_PER_SECOND[SPEED_NORMAL])


class Mode(Enum):
    STATIC = "static"
    PAGED = "paged"
    STEPPED = "stepped"
    CONTINUOUS = "continuous"


@dataclass(frozen=True)
class TransitionSnapshot:
    mode: Mode
    style: str
    item_count: int
    has_overflow: bool
    items_per_page: int
    current_page: int
    total_pages: int
    scroll_offset: float
    enter_seconds: float
    exit_seconds: float


class TransitionScheduler:
    def __init__(self, host: TimerHost, container=None, *, item_height: float = DEFAULT_ITEM_HEIGHT, on_update=None):
        self.host = host
        self.container = container
        self.item_height = item_height
        self.on_update = on_update

        self.style = STYLE_STATIC
        self.speed = SPEED_NORMAL
        self.custom_seconds = 3.0
        self.smooth = True

        self.item_count = 0
        self.overflow = OverflowState(has_overflow=False, items_per_page=DEFAULT_ITEMS_PER_PAGE)

        self.mode = Mode.STATIC
        self.current_page = 0
        self.scroll_offset = 0.0
        self.single_set_height = 0.0

        self._handles = HandleSet(host)
        self._reset_handle = None
        self._last_frame_ts = None
        self._closed = False

    # -- inputs ---------------------------------------------------------

    def configure(self, style: str, speed: str, custom_seconds: float = 3, smooth: bool = True) -> None:
        if style not in TRANSITION_STYLES:
            logger.warning("Unknown transition style %r, using static", style)
            style = STYLE_STATIC
        custom_seconds = float(custom_seconds)
        changed = (style, speed, custom_seconds, bool(smooth)) != (self.style, self.speed, self.custom_seconds, self.smooth)
        style_changed = style != self.style
        self.style, self.speed, self.custom_seconds, self.smooth = style, speed, custom_seconds, bool(smooth)
        if not changed:
            return
        if style_changed:
            self._reset_position()
        self.evaluate()

    def apply_settings(self, settings) -> None:
        self.configure(
            settings.transition_style,
            settings.transition_speed,
            settings.custom_transition_seconds,
            settings.smooth_scroll_enabled,
        )

    def set_item_count(self, item_count: int) -> None:
        if item_count == self.item_count:
            return
        self.item_count = item_count
        self._reset_position()
        self.evaluate()

    def set_overflow(self, state: OverflowState) -> None:
        if state == self.overflow:
            return
        self.overflow = state
        if self.current_page >= self.total_pages:
            self.current_page = 0
        self.evaluate()

    def set_container(self, container) -> None:
        if container is self.container:
            return
        self._teardown()
        self.container = container
        self._reset_position()
        self.evaluate()

    def close(self) -> None:
        self._teardown()
        self.mode = Mode.STATIC
        self._closed = True

    # -- state ----------------------------------------------------------

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.item_count / max(1, self.overflow.items_per_page)))

    def active_handles(self) -> list:
        return self._handles.active()

    def snapshot(self) -> TransitionSnapshot:
        return TransitionSnapshot(
            mode=self.mode,
            style=self.style,
            item_count=self.item_count,
            has_overflow=self.overflow.has_overflow,
            items_per_page=self.overflow.items_per_page,
            current_page=self.current_page,
            total_pages=self.total_pages,
            scroll_offset=self.scroll_offset,
            enter_seconds=animation_seconds(self.speed, self.custom_seconds),
            exit_seconds=exit_seconds(self.speed, self.custom_seconds),
        )

    def select_mode(self) -> Mode:
        if self._closed or self.container is None or self.item_count == 0:
            return Mode.STATIC
        if self.style == STYLE_STATIC or not self.overflow.has_overflow:
            return Mode.STATIC
        if self.style in PAGED_STYLES:
            return Mode.PAGED if self.total_pages > 1 else Mode.STATIC
        if self.style == STYLE_VERTICAL_AUTO_SCROLL:
            return Mode.STEPPED
        if self.style == STYLE_GENTLE_CONTINUOUS_SCROLL:
            return Mode.CONTINUOUS
        return Mode.STATIC

    def evaluate(self) -> Mode:
        """Tear down the running mode, then set up whichever mode applies now."""
        self._teardown()
        self.mode = self.select_mode()
        self._layout()
        if self.mode == Mode.PAGED:
            self._handles.add(self.host.set_interval(self._next_page, page_dwell_ms(self.speed)))
        elif self.mode == Mode.STEPPED:
            self._handles.add(self.host.set_interval(self._step, STEP_INTERVAL_MS))
        elif self.mode == Mode.CONTINUOUS:
            self._start_continuous()
        logger.debug("Transition mode %s (style=%s, items=%s)", self.mode.value, self.style, self.item_count)
        self._notify()
        return self.mode

    # -- internals ------------------------------------------------------

    def rendered_count(self) -> int:
        if self.mode == Mode.PAGED:
            start = self.current_page * self.overflow.items_per_page
            return max(0, min(self.overflow.items_per_page, self.item_count - start))
        if self.mode == Mode.CONTINUOUS:
            return self.item_count * 2
        return self.item_count

    def _layout(self) -> None:
        if self.container is not None and hasattr(self.container, "layout"):
            self.container.layout(self.rendered_count() * self.item_height)

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self)

    def _teardown(self) -> None:
        self._handles.cancel_all()
        self._reset_handle = None
        self._last_frame_ts = None

    def _reset_position(self) -> None:
        self.current_page = 0
        self.scroll_offset = 0.0
        if self.container is not None:
            self.container.scroll_to(0)

    def _next_page(self) -> None:
        self.current_page = (self.current_page + 1) % self.total_pages
        self._layout()
        self._notify()

    def _step(self) -> None:
        container = self.container
        if container is None or self._reset_handle is not None:
            return
        max_scroll = container.scroll_height - container.client_height
        self.scroll_offset += self.item_height * STEP_ROWS
        if self.scroll_offset >= max_scroll:
            self._reset_handle = self._handles.add(self.host.set_timeout(self._back_to_top, STEP_RESET_PAUSE_MS))
        else:
            container.scroll_to(self.scroll_offset, smooth=self.smooth)
        self._notify()

    def _back_to_top(self) -> None:
        self._reset_handle = None
        self.scroll_offset = 0.0
        if self.container is not None:
            # jumps back instantly whatever the smooth setting
            self.container.scroll_to(0)
        self._notify()

    def _start_continuous(self) -> None:
        # the list is rendered twice, so one copy is half the scroll height
        self.single_set_height = self.container.scroll_height / 2
        if self.single_set_height <= 0:
            return
        self._last_frame_ts = None
        self._handles.add(self.host.request_frame(self._frame))

    def _frame(self, timestamp: float) -> None:
        if self.mode != Mode.CONTINUOUS:
            return
        if self._last_frame_ts is None:
            self._last_frame_ts = timestamp
        elapsed = timestamp - self._last_frame_ts
        self._last_frame_ts = timestamp

        self.scroll_offset += scroll_px_per_second(self.speed) * elapsed / 1000
        while self.scroll_offset >= self.single_set_height:
            self.scroll_offset -= self.single_set_height
        self.container.scroll_top = self.scroll_offset
        self._handles.add(self.host.request_frame(self._frame))
