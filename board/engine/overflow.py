from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .timers import HandleSet, TimerHost

logger = logging.getLogger(__name__)

DEFAULT_ITEM_HEIGHT = 32
DEFAULT_ITEMS_PER_PAGE = 10
# vertical padding of the list container, used by the estimate only
ESTIMATE_PADDING = 12


class ScrollContainer:
    """Geometry of one scrollable list container.

    ``content_height`` is what the measurement node reports (the natural
    height of the whole list); ``rendered_height`` is the height of what is
    currently laid out inside the container and drives ``scroll_height``.
    """

    def __init__(self, client_height: float, *, measurable: bool = True):
        self.client_height = float(client_height)
        self.measurable = measurable
        self.content_height = 0.0 if measurable else None
        self.rendered_height = 0.0
        self.scroll_top = 0.0
        self.last_scroll_behavior = "auto"
        self._resize_observers = []

    @property
    def scroll_height(self) -> float:
        return max(self.client_height, self.rendered_height)

    def measure_content_height(self) -> float | None:
        return self.content_height

    def layout(self, rendered_height: float) -> None:
        self.rendered_height = float(rendered_height)

    def set_content(self, item_count: int, item_height: float) -> None:
        if self.measurable:
            self.content_height = float(item_count * item_height)

    def scroll_to(self, top: float, *, smooth: bool = False) -> None:
        max_top = max(0.0, self.scroll_height - self.client_height)
        self.scroll_top = min(max(0.0, float(top)), max_top)
        self.last_scroll_behavior = "smooth" if smooth else "auto"

    def resize(self, client_height: float) -> None:
        if float(client_height) == self.client_height:
            return
        self.client_height = float(client_height)
        for cb in list(self._resize_observers):
            cb(self)

    def observe_resize(self, callback):
        self._resize_observers.append(callback)

        def unobserve():
            if callback in self._resize_observers:
                self._resize_observers.remove(callback)

        return unobserve


class Viewport:
    """Window-level resize notifications shared by every container."""

    def __init__(self):
        self._listeners = []

    def add_listener(self, callback):
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def resized(self) -> None:
        for cb in list(self._listeners):
            cb()


@dataclass(frozen=True)
class OverflowState:
    has_overflow: bool
    items_per_page: int


def items_per_page(container_height: float, item_height: float) -> int:
    if item_height <= 0:
        return 1
    return max(1, int(math.floor(container_height / item_height)))


def measure_overflow(container, item_count: int, item_height: float = DEFAULT_ITEM_HEIGHT) -> OverflowState:
    """Measure ``container`` against its content.

    The measured content height wins when the measurement node is there;
    otherwise the item count estimate is used. Never raises.
    """
    visible = float(container.client_height)
    per_page = items_per_page(visible, item_height)

    measured = None
    try:
        measured = container.measure_content_height()
    except Exception:
        logger.debug("Content measurement unavailable, using estimate", exc_info=True)

    if measured is not None:
        return OverflowState(has_overflow=measured > visible, items_per_page=per_page)
    return OverflowState(
        has_overflow=item_count * item_height > visible - ESTIMATE_PADDING,
        items_per_page=per_page,
    )


class OverflowDetector:
    """Keeps an ``OverflowState`` current for one container.

    Re-measures when the container or the window is resized and when the
    number of items changes. ``on_change`` receives the new state whenever
    it differs from the previous one.
    """

    def __init__(self, host: TimerHost, *, item_height: float = DEFAULT_ITEM_HEIGHT, on_change=None, viewport: Viewport | None = None):
        self.host = host
        self.item_height = item_height
        self.on_change = on_change
        self.viewport = viewport
        self.container = None
        self.item_count = 0
        self.state = OverflowState(has_overflow=False, items_per_page=DEFAULT_ITEMS_PER_PAGE)
        self._handles = HandleSet(host)
        self._unsubscribe = []

    def attach(self, container, item_count: int = 0) -> OverflowState:
        self.detach()
        self.container = container
        self.item_count = item_count
        if container is not None and hasattr(container, "observe_resize"):
            self._unsubscribe.append(container.observe_resize(lambda _c: self._schedule_check()))
        if self.viewport is not None:
            self._unsubscribe.append(self.viewport.add_listener(self.check))
        return self.check()

    def detach(self) -> None:
        self._handles.cancel_all()
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.container = None

    def set_item_count(self, item_count: int) -> OverflowState:
        if item_count == self.item_count:
            return self.state
        self.item_count = item_count
        return self.check()

    def _schedule_check(self) -> None:
        # resize notifications are coalesced into the next frame
        self._handles.cancel_all()
        self._handles.add(self.host.request_frame(lambda _ts: self.check()))

    def check(self) -> OverflowState:
        if self.container is None:
            return self.state
        state = measure_overflow(self.container, self.item_count, self.item_height)
        if state != self.state:
            self.state = state
            if self.on_change is not None:
                self.on_change(state)
        return self.state
