from __future__ import annotations

from dataclasses import dataclass

from ..constants import EMPTY_PLACEHOLDER
from .overflow import DEFAULT_ITEM_HEIGHT, OverflowDetector
from .transitions import Mode, TransitionScheduler, TransitionSnapshot


@dataclass(frozen=True)
class RenderedList:
    items: list
    placeholder: str = ""
    # None means the list must not be remounted between updates
    transition_key: str | None = None
    enter_seconds: float = 0.0
    exit_seconds: float = 0.0
    page_dots: int = 0
    active_dot: int = 0


def _item_key(item) -> str:
    return str(getattr(item, "id", None) or (item.get("id") if isinstance(item, dict) else item))


def render_list(items: list, snapshot: TransitionSnapshot, *, placeholder: str = EMPTY_PLACEHOLDER) -> RenderedList:
    if not items:
        return RenderedList(items=[], placeholder=placeholder)

    if snapshot.mode == Mode.CONTINUOUS:
        return RenderedList(items=list(items) + list(items))

    if snapshot.mode == Mode.PAGED:
        per_page = snapshot.items_per_page
        start = snapshot.current_page * per_page
        page = list(items[start:start + per_page])
        key = f"page-{snapshot.current_page}-{snapshot.total_pages}-" + "-".join(_item_key(i) for i in page)
        return RenderedList(
            items=page,
            transition_key=key,
            enter_seconds=snapshot.enter_seconds,
            exit_seconds=snapshot.exit_seconds,
            page_dots=snapshot.total_pages,
            active_dot=snapshot.current_page,
        )

    return RenderedList(items=list(items), transition_key="all-" + "-".join(_item_key(i) for i in items))


class ListView:
    """One rendered list: container geometry, overflow detection and
    transition scheduling wired together.

    ``on_render`` receives a ``RenderedList`` each time what is visible
    changes (mode switch, page change, new items).
    """

    def __init__(self, name: str, host, container, *, item_height: float = DEFAULT_ITEM_HEIGHT, viewport=None,
                 placeholder: str = EMPTY_PLACEHOLDER, on_render=None):
        self.name = name
        self.container = container
        self.item_height = item_height
        self.placeholder = placeholder
        self.on_render = on_render
        self.items = []
        self.last_rendered = None

        self.scheduler = TransitionScheduler(host, container, item_height=item_height, on_update=self._updated)
        self.detector = OverflowDetector(host, item_height=item_height, on_change=self.scheduler.set_overflow, viewport=viewport)
        self.scheduler.set_overflow(self.detector.attach(container, 0))

    def set_items(self, items: list) -> None:
        self.items = list(items)
        if hasattr(self.container, "set_content"):
            self.container.set_content(len(self.items), self.item_height)
        if len(self.items) == self.scheduler.item_count:
            # same length, new content: redraw without restarting the mode
            self._updated(self.scheduler)
        else:
            self.scheduler.set_item_count(len(self.items))
        self.detector.set_item_count(len(self.items))

    def apply_settings(self, settings) -> None:
        self.scheduler.apply_settings(settings)

    def render(self) -> RenderedList:
        return render_list(self.items, self.scheduler.snapshot(), placeholder=self.placeholder)

    def close(self) -> None:
        self.detector.detach()
        self.scheduler.close()

    def _updated(self, _scheduler) -> None:
        rendered = self.render()
        if rendered == self.last_rendered:
            return
        self.last_rendered = rendered
        if self.on_render is not None:
            self.on_render(self.name, rendered)
