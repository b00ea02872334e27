from __future__ import annotations

import logging
from datetime import datetime

from .constants import STATUS_KINDS
from .engine.overflow import ScrollContainer, Viewport
from .engine.renderer import ListView
from .records import active_personnel, events_on

logger = logging.getLogger(__name__)

TODAY = "today"
PROJECTS = "projects"


class BoardDisplay:
    """The lists shown on the board, each with its own container and
    transition scheduler, kept in step with a ``ScheduleStore``."""

    def __init__(self, host, store, *, container_height: float = 400, item_height: float = 32,
                 event_item_height: float = 50, clock=None, on_render=None):
        self.store = store
        self.clock = clock or datetime.now
        self.viewport = Viewport()
        self.views = {}

        self.views[TODAY] = ListView(
            TODAY, host, ScrollContainer(container_height), item_height=event_item_height,
            viewport=self.viewport, placeholder="No events scheduled", on_render=on_render,
        )
        for kind, label in STATUS_KINDS:
            self.views[kind] = ListView(
                kind, host, ScrollContainer(container_height), item_height=item_height,
                viewport=self.viewport, placeholder=f"No {label} today", on_render=on_render,
            )
        self.views[PROJECTS] = ListView(
            PROJECTS, host, ScrollContainer(container_height), item_height=item_height,
            viewport=self.viewport, placeholder="No projects", on_render=on_render,
        )
        self._unsubscribe = store.subscribe(lambda _doc, _local: self.refresh())

    def refresh(self) -> None:
        if not self.store.hydrated:
            # nothing real to show yet
            return
        today = self.clock().date()
        settings = self.store.settings

        groups = active_personnel(self.store.personnel, today)
        lists = {TODAY: events_on(self.store.events, today), PROJECTS: self.store.projects}
        lists.update(groups)

        for name, view in self.views.items():
            view.apply_settings(settings)
            view.set_items(lists.get(name, []))

    def resize(self, container_height: float) -> None:
        for view in self.views.values():
            view.container.resize(container_height)

    def snapshot(self) -> dict:
        return {name: view.render() for name, view in self.views.items()}

    def close(self) -> None:
        self._unsubscribe()
        for view in self.views.values():
            view.close()
