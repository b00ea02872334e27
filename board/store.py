from __future__ import annotations

import logging
from dataclasses import replace

from .records import (
    Document,
    Settings,
    build_event,
    build_personnel,
    build_project,
)

logger = logging.getLogger(__name__)


class ScheduleStore:
    """In-memory copy of the schedule document held by a display client.

    Listeners are called as ``listener(document, local)``; ``local`` is True
    for mutations made on this client (the ones that need pushing) and False
    for wholesale replacements coming from the server.
    """

    def __init__(self, document: Document | None = None):
        self.document = document or Document()
        self.hydrated = False
        self._listeners = []

    def subscribe(self, listener):
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, local: bool) -> None:
        for listener in list(self._listeners):
            listener(self.document, local)

    @property
    def events(self):
        return self.document.events

    @property
    def personnel(self):
        return self.document.personnel

    @property
    def projects(self):
        return self.document.projects

    @property
    def settings(self) -> Settings:
        return self.document.settings

    def replace(self, document: Document) -> None:
        self.document = document
        self._emit(local=False)

    def mark_hydrated(self) -> None:
        self.hydrated = True

    # Events

    def add_event(self, data: dict, *, all_day: bool = False):
        event = build_event(data, all_day=all_day)
        self.document.events = [*self.document.events, event]
        self._emit(local=True)
        return event

    def update_event(self, event_id: str, data: dict, *, all_day: bool = False):
        current = self._find(self.document.events, event_id)
        merged = {**current.to_dict(), **data}
        event = build_event(merged, all_day=all_day, event_id=event_id)
        self.document.events = [event if e.id == event_id else e for e in self.document.events]
        self._emit(local=True)
        return event

    def delete_event(self, event_id: str) -> None:
        self.document.events = [e for e in self.document.events if e.id != event_id]
        self._emit(local=True)

    # Personnel

    def add_personnel_status(self, data: dict):
        status = build_personnel(data)
        self.document.personnel = [*self.document.personnel, status]
        self._emit(local=True)
        return status

    def update_personnel_status(self, status_id: str, data: dict):
        current = self._find(self.document.personnel, status_id)
        status = build_personnel({**current.to_dict(), **data}, status_id=status_id)
        self.document.personnel = [status if p.id == status_id else p for p in self.document.personnel]
        self._emit(local=True)
        return status

    def delete_personnel_status(self, status_id: str) -> None:
        self.document.personnel = [p for p in self.document.personnel if p.id != status_id]
        self._emit(local=True)

    # Projects

    def add_project(self, data: dict):
        project = build_project(data)
        self.document.projects = [*self.document.projects, project]
        self._emit(local=True)
        return project

    def update_project(self, project_id: str, data: dict):
        current = self._find(self.document.projects, project_id)
        project = build_project({**current.to_dict(), **data}, project_id=project_id)
        self.document.projects = [project if p.id == project_id else p for p in self.document.projects]
        self._emit(local=True)
        return project

    def delete_project(self, project_id: str) -> None:
        self.document.projects = [p for p in self.document.projects if p.id != project_id]
        self._emit(local=True)

    def increment_project(self, project_id: str) -> None:
        self._bump(project_id, 1)

    def decrement_project(self, project_id: str) -> None:
        self._bump(project_id, -1)

    def _bump(self, project_id: str, delta: int) -> None:
        self.document.projects = [
            replace(p, count=max(0, p.count + delta)) if p.id == project_id else p
            for p in self.document.projects
        ]
        self._emit(local=True)

    # Settings

    def update_settings(self, changes: dict) -> Settings:
        self.document.settings = self.document.settings.update(changes)
        self._emit(local=True)
        return self.document.settings

    def reset_settings(self) -> Settings:
        self.document.settings = Settings()
        self._emit(local=True)
        return self.document.settings

    # lockout bookkeeping stays on this client until the next push

    def record_failed_attempt(self) -> int:
        settings = self.document.settings
        settings.failed_attempts += 1
        self._emit(local=False)
        return settings.failed_attempts

    def reset_failed_attempts(self) -> None:
        self.document.settings.failed_attempts = 0
        self._emit(local=False)

    def set_lockout_until(self, value: str | None) -> None:
        self.document.settings.lockout_until = value
        self._emit(local=False)

    @staticmethod
    def _find(items, item_id):
        for item in items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)
