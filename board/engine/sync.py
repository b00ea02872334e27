"""Polling synchronisation between a display client and the server document.

There is no push channel. The client pulls the whole document on an
interval and replaces its local copy only when the serialised document
differs from the last one it saw; local mutations are pushed, debounced,
as a whole document. Whichever push lands last wins.
"""
from __future__ import annotations

import json
import logging

import requests

from ..exceptions import SyncError
from ..records import Document
from .timers import HandleSet, TimerHost

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 3000
DEFAULT_DEBOUNCE_MS = 500
DEFAULT_TIMEOUT = 10


def serialize(payload: dict) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class SyncClient:
    def __init__(
        self,
        store,
        host: TimerHost,
        *,
        base_url: str,
        session: requests.Session | None = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.store = store
        self.host = host
        self.url = base_url.rstrip("/") + "/api/schedule/"
        self.session = session or requests.Session()
        self.poll_interval_ms = poll_interval_ms
        self.debounce_ms = debounce_ms
        self.timeout = timeout

        self.last_seen = None
        self.loading = False
        self.running = False

        self._poll_handles = HandleSet(host)
        self._push_handles = HandleSet(host)
        self._unsubscribe = None

    # -- lifecycle ------------------------------------------------------

    def start(self) -> None:
        """Load once, then keep polling. Local mutations schedule pushes."""
        if self.running:
            return
        self.running = True
        self.loading = True
        try:
            self.pull()
        finally:
            self.loading = False
            self.store.mark_hydrated()
        self._unsubscribe = self.store.subscribe(self._on_store_change)
        self._poll_handles.add(self.host.set_interval(self.pull, self.poll_interval_ms))
        logger.info("Sync started against %s every %sms", self.url, self.poll_interval_ms)

    def stop(self) -> None:
        self._poll_handles.cancel_all()
        self._push_handles.cancel_all()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.running = False

    # -- pull -----------------------------------------------------------

    def _fetch(self) -> dict:
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise SyncError(f"Failed to load from server: {e}") from e
        if not isinstance(data, dict):
            raise SyncError("Failed to load from server: document is not an object")
        return data

    def pull(self) -> bool:
        """Fetch the server document; returns True when the local copy was replaced."""
        try:
            data = self._fetch()
            serialized = serialize(data)
            if serialized == self.last_seen:
                return False
            document = Document.from_dict(data)
        except (SyncError, TypeError, ValueError) as e:
            logger.error("Auto-sync failed: %s", e)
            return False

        self.last_seen = serialized
        self.store.replace(document)
        logger.debug("Applied server document (%s bytes)", len(serialized))
        return True

    # -- push -----------------------------------------------------------

    def _on_store_change(self, _document, local: bool) -> None:
        if local:
            self.schedule_push()

    def schedule_push(self) -> None:
        self._push_handles.cancel_all()
        self._push_handles.add(self.host.set_timeout(self.push, self.debounce_ms))

    @property
    def push_pending(self) -> bool:
        return len(self._push_handles) > 0

    def push(self) -> bool:
        payload = self.store.document.to_dict()
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("Failed to save to server: %s", e)
            return False
        self.last_seen = serialize(payload)
        return True
