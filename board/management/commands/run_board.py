from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand

from board.display import BoardDisplay
from board.engine.notifications import ChimePlayer, NotificationEvaluator, NullAlertPlayer
from board.engine.sync import SyncClient
from board.engine.timers import AsyncioTimerHost, ManualTimerHost
from board.records import event_time_label, events_on
from board.store import ScheduleStore

logger = logging.getLogger("board.display")


def _describe(item) -> str:
    if hasattr(item, "time_start"):
        return f"{event_time_label(item)}  {item.title}"
    if hasattr(item, "count"):
        return f"{item.name}: {item.count}"
    if getattr(item, "location", ""):
        return f"{item.name} ({item.location})"
    return getattr(item, "name", str(item))


class Command(BaseCommand):
    help = "Run a headless display client that mirrors the board from a server."

    def add_arguments(self, parser):
        opts = settings.BOARD
        parser.add_argument("--url", default=opts["SYNC_URL"], help="Board server base URL")
        parser.add_argument("--poll-ms", type=int, default=opts["POLL_INTERVAL_MS"])
        parser.add_argument("--height", type=float, default=400, help="List container height in px")
        parser.add_argument("--chime-file", default="", help="Write the alert chime here each time it sounds")
        parser.add_argument("--once", action="store_true", help="Load once, print every list and exit")

    def handle(self, *args, **options):
        if options["once"]:
            self._print_once(options)
            return
        try:
            asyncio.run(self._run(options))
        except KeyboardInterrupt:
            self.stdout.write("Stopped.")

    def _build(self, host, options, on_render=None):
        opts = settings.BOARD
        store = ScheduleStore()
        sync = SyncClient(
            store,
            host,
            base_url=options["url"],
            poll_interval_ms=options["poll_ms"],
            debounce_ms=opts["PUSH_DEBOUNCE_MS"],
            timeout=opts["REQUEST_TIMEOUT"],
        )
        display = BoardDisplay(
            host,
            store,
            container_height=options["height"],
            item_height=opts["ITEM_HEIGHT"],
            event_item_height=opts["EVENT_ITEM_HEIGHT"],
            on_render=on_render,
        )
        return store, sync, display

    def _print_once(self, options):
        store, sync, display = self._build(ManualTimerHost(), options)
        sync.start()
        sync.stop()
        display.refresh()
        for name, rendered in display.snapshot().items():
            self.stdout.write(f"[{name}]")
            if not rendered.items:
                self.stdout.write(f"  {rendered.placeholder}")
            for item in rendered.items:
                self.stdout.write(f"  {_describe(item)}")
        display.close()

    async def _run(self, options):
        opts = settings.BOARD
        host = AsyncioTimerHost()

        def on_render(name, rendered):
            if not rendered.items:
                logger.info("[%s] %s", name, rendered.placeholder)
                return
            page = f" page {rendered.active_dot + 1}/{rendered.page_dots}" if rendered.page_dots else ""
            logger.info("[%s]%s %s", name, page, " | ".join(_describe(i) for i in rendered.items))

        store, sync, display = self._build(host, options, on_render)

        if options["chime_file"]:
            path = Path(options["chime_file"])
            player = ChimePlayer(path.write_bytes)
        else:
            player = NullAlertPlayer()

        def today_events():
            return events_on(store.events, date.today())

        def announce(active):
            for n in active:
                logger.info("Starting in %s min: %s", n.minutes_until, n.event.title)

        evaluator = NotificationEvaluator(
            host,
            today_events,
            player=player,
            minutes_before=opts["NOTIFY_MINUTES_BEFORE"],
            interval_ms=opts["NOTIFY_CHECK_INTERVAL_MS"],
            on_change=announce,
        )

        sync.start()
        display.refresh()
        evaluator.start()
        try:
            await asyncio.Event().wait()
        finally:
            evaluator.stop()
            sync.stop()
            display.close()
