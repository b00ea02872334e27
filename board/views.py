from __future__ import annotations

import json
import logging
from datetime import datetime

from django.conf import settings as django_settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from . import mail
from .constants import VIEW_DAY, VIEW_MODES, VIEW_MONTH, VIEW_WEEK
from .exceptions import ValidationError
from .models import ScheduleDocument
from .records import (
    Document,
    active_personnel,
    event_status,
    event_time_label,
    events_on,
    format_time_12h,
    month_grid,
    tomorrow_events,
    week_days,
)

logger = logging.getLogger(__name__)


def _json_body(request):
    try:
        return json.loads(request.body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError):
        return None


def _board_option(key, default=None):
    return getattr(django_settings, "BOARD", {}).get(key, default)


def home(request):
    doc = ScheduleDocument.load().as_document()
    now = datetime.now()
    today = now.date()
    view_mode = request.GET.get("view", VIEW_DAY)
    if view_mode not in VIEW_MODES:
        view_mode = VIEW_DAY

    def rows(events):
        return [{
            "event": e,
            "status": event_status(e, now),
            "time_label": event_time_label(e),
            "start_label": format_time_12h(e.time_start),
        } for e in events]

    def cell(cal_day, events):
        return {"day": cal_day, "rows": rows(events), "is_today": cal_day.day == today}

    context = {
        "app_name": _board_option("APP_NAME", "Schedule Board"),
        "today": today,
        "view_mode": view_mode,
        "view_modes": VIEW_MODES,
        "today_events": rows(events_on(doc.events, today)),
        "tomorrow_events": rows(tomorrow_events(doc.events, today)),
        "personnel_groups": active_personnel(doc.personnel, today),
        "projects": doc.projects,
        "settings": doc.settings,
    }
    if view_mode == VIEW_WEEK:
        context["week"] = [cell(d, d.events) for d in week_days(doc.events, today)]
    elif view_mode == VIEW_MONTH:
        context["month_weeks"] = [
            [cell(d, d.shown_events) for d in week] for week in month_grid(doc.events, today)
        ]
    return render(request, "board/home.html", context)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_schedule(request):
    if request.method == "GET":
        try:
            doc = ScheduleDocument.load()
            return JsonResponse(doc.as_payload())
        except DatabaseError:
            logger.exception("Error fetching schedule data")
            return JsonResponse({"error": "Failed to fetch data"}, status=500)

    payload = _json_body(request)
    if not isinstance(payload, dict):
        return JsonResponse({"error": "Request body must be a JSON object."}, status=400)
    try:
        Document.check_shape(payload)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)

    document = Document.from_dict(payload)
    try:
        doc = ScheduleDocument.load().store(document)
    except DatabaseError:
        logger.exception("Error saving schedule data")
        return JsonResponse({"error": "Failed to save data"}, status=500)

    logger.info(
        "Saved schedule document: %s events, %s personnel, %s projects",
        len(document.events), len(document.personnel), len(document.projects),
    )
    return JsonResponse(doc.as_payload())


@csrf_exempt
@require_POST
def api_email(request):
    payload = _json_body(request)
    if not isinstance(payload, dict):
        return JsonResponse({"success": False, "error": "Request body must be a JSON object."}, status=400)

    try:
        message = mail.validate_email(payload)
    except ValidationError as e:
        return JsonResponse({"success": False, "error": e.message}, status=400)

    return JsonResponse(mail.dispatch(message))
