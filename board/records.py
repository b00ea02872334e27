from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .constants import (
    ALL_DAY_END,
    ALL_DAY_START,
    DEFAULT_SETTINGS,
    DEFAULT_STATUS_COLORS,
    EVENT_COMPLETED,
    EVENT_ONGOING,
    EVENT_UPCOMING,
    SPEED_NORMAL,
    STATUS_KINDS,
    STYLE_STATIC,
    TRANSITION_SPEEDS,
    TRANSITION_STYLES,
    TRAVEL,
)
from .exceptions import ValidationError

STATUS_KIND_KEYS = [k for k, _ in STATUS_KINDS]


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def _clean(s) -> str:
    if s is None:
        return ""
    return str(s).strip()


def _dicts(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [x for x in value if isinstance(x, dict)]


def _parse_date(s) -> date | None:
    s = _clean(s)
    if not s:
        return None
    try:
        return datetime.strptime(s[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_hhmm(s) -> tuple[int, int] | None:
    s = _clean(s)
    try:
        hours, minutes = s.split(":")[:2]
        h, m = int(hours), int(minutes)
    except ValueError:
        return None
    if not (0 <= h < 24 and 0 <= m < 60):
        return None
    return h, m


def normalize_hhmm(s) -> str:
    """Zero-padded "HH:MM" so times compare correctly as strings."""
    parsed = parse_hhmm(s)
    if parsed is None:
        return _clean(s)
    return f"{parsed[0]:02d}:{parsed[1]:02d}"


@dataclass
class ScheduleEvent:
    id: str
    title: str
    date_started: str
    date_end: str
    time_start: str
    time_end: str
    details: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "ScheduleEvent":
        started = _clean(d.get("dateStarted"))
        return cls(
            id=_clean(d.get("id")) or new_id(),
            title=_clean(d.get("title")),
            date_started=started,
            date_end=_clean(d.get("dateEnd")) or started,
            time_start=normalize_hhmm(d.get("timeStart")),
            time_end=normalize_hhmm(d.get("timeEnd")),
            details=_clean(d.get("details")),
        )

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "title": self.title,
            "dateStarted": self.date_started,
            "dateEnd": self.date_end,
            "timeStart": self.time_start,
            "timeEnd": self.time_end,
        }
        if self.details:
            out["details"] = self.details
        return out

    @property
    def all_day(self) -> bool:
        return self.time_start == ALL_DAY_START and self.time_end == ALL_DAY_END


@dataclass
class PersonnelStatus:
    id: str
    name: str
    type: str
    date_start: str
    date_end: str
    location: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "PersonnelStatus":
        start = _clean(d.get("dateStart"))
        return cls(
            id=_clean(d.get("id")) or new_id(),
            name=_clean(d.get("name")),
            type=_clean(d.get("type")).upper(),
            date_start=start,
            date_end=_clean(d.get("dateEnd")) or start,
            location=_clean(d.get("location")),
        )

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "dateStart": self.date_start,
            "dateEnd": self.date_end,
        }
        if self.location:
            out["location"] = self.location
        return out

    def is_active_on(self, day: date) -> bool:
        start = _parse_date(self.date_start)
        end = _parse_date(self.date_end) or start
        if start is None:
            return False
        return start <= day <= end


@dataclass
class Project:
    id: str
    name: str
    count: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> "Project":
        # "number" is the counter key used by older clients
        raw = d.get("count", d.get("number", 0))
        try:
            count = max(0, int(raw or 0))
        except (TypeError, ValueError):
            count = 0
        return cls(id=_clean(d.get("id")) or new_id(), name=_clean(d.get("name")), count=count)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "count": self.count}


@dataclass
class Settings:
    theme: str = "light"
    transition_style: str = STYLE_STATIC
    transition_speed: str = SPEED_NORMAL
    custom_transition_seconds: float = 3
    smooth_scroll_enabled: bool = True
    status_colors: dict = field(default_factory=lambda: dict(DEFAULT_STATUS_COLORS))
    pin_enabled: bool = False
    pin: str = ""
    password_enabled: bool = False
    password: str = ""
    password_hint: str = ""
    recovery_email: str = ""
    failed_attempts: int = 0
    lockout_until: str | None = None
    extra: dict = field(default_factory=dict)

    _KEYS = {
        "theme": "theme",
        "transitionStyle": "transition_style",
        "transitionSpeed": "transition_speed",
        "customTransitionSeconds": "custom_transition_seconds",
        "smoothScrollEnabled": "smooth_scroll_enabled",
        "statusColors": "status_colors",
        "pinEnabled": "pin_enabled",
        "pin": "pin",
        "passwordEnabled": "password_enabled",
        "password": "password",
        "passwordHint": "password_hint",
        "recoveryEmail": "recovery_email",
        "failedAttempts": "failed_attempts",
        "lockoutUntil": "lockout_until",
    }

    @classmethod
    def from_dict(cls, d: dict | None) -> "Settings":
        merged = dict(DEFAULT_SETTINGS)
        merged.update(d or {})
        colors = dict(DEFAULT_STATUS_COLORS)
        if isinstance(merged.get("statusColors"), dict):
            colors.update(merged["statusColors"])
        merged["statusColors"] = colors

        s = cls(**{attr: merged[key] for key, attr in cls._KEYS.items()})
        s.extra = {k: v for k, v in merged.items() if k not in cls._KEYS}

        if s.transition_style not in TRANSITION_STYLES:
            s.transition_style = STYLE_STATIC
        if s.transition_speed not in TRANSITION_SPEEDS:
            s.transition_speed = SPEED_NORMAL
        try:
            s.custom_transition_seconds = float(s.custom_transition_seconds)
        except (TypeError, ValueError):
            s.custom_transition_seconds = float(DEFAULT_SETTINGS["customTransitionSeconds"])
        try:
            s.failed_attempts = max(0, int(s.failed_attempts or 0))
        except (TypeError, ValueError):
            s.failed_attempts = 0
        s.smooth_scroll_enabled = bool(s.smooth_scroll_enabled)
        return s

    def to_dict(self) -> dict:
        out = dict(self.extra)
        for key, attr in self._KEYS.items():
            out[key] = getattr(self, attr)
        out["statusColors"] = dict(self.status_colors)
        return out

    def update(self, changes: dict) -> "Settings":
        d = self.to_dict()
        d.update(changes)
        return Settings.from_dict(d)


@dataclass
class Document:
    events: list = field(default_factory=list)
    personnel: list = field(default_factory=list)
    projects: list = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)

    LIST_KEYS = ("events", "personnel", "personnelStatuses", "projects")

    @classmethod
    def check_shape(cls, d: dict) -> None:
        """Reject a posted document whose collections have the wrong type."""
        for key in cls.LIST_KEYS:
            if d.get(key) is not None and not isinstance(d[key], list):
                raise ValidationError(f"'{key}' must be a list", field=key)
        if d.get("settings") is not None and not isinstance(d["settings"], dict):
            raise ValidationError("'settings' must be an object", field="settings")

    @classmethod
    def from_dict(cls, d: dict | None) -> "Document":
        d = d or {}
        personnel = d.get("personnel")
        if personnel is None:
            personnel = d.get("personnelStatuses")
        return cls(
            events=[ScheduleEvent.from_dict(x) for x in _dicts(d.get("events"))],
            personnel=[PersonnelStatus.from_dict(x) for x in _dicts(personnel)],
            projects=[Project.from_dict(x) for x in _dicts(d.get("projects"))],
            settings=Settings.from_dict(d.get("settings") if isinstance(d.get("settings"), dict) else {}),
        )

    def to_dict(self) -> dict:
        return {
            "events": [e.to_dict() for e in self.events],
            "personnel": [p.to_dict() for p in self.personnel],
            "projects": [p.to_dict() for p in self.projects],
            "settings": self.settings.to_dict(),
        }


# ---------------------------------------------------------------------------
# Validation


def build_event(data: dict, *, all_day: bool = False, event_id: str = "") -> ScheduleEvent:
    """Validate form input and return a new event.

    Raises ValidationError with the message shown next to the form.
    """
    title = _clean(data.get("title"))
    if not title:
        raise ValidationError("Event title is required", field="title")

    date_started = _clean(data.get("dateStarted"))
    if _parse_date(date_started) is None:
        raise ValidationError("Start date is required", field="dateStarted")
    date_end = _clean(data.get("dateEnd")) or date_started
    if _parse_date(date_end) is None:
        raise ValidationError("End date is invalid", field="dateEnd")

    if all_day:
        time_start, time_end = ALL_DAY_START, ALL_DAY_END
    else:
        time_start = _clean(data.get("timeStart"))
        time_end = _clean(data.get("timeEnd"))
        if parse_hhmm(time_start) is None or parse_hhmm(time_end) is None:
            raise ValidationError("Start and end time are required", field="timeStart")
        if parse_hhmm(time_end) <= parse_hhmm(time_start):
            raise ValidationError("End time must be after start time", field="timeEnd")
        time_start, time_end = normalize_hhmm(time_start), normalize_hhmm(time_end)

    return ScheduleEvent(
        id=event_id or _clean(data.get("id")) or new_id(),
        title=title,
        date_started=date_started,
        date_end=date_end,
        time_start=time_start,
        time_end=time_end,
        details=_clean(data.get("details")),
    )


def build_personnel(data: dict, *, status_id: str = "") -> PersonnelStatus:
    name = _clean(data.get("name"))
    if not name:
        raise ValidationError("Personnel name is required", field="name")

    kind = _clean(data.get("type")).upper()
    if kind not in STATUS_KIND_KEYS:
        raise ValidationError("Status type must be one of " + ", ".join(STATUS_KIND_KEYS), field="type")

    date_start = _clean(data.get("dateStart"))
    if _parse_date(date_start) is None:
        raise ValidationError("Start date is required", field="dateStart")
    date_end = _clean(data.get("dateEnd")) or date_start
    if _parse_date(date_end) is None:
        raise ValidationError("End date is invalid", field="dateEnd")

    location = _clean(data.get("location"))
    if kind == TRAVEL and not location:
        raise ValidationError("Location is required", field="location")

    return PersonnelStatus(
        id=status_id or _clean(data.get("id")) or new_id(),
        name=name,
        type=kind,
        date_start=date_start,
        date_end=date_end,
        location=location if kind == TRAVEL else "",
    )


def build_project(data: dict, *, project_id: str = "") -> Project:
    name = _clean(data.get("name"))
    if not name:
        raise ValidationError("Project name is required", field="name")
    try:
        count = int(_clean(data.get("count", 0)) or 0)
    except ValueError:
        raise ValidationError("Please enter a valid number", field="count") from None
    if count < 0:
        raise ValidationError("Please enter a valid number", field="count")
    return Project(id=project_id or _clean(data.get("id")) or new_id(), name=name, count=count)


# ---------------------------------------------------------------------------
# Display helpers


def format_time_12h(hhmm: str) -> str:
    parsed = parse_hhmm(hhmm)
    if parsed is None:
        return _clean(hhmm)
    hours, minutes = parsed
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def event_time_label(event: ScheduleEvent) -> str:
    if event.all_day:
        return "All Day"
    return f"{format_time_12h(event.time_start)} - {format_time_12h(event.time_end)}"


def event_status(event: ScheduleEvent, now: datetime) -> str:
    if event.date_started != now.date().isoformat():
        return EVENT_UPCOMING
    current = now.strftime("%H:%M")
    if current < event.time_start:
        return EVENT_UPCOMING
    if current <= event.time_end:
        return EVENT_ONGOING
    return EVENT_COMPLETED


def events_on(events: list[ScheduleEvent], day: date) -> list[ScheduleEvent]:
    key = day.isoformat()
    out = [e for e in events if e.date_started == key]
    out.sort(key=lambda e: (e.time_start, e.title))
    return out


def tomorrow_events(events: list[ScheduleEvent], today: date) -> list[ScheduleEvent]:
    return events_on(events, today + timedelta(days=1))


def active_personnel(personnel: list[PersonnelStatus], day: date) -> dict[str, list[PersonnelStatus]]:
    groups = {k: [] for k in STATUS_KIND_KEYS}
    for p in personnel:
        if p.type in groups and p.is_active_on(day):
            groups[p.type].append(p)
    return groups


# ---------------------------------------------------------------------------
# Calendar views

# events listed in one month cell before "+N more"
MONTH_CELL_LIMIT = 3


@dataclass
class CalendarDay:
    day: date
    events: list = field(default_factory=list)
    in_month: bool = True

    @property
    def is_weekend(self) -> bool:
        return self.day.weekday() >= 5

    @property
    def shown_events(self) -> list:
        return self.events[:MONTH_CELL_LIMIT]

    @property
    def more_count(self) -> int:
        return max(0, len(self.events) - MONTH_CELL_LIMIT)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_days(events: list[ScheduleEvent], day: date) -> list[CalendarDay]:
    start = week_start(day)
    return [CalendarDay(d, events_on(events, d)) for d in (start + timedelta(days=i) for i in range(7))]


def month_grid(events: list[ScheduleEvent], day: date) -> list[list[CalendarDay]]:
    """Weeks (Monday first) covering the month of ``day``, padded with the
    neighbouring months' days to whole weeks."""
    first = day.replace(day=1)
    last = (first + timedelta(days=32)).replace(day=1) - timedelta(days=1)
    current = week_start(first)
    end = week_start(last) + timedelta(days=6)

    weeks = []
    while current <= end:
        weeks.append([
            CalendarDay(d, events_on(events, d), in_month=d.month == first.month)
            for d in (current + timedelta(days=i) for i in range(7))
        ])
        current += timedelta(days=7)
    return weeks
