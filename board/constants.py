from __future__ import annotations

DOCUMENT_ID = "main"

STATUS_KINDS = [
    ("CTO", "CTO"),
    ("FL", "FL"),
    ("WFH", "WFH"),
    ("TRAVEL", "In Travel"),
]
TRAVEL = "TRAVEL"

EVENT_UPCOMING = "upcoming"
EVENT_ONGOING = "ongoing"
EVENT_COMPLETED = "completed"

ALL_DAY_START = "00:00"
ALL_DAY_END = "23:59"

STYLE_STATIC = "static"
STYLE_FADE = "fade"
STYLE_SLIDE_UP = "slideUp"
STYLE_SLIDE_LEFT = "slideLeft"
STYLE_VERTICAL_AUTO_SCROLL = "verticalAutoScroll"
STYLE_GENTLE_CONTINUOUS_SCROLL = "gentleContinuousScroll"

TRANSITION_STYLES = (
    STYLE_STATIC,
    STYLE_FADE,
    STYLE_SLIDE_UP,
    STYLE_SLIDE_LEFT,
    STYLE_VERTICAL_AUTO_SCROLL,
    STYLE_GENTLE_CONTINUOUS_SCROLL,
)
PAGED_STYLES = (STYLE_FADE, STYLE_SLIDE_UP, STYLE_SLIDE_LEFT)

SPEED_VERY_SLOW = "verySlow"
SPEED_SLOW = "slow"
SPEED_NORMAL = "normal"
SPEED_FAST = "fast"
SPEED_CUSTOM = "custom"

TRANSITION_SPEEDS = (SPEED_VERY_SLOW, SPEED_SLOW, SPEED_NORMAL, SPEED_FAST, SPEED_CUSTOM)

THEMES = ("light", "dark", "system")

EMAIL_TYPES = ("recovery", "lockout", "hint")

MAX_FAILED_ATTEMPTS = 5
LOCKOUT_MINUTES = 5
HINT_AFTER_ATTEMPTS = 3

DEFAULT_STATUS_COLORS = {
    "upcoming": "#3b82f6",
    "ongoing": "#22c55e",
    "completed": "#9ca3af",
}

DEFAULT_SETTINGS = {
    "theme": "light",
    "transitionStyle": STYLE_STATIC,
    "transitionSpeed": SPEED_NORMAL,
    "customTransitionSeconds": 3,
    "smoothScrollEnabled": True,
    "statusColors": dict(DEFAULT_STATUS_COLORS),
    "pinEnabled": False,
    "pin": "",
    "passwordEnabled": False,
    "password": "",
    "passwordHint": "",
    "recoveryEmail": "",
    "failedAttempts": 0,
    "lockoutUntil": None,
}

EMPTY_PLACEHOLDER = "Nothing scheduled"

VIEW_DAY = "day"
VIEW_WEEK = "week"
VIEW_MONTH = "month"
VIEW_MODES = (VIEW_DAY, VIEW_WEEK, VIEW_MONTH)
