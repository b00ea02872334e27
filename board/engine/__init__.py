from .overflow import OverflowDetector, OverflowState, ScrollContainer, Viewport, items_per_page, measure_overflow
from .renderer import ListView, RenderedList, render_list
from .timers import AsyncioTimerHost, ManualTimerHost, TimerHost
from .transitions import Mode, TransitionScheduler

__all__ = [
    "AsyncioTimerHost",
    "ListView",
    "ManualTimerHost",
    "Mode",
    "OverflowDetector",
    "OverflowState",
    "RenderedList",
    "ScrollContainer",
    "TimerHost",
    "TransitionScheduler",
    "Viewport",
    "items_per_page",
    "measure_overflow",
    "render_list",
]
