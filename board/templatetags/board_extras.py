from __future__ import annotations

from django import template

from ..constants import STATUS_KINDS

register = template.Library()


@register.filter
def status_style(status, settings):
    colors = getattr(settings, "status_colors", None) or {}
    color = colors.get(status)
    if not color:
        return ""
    return f"border-left: 4px solid {color};"


@register.filter
def kind_label(kind):
    return dict(STATUS_KINDS).get(kind, kind)
