from __future__ import annotations

from django.db import models
from django.utils import timezone

from .constants import DEFAULT_SETTINGS, DOCUMENT_ID
from .records import Document


def _now():
    return timezone.now()


def _default_settings():
    return dict(DEFAULT_SETTINGS)


class ScheduleDocument(models.Model):
    """The single persisted copy of the whole board."""

    id = models.CharField(max_length=20, primary_key=True, default=DOCUMENT_ID)
    events = models.JSONField(default=list, blank=True)
    personnel = models.JSONField(default=list, blank=True)
    projects = models.JSONField(default=list, blank=True)
    settings = models.JSONField(default=_default_settings, blank=True)

    created_at = models.DateTimeField(default=_now)
    updated_at = models.DateTimeField(default=_now)

    def save(self, *args, **kwargs):
        self.updated_at = _now()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"ScheduleDocument({self.id})"

    @classmethod
    def load(cls) -> "ScheduleDocument":
        doc, _ = cls.objects.get_or_create(id=DOCUMENT_ID)
        return doc

    def as_document(self) -> Document:
        return Document.from_dict({
            "events": self.events,
            "personnel": self.personnel,
            "projects": self.projects,
            "settings": self.settings,
        })

    def as_payload(self) -> dict:
        return self.as_document().to_dict()

    def store(self, document: Document):
        payload = document.to_dict()
        self.events = payload["events"]
        self.personnel = payload["personnel"]
        self.projects = payload["projects"]
        self.settings = payload["settings"]
        self.save()
        return self
