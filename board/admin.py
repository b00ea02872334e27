from django.contrib import admin

from .models import ScheduleDocument


@admin.register(ScheduleDocument)
class ScheduleDocumentAdmin(admin.ModelAdmin):
    list_display = ("id", "event_count", "personnel_count", "project_count", "updated_at")
    readonly_fields = ("created_at", "updated_at")

    @admin.display(description="Events")
    def event_count(self, obj):
        return len(obj.events or [])

    @admin.display(description="Personnel")
    def personnel_count(self, obj):
        return len(obj.personnel or [])

    @admin.display(description="Projects")
    def project_count(self, obj):
        return len(obj.projects or [])
