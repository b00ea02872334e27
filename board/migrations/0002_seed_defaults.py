from django.db import migrations

from board.constants import DEFAULT_SETTINGS, DOCUMENT_ID


def seed(apps, schema_editor):
    ScheduleDocument = apps.get_model("board", "ScheduleDocument")
    ScheduleDocument.objects.get_or_create(
        id=DOCUMENT_ID,
        defaults={
            "events": [],
            "personnel": [],
            "projects": [],
            "settings": dict(DEFAULT_SETTINGS),
        },
    )


def unseed(apps, schema_editor):
    ScheduleDocument = apps.get_model("board", "ScheduleDocument")
    ScheduleDocument.objects.filter(id=DOCUMENT_ID).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("board", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed, unseed),
    ]
