from django.db import migrations, models

import board.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ScheduleDocument",
            fields=[
                ("id", models.CharField(default="main", max_length=20, primary_key=True, serialize=False)),
                ("events", models.JSONField(blank=True, default=list)),
                ("personnel", models.JSONField(blank=True, default=list)),
                ("projects", models.JSONField(blank=True, default=list)),
                ("settings", models.JSONField(blank=True, default=board.models._default_settings)),
                ("created_at", models.DateTimeField(default=board.models._now)),
                ("updated_at", models.DateTimeField(default=board.models._now)),
            ],
        ),
    ]
