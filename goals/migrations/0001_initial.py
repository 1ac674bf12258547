import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("members", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Goal",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "goal_type",
                    models.CharField(
                        choices=[("skill", "Skill"), ("boss", "Boss")],
                        max_length=8,
                    ),
                ),
                ("metric", models.CharField(max_length=64)),
                ("start_value", models.BigIntegerField(default=0)),
                ("current_value", models.BigIntegerField(default=0)),
                (
                    "target_value",
                    models.BigIntegerField(
                        help_text="Absolute value to reach; gain targets are stored as start + gain.",
                    ),
                ),
                ("target_date", models.DateField(blank=True, null=True)),
                ("completed", models.BooleanField(default=False)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("is_public", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="goals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "character",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="goals",
                        to="members.character",
                    ),
                ),
            ],
            options={
                "ordering": ["completed", "-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["account", "character", "completed"],
                        name="goal_account_char_open_idx",
                    ),
                ],
            },
        ),
    ]
