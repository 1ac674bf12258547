from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Character",
            fields=[
                (
                    "wom_id",
                    models.PositiveIntegerField(
                        help_text="Stable player id issued by the Wise Old Man statistics service.",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Username on the statistics service.",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("display_name", models.CharField(blank=True, max_length=64)),
                (
                    "current_role",
                    models.CharField(
                        blank=True,
                        help_text="Free-text clan rank label, e.g. 'sapphire' or 'leader'.",
                        max_length=64,
                    ),
                ),
                ("ehb", models.IntegerField(default=0, help_text="Efficient hours bossed.")),
                ("current_experience", models.BigIntegerField(default=0)),
                (
                    "initial_experience",
                    models.BigIntegerField(
                        default=0,
                        help_text="Overall experience when the character joined the clan.",
                    ),
                ),
                ("siege_score", models.IntegerField(default=0)),
                ("join_date", models.DateTimeField(blank=True, null=True)),
                ("hidden", models.BooleanField(default=False)),
                ("not_found_upstream", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
