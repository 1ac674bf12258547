from __future__ import annotations

from django.db import models


class Character(models.Model):
    """A clan member's in-game character, keyed by its Wise Old Man id."""

    wom_id = models.PositiveIntegerField(
        primary_key=True,
        help_text="Stable player id issued by the Wise Old Man statistics service.",
    )
    name = models.CharField(
        max_length=64,
        unique=True,
        help_text="Username on the statistics service.",
    )
    display_name = models.CharField(max_length=64, blank=True)
    current_role = models.CharField(
        max_length=64,
        blank=True,
        help_text="Free-text clan rank label, e.g. 'sapphire' or 'leader'.",
    )
    ehb = models.IntegerField(default=0, help_text="Efficient hours bossed.")
    current_experience = models.BigIntegerField(default=0)
    initial_experience = models.BigIntegerField(
        default=0,
        help_text="Overall experience when the character joined the clan.",
    )
    siege_score = models.IntegerField(default=0)
    join_date = models.DateTimeField(null=True, blank=True)
    hidden = models.BooleanField(default=False)
    not_found_upstream = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.display_name or self.name

    @property
    def clan_experience(self) -> int:
        return (self.current_experience or 0) - (self.initial_experience or 0)

    def to_payload(self) -> dict[str, int | str | bool | None]:
        return {
            "wom_id": self.wom_id,
            "name": self.name,
            "display_name": self.display_name or self.name,
            "current_role": self.current_role,
            "ehb": self.ehb,
            "current_experience": self.current_experience,
            "initial_experience": self.initial_experience,
            "clan_experience": self.clan_experience,
            "siege_score": self.siege_score,
            "join_date": self.join_date.isoformat() if self.join_date else None,
            "hidden": self.hidden,
            "not_found_upstream": self.not_found_upstream,
        }
