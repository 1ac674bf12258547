from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from members.models import Character


class Goal(models.Model):
    """A target value for one skill's experience or one boss's kill count."""

    class GoalType(models.TextChoices):
        SKILL = "skill", "Skill"
        BOSS = "boss", "Boss"

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="goals",
    )
    character = models.ForeignKey(
        Character,
        on_delete=models.CASCADE,
        related_name="goals",
    )
    goal_type = models.CharField(max_length=8, choices=GoalType.choices)
    metric = models.CharField(max_length=64)
    start_value = models.BigIntegerField(default=0)
    current_value = models.BigIntegerField(default=0)
    target_value = models.BigIntegerField(
        help_text="Absolute value to reach; gain targets are stored as start + gain.",
    )
    target_date = models.DateField(null=True, blank=True)
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    is_public = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["completed", "-created_at", "-id"]
        indexes = [
            models.Index(fields=["account", "character", "completed"], name="goal_account_char_open_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.character} {self.metric} -> {self.target_value}"

    @property
    def progress_percent(self) -> int:
        span = self.target_value - self.start_value
        if span <= 0:
            return 100 if self.completed or self.current_value >= self.target_value else 0
        percent = (self.current_value - self.start_value) * 100 // span
        return max(0, min(100, int(percent)))

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "wom_id": self.character_id,
            "goal_type": self.goal_type,
            "metric": self.metric,
            "start_value": self.start_value,
            "current_value": self.current_value,
            "target_value": self.target_value,
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "completed": self.completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "is_public": self.is_public,
            "progress_percent": self.progress_percent,
            "created_at": self.created_at.isoformat(),
        }
