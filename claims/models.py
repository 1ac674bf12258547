from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from members.models import Character


class Claim(models.Model):
    """Binds an account to the character it plays. A character has at most one claim."""

    class Source(models.TextChoices):
        CODE = "code", "Claim code"
        REQUEST = "request", "Claim request"

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="claims",
    )
    character = models.OneToOneField(
        Character,
        on_delete=models.CASCADE,
        related_name="claim",
    )
    source = models.CharField(max_length=16, choices=Source.choices)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.character} claimed by {self.account}"

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "wom_id": self.character_id,
            "character_name": str(self.character),
            "source": self.source,
            "created_at": self.created_at.isoformat(),
        }


class ClaimCode(models.Model):
    """A single-use code an admin hands to a player to claim a character without review."""

    code = models.CharField(max_length=16, unique=True)
    character = models.ForeignKey(
        Character,
        on_delete=models.CASCADE,
        related_name="claim_codes",
    )
    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="issued_claim_codes",
    )
    issued_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Leave empty for a code that never expires.",
    )
    consumed = models.BooleanField(default=False)
    consumed_at = models.DateTimeField(null=True, blank=True)
    consumed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="redeemed_claim_codes",
    )

    class Meta:
        ordering = ["-issued_at"]

    def __str__(self) -> str:
        return f"{self.code} ({self.character})"

    def is_expired(self, at=None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < (at or timezone.now())

    def to_payload(self) -> dict:
        return {
            "code": self.code,
            "wom_id": self.character_id,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "consumed": self.consumed,
        }


class ClaimRequest(models.Model):
    """A player's request to claim a character, reviewed by an admin."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        DENIED = "denied", "Denied"

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="claim_requests",
    )
    character = models.ForeignKey(
        Character,
        on_delete=models.CASCADE,
        related_name="claim_requests",
    )
    character_name = models.CharField(
        max_length=64,
        help_text="Character name at the time the request was made.",
    )
    message = models.TextField(blank=True)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    admin_notes = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_claim_requests",
    )
    created_at = models.DateTimeField(default=timezone.now)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["character"],
                condition=Q(status="pending"),
                name="unique_pending_claim_request",
            ),
        ]

    def __str__(self) -> str:
        return f"Request #{self.pk} for {self.character_name} ({self.status})"

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "wom_id": self.character_id,
            "character_name": self.character_name,
            "message": self.message,
            "status": self.status,
            "admin_notes": self.admin_notes,
            "processed_by": self.processed_by_id,
            "created_at": self.created_at.isoformat(),
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
        }
