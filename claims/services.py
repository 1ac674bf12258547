"""Claiming workflow: one-time codes and admin-reviewed requests.

Both paths end in :func:`_create_claim`. The one-to-one column on
``Claim.character`` is what actually guarantees a character is claimed at
most once; the ``is_claimed`` checks before it only produce a friendlier
error in the common case.
"""
from __future__ import annotations

import logging
import random
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from clan_portal.errors import (
    AlreadyClaimed,
    DuplicatePending,
    Expired,
    InvalidCode,
    InvalidInput,
    NotFound,
    NotPending,
    PortalError,
    require_admin,
)
from members.models import Character
from members.services import get_character

from .models import Claim, ClaimCode, ClaimRequest

logger = logging.getLogger(__name__)

# Uppercase letters and digits without I, O, 0 and 1.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_ATTEMPTS = 10


def generate_code(length: Optional[int] = None) -> str:
    length = length or getattr(settings, "CLAIM_CODE_LENGTH", 8)
    return "".join(random.choices(CODE_ALPHABET, k=length))


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def is_claimed(wom_id: int) -> bool:
    return Claim.objects.filter(character_id=wom_id).exists()


def _already_claimed(character: Character) -> AlreadyClaimed:
    return AlreadyClaimed(f"{character} has already been claimed.", wom_id=character.wom_id)


def _create_claim(account, character: Character, source: str) -> Claim:
    try:
        with transaction.atomic():
            claim = Claim.objects.create(account=account, character=character, source=source)
    except IntegrityError as exc:
        raise _already_claimed(character) from exc
    logger.info("Character %s claimed by account %s via %s", character.wom_id, account.pk, source)
    return claim


def issue_code(acting_account, wom_id: int, expiry_days: int = 30) -> ClaimCode:
    """Create a claim code for an unclaimed character. ``expiry_days=0`` never expires."""
    require_admin(acting_account, "issue claim codes")
    try:
        expiry_days = int(expiry_days)
    except (TypeError, ValueError):
        raise InvalidInput("expiry_days must be an integer.") from None
    if expiry_days < 0:
        raise InvalidInput("expiry_days must not be negative.")

    character = get_character(wom_id)
    if is_claimed(character.wom_id):
        raise _already_claimed(character)

    issued_at = timezone.now()
    expires_at = issued_at + timedelta(days=expiry_days) if expiry_days else None
    for _ in range(CODE_ATTEMPTS):
        code = generate_code()
        if ClaimCode.objects.filter(code=code).exists():
            continue
        try:
            with transaction.atomic():
                claim_code = ClaimCode.objects.create(
                    code=code,
                    character=character,
                    issued_by=acting_account,
                    issued_at=issued_at,
                    expires_at=expires_at,
                )
        except IntegrityError:
            continue
        logger.info("Issued claim code for %s (expires %s)", character.wom_id, expires_at or "never")
        return claim_code
    raise PortalError("Failed to generate a unique claim code. Please try again.")


def redeem_code(acting_account, code: str) -> Claim:
    """Claim the code's character for ``acting_account`` and consume the code."""
    normalized = normalize_code(code)
    if not normalized:
        raise InvalidInput("code is required.")

    now = timezone.now()
    with transaction.atomic():
        claim_code = (
            ClaimCode.objects.select_for_update()
            .select_related("character")
            .filter(code=normalized, consumed=False)
            .first()
        )
        if claim_code is None:
            raise InvalidCode("Invalid or already used claim code.")
        if claim_code.is_expired(now):
            raise Expired("This claim code has expired.", expired_at=claim_code.expires_at.isoformat())
        if is_claimed(claim_code.character_id):
            raise _already_claimed(claim_code.character)

        claim = _create_claim(acting_account, claim_code.character, Claim.Source.CODE)
        consumed = ClaimCode.objects.filter(pk=claim_code.pk, consumed=False).update(
            consumed=True,
            consumed_at=now,
            consumed_by=acting_account,
        )
        if not consumed:
            # Rolls the claim back with the transaction.
            raise InvalidCode("Invalid or already used claim code.")
    return claim


def revoke_code(acting_account, code: str) -> None:
    require_admin(acting_account, "revoke claim codes")
    deleted, _ = ClaimCode.objects.filter(code=normalize_code(code), consumed=False).delete()
    if not deleted:
        raise InvalidCode("Invalid or already used claim code.")


def list_codes(acting_account, wom_id: Optional[int] = None) -> QuerySet:
    require_admin(acting_account, "list claim codes")
    queryset = ClaimCode.objects.select_related("character")
    if wom_id is not None:
        queryset = queryset.filter(character_id=wom_id)
    return queryset


def submit_request(acting_account, wom_id: int, message: str = "") -> ClaimRequest:
    character = get_character(wom_id)
    if is_claimed(character.wom_id):
        raise _already_claimed(character)
    if ClaimRequest.objects.filter(character=character, status=ClaimRequest.Status.PENDING).exists():
        raise DuplicatePending(
            f"A claim request for {character} is already pending review.",
            wom_id=character.wom_id,
        )

    try:
        with transaction.atomic():
            claim_request = ClaimRequest.objects.create(
                account=acting_account,
                character=character,
                character_name=str(character),
                message=(message or "").strip(),
            )
    except IntegrityError as exc:
        raise DuplicatePending(
            f"A claim request for {character} is already pending review.",
            wom_id=character.wom_id,
        ) from exc
    logger.info("Claim request %s submitted for %s by %s", claim_request.pk, wom_id, acting_account.pk)
    return claim_request


def process_request(
    acting_account,
    request_id: int,
    decision: str,
    notes: str = "",
) -> ClaimRequest:
    """
    Approve or deny a pending request.

    Approval creates the claim before the status moves, inside one
    transaction, so a failed claim leaves the request pending. The status
    change is conditioned on the request still being pending; a concurrent
    second decision gets ``NotPending``.
    """
    require_admin(acting_account, "process claim requests")
    if decision not in (ClaimRequest.Status.APPROVED, ClaimRequest.Status.DENIED):
        raise InvalidInput('Invalid decision. Must be "approved" or "denied".')

    now = timezone.now()
    with transaction.atomic():
        claim_request = (
            ClaimRequest.objects.select_for_update()
            .select_related("character", "account")
            .filter(pk=request_id)
            .first()
        )
        if claim_request is None:
            raise NotFound(f"Claim request {request_id} does not exist.", request_id=request_id)
        if claim_request.status != ClaimRequest.Status.PENDING:
            raise NotPending(
                f"Claim request {request_id} was already {claim_request.status}.",
                request_id=request_id,
                status=claim_request.status,
            )

        if decision == ClaimRequest.Status.APPROVED:
            if is_claimed(claim_request.character_id):
                raise _already_claimed(claim_request.character)
            _create_claim(claim_request.account, claim_request.character, Claim.Source.REQUEST)

        moved = ClaimRequest.objects.filter(pk=request_id, status=ClaimRequest.Status.PENDING).update(
            status=decision,
            admin_notes=(notes or "").strip(),
            processed_at=now,
            processed_by=acting_account,
        )
        if not moved:
            raise NotPending(f"Claim request {request_id} is no longer pending.", request_id=request_id)

    logger.info("Claim request %s %s by %s", request_id, decision, acting_account.pk)
    claim_request.refresh_from_db()
    return claim_request


def list_requests(acting_account, status: Optional[str] = None) -> QuerySet:
    """Admins see every request, other accounts only their own."""
    if status and status not in ClaimRequest.Status.values:
        raise InvalidInput(f"Unknown status {status!r}.")
    queryset = ClaimRequest.objects.select_related("character")
    if not acting_account.is_staff:
        queryset = queryset.filter(account=acting_account)
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by("-created_at", "-id")


def list_claims(account) -> QuerySet:
    return Claim.objects.filter(account=account).select_related("character")


def account_holds_claim(account, wom_id: int) -> bool:
    return Claim.objects.filter(account=account, character_id=wom_id).exists()
