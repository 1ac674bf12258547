from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from clan_portal import wom_client
from clan_portal.errors import InvalidInput, NotFound, require_admin

from . import ranks
from .models import Character

logger = logging.getLogger(__name__)


def get_character(wom_id: int, *, for_update: bool = False) -> Character:
    queryset = Character.objects.select_for_update() if for_update else Character.objects
    try:
        return queryset.get(wom_id=wom_id)
    except Character.DoesNotExist:
        raise NotFound(f"Character {wom_id} does not exist.", wom_id=wom_id) from None


def classify_character(wom_id: int) -> Dict[str, Any]:
    character = get_character(wom_id)
    parsed = ranks.ParsedRole.parse(character.current_role)
    evaluation = ranks.evaluate(character, parsed)
    payload = evaluation.to_payload()
    payload["priority"] = ranks.priority(character, evaluation, parsed)
    payload["next_tier_gap"] = ranks.next_tier_gap(character, parsed)
    payload["character"] = character.to_payload()
    return payload


def list_rank_alerts(acting_account, *, include_hidden: bool = False) -> List[ranks.RankAlert]:
    require_admin(acting_account, "view rank alerts")
    queryset = Character.objects.all()
    if not include_hidden:
        queryset = queryset.filter(hidden=False)
    return ranks.rank_alerts(queryset)


def _set_role(character: Character, role: str) -> Character:
    previous = character.current_role
    character.current_role = role
    character.save(update_fields=["current_role", "updated_at"])
    logger.info("Character %s role changed %r -> %r", character.wom_id, previous, role)
    return character


def fix_character_tier(acting_account, wom_id: int) -> Character:
    """Set the character's role to the tier its stats call for."""
    require_admin(acting_account, "change ranks")
    with transaction.atomic():
        character = get_character(wom_id, for_update=True)
        parsed = ranks.ParsedRole.parse(character.current_role)
        if parsed.category is ranks.Category.UNKNOWN:
            raise InvalidInput(
                f"Role {character.current_role!r} is not a skiller or fighter rank.",
                wom_id=wom_id,
            )
        expected = ranks.expected_tier(character, parsed)
        if parsed.mentions(expected):
            return character
        return _set_role(character, expected.name)


def toggle_character_category(acting_account, wom_id: int) -> Character:
    """Move the character to the other ladder at the tier its stats give there."""
    require_admin(acting_account, "change ranks")
    with transaction.atomic():
        character = get_character(wom_id, for_update=True)
        parsed = ranks.ParsedRole.parse(character.current_role)
        if parsed.category is ranks.Category.UNKNOWN:
            raise InvalidInput(
                f"Role {character.current_role!r} is not a skiller or fighter rank.",
                wom_id=wom_id,
            )
        return _set_role(character, ranks.toggled_tier(character, parsed).name)


def set_hidden(acting_account, wom_id: int, hidden: bool) -> Character:
    require_admin(acting_account, "change member visibility")
    updated = Character.objects.filter(wom_id=wom_id).update(hidden=bool(hidden), updated_at=timezone.now())
    if not updated:
        raise NotFound(f"Character {wom_id} does not exist.", wom_id=wom_id)
    return get_character(wom_id)


def adjust_siege_score(acting_account, wom_id: int, delta: int) -> Character:
    require_admin(acting_account, "adjust siege scores")
    try:
        delta = int(delta)
    except (TypeError, ValueError):
        raise InvalidInput("delta must be an integer.") from None
    with transaction.atomic():
        character = get_character(wom_id, for_update=True)
        character.siege_score += delta
        character.save(update_fields=["siege_score", "updated_at"])
    logger.info("Siege score for %s adjusted by %s", wom_id, delta)
    return character


def set_admin(acting_account, account_id: int, is_admin: bool):
    require_admin(acting_account, "grant or revoke admin rights")
    User = get_user_model()
    if acting_account.pk == account_id and not is_admin:
        raise InvalidInput("Admins cannot revoke their own admin rights.")
    try:
        account = User.objects.get(pk=account_id)
    except User.DoesNotExist:
        raise NotFound(f"Account {account_id} does not exist.", account_id=account_id) from None
    account.is_staff = bool(is_admin)
    account.save(update_fields=["is_staff"])
    logger.info("Account %s admin flag set to %s by %s", account_id, account.is_staff, acting_account.pk)
    return account


@dataclass
class RosterRefreshResult:
    added: int = 0
    updated: int = 0
    missing: int = 0
    errors: List[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "added": self.added,
            "updated": self.updated,
            "missing": self.missing,
            "errors": self.errors,
        }


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return default


def _membership_fields(membership: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    player = membership.get("player")
    if not isinstance(player, dict) or not player.get("username"):
        return None
    wom_id = membership.get("playerId") or player.get("id")
    if wom_id is None:
        return None
    return {
        "wom_id": _to_int(wom_id),
        "name": player["username"],
        "display_name": player.get("displayName") or player["username"],
        "current_role": membership.get("role") or "",
        "current_experience": _to_int(player.get("exp")),
        "ehb": _to_int(player.get("ehb")),
        "join_date": parse_datetime(membership.get("createdAt") or player.get("registeredAt") or ""),
    }


def _release_name(name: str, wom_id: int) -> None:
    """Move ``name`` off any other row so a renamed player can take it over."""
    holders = Character.objects.select_for_update().filter(name=name).exclude(wom_id=wom_id)
    for holder in holders:
        suffix = f"#{holder.wom_id}"
        holder.name = f"{holder.name[: 64 - len(suffix)]}{suffix}"
        holder.save(update_fields=["name", "updated_at"])
        logger.info("Released name %r from member %s", name, holder.wom_id)


def _upsert_member(wom_id: int, fields: Dict[str, Any], join_date) -> bool:
    """Insert or update one member by ``wom_id``. Returns True when inserted."""
    with transaction.atomic():
        _release_name(fields["name"], wom_id)
        character = Character.objects.select_for_update().filter(wom_id=wom_id).first()
        if character is None:
            Character.objects.create(
                wom_id=wom_id,
                initial_experience=fields["current_experience"],
                join_date=join_date or timezone.now(),
                **fields,
            )
            logger.info("Added new member %s (%s)", fields["name"], wom_id)
            return True
        for name, value in fields.items():
            setattr(character, name, value)
        character.not_found_upstream = False
        character.save()
        return False


def refresh_roster(group_id: int | str) -> RosterRefreshResult:
    """
    Reconcile the local roster with the group's memberships on the statistics service.

    New members are inserted with their current experience recorded as the
    initial experience; known members get fresh stats and role; members no
    longer in the group are flagged ``not_found_upstream``.
    """
    group = wom_client.fetch_group(group_id)
    result = RosterRefreshResult()
    seen = set()

    for membership in group["memberships"]:
        fields = _membership_fields(membership) if isinstance(membership, dict) else None
        if fields is None:
            result.errors.append(f"Skipped malformed membership: {membership!r}")
            continue
        wom_id = fields.pop("wom_id")
        seen.add(wom_id)
        join_date = fields.pop("join_date")

        try:
            created = _upsert_member(wom_id, fields, join_date)
        except IntegrityError as exc:
            logger.warning("Could not store member %s (%s): %s", fields["name"], wom_id, exc)
            result.errors.append(f"Failed to store member {wom_id}: {exc}")
            continue
        if created:
            result.added += 1
        else:
            result.updated += 1

    result.missing = (
        Character.objects.exclude(wom_id__in=seen)
        .filter(not_found_upstream=False)
        .update(not_found_upstream=True, updated_at=timezone.now())
    )
    logger.info(
        "Roster refresh complete: %s added, %s updated, %s missing, %s errors",
        result.added,
        result.updated,
        result.missing,
        len(result.errors),
    )
    return result
