from __future__ import annotations

import datetime
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from django.db.models import QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_date

from claims.services import account_holds_claim
from clan_portal import wom_client
from clan_portal.errors import (
    InvalidInput,
    MalformedUpstreamData,
    NotAuthorized,
    NotFound,
    UpstreamUnavailable,
    require_admin,
)
from members.services import get_character

from . import stats
from .models import Goal

logger = logging.getLogger(__name__)

TARGET_MODES = ("gain", "total")
PUBLIC_SORTS = ("progress", "recent", "deadline")


@dataclass
class SyncResult:
    updated_count: int = 0
    completed_count: int = 0
    error: Optional[str] = None

    def to_payload(self) -> dict:
        return {
            "updated": self.updated_count,
            "completed": self.completed_count,
            "error": self.error,
        }


def fetch_player_payload(wom_id: int) -> Any:
    """
    Fetch the player's payload, degrading undecodable bodies to an empty one.

    An empty payload makes every metric resolve to its zeroed default record,
    so goals can appear to regress when the statistics service misbehaves.
    """
    try:
        return wom_client.fetch_player(int(wom_id))
    except MalformedUpstreamData as exc:
        logger.warning("Malformed statistics payload for %s, using defaults: %s", wom_id, exc.message)
        return {}


def _coerce_target_date(value: Any) -> Optional[datetime.date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    parsed = parse_date(str(value)) if isinstance(value, str) else None
    if parsed is None:
        raise InvalidInput("target_date must be an ISO date (YYYY-MM-DD).")
    return parsed


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be an integer.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be an integer.") from None
    if number <= 0:
        raise InvalidInput(f"{name} must be greater than zero.")
    return number


def create_goal(
    acting_account,
    wom_id: int,
    goal_type: str,
    metric: str,
    target: Any,
    *,
    mode: str = "gain",
    target_date: Any = None,
    is_public: bool = False,
    account=None,
) -> Goal:
    """
    Create a goal for a character the owner has claimed.

    ``mode="gain"`` treats ``target`` as an amount to gain and stores the
    absolute value ``start + target``; ``mode="total"`` takes ``target`` as
    the absolute value, which must exceed the current one.
    """
    owner = account or acting_account
    if owner.pk != acting_account.pk:
        require_admin(acting_account, "create goals for other accounts")
    if goal_type not in stats.METRICS:
        raise InvalidInput(f"Unknown goal type {goal_type!r}.")
    if metric not in stats.METRICS[goal_type]:
        raise InvalidInput(f"Unknown {goal_type} metric {metric!r}.")
    if mode not in TARGET_MODES:
        raise InvalidInput(f"Unknown target mode {mode!r}.")
    amount = _positive_int(target, "target")
    due = _coerce_target_date(target_date)

    character = get_character(wom_id)
    if not account_holds_claim(owner, character.wom_id):
        raise NotAuthorized(f"{character} is not claimed by this account.", wom_id=character.wom_id)

    record = stats.extract(fetch_player_payload(character.wom_id), goal_type, metric)
    start_value = stats.value_for(record, goal_type) or 0

    if mode == "gain":
        target_value = start_value + amount
    else:
        target_value = amount
        if target_value <= start_value:
            raise InvalidInput(
                "Target value must be greater than current value.",
                current_value=start_value,
            )

    goal = Goal.objects.create(
        account=owner,
        character=character,
        goal_type=goal_type,
        metric=metric,
        start_value=start_value,
        current_value=start_value,
        target_value=target_value,
        target_date=due,
        is_public=bool(is_public),
    )
    logger.info("Goal %s created: %s %s -> %s", goal.pk, character.wom_id, metric, target_value)
    return goal


def _get_goal(goal_id: int) -> Goal:
    try:
        return Goal.objects.get(pk=goal_id)
    except Goal.DoesNotExist:
        raise NotFound(f"Goal {goal_id} does not exist.", goal_id=goal_id) from None


def delete_goal(acting_account, goal_id: int) -> None:
    goal = _get_goal(goal_id)
    if goal.account_id != acting_account.pk:
        require_admin(acting_account, "delete other accounts' goals")
    goal.delete()
    logger.info("Goal %s deleted by %s", goal_id, acting_account.pk)


def apply_payload(goals: Iterable[Goal], payload: Any) -> SyncResult:
    """
    Write fresh values from one payload into open goals.

    ``current_value`` is always rewritten. Completion is set only by an
    update filtered on ``completed=False``, so ``completed_at`` is written
    once and a completed goal is never touched again.
    """
    result = SyncResult()
    now = timezone.now()
    for goal in goals:
        record = stats.extract(payload, goal.goal_type, goal.metric)
        value = stats.value_for(record, goal.goal_type)
        if value is None:
            logger.warning("No %s data found for goal %s (%s)", goal.goal_type, goal.pk, goal.metric)
            continue

        open_goal = Goal.objects.filter(pk=goal.pk, completed=False)
        if value >= goal.target_value:
            written = open_goal.update(current_value=value, completed=True, completed_at=now, updated_at=now)
            result.completed_count += written
        else:
            written = open_goal.update(current_value=value, updated_at=now)
        result.updated_count += written
        logger.debug(
            "Goal %s for %s: current=%s target=%s", goal.pk, goal.metric, value, goal.target_value
        )
    return result


def _sync(wom_id: int, account) -> SyncResult:
    goals = list(Goal.objects.filter(account=account, character_id=wom_id, completed=False))
    if not goals:
        return SyncResult()
    try:
        payload = fetch_player_payload(wom_id)
    except UpstreamUnavailable as exc:
        logger.warning("Skipping goal sync for %s: %s", wom_id, exc.message)
        return SyncResult(error=exc.message)
    result = apply_payload(goals, payload)
    logger.info(
        "Goals update complete for %s: %s updated, %s completed",
        wom_id,
        result.updated_count,
        result.completed_count,
    )
    return result


def sync_goals(acting_account, wom_id: int, account=None) -> SyncResult:
    """Refresh every open goal the account has on the character."""
    owner = account or acting_account
    if owner.pk != acting_account.pk:
        require_admin(acting_account, "sync other accounts' goals")
    get_character(wom_id)
    return _sync(wom_id, owner)


def sync_all_open_goals() -> SyncResult:
    """Periodic job: one fetch per character, applied to all of its open goals."""
    by_character = defaultdict(list)
    for goal in Goal.objects.filter(completed=False).order_by("character_id", "id"):
        by_character[goal.character_id].append(goal)

    total = SyncResult()
    failures = []
    for wom_id, goals in by_character.items():
        try:
            payload = fetch_player_payload(wom_id)
        except UpstreamUnavailable as exc:
            logger.warning("Skipping goal sync for %s: %s", wom_id, exc.message)
            failures.append(f"{wom_id}: {exc.message}")
            continue
        result = apply_payload(goals, payload)
        total.updated_count += result.updated_count
        total.completed_count += result.completed_count
    if failures:
        total.error = "; ".join(failures)
    return total


def list_goals(account, wom_id: Optional[int] = None) -> QuerySet:
    queryset = Goal.objects.filter(account=account).select_related("character")
    if wom_id is not None:
        queryset = queryset.filter(character_id=wom_id)
    return queryset


def list_public_goals(goal_type: Optional[str] = None, sort: str = "progress") -> List[Goal]:
    if sort not in PUBLIC_SORTS:
        raise InvalidInput(f"Unknown sort {sort!r}.")
    queryset = Goal.objects.filter(is_public=True).select_related("character")
    if goal_type:
        if goal_type not in stats.METRICS:
            raise InvalidInput(f"Unknown goal type {goal_type!r}.")
        queryset = queryset.filter(goal_type=goal_type)

    goals = list(queryset)
    if sort == "progress":
        goals.sort(key=lambda goal: goal.progress_percent, reverse=True)
    elif sort == "recent":
        goals.sort(key=lambda goal: goal.created_at, reverse=True)
    else:
        goals.sort(key=lambda goal: (goal.target_date is None, goal.target_date or datetime.date.max))
    return goals
