"""Reading skill and boss records out of Wise Old Man player payloads.

The payload shape has moved between API versions, so a record is looked up
in several places. The lookup order is the ``LOOKUP_ORDER`` constant: the
first location holding a record for the metric wins.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

SKILL = "skill"
BOSS = "boss"

SKILLS: Tuple[str, ...] = (
    "overall",
    "attack",
    "defence",
    "strength",
    "hitpoints",
    "ranged",
    "prayer",
    "magic",
    "cooking",
    "woodcutting",
    "fletching",
    "fishing",
    "firemaking",
    "crafting",
    "smithing",
    "mining",
    "herblore",
    "agility",
    "thieving",
    "slayer",
    "farming",
    "runecrafting",
    "hunter",
    "construction",
)

BOSSES: Tuple[str, ...] = (
    "abyssal_sire",
    "alchemical_hydra",
    "barrows_chests",
    "bryophyta",
    "callisto",
    "cerberus",
    "chambers_of_xeric",
    "chambers_of_xeric_challenge_mode",
    "chaos_elemental",
    "chaos_fanatic",
    "commander_zilyana",
    "corporeal_beast",
    "crazy_archaeologist",
    "dagannoth_prime",
    "dagannoth_rex",
    "dagannoth_supreme",
    "deranged_archaeologist",
    "general_graardor",
    "giant_mole",
    "grotesque_guardians",
    "hespori",
    "kalphite_queen",
    "king_black_dragon",
    "kraken",
    "kreearra",
    "kril_tsutsaroth",
    "mimic",
    "nightmare",
    "phosanis_nightmare",
    "obor",
    "sarachnis",
    "scorpia",
    "skotizo",
    "tempoross",
    "the_gauntlet",
    "the_corrupted_gauntlet",
    "theatre_of_blood",
    "theatre_of_blood_hard_mode",
    "thermonuclear_smoke_devil",
    "tombs_of_amascut",
    "tombs_of_amascut_expert",
    "tzkal_zuk",
    "tztok_jad",
    "venenatis",
    "vetion",
    "vorkath",
    "wintertodt",
    "zalcano",
    "zulrah",
)

METRICS: Dict[str, Tuple[str, ...]] = {SKILL: SKILLS, BOSS: BOSSES}

_CONTAINERS = {SKILL: "skills", BOSS: "bosses"}
_VALUE_FIELDS = {SKILL: "experience", BOSS: "kills"}
_DEFAULT_RECORDS: Dict[str, Dict[str, int]] = {
    SKILL: {"experience": 0, "level": 1, "rank": 0},
    BOSS: {"kills": 0, "rank": 0},
}


def _dig(payload: Any, *keys: str) -> Optional[Any]:
    node = payload
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def from_latest_snapshot(payload: Any, container: str, metric: str) -> Optional[Any]:
    return _dig(payload, "latestSnapshot", "data", container, metric)


def from_data(payload: Any, container: str, metric: str) -> Optional[Any]:
    return _dig(payload, "data", container, metric)


def from_root(payload: Any, container: str, metric: str) -> Optional[Any]:
    return _dig(payload, container, metric)


Accessor = Callable[[Any, str, str], Optional[Any]]

LOOKUP_ORDER: Tuple[Accessor, ...] = (from_latest_snapshot, from_data, from_root)


def default_record(goal_type: str) -> Optional[Dict[str, int]]:
    record = _DEFAULT_RECORDS.get(goal_type)
    return dict(record) if record is not None else None


def extract(payload: Any, goal_type: str, metric: str) -> Optional[Mapping[str, Any]]:
    """
    Return the record for ``metric`` from a player payload.

    - ``None`` when there is no payload at all or ``goal_type`` is unknown.
    - The first record found along ``LOOKUP_ORDER``, unmodified.
    - A zeroed default record when the payload exists but holds no record
      for the metric, including payloads that are not objects at all.
    """
    if payload is None:
        return None
    container = _CONTAINERS.get(goal_type)
    if container is None:
        return None
    for accessor in LOOKUP_ORDER:
        record = accessor(payload, container, metric)
        if isinstance(record, Mapping):
            return record
    return default_record(goal_type)


def value_for(record: Optional[Mapping[str, Any]], goal_type: str) -> Optional[int]:
    """Experience for skills, kills for bosses. ``None`` when the field is absent."""
    field = _VALUE_FIELDS.get(goal_type)
    if record is None or field is None or record.get(field) is None:
        return None
    raw = record[field]
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Non-numeric %s value %r treated as 0", field, raw)
        return 0
