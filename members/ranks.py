"""Clan rank classification.

A character belongs to one of two progression categories. Skillers are
ranked by the overall experience gained since joining the clan, fighters by
their efficient hours bossed (EHB). The free-text role stored on a character
is parsed once into a :class:`ParsedRole`; everything below works on the
parsed value.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple


class Category(str, Enum):
    SKILLER = "skiller"
    FIGHTER = "fighter"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Tier:
    name: str
    category: Category
    threshold: int


# Ordered low -> high. Thresholds are inclusive lower bounds.
SKILLER_TIERS: Tuple[Tier, ...] = (
    Tier("opal", Category.SKILLER, 0),
    Tier("sapphire", Category.SKILLER, 3_000_000),
    Tier("emerald", Category.SKILLER, 8_000_000),
    Tier("ruby", Category.SKILLER, 15_000_000),
    Tier("diamond", Category.SKILLER, 40_000_000),
    Tier("dragonstone", Category.SKILLER, 90_000_000),
    Tier("onyx", Category.SKILLER, 150_000_000),
    Tier("zenyte", Category.SKILLER, 500_000_000),
)

FIGHTER_TIERS: Tuple[Tier, ...] = (
    Tier("mentor", Category.FIGHTER, 0),
    Tier("prefect", Category.FIGHTER, 100),
    Tier("leader", Category.FIGHTER, 300),
    Tier("supervisor", Category.FIGHTER, 500),
    Tier("superior", Category.FIGHTER, 700),
    Tier("executive", Category.FIGHTER, 900),
    Tier("senator", Category.FIGHTER, 1100),
    Tier("monarch", Category.FIGHTER, 1300),
    Tier("tzkal", Category.FIGHTER, 1500),
)

TIERS_BY_CATEGORY = {
    Category.SKILLER: SKILLER_TIERS,
    Category.FIGHTER: FIGHTER_TIERS,
}

PRIORITY_WRONG_CATEGORY = 3
PRIORITY_WRONG_TIER = 2
PRIORITY_NONE = 0


@dataclass(frozen=True)
class ParsedRole:
    category: Category
    tier: Optional[Tier]
    matched: FrozenSet[str] = frozenset()

    @classmethod
    def parse(cls, role: Optional[str]) -> "ParsedRole":
        """Parse a free-text role label. Skiller names are checked first."""
        text = (role or "").strip().lower()
        if text:
            for tiers in (SKILLER_TIERS, FIGHTER_TIERS):
                hits = [tier for tier in tiers if tier.name in text]
                if hits:
                    return cls(hits[0].category, hits[-1], frozenset(t.name for t in hits))
        return cls(Category.UNKNOWN, None)

    def mentions(self, tier: Tier) -> bool:
        return tier.name in self.matched


@dataclass(frozen=True)
class RankEvaluation:
    has_correct_tier: bool
    expected_tier: Optional[str]
    category: Category
    current_tier: Optional[str] = None

    def to_payload(self) -> dict:
        return {
            "has_correct_tier": self.has_correct_tier,
            "expected_tier": self.expected_tier,
            "category": self.category.value,
            "current_tier": self.current_tier,
        }


def classify_tier(category: Category, value: float) -> Tier:
    try:
        tiers = TIERS_BY_CATEGORY[Category(category)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Cannot classify category {category!r}") from exc
    for tier in reversed(tiers):
        if value >= tier.threshold:
            return tier
    return tiers[0]


def classify(category: Category | str, value: float) -> str:
    """Map a category and its progression value to the tier name."""
    return classify_tier(Category(category), value).name


def progression_value(character, category: Category) -> int:
    if category is Category.SKILLER:
        return character.clan_experience
    if category is Category.FIGHTER:
        return character.ehb or 0
    raise ValueError(f"No progression value for category {category!r}")


def expected_tier(character, parsed: Optional[ParsedRole] = None) -> Optional[Tier]:
    parsed = parsed or ParsedRole.parse(character.current_role)
    if parsed.category is Category.UNKNOWN:
        return None
    return classify_tier(parsed.category, progression_value(character, parsed.category))


def evaluate(character, parsed: Optional[ParsedRole] = None) -> RankEvaluation:
    parsed = parsed or ParsedRole.parse(character.current_role)
    if parsed.category is Category.UNKNOWN:
        # Roles outside both ladders are never flagged.
        return RankEvaluation(True, None, Category.UNKNOWN)

    expected = expected_tier(character, parsed)
    return RankEvaluation(
        has_correct_tier=parsed.mentions(expected),
        expected_tier=expected.name,
        category=parsed.category,
        current_tier=parsed.tier.name if parsed.tier else None,
    )


def other_category(category: Category) -> Category:
    if category is Category.SKILLER:
        return Category.FIGHTER
    if category is Category.FIGHTER:
        return Category.SKILLER
    raise ValueError("Unknown roles have no opposite category")


def has_wrong_category(character, parsed: Optional[ParsedRole] = None) -> bool:
    """
    A character is in the wrong category when it sits at the bottom tier of its
    own ladder while its stats already clear the first step of the other one.
    """
    parsed = parsed or ParsedRole.parse(character.current_role)
    if parsed.category is Category.UNKNOWN:
        return False
    own = TIERS_BY_CATEGORY[parsed.category]
    other = other_category(parsed.category)
    other_tiers = TIERS_BY_CATEGORY[other]
    own_value = progression_value(character, parsed.category)
    other_value = progression_value(character, other)
    return own_value < own[1].threshold and other_value >= other_tiers[1].threshold


def priority(
    character,
    evaluation: Optional[RankEvaluation] = None,
    parsed: Optional[ParsedRole] = None,
) -> int:
    parsed = parsed or ParsedRole.parse(character.current_role)
    evaluation = evaluation or evaluate(character, parsed)
    if evaluation.has_correct_tier:
        return PRIORITY_NONE
    if has_wrong_category(character, parsed):
        return PRIORITY_WRONG_CATEGORY
    return PRIORITY_WRONG_TIER


def toggled_tier(character, parsed: Optional[ParsedRole] = None) -> Tier:
    """Tier the character would hold in the other category."""
    parsed = parsed or ParsedRole.parse(character.current_role)
    target = other_category(parsed.category)
    return classify_tier(target, progression_value(character, target))


def next_tier_gap(character, parsed: Optional[ParsedRole] = None) -> int:
    """Experience or EHB still needed to reach the next tier; 0 at the top."""
    parsed = parsed or ParsedRole.parse(character.current_role)
    if parsed.category is Category.UNKNOWN:
        return 0
    value = progression_value(character, parsed.category)
    for tier in TIERS_BY_CATEGORY[parsed.category]:
        if value < tier.threshold:
            return int(tier.threshold - value)
    return 0


@dataclass(frozen=True)
class RankAlert:
    character: object
    evaluation: RankEvaluation
    priority: int

    def to_payload(self) -> dict:
        payload = {"priority": self.priority}
        payload.update(self.evaluation.to_payload())
        payload["character"] = self.character.to_payload()
        return payload


def rank_alerts(characters: Iterable) -> List[RankAlert]:
    """Characters whose role does not match their stats, most urgent first."""
    alerts = []
    for character in characters:
        parsed = ParsedRole.parse(character.current_role)
        evaluation = evaluate(character, parsed)
        if evaluation.has_correct_tier:
            continue
        alerts.append(RankAlert(character, evaluation, priority(character, evaluation, parsed)))
    alerts.sort(key=lambda alert: (-alert.priority, (alert.character.name or "").lower()))
    return alerts
