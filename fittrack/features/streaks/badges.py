"""
Badge catalog and the streak-threshold rules evaluated against it.

The catalog lists six badges. Only the four streak-based ones are awarded
automatically; "First Workout" and "Calorie Counter" are display-only until
count-based rules exist.
"""

from datetime import datetime
from typing import Dict, List, Tuple

from fittrack.models.streak import Badge, BadgeDefinition, BadgeRequirement, StreakRecord


BADGE_CATALOG: Tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        name="First Workout",
        description="Complete your first workout",
        image="/images/badges/first-workout.png",
        requirement=BadgeRequirement(type="workout", count=1),
    ),
    BadgeDefinition(
        name="Week Warrior",
        description="Work out for 7 consecutive days",
        image="/images/badges/week-warrior.png",
        requirement=BadgeRequirement(type="workout_streak", count=7),
    ),
    BadgeDefinition(
        name="Hydration Hero",
        description="Drink 8+ glasses of water for 7 days",
        image="/images/badges/hydration-hero.png",
        requirement=BadgeRequirement(type="water_streak", count=7),
    ),
    BadgeDefinition(
        name="Meal Master",
        description="Log meals for 14 consecutive days",
        image="/images/badges/meal-master.png",
        requirement=BadgeRequirement(type="diet_streak", count=14),
    ),
    BadgeDefinition(
        name="Fitness Fanatic",
        description="Work out for 30 consecutive days",
        image="/images/badges/fitness-fanatic.png",
        requirement=BadgeRequirement(type="workout_streak", count=30),
    ),
    BadgeDefinition(
        name="Calorie Counter",
        description="Log 100 meals",
        image="/images/badges/calorie-counter.png",
        requirement=BadgeRequirement(type="meal_count", count=100),
    ),
)

_BY_NAME: Dict[str, BadgeDefinition] = {b.name: b for b in BADGE_CATALOG}

# Requirement type -> StreakRecord counter
_STREAK_COUNTERS = {
    "workout_streak": "workout_streak",
    "water_streak": "water_streak",
    "diet_streak": "diet_streak",
}

# Evaluation order matters: it is the order new badges are appended in.
STREAK_BADGE_RULES: Tuple[str, ...] = (
    "Week Warrior",
    "Fitness Fanatic",
    "Hydration Hero",
    "Meal Master",
)


def available_badges() -> List[BadgeDefinition]:
    return list(BADGE_CATALOG)


def badge_definition(name: str) -> BadgeDefinition:
    return _BY_NAME[name]


def rule_met(definition: BadgeDefinition, record: StreakRecord) -> bool:
    counter = _STREAK_COUNTERS.get(definition.requirement.type)
    if counter is None:
        return False
    return getattr(record, counter) >= definition.requirement.count


def evaluate(record: StreakRecord, now: datetime) -> Tuple[StreakRecord, List[str]]:
    """
    Append every streak badge whose threshold is met and which the user does
    not hold yet. Returns the (possibly) updated record and the new names.
    """
    earned: List[Badge] = []
    for name in STREAK_BADGE_RULES:
        definition = badge_definition(name)
        if not rule_met(definition, record) or record.has_badge(name):
            continue
        earned.append(
            Badge(
                name=definition.name,
                description=definition.description,
                image=definition.image,
                earned_date=now,
            )
        )

    if not earned:
        return record, []
    updated = record.model_copy(update={"badges": list(record.badges) + earned})
    return updated, [b.name for b in earned]
