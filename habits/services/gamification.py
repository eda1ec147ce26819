from typing import Optional, Sequence

from django.db import DatabaseError, transaction
from django.utils import timezone
from loguru import logger

from habits.catalog import CatalogEntry, load_catalog, streak_thresholds
from habits.models import Achievement, Habit


@transaction.atomic
def evaluate_streak_achievements(
        habit: Habit,
        *,
        catalog: Optional[Sequence[CatalogEntry]] = None,
) -> list[Achievement]:
    """
    Unlock every streak achievement whose threshold equals the habit's
    current streak exactly. Existing (owner, habit, type) rows are left alone,
    so repeated calls never create duplicates.
    """
    catalog = load_catalog() if catalog is None else catalog
    now = timezone.now()
    unlocked = []

    for entry in streak_thresholds(catalog):
        if habit.current_streak != entry.streak:
            continue

        achievement, created = Achievement.objects.get_or_create(
            owner_id=habit.owner_id,
            habit=habit,
            achievement_type=entry.type,
            defaults={
                "title": entry.title,
                "description": entry.description,
                "points": entry.points,
                "unlocked_at": now,
            },
        )
        if created:
            logger.info("Achievement {} unlocked for user {} on habit {}", entry.type, habit.owner_id, habit.id)
            unlocked.append(achievement)

    return unlocked


def unlock_achievements(habit: Habit, *, catalog: Optional[Sequence[CatalogEntry]] = None) -> list[Achievement]:
    """Side effect of a recorder write: failures are logged, never raised."""
    try:
        return evaluate_streak_achievements(habit, catalog=catalog)
    except DatabaseError:
        logger.exception("Achievement evaluation failed for habit {}", habit.id)
        return []


def list_achievements(owner):
    return Achievement.objects.filter(owner=owner).order_by("-unlocked_at", "-id")


def recent_achievements(owner, limit: int = 3) -> list[Achievement]:
    return list(list_achievements(owner)[:limit])


def available_achievements(owner, *, catalog: Optional[Sequence[CatalogEntry]] = None) -> list[dict]:
    catalog = load_catalog() if catalog is None else catalog
    unlocked_types = set(
        Achievement.objects.filter(owner=owner).values_list("achievement_type", flat=True)
    )
    return [
        {
            "type": entry.type,
            "title": entry.title,
            "description": entry.description,
            "points": entry.points,
            "locked": entry.type not in unlocked_types,
        }
        for entry in catalog
    ]
