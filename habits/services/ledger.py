"""
Completion ledger: storage access only, no business rules.
"""
from datetime import date
from typing import Optional

from django.db.models import Count, Q, QuerySet, Sum

from habits.models import Completion, Habit


def append(completion: Completion) -> Completion:
    completion.save()
    return completion


def list_by_habit(habit: Habit) -> QuerySet:
    return Completion.objects.filter(habit=habit).order_by("completed_at", "created_at", "id")


def list_by_habit_and_day_range(habit: Habit, start: date, end: date) -> QuerySet:
    """Completions whose UTC day falls in [start, end], inclusive."""
    return list_by_habit(habit).filter(day__range=(start, end))


def count_in_day(habit: Habit, day: date) -> int:
    return Completion.objects.filter(habit=habit, day=day).count()


def find_most_recent_in_day(habit: Habit, day: date) -> Optional[Completion]:
    return (
        Completion.objects.filter(habit=habit, day=day)
        .order_by("-created_at", "-id")
        .first()
    )


def first_completion_day(habit: Habit) -> Optional[date]:
    return list_by_habit(habit).values_list("day", flat=True).first()


def daily_tallies(habit: Habit, start: Optional[date] = None, end: Optional[date] = None) -> dict:
    """
    Per-day summary ``{day: (count, has_plaster)}``, optionally bounded to
    [start, end]. Days without completions are absent.
    """
    qs = Completion.objects.filter(habit=habit)
    if start is not None:
        qs = qs.filter(day__gte=start)
    if end is not None:
        qs = qs.filter(day__lte=end)

    rows = (
        qs.values("day")
        .annotate(
            total=Count("id"),
            plasters=Count("id", filter=Q(is_missed_completion=True)),
        )
        .order_by("day")
    )
    return {row["day"]: (row["total"], row["plasters"] > 0) for row in rows}


def sum_points(habit: Habit) -> int:
    agg = Completion.objects.filter(habit=habit).aggregate(total=Sum("points"))
    return int(agg["total"] or 0)


def latest_plaster(habit: Habit, since: Optional[date] = None) -> Optional[Completion]:
    qs = Completion.objects.filter(habit=habit, is_missed_completion=True)
    if since is not None:
        qs = qs.filter(day__gte=since)
    return qs.order_by("-completed_at", "-created_at", "-id").first()


def delete_by_id(completion_id) -> int:
    deleted, _ = Completion.objects.filter(pk=completion_id).delete()
    return deleted
