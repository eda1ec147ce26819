from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone
from loguru import logger

from habits.models import Achievement, Completion, Habit, day_key
from habits.services import habit_stats, ledger
from habits.services.gamification import recent_achievements

RECENT_WINDOW_DAYS = 7
RECENT_ACHIEVEMENTS_LIMIT = 3


@dataclass
class HabitSummary:
    habit: Habit
    recent_completions: list[Completion]
    completions_today: int
    next_completion_points: int


@dataclass
class Dashboard:
    habits: list[HabitSummary] = field(default_factory=list)
    total_points: int = 0
    recent_achievements: list[Achievement] = field(default_factory=list)


def build_dashboard(owner, *, now: Optional[datetime] = None) -> Dashboard:
    """
    Read-only projection over the owner's habits. Aggregates are read from
    the habit rows on every call.
    """
    now = now or timezone.now()
    today = day_key(now)
    window_start = today - timedelta(days=RECENT_WINDOW_DAYS - 1)

    habits = list(
        habit_stats.with_habit_stats(Habit.objects.filter(owner=owner), today=today)
        .order_by("created_at", "id")
    )

    summaries = []
    for habit in habits:
        recent = list(
            ledger.list_by_habit_and_day_range(habit, window_start, today)
            .order_by("-completed_at", "-created_at", "-id")[:RECENT_WINDOW_DAYS]
        )
        today_count = habit_stats.completions_today(habit)
        summaries.append(HabitSummary(
            habit=habit,
            recent_completions=recent,
            completions_today=today_count,
            next_completion_points=habit_stats.next_completion_points(
                habit,
                goal_count=habit.goal_count_per_day,
                completions_today=today_count,
                now=now,
            ),
        ))

    dashboard = Dashboard(
        habits=summaries,
        total_points=sum(h.total_points for h in habits),
        recent_achievements=recent_achievements(owner, RECENT_ACHIEVEMENTS_LIMIT),
    )
    logger.debug("Built dashboard for user {}: {} habits, {} points", owner.pk, len(habits), dashboard.total_points)
    return dashboard
