from datetime import date, datetime, timedelta
from typing import Optional

from django.conf import settings
from django.db.models import Count, Q
from django.utils import timezone

from habits.models import Completion, Habit, day_key
from habits.services import ledger

ONE_DAY = timedelta(days=1)
DEFAULT_MAX_LOOKBACK_DAYS = 1000


def with_habit_stats(qs, today: Optional[date] = None):
    """
    Adds annotations used by list views and the dashboard.

    - completions_today_anno
    """
    today = today or day_key(timezone.now())
    return qs.annotate(
        completions_today_anno=Count(
            "completions",
            filter=Q(completions__day=today),
            distinct=True,
        ),
    )


def completions_today(habit: Habit) -> int:
    val = getattr(habit, "completions_today_anno", None)
    if val is not None:
        return int(val)
    return ledger.count_in_day(habit, day_key(timezone.now()))


def days_between(later: date, earlier: date) -> int:
    return (later - earlier).days


def _max_lookback() -> int:
    return int(getattr(settings, "HABITS_MAX_STREAK_LOOKBACK_DAYS", DEFAULT_MAX_LOOKBACK_DAYS))


def _qualifies(tally, goal_count: int) -> bool:
    # a plastered day always counts toward the streak
    if tally is None:
        return False
    count, has_plaster = tally
    return has_plaster or count >= goal_count


def day_qualifies(habit: Habit, day: date, goal_count: int) -> bool:
    return _qualifies(ledger.daily_tallies(habit, day, day).get(day), goal_count)


def find_streak_start(habit: Habit, as_of_day: date, goal_count: int) -> date:
    """
    Walk backward from ``as_of_day`` while each day meets the goal and return
    the earliest day of that run.

    Returns ``as_of_day`` itself when it does not qualify, and the first
    recorded completion day when the walk runs out of history. The walk is
    capped at HABITS_MAX_STREAK_LOOKBACK_DAYS.
    """
    lookback = _max_lookback()
    tallies = ledger.daily_tallies(habit, as_of_day - timedelta(days=lookback), as_of_day)
    if not _qualifies(tallies.get(as_of_day), goal_count):
        return as_of_day

    first_day = ledger.first_completion_day(habit)
    start = as_of_day
    for _ in range(lookback):
        previous = start - ONE_DAY
        if previous < first_day:
            return first_day
        if not _qualifies(tallies.get(previous), goal_count):
            break
        start = previous
    return start


def find_last_plaster_since(habit: Habit, since_day: date) -> Optional[Completion]:
    return ledger.latest_plaster(habit, since=since_day)


def points_for_goal_meeting_completion(habit: Habit, completed_at: datetime, goal_count: int) -> int:
    """
    Value of the completion that meets the day's goal.

    The completion's own day counts as met. A fresh run is worth the number of
    days in it; a plaster inside the run restarts the count, so the first
    completion after a plaster is worth 1.
    """
    if habit.point_streak_reset:
        return 1

    day = day_key(completed_at)
    previous = day - ONE_DAY
    if day_qualifies(habit, previous, goal_count):
        start = find_streak_start(habit, previous, goal_count)
    else:
        start = day

    plaster = find_last_plaster_since(habit, start)
    if plaster is not None:
        return max(1, days_between(day, plaster.day))
    return max(1, days_between(day, start) + 1)


def scan_streaks(tallies: dict, goal_count: int) -> tuple[int, int]:
    """
    Chronological scan over qualifying days.
    Returns (streak ending at the last qualifying day, longest streak).
    """
    current = best = 0
    previous = None
    for day in sorted(tallies):
        if not _qualifies(tallies[day], goal_count):
            continue
        if previous is not None and days_between(day, previous) == 1:
            current += 1
        else:
            current = 1
        best = max(best, current)
        previous = day
    return current, best


def recompute_aggregates(habit: Habit) -> Habit:
    """Re-derive current_streak, max_streak and total_points from the whole ledger."""
    current, best = scan_streaks(ledger.daily_tallies(habit), habit.goal_count_per_day)

    habit.current_streak = current
    habit.max_streak = max(habit.max_streak, best)
    habit.total_points = ledger.sum_points(habit)
    habit.save(update_fields=["current_streak", "max_streak", "total_points"])
    return habit


def next_completion_points(habit: Habit, *, goal_count: int, completions_today: int, now: Optional[datetime] = None) -> int:
    """Preview of what the goal-meeting completion today would earn; 0 once today's goal is met."""
    if completions_today >= goal_count:
        return 0
    return points_for_goal_meeting_completion(habit, now or timezone.now(), goal_count)
