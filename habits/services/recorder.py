"""
Completion recorder.

Every write here runs in one transaction with the habit row locked
(``select_for_update``), so the ledger insert/delete and the aggregate update
commit together or not at all, and concurrent writes to one habit serialize.
"""
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from loguru import logger

from habits.exceptions import Conflict, Forbidden, InsufficientPoints, NotFound, ValidationFailed
from habits.models import Completion, Habit, day_key
from habits.services import habit_stats, ledger
from habits.services.gamification import unlock_achievements
from habits.services.habit_crud import get_owned_habit, total_points_for_owner

DEFAULT_PLASTER_COST = 10


@dataclass(frozen=True)
class CompletionResult:
    completion: Completion
    habit: Habit
    points_earned: int
    completions_today: int
    goal_count: int

    @property
    def goal_met(self) -> bool:
        return self.completions_today >= self.goal_count


@dataclass(frozen=True)
class PlasterResult:
    completion: Completion
    habit: Habit
    points_cost: int

    @property
    def message(self) -> str:
        return (
            f"Past completion added. {self.points_cost} points deducted. "
            "Your next completion will earn 1 point (streak point worthiness reset)."
        )


def plaster_cost() -> int:
    return int(getattr(settings, "HABITS_PLASTER_COST", DEFAULT_PLASTER_COST))


def _aware(moment: datetime) -> datetime:
    if timezone.is_naive(moment):
        return timezone.make_aware(moment, dt_timezone.utc)
    return moment


def _rederive_plaster_state(habit: Habit) -> None:
    plaster = ledger.latest_plaster(habit)
    habit.point_streak_reset = plaster is not None
    habit.last_missed_completion_date = plaster.day if plaster is not None else None
    habit.save(update_fields=["point_streak_reset", "last_missed_completion_date"])


@transaction.atomic
def record_completion(owner, habit_id, at: Optional[datetime] = None) -> CompletionResult:
    habit = get_owned_habit(owner, habit_id, lock=True)
    at = _aware(at) if at is not None else timezone.now()
    day = day_key(at)
    goal = habit.goal_count_per_day

    existing, plastered = ledger.daily_tallies(habit, day, day).get(day, (0, False))
    meets_goal = existing + 1 == goal

    # completions before or after the goal-meeting one, and any on a plastered day, are worth 0
    points = 0
    if meets_goal and not plastered:
        points = habit_stats.points_for_goal_meeting_completion(habit, at, goal)

    # a completion dated before later history can move streak boundaries anywhere
    backdated = ledger.list_by_habit(habit).filter(day__gt=day).exists()

    new_streak = habit.current_streak
    if meets_goal and not plastered and not backdated:
        if habit_stats.day_qualifies(habit, day - habit_stats.ONE_DAY, goal):
            new_streak = habit.current_streak + 1
        else:
            new_streak = 1

    completion = ledger.append(Completion(
        habit=habit,
        owner=owner,
        completed_at=at,
        points=points,
    ))

    if backdated:
        habit_stats.recompute_aggregates(habit)
    else:
        habit.current_streak = new_streak
        habit.max_streak = max(habit.max_streak, new_streak)
        habit.total_points += points
    # only a point-earning completion consumes a pending reset
    if points > 0:
        habit.point_streak_reset = False
    habit.save(update_fields=["current_streak", "max_streak", "total_points", "point_streak_reset"])

    if points > 0:
        unlock_achievements(habit)

    logger.info(
        "Recorded completion {} for habit {}: {} points, streak {}",
        completion.id, habit.id, points, habit.current_streak,
    )
    return CompletionResult(
        completion=completion,
        habit=habit,
        points_earned=points,
        completions_today=existing + 1,
        goal_count=goal,
    )


@transaction.atomic
def record_past_completion(owner, habit_id, completed_at: Optional[datetime]) -> PlasterResult:
    """
    Insert a plaster: a zero-point completion on a past day with no
    completions, paid for with a fixed point cost.
    """
    if completed_at is None:
        raise ValidationFailed("completedAt is required")
    completed_at = _aware(completed_at)
    day = day_key(completed_at)
    # whole days only: any time today counts as today, not the past
    if day >= day_key(timezone.now()):
        logger.warning("Rejected plaster for habit {} on {}: not in the past", habit_id, day)
        raise ValidationFailed("Date must be in the past")

    habit = get_owned_habit(owner, habit_id, lock=True)

    if ledger.count_in_day(habit, day) > 0:
        logger.warning("Rejected plaster for habit {} on {}: day already has a completion", habit.id, day)
        raise Conflict("Completion already exists for this date")

    cost = plaster_cost()
    owner_points = total_points_for_owner(owner)
    if owner_points < cost:
        logger.warning("Rejected plaster for habit {}: user {} has {} points", habit.id, owner.pk, owner_points)
        raise InsufficientPoints("Not enough points for this!")

    completion = ledger.append(Completion(
        habit=habit,
        owner=owner,
        completed_at=completed_at,
        points=0,
        is_missed_completion=True,
    ))

    habit_stats.recompute_aggregates(habit)
    habit.total_points = max(0, habit.total_points - cost)
    habit.point_streak_reset = True
    habit.last_missed_completion_date = day
    habit.save(update_fields=["total_points", "point_streak_reset", "last_missed_completion_date"])

    unlock_achievements(habit)

    logger.info(
        "Recorded plaster {} for habit {} on {}: cost {}, streak {}, total {}",
        completion.id, habit.id, day, cost, habit.current_streak, habit.total_points,
    )
    return PlasterResult(completion=completion, habit=habit, points_cost=cost)


@transaction.atomic
def remove_today_completion(owner, habit_id, now: Optional[datetime] = None) -> Habit:
    habit = get_owned_habit(owner, habit_id, lock=True)
    today = day_key(now or timezone.now())

    completion = ledger.find_most_recent_in_day(habit, today)
    if completion is None:
        logger.warning("No completion today for habit {}", habit.id)
        raise NotFound("No completions found for today")

    ledger.delete_by_id(completion.id)
    habit_stats.recompute_aggregates(habit)
    _rederive_plaster_state(habit)

    logger.info("Removed completion {} from habit {}", completion.id, habit.id)
    return habit


@transaction.atomic
def delete_completion(owner, completion_id) -> bool:
    try:
        completion = Completion.objects.get(pk=completion_id)
    except (Completion.DoesNotExist, ValueError):
        logger.warning("Completion {} not found for user {}", completion_id, owner.pk)
        raise NotFound("Completion not found")

    if completion.owner_id != owner.pk:
        logger.warning("User {} does not own completion {}", owner.pk, completion_id)
        raise Forbidden("Unauthorized")

    habit = Habit.objects.select_for_update().get(pk=completion.habit_id)
    ledger.delete_by_id(completion.id)
    habit_stats.recompute_aggregates(habit)
    _rederive_plaster_state(habit)

    logger.info("Deleted completion {} from habit {}", completion_id, habit.id)
    return True
