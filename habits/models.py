from __future__ import annotations
from datetime import date, datetime, timezone as dt_timezone
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q


def day_key(moment: datetime) -> date:
    """UTC calendar day of a timestamp. Every same-day comparison goes through this."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(dt_timezone.utc).date()


class Habit(models.Model):
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='habits',
    )
    name = models.CharField(max_length=120)
    color = models.CharField(max_length=32)
    icon = models.CharField(max_length=64, default='star')
    goal_count_per_day = models.PositiveIntegerField()
    # display only
    goal_period_days = models.PositiveIntegerField()

    # aggregates, written by the completion recorder only
    current_streak = models.PositiveIntegerField(default=0)
    max_streak = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)
    point_streak_reset = models.BooleanField(default=False)
    last_missed_completion_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(condition=Q(goal_count_per_day__gte=1), name="habit_goal_count_positive"),
            models.CheckConstraint(condition=Q(goal_period_days__gte=1), name="habit_goal_period_positive"),
        ]

    if TYPE_CHECKING:
        # Django dynamically injects these via related_name
        completions = None
        achievements = None

    def __str__(self) -> str:
        return self.name


class Completion(models.Model):
    habit = models.ForeignKey(Habit, on_delete=models.CASCADE,
                              related_name="completions")
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='completions',
    )
    completed_at = models.DateTimeField()
    # UTC day of completed_at, kept in sync by save()
    day = models.DateField(db_index=True, editable=False)
    points = models.PositiveIntegerField(default=0)
    is_missed_completion = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["habit", "day"],
                condition=Q(is_missed_completion=True),
                name="one_plaster_per_habit_per_day",
            )
        ]
        ordering = ["completed_at", "created_at", "id"]

    def save(self, *args, **kwargs):
        self.day = day_key(self.completed_at)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.habit.name} @ {self.completed_at.isoformat()}"


class Achievement(models.Model):
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='achievements',
    )
    habit = models.ForeignKey(Habit, on_delete=models.CASCADE, null=True, blank=True,
                              related_name="achievements")
    achievement_type = models.CharField(max_length=64)
    title = models.CharField(max_length=120)
    description = models.CharField(max_length=255)
    points = models.PositiveIntegerField()
    unlocked_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["owner", "habit", "achievement_type"],
                name="unique_achievement_per_owner_habit_type",
            )
        ]
        ordering = ["-unlocked_at", "-id"]

    def __str__(self) -> str:
        return f"{self.title} ({self.owner_id})"
