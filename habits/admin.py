from django.contrib import admin

from habits.models import Achievement, Completion, Habit


@admin.register(Habit)
class HabitAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "goal_count_per_day", "current_streak", "max_streak", "total_points")
    readonly_fields = (
        "current_streak",
        "max_streak",
        "total_points",
        "point_streak_reset",
        "last_missed_completion_date",
    )


@admin.register(Completion)
class CompletionAdmin(admin.ModelAdmin):
    list_display = ("habit", "completed_at", "day", "points", "is_missed_completion")
    list_filter = ("is_missed_completion",)
    readonly_fields = ("points", "is_missed_completion")


@admin.register(Achievement)
class AchievementAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "habit", "achievement_type", "unlocked_at")
