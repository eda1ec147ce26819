"""
Achievement catalog.

Read-only configuration: titles, descriptions and point values keyed by
achievement type. Only entries with a ``streak`` threshold are unlocked
automatically; the rest are listed (locked) by the achievements endpoint.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from django.conf import settings


@dataclass(frozen=True)
class CatalogEntry:
    type: str
    title: str
    description: str
    points: int
    streak: Optional[int] = None


DEFAULT_CATALOG: tuple[CatalogEntry, ...] = (
    # streaks on a single habit
    CatalogEntry("streak_7", "7-Day Streak", "Completed a habit 7 days in a row", 50, streak=7),
    CatalogEntry("streak_14", "14-Day Streak", "Completed a habit 14 days in a row", 100, streak=14),
    CatalogEntry("streak_30", "30-Day Streak", "Completed a habit 30 days in a row", 250, streak=30),
    CatalogEntry("streak_100", "100-Day Streak", "Completed a habit 100 days in a row", 500, streak=100),

    CatalogEntry("first_habit", "Getting Started", "Created your first habit", 10),
    CatalogEntry("five_habits", "Building Momentum", "Created 5 habits", 50),
    CatalogEntry("ten_habits", "Habit Master", "Created 10 habits", 100),
    CatalogEntry("twenty_habits", "Habit Legend", "Created 20 habits", 200),

    CatalogEntry("first_completion", "First Step", "Completed your first habit", 5),
    CatalogEntry("ten_completions", "On the Path", "Completed 10 habits total", 25),
    CatalogEntry("fifty_completions", "Habit Enthusiast", "Completed 50 habits total", 100),
    CatalogEntry("hundred_completions", "Completion Champion", "Completed 100 habits total", 250),
    CatalogEntry("five_hundred_completions", "Unstoppable", "Completed 500 habits total", 500),

    CatalogEntry("hundred_points", "Point Collector", "Earned 100 points", 25),
    CatalogEntry("five_hundred_points", "Point Accumulator", "Earned 500 points", 100),
    CatalogEntry("thousand_points", "Point Master", "Earned 1000 points", 250),
    CatalogEntry("five_thousand_points", "Point Legend", "Earned 5000 points", 500),

    CatalogEntry("simultaneous_streaks_2", "Dual Threat", "Maintain 2 simultaneous 7-day streaks", 75),
    CatalogEntry("simultaneous_streaks_3", "Triple Threat", "Maintain 3 simultaneous 7-day streaks", 150),
    CatalogEntry("simultaneous_streaks_5", "Streaking Master", "Maintain 5 simultaneous 7-day streaks", 300),

    CatalogEntry("daily_7_days", "Week Warrior", "Complete at least one habit every day for 7 days", 75),
    CatalogEntry("daily_30_days", "Monthly Grind", "Complete at least one habit every day for 30 days", 250),
    CatalogEntry("weekly_4_weeks", "Weekly Wonder", "Complete at least 4 habits per week for 4 weeks", 100),

    CatalogEntry("habit_3_day_streak", "Three-in-a-Row", "Get a 3-day streak on any habit", 15),
    CatalogEntry("habit_14_day_streak", "Two Week Wonder", "Get a 14-day streak on any habit", 75),
    CatalogEntry("habit_50_day_streak", "Fifty Days Strong", "Get a 50-day streak on any habit", 300),

    CatalogEntry("early_bird", "Early Bird", "Complete a habit before 8 AM", 10),
    CatalogEntry("night_owl", "Night Owl", "Complete a habit after 10 PM", 10),
    CatalogEntry("comeback", "Comeback Kid", "Restart a habit after breaking a streak", 50),
    CatalogEntry("variety_5", "Variety is the Spice", "Complete 5 different habits on the same day", 75),

    CatalogEntry("level_10", "Level 10", "Reach 10 total achievements", 50),
    CatalogEntry("level_25", "Level 25", "Reach 25 total achievements", 150),
    CatalogEntry("level_50", "Master Achiever", "Unlock all 50 achievements", 1000),

    CatalogEntry("spring", "Spring Sprout", "Maintain a 7-day streak during spring", 50),
    CatalogEntry("summer", "Summer Sizzle", "Maintain a 14-day streak during summer", 100),
    CatalogEntry("fall", "Fall Focus", "Maintain a 14-day streak during fall", 100),
    CatalogEntry("winter", "Winter Warrior", "Maintain a 14-day streak during winter", 100),

    CatalogEntry("perfect_week", "Perfect Week", "Complete all habit goals for 7 consecutive days", 200),
    CatalogEntry("consistency_100", "Consistency is Key", "Complete at least 100 habits in a single month", 250),
    CatalogEntry("diversity_expert", "Diversity Expert", "Create habits in 10+ different categories", 150),
    CatalogEntry("midnight_achiever", "Midnight Achiever", "Earn an achievement between midnight and 1 AM", 25),
    CatalogEntry("one_year_member", "One Year Member", "Use the app for one year", 500),
)


def load_catalog() -> Sequence[CatalogEntry]:
    configured = getattr(settings, "HABITS_ACHIEVEMENT_CATALOG", None)
    return DEFAULT_CATALOG if configured is None else tuple(configured)


def streak_thresholds(catalog: Sequence[CatalogEntry]) -> list[CatalogEntry]:
    return sorted((e for e in catalog if e.streak is not None), key=lambda e: e.streak)
