"""JSON shapes returned by the REST views (camelCase keys)."""


def _iso(value):
    return value.isoformat() if value is not None else None


def habit_to_dict(habit) -> dict:
    return {
        "id": habit.id,
        "name": habit.name,
        "color": habit.color,
        "icon": habit.icon,
        "goalCountPerDay": habit.goal_count_per_day,
        "goalPeriodDays": habit.goal_period_days,
        "currentStreak": habit.current_streak,
        "maxStreak": habit.max_streak,
        "totalPoints": habit.total_points,
        "pointStreakReset": habit.point_streak_reset,
        "lastMissedCompletionDate": _iso(habit.last_missed_completion_date),
        "createdAt": _iso(habit.created_at),
    }


def completion_to_dict(completion) -> dict:
    return {
        "id": completion.id,
        "habitId": completion.habit_id,
        "completedAt": _iso(completion.completed_at),
        "points": completion.points,
        "isMissedCompletion": completion.is_missed_completion,
        "createdAt": _iso(completion.created_at),
    }


def achievement_to_dict(achievement) -> dict:
    return {
        "id": achievement.id,
        "habitId": achievement.habit_id,
        "achievementType": achievement.achievement_type,
        "title": achievement.title,
        "description": achievement.description,
        "points": achievement.points,
        "unlockedAt": _iso(achievement.unlocked_at),
    }


def dashboard_to_dict(dashboard) -> dict:
    return {
        "habits": [
            {
                **habit_to_dict(summary.habit),
                "completionsToday": summary.completions_today,
                "nextCompletionPoints": summary.next_completion_points,
                "recentCompletions": [
                    {
                        "id": c.id,
                        "completedAt": _iso(c.completed_at),
                        "points": c.points,
                        "isMissedCompletion": c.is_missed_completion,
                    }
                    for c in summary.recent_completions
                ],
            }
            for summary in dashboard.habits
        ],
        "totalPoints": dashboard.total_points,
        "recentAchievements": [achievement_to_dict(a) for a in dashboard.recent_achievements],
    }
