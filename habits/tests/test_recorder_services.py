from datetime import datetime, time, timedelta, timezone as dt_timezone

import pytest
from django.db import DatabaseError
from django.utils import timezone

from habits.exceptions import Conflict, Forbidden, InsufficientPoints, NotFound, ValidationFailed
from habits.models import Achievement, Completion, Habit
from habits.services import gamification, habit_stats, recorder

pytestmark = pytest.mark.django_db


@pytest.fixture()
def user(django_user_model):
    return django_user_model.objects.create_user(
        username="u1",
        password="pass12345",
        email="u1@example.com",
    )


@pytest.fixture()
def other_user(django_user_model):
    return django_user_model.objects.create_user(
        username="u2",
        password="pass12345",
        email="u2@example.com",
    )


def _today():
    return timezone.now().astimezone(dt_timezone.utc).date()


def _noon(days_ago: int) -> datetime:
    return datetime.combine(_today() - timedelta(days=days_ago), time(12), tzinfo=dt_timezone.utc)


def _habit(user, goal=1, name="Gym"):
    return Habit.objects.create(owner=user, name=name, color="#00ff00", goal_count_per_day=goal, goal_period_days=7)


def _record(user, habit, days_ago):
    return recorder.record_completion(user, habit.id, _noon(days_ago))


def _ledger_points(habit):
    return sum(Completion.objects.filter(habit=habit).values_list("points", flat=True))


def test_scenario_a__points_scale_with_streak_and_reset_after_gap(user):
    habit = _habit(user)

    day1 = _record(user, habit, 3)
    assert (day1.points_earned, day1.habit.total_points, day1.habit.current_streak) == (1, 1, 1)

    day2 = _record(user, habit, 2)
    assert (day2.points_earned, day2.habit.total_points, day2.habit.current_streak) == (2, 3, 2)

    # day 3 skipped
    day4 = _record(user, habit, 0)
    assert (day4.points_earned, day4.habit.total_points, day4.habit.current_streak) == (1, 4, 1)
    assert day4.habit.max_streak == 2
    assert day4.goal_met is True


def test_scenario_b__plaster_rejected_with_insufficient_points(user):
    habit = _habit(user)
    for days_ago in (3, 2, 0):
        _record(user, habit, days_ago)

    with pytest.raises(InsufficientPoints):
        recorder.record_past_completion(user, habit.id, _noon(1))

    habit.refresh_from_db()
    assert habit.total_points == 4
    assert Completion.objects.filter(habit=habit).count() == 3
    assert not Completion.objects.filter(habit=habit, is_missed_completion=True).exists()


def test_scenario_c__plaster_joins_runs_and_costs_points(user):
    habit = _habit(user)
    for days_ago in (8, 7, 6, 5, 3, 1):
        _record(user, habit, days_ago)
    habit.refresh_from_db()
    assert habit.total_points == 12

    result = recorder.record_past_completion(user, habit.id, _noon(2))

    habit.refresh_from_db()
    assert result.completion.is_missed_completion is True
    assert result.completion.points == 0
    assert result.points_cost == 10
    assert habit.total_points == 2
    assert habit.current_streak == 3
    assert habit.max_streak == 4
    assert habit.point_streak_reset is True
    assert habit.last_missed_completion_date == _today() - timedelta(days=2)
    assert "10 points deducted" in result.message


def test_first_completion_after_plaster_is_worth_one_point(user):
    habit = _habit(user)
    for days_ago in (8, 7, 6, 5, 3, 1):
        _record(user, habit, days_ago)
    recorder.record_past_completion(user, habit.id, _noon(2))

    result = _record(user, habit, 0)

    assert result.points_earned == 1
    assert result.habit.point_streak_reset is False
    assert result.habit.current_streak == 4
    assert result.habit.total_points == 3


def test_scenario_d__remove_today_recomputes_from_remaining_history(user):
    habit = _habit(user)
    for days_ago in (2, 1, 0):
        _record(user, habit, days_ago)

    updated = recorder.remove_today_completion(user, habit.id)

    assert updated.current_streak == 2
    assert updated.total_points == 3
    assert updated.max_streak == 3
    assert updated.point_streak_reset is False
    assert updated.last_missed_completion_date is None
    assert not Completion.objects.filter(habit=habit, day=_today()).exists()


def test_remove_today__rederives_reset_flag_from_remaining_plasters(user):
    habit = _habit(user)
    for days_ago in (8, 7, 6, 5, 3, 1):
        _record(user, habit, days_ago)
    recorder.record_past_completion(user, habit.id, _noon(2))
    _record(user, habit, 0)

    updated = recorder.remove_today_completion(user, habit.id)

    assert updated.point_streak_reset is True
    assert updated.last_missed_completion_date == _today() - timedelta(days=2)
    assert updated.current_streak == 3
    # recomputation sums the ledger
    assert updated.total_points == _ledger_points(habit)


def test_remove_today__removes_most_recently_created(user):
    habit = _habit(user, goal=2)
    first = _record(user, habit, 0).completion
    second = _record(user, habit, 0).completion

    recorder.remove_today_completion(user, habit.id)

    remaining = list(Completion.objects.filter(habit=habit).values_list("id", flat=True))
    assert remaining == [first.id]
    assert second.id not in remaining


def test_remove_today__not_found_when_nothing_recorded_today(user):
    habit = _habit(user)
    _record(user, habit, 1)

    with pytest.raises(NotFound):
        recorder.remove_today_completion(user, habit.id)


def test_goal_gated_points__only_goal_meeting_completion_earns(user):
    habit = _habit(user, goal=3)
    yesterday = [_record(user, habit, 1).points_earned for _ in range(3)]
    today = [_record(user, habit, 0) for _ in range(4)]

    assert yesterday == [0, 0, 1]
    assert [r.points_earned for r in today] == [0, 0, 2, 0]
    assert [r.goal_met for r in today] == [False, False, True, True]
    assert today[-1].completions_today == 4
    assert today[-1].goal_count == 3

    habit.refresh_from_db()
    assert habit.current_streak == 2
    assert habit.total_points == 3


def test_goal_not_met_day_does_not_extend_streak(user):
    habit = _habit(user, goal=2)
    _record(user, habit, 1)  # 1 of 2
    _record(user, habit, 0)
    result = _record(user, habit, 0)

    assert result.points_earned == 1
    assert result.habit.current_streak == 1


def test_incremental_update_matches_full_recomputation(user):
    habit = _habit(user, goal=2)
    for days_ago in (4, 4, 3, 2, 2, 1, 1, 0, 0, 0):
        _record(user, habit, days_ago)
    habit.refresh_from_db()
    incremental = (habit.current_streak, habit.total_points)

    habit_stats.recompute_aggregates(habit)

    assert (habit.current_streak, habit.total_points) == incremental
    assert habit.total_points == _ledger_points(habit)


def test_backdated_completion_triggers_recomputation(user):
    habit = _habit(user)
    _record(user, habit, 2)
    _record(user, habit, 0)

    result = _record(user, habit, 1)

    assert result.habit.current_streak == 3
    assert result.habit.total_points == _ledger_points(habit)


def test_plaster_gating__nine_points_is_not_enough(user):
    habit = _habit(user)
    Completion.objects.create(habit=habit, owner=user, completed_at=_noon(5), points=9)
    habit_stats.recompute_aggregates(habit)

    with pytest.raises(InsufficientPoints):
        recorder.record_past_completion(user, habit.id, _noon(2))

    assert Completion.objects.filter(habit=habit).count() == 1
    habit.refresh_from_db()
    assert habit.total_points == 9


def test_plaster_gating__uses_points_across_all_habits_and_clamps_at_zero(user):
    poor = _habit(user, name="Read")
    rich = _habit(user, name="Run")
    Completion.objects.create(habit=poor, owner=user, completed_at=_noon(5), points=4)
    Completion.objects.create(habit=rich, owner=user, completed_at=_noon(5), points=6)
    habit_stats.recompute_aggregates(poor)
    habit_stats.recompute_aggregates(rich)

    recorder.record_past_completion(user, poor.id, _noon(3))

    poor.refresh_from_db()
    rich.refresh_from_db()
    assert poor.total_points == 0
    assert rich.total_points == 6


def test_plaster__rejects_today_and_future(user):
    habit = _habit(user)

    with pytest.raises(ValidationFailed):
        recorder.record_past_completion(user, habit.id, _noon(0))
    with pytest.raises(ValidationFailed):
        recorder.record_past_completion(user, habit.id, datetime.combine(_today(), time.min, tzinfo=dt_timezone.utc))
    with pytest.raises(ValidationFailed):
        recorder.record_past_completion(user, habit.id, _noon(-2))
    with pytest.raises(ValidationFailed):
        recorder.record_past_completion(user, habit.id, None)


def test_plaster__conflict_when_day_has_a_completion(user):
    habit = _habit(user)
    Completion.objects.create(habit=habit, owner=user, completed_at=_noon(6), points=20)
    habit_stats.recompute_aggregates(habit)
    _record(user, habit, 2)

    with pytest.raises(Conflict):
        recorder.record_past_completion(user, habit.id, _noon(2))


def test_completion_on_plastered_day_earns_nothing(user):
    habit = _habit(user)
    Completion.objects.create(habit=habit, owner=user, completed_at=_noon(6), points=20)
    habit_stats.recompute_aggregates(habit)
    recorder.record_past_completion(user, habit.id, _noon(2))

    result = _record(user, habit, 2)

    assert result.points_earned == 0


def test_recorder_rejects_other_users_habit(user, other_user):
    habit = _habit(other_user)

    with pytest.raises(Forbidden):
        recorder.record_completion(user, habit.id)
    with pytest.raises(NotFound):
        recorder.record_completion(user, 999999)


def test_delete_completion__recomputes_and_checks_owner(user, other_user):
    habit = _habit(user)
    results = [_record(user, habit, days_ago) for days_ago in (2, 1, 0)]

    with pytest.raises(Forbidden):
        recorder.delete_completion(other_user, results[1].completion.id)

    assert recorder.delete_completion(user, results[1].completion.id) is True

    habit.refresh_from_db()
    assert habit.current_streak == 1
    assert habit.max_streak == 3
    assert habit.total_points == 1 + 3
    assert habit.total_points == _ledger_points(habit)

    with pytest.raises(NotFound):
        recorder.delete_completion(user, results[1].completion.id)


def test_delete_completion__removing_plaster_clears_reset_flag(user):
    habit = _habit(user)
    Completion.objects.create(habit=habit, owner=user, completed_at=_noon(6), points=20)
    habit_stats.recompute_aggregates(habit)
    plaster = recorder.record_past_completion(user, habit.id, _noon(2)).completion

    recorder.delete_completion(user, plaster.id)

    habit.refresh_from_db()
    assert habit.point_streak_reset is False
    assert habit.last_missed_completion_date is None


def test_achievement_failure_does_not_fail_completion(user, monkeypatch):
    habit = _habit(user)

    def boom(*args, **kwargs):
        raise DatabaseError("achievements table unavailable")

    monkeypatch.setattr(gamification, "evaluate_streak_achievements", boom)

    result = _record(user, habit, 0)

    assert result.points_earned == 1
    assert Completion.objects.filter(habit=habit).count() == 1
    assert not Achievement.objects.exists()


def test_seven_day_streak_unlocks_achievement_once(user):
    habit = _habit(user)
    for days_ago in range(6, -1, -1):
        _record(user, habit, days_ago)

    habit.refresh_from_db()
    assert habit.current_streak == 7
    achievements = list(Achievement.objects.filter(owner=user, habit=habit))
    assert [a.achievement_type for a in achievements] == ["streak_7"]
    assert achievements[0].points == 50


def test_delete_completion__reset_follows_remaining_plasters(user):
    habit = _habit(user)
    for days_ago in (8, 7, 6, 5, 3, 1):
        _record(user, habit, days_ago)
    recorder.record_past_completion(user, habit.id, _noon(2))
    _record(user, habit, 0)
    oldest = Completion.objects.get(habit=habit, day=_today() - timedelta(days=8))

    recorder.delete_completion(user, oldest.id)

    habit.refresh_from_db()
    assert habit.point_streak_reset is True
    assert habit.last_missed_completion_date == _today() - timedelta(days=2)


def test_goal_met_on_plastered_day_keeps_pending_reset(user):
    habit = _habit(user, goal=2)
    for days_ago in (5, 4, 3, 2, 1):
        _record(user, habit, days_ago)
        _record(user, habit, days_ago)
    recorder.record_past_completion(user, habit.id, _noon(30))

    on_plaster = _record(user, habit, 30)
    assert on_plaster.points_earned == 0
    assert on_plaster.habit.point_streak_reset is True

    _record(user, habit, 0)
    result = _record(user, habit, 0)

    assert result.goal_met is True
    assert result.points_earned == 1
    assert result.habit.point_streak_reset is False


def test_plaster_sets_last_missed_to_the_plastered_day(user):
    habit = _habit(user)
    bank = _habit(user, name="Bank")
    for days_ago in (10, 9, 8, 7, 6):
        _record(user, bank, days_ago)

    recorder.record_past_completion(user, habit.id, _noon(2))
    result = recorder.record_past_completion(user, habit.id, _noon(5))

    habit.refresh_from_db()
    assert result.habit.last_missed_completion_date == _today() - timedelta(days=5)
    assert habit.last_missed_completion_date == _today() - timedelta(days=5)
    assert habit.point_streak_reset is True
