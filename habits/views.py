import json
from datetime import datetime, time, timezone as dt_timezone
from functools import wraps

from django.http import JsonResponse
from django.utils.dateparse import parse_date, parse_datetime
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from loguru import logger

from habits.exceptions import HabitError, NotAuthenticated, ValidationFailed
from habits.serializers import (
    achievement_to_dict,
    completion_to_dict,
    dashboard_to_dict,
    habit_to_dict,
)
from habits.services import dashboard, gamification, habit_crud, recorder

# request body key -> Habit field
HABIT_FIELDS = {
    "name": "name",
    "color": "color",
    "icon": "icon",
    "goalCountPerDay": "goal_count_per_day",
    "goalPeriodDays": "goal_period_days",
}


def json_api(*methods):
    """
    Wrap a view that returns JSON-able data: enforce methods and login, and
    turn HabitError into ``{"error": kind, "message": ...}`` with its status.
    """
    def decorator(view):
        @csrf_exempt
        @require_http_methods(list(methods))
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                if not request.user.is_authenticated:
                    raise NotAuthenticated("Authentication required")
                data = view(request, *args, **kwargs)
            except HabitError as exc:
                return JsonResponse(exc.as_dict(), status=exc.status)
            return JsonResponse(data, safe=False)
        return wrapper
    return decorator


def _body(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationFailed("Malformed JSON body")
    if not isinstance(data, dict):
        raise ValidationFailed("JSON body must be an object")
    return data


def parse_timestamp(raw):
    """ISO datetime, or a bare ISO date (taken as midnight UTC). None passes through."""
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationFailed("Invalid date format")
    try:
        moment = parse_datetime(raw)
        if moment is None:
            day = parse_date(raw)
            if day is None:
                raise ValueError(raw)
            moment = datetime.combine(day, time.min, tzinfo=dt_timezone.utc)
    except ValueError:
        logger.warning("Invalid date format {!r}", raw)
        raise ValidationFailed("Invalid date format")
    return moment


def _habit_fields(body: dict) -> dict:
    return {HABIT_FIELDS.get(key, key): value for key, value in body.items()}


@json_api("GET", "POST")
def habits_collection(request):
    if request.method == "GET":
        return [habit_to_dict(h) for h in habit_crud.list_habits(request.user)]

    body = _body(request)
    missing = [key for key in ("name", "color", "goalCountPerDay", "goalPeriodDays") if body.get(key) in (None, "")]
    if missing:
        logger.warning("Habit creation by user {} missing {}", request.user.pk, missing)
        raise ValidationFailed("All fields (name, color, goalCountPerDay, goalPeriodDays) are required")

    habit = habit_crud.create_habit(
        request.user,
        name=body["name"],
        color=body["color"],
        icon=body.get("icon") or "star",
        goal_count_per_day=body["goalCountPerDay"],
        goal_period_days=body["goalPeriodDays"],
    )
    return habit_to_dict(habit)


@json_api("PUT", "DELETE")
def habit_detail(request, habit_id):
    if request.method == "DELETE":
        return {"success": habit_crud.delete_habit(request.user, habit_id)}

    habit = habit_crud.update_habit(request.user, habit_id, _habit_fields(_body(request)))
    return habit_to_dict(habit)


@json_api("GET")
def habit_completions(request, habit_id):
    return [completion_to_dict(c) for c in habit_crud.list_completions(request.user, habit_id)]


@json_api("POST")
def complete_habit(request, habit_id):
    body = _body(request)
    result = recorder.record_completion(request.user, habit_id, parse_timestamp(body.get("completedAt")))
    return {
        "completion": completion_to_dict(result.completion),
        "updatedHabit": habit_to_dict(result.habit),
        "pointsEarned": result.points_earned,
        "completionsToday": result.completions_today,
        "goalCount": result.goal_count,
        "goalMet": result.goal_met,
    }


@json_api("POST")
def complete_past(request, habit_id):
    body = _body(request)
    result = recorder.record_past_completion(request.user, habit_id, parse_timestamp(body.get("completedAt")))
    return {
        "completion": completion_to_dict(result.completion),
        "updatedHabit": habit_to_dict(result.habit),
        "pointsEarned": 0,
        "pointsCost": result.points_cost,
        "totalPoints": result.habit.total_points,
        "message": result.message,
    }


@json_api("DELETE")
def remove_today_completion(request, habit_id):
    habit = recorder.remove_today_completion(request.user, habit_id)
    return {"updatedHabit": habit_to_dict(habit)}


@json_api("DELETE")
def delete_completion(request, completion_id):
    return {"success": recorder.delete_completion(request.user, completion_id)}


@json_api("GET")
def dashboard_view(request):
    return dashboard_to_dict(dashboard.build_dashboard(request.user))


@json_api("GET")
def achievements(request):
    return [achievement_to_dict(a) for a in gamification.list_achievements(request.user)]


@json_api("GET")
def available_achievements(request):
    return gamification.available_achievements(request.user)
