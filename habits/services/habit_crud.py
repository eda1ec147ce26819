from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Sum
from loguru import logger

from habits.exceptions import Forbidden, NotFound, ValidationFailed
from habits.models import Habit
from habits.services import habit_stats, ledger

EDITABLE_FIELDS = ("name", "color", "icon", "goal_count_per_day", "goal_period_days")
REQUIRED_FIELDS = ("name", "color", "goal_count_per_day", "goal_period_days")


def _positive_int(field: str, value) -> int:
    message = f"{field} must be a positive integer"
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationFailed(message)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(message) from None
    if number < 1:
        raise ValidationFailed(message)
    return number


def _text(field: str, value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed(f"{field} is required")
    return value.strip()


def _clean(field: str, value):
    if field in ("goal_count_per_day", "goal_period_days"):
        return _positive_int(field, value)
    return _text(field, value)


def get_owned_habit(owner, habit_id, *, lock: bool = False) -> Habit:
    """Fetch a habit and check ownership. ``lock`` must only be used inside a transaction."""
    qs = Habit.objects.select_for_update() if lock else Habit.objects.all()
    try:
        habit = qs.get(pk=habit_id)
    except (Habit.DoesNotExist, ValueError, DjangoValidationError):
        logger.warning("Habit {} not found for user {}", habit_id, owner.pk)
        raise NotFound("Habit not found")

    if habit.owner_id != owner.pk:
        logger.warning("User {} does not own habit {}", owner.pk, habit_id)
        raise Forbidden("Unauthorized")
    return habit


def list_habits(owner):
    return Habit.objects.filter(owner=owner).order_by("created_at", "id")


def total_points_for_owner(owner) -> int:
    agg = Habit.objects.filter(owner=owner).aggregate(total=Sum("total_points"))
    return int(agg["total"] or 0)


def create_habit(owner, *, name, color, goal_count_per_day, goal_period_days, icon="star") -> Habit:
    habit = Habit.objects.create(
        owner=owner,
        name=_text("name", name),
        color=_text("color", color),
        icon=_text("icon", icon),
        goal_count_per_day=_positive_int("goal_count_per_day", goal_count_per_day),
        goal_period_days=_positive_int("goal_period_days", goal_period_days),
    )
    logger.info("Created habit {} for user {}", habit.id, owner.pk)
    return habit


@transaction.atomic
def update_habit(owner, habit_id, fields: dict) -> Habit:
    """
    Partial update of the user-editable fields. Aggregates are not editable;
    a goal-count change re-derives them since it moves streak boundaries.
    """
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationFailed(f"Fields not editable: {', '.join(unknown)}")

    habit = get_owned_habit(owner, habit_id, lock=True)
    cleaned = {field: _clean(field, value) for field, value in fields.items()}
    goal_changed = (
        "goal_count_per_day" in cleaned
        and cleaned["goal_count_per_day"] != habit.goal_count_per_day
    )

    for field, value in cleaned.items():
        setattr(habit, field, value)
    if cleaned:
        habit.save(update_fields=list(cleaned))

    if goal_changed:
        habit_stats.recompute_aggregates(habit)

    logger.info("Updated habit {} fields {}", habit.id, sorted(cleaned))
    return habit


@transaction.atomic
def delete_habit(owner, habit_id) -> bool:
    habit = get_owned_habit(owner, habit_id, lock=True)
    habit.delete()
    logger.info("Deleted habit {} for user {}", habit_id, owner.pk)
    return True


def list_completions(owner, habit_id):
    habit = get_owned_habit(owner, habit_id)
    return ledger.list_by_habit(habit)
