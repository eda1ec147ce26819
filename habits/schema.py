import graphene
from graphene_django import DjangoObjectType

from .exceptions import NotAuthenticated
from .models import Achievement, Completion, Habit
from habits.services import dashboard, gamification, habit_crud, habit_stats, recorder


def _require_user(info):
    user = info.context.user
    if user.is_anonymous:
        raise NotAuthenticated("Authentication required")
    return user


class HabitType(DjangoObjectType):
    completions_today = graphene.Int()
    next_completion_points = graphene.Int()

    class Meta:
        model = Habit
        fields = (
            "id", "name", "color", "icon", "goal_count_per_day", "goal_period_days",
            "current_streak", "max_streak", "total_points", "point_streak_reset",
            "last_missed_completion_date", "created_at",
        )

    def resolve_completions_today(self, info):
        return habit_stats.completions_today(self)

    def resolve_next_completion_points(self, info):
        return habit_stats.next_completion_points(
            self,
            goal_count=self.goal_count_per_day,
            completions_today=habit_stats.completions_today(self),
        )


class CompletionType(DjangoObjectType):
    class Meta:
        model = Completion
        fields = ("id", "habit", "completed_at", "points", "is_missed_completion", "created_at")


class AchievementType(DjangoObjectType):
    class Meta:
        model = Achievement
        fields = ("id", "habit", "achievement_type", "title", "description", "points", "unlocked_at")


class AvailableAchievementType(graphene.ObjectType):
    type = graphene.String(required=True)
    title = graphene.String(required=True)
    description = graphene.String(required=True)
    points = graphene.Int(required=True)
    locked = graphene.Boolean(required=True)


class HabitSummaryType(graphene.ObjectType):
    habit = graphene.Field(HabitType, required=True)
    completions_today = graphene.Int(required=True)
    next_completion_points = graphene.Int(required=True)
    recent_completions = graphene.List(graphene.NonNull(CompletionType), required=True)


class DashboardType(graphene.ObjectType):
    habits = graphene.List(graphene.NonNull(HabitSummaryType), required=True)
    total_points = graphene.Int(required=True)
    recent_achievements = graphene.List(graphene.NonNull(AchievementType), required=True)


class Query(graphene.ObjectType):
    habits = graphene.List(HabitType)
    habit = graphene.Field(HabitType, id=graphene.ID(required=True))
    completions = graphene.List(CompletionType, habit_id=graphene.ID(required=True))
    dashboard = graphene.Field(DashboardType)
    achievements = graphene.List(AchievementType)
    available_achievements = graphene.List(AvailableAchievementType)

    def resolve_habits(self, info):
        user = info.context.user
        if user.is_anonymous:
            return Habit.objects.none()
        return habit_stats.with_habit_stats(habit_crud.list_habits(user))

    def resolve_habit(self, info, id):
        return habit_crud.get_owned_habit(_require_user(info), id)

    def resolve_completions(self, info, habit_id):
        return habit_crud.list_completions(_require_user(info), habit_id)

    def resolve_dashboard(self, info):
        return dashboard.build_dashboard(_require_user(info))

    def resolve_achievements(self, info):
        user = info.context.user
        if user.is_anonymous:
            return Achievement.objects.none()
        return gamification.list_achievements(user)

    def resolve_available_achievements(self, info):
        rows = gamification.available_achievements(_require_user(info))
        return [AvailableAchievementType(**row) for row in rows]


class CreateHabit(graphene.Mutation):
    class Arguments:
        name = graphene.String(required=True)
        color = graphene.String(required=True)
        goal_count_per_day = graphene.Int(required=True)
        goal_period_days = graphene.Int(required=True)
        icon = graphene.String(required=False)

    habit = graphene.Field(HabitType)

    def mutate(self, info, name, color, goal_count_per_day, goal_period_days, icon=None):
        habit = habit_crud.create_habit(
            _require_user(info),
            name=name,
            color=color,
            icon=icon or "star",
            goal_count_per_day=goal_count_per_day,
            goal_period_days=goal_period_days,
        )
        return CreateHabit(habit=habit)


class UpdateHabit(graphene.Mutation):
    class Arguments:
        id = graphene.ID(required=True)
        name = graphene.String(required=False)
        color = graphene.String(required=False)
        icon = graphene.String(required=False)
        goal_count_per_day = graphene.Int(required=False)
        goal_period_days = graphene.Int(required=False)

    habit = graphene.Field(HabitType)

    def mutate(self, info, id, **fields):
        habit = habit_crud.update_habit(_require_user(info), id, fields)
        return UpdateHabit(habit=habit)


class DeleteHabit(graphene.Mutation):
    class Arguments:
        id = graphene.ID(required=True)

    ok = graphene.Boolean(required=True)
    deleted_id = graphene.ID(required=True)

    def mutate(self, info, id):
        ok = habit_crud.delete_habit(_require_user(info), id)
        return DeleteHabit(ok=ok, deleted_id=id)


class CompleteHabit(graphene.Mutation):
    class Arguments:
        habit_id = graphene.ID(required=True)
        completed_at = graphene.DateTime(required=False)

    completion = graphene.Field(CompletionType)
    habit = graphene.Field(HabitType)
    points_earned = graphene.Int(required=True)
    completions_today = graphene.Int(required=True)
    goal_count = graphene.Int(required=True)
    goal_met = graphene.Boolean(required=True)

    @classmethod
    def mutate(cls, root, info, habit_id, completed_at=None):
        result = recorder.record_completion(_require_user(info), habit_id, completed_at)
        return cls(
            completion=result.completion,
            habit=result.habit,
            points_earned=result.points_earned,
            completions_today=result.completions_today,
            goal_count=result.goal_count,
            goal_met=result.goal_met,
        )


class CompletePastHabit(graphene.Mutation):
    class Arguments:
        habit_id = graphene.ID(required=True)
        completed_at = graphene.DateTime(required=True)

    completion = graphene.Field(CompletionType)
    habit = graphene.Field(HabitType)
    points_earned = graphene.Int(required=True)
    points_cost = graphene.Int(required=True)
    message = graphene.String(required=True)

    @classmethod
    def mutate(cls, root, info, habit_id, completed_at):
        result = recorder.record_past_completion(_require_user(info), habit_id, completed_at)
        return cls(
            completion=result.completion,
            habit=result.habit,
            points_earned=0,
            points_cost=result.points_cost,
            message=result.message,
        )


class RemoveTodayCompletion(graphene.Mutation):
    class Arguments:
        habit_id = graphene.ID(required=True)

    habit = graphene.Field(HabitType)

    def mutate(self, info, habit_id):
        habit = recorder.remove_today_completion(_require_user(info), habit_id)
        return RemoveTodayCompletion(habit=habit)


class DeleteCompletion(graphene.Mutation):
    class Arguments:
        id = graphene.ID(required=True)

    ok = graphene.Boolean(required=True)

    def mutate(self, info, id):
        return DeleteCompletion(ok=recorder.delete_completion(_require_user(info), id))


class Mutation(graphene.ObjectType):
    create_habit = CreateHabit.Field()
    update_habit = UpdateHabit.Field()
    delete_habit = DeleteHabit.Field()
    complete_habit = CompleteHabit.Field()
    complete_past_habit = CompletePastHabit.Field()
    remove_today_completion = RemoveTodayCompletion.Field()
    delete_completion = DeleteCompletion.Field()
