from django.urls import path

from habits import views

urlpatterns = [
    path("habits", views.habits_collection, name="habits"),
    path("habits/<int:habit_id>", views.habit_detail, name="habit-detail"),
    path("habits/<int:habit_id>/completions", views.habit_completions, name="habit-completions"),
    path("habits/<int:habit_id>/complete", views.complete_habit, name="habit-complete"),
    path("habits/<int:habit_id>/complete-past", views.complete_past, name="habit-complete-past"),
    path("habits/<int:habit_id>/complete-today", views.remove_today_completion, name="habit-complete-today"),
    path("completions/<int:completion_id>", views.delete_completion, name="completion-detail"),
    path("dashboard", views.dashboard_view, name="dashboard"),
    path("achievements", views.achievements, name="achievements"),
    path("achievements/available", views.available_achievements, name="achievements-available"),
]
