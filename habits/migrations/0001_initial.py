import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Habit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('color', models.CharField(max_length=32)),
                ('icon', models.CharField(default='star', max_length=64)),
                ('goal_count_per_day', models.PositiveIntegerField()),
                ('goal_period_days', models.PositiveIntegerField()),
                ('current_streak', models.PositiveIntegerField(default=0)),
                ('max_streak', models.PositiveIntegerField(default=0)),
                ('total_points', models.PositiveIntegerField(default=0)),
                ('point_streak_reset', models.BooleanField(default=False)),
                ('last_missed_completion_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='habits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['created_at', 'id'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('goal_count_per_day__gte', 1)), name='habit_goal_count_positive'),
                    models.CheckConstraint(condition=models.Q(('goal_period_days__gte', 1)), name='habit_goal_period_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Completion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('completed_at', models.DateTimeField()),
                ('day', models.DateField(db_index=True, editable=False)),
                ('points', models.PositiveIntegerField(default=0)),
                ('is_missed_completion', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('habit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='completions', to='habits.habit')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='completions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['completed_at', 'created_at', 'id'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_missed_completion', True)), fields=('habit', 'day'), name='one_plaster_per_habit_per_day'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Achievement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('achievement_type', models.CharField(max_length=64)),
                ('title', models.CharField(max_length=120)),
                ('description', models.CharField(max_length=255)),
                ('points', models.PositiveIntegerField()),
                ('unlocked_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('habit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='achievements', to='habits.habit')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='achievements', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-unlocked_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(fields=('owner', 'habit', 'achievement_type'), name='unique_achievement_per_owner_habit_type'),
                ],
            },
        ),
    ]
