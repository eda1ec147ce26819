from django.apps import AppConfig
from django.conf import settings


class HabitsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "habits"

    def ready(self):
        from config.log import setup_logging

        setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
