"""
Django settings for the habit ledger project.

Values that differ between deployments are read from the environment (or a
``.env`` file) through ``EnvSettings``; everything else is fixed here.
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBUG: bool = False
    SECRET_KEY: str = "django-insecure-habit-ledger-dev-key"
    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    DATABASE_NAME: str = str(BASE_DIR / "db.sqlite3")
    # seconds a storage call may wait on a locked database
    DATABASE_TIMEOUT: float = 5.0

    LOG_LEVEL: str = "INFO"

    PLASTER_COST: int = 10
    MAX_STREAK_LOOKBACK_DAYS: int = 1000

    @property
    def allowed_hosts(self) -> list[str]:
        return [h.strip() for h in self.ALLOWED_HOSTS.split(",") if h.strip()]


env = EnvSettings()

SECRET_KEY = env.SECRET_KEY
DEBUG = env.DEBUG
ALLOWED_HOSTS = env.allowed_hosts

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "graphene_django",
    "habits.apps.HabitsConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": env.DATABASE_NAME,
        "OPTIONS": {"timeout": env.DATABASE_TIMEOUT},
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

GRAPHENE = {
    "SCHEMA": "config.schema.schema",
}

LOG_LEVEL = env.LOG_LEVEL

HABITS_PLASTER_COST = env.PLASTER_COST
HABITS_MAX_STREAK_LOOKBACK_DAYS = env.MAX_STREAK_LOOKBACK_DAYS
# None means the built-in catalog in habits.catalog
HABITS_ACHIEVEMENT_CATALOG = None
