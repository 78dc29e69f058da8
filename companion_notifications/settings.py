"""Django settings for the learning companion notification service.

All deployment-specific values are read from environment variables so the
same image runs locally, in CI and in production.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-local-development-key")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_rq",
    "core",
]

MIDDLEWARE = [
    "core.middleware.RequestIDMiddleware",
    "core.middleware.ProcessTimeMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "companion_notifications.urls"

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

WSGI_APPLICATION = "companion_notifications.wsgi.application"

# Database
if os.getenv("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB"),
            "USER": os.getenv("POSTGRES_USER", "postgres"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
            "OPTIONS": {"options": f"-c search_path={os.getenv('POSTGRES_SCHEMA', 'public')}"},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.getenv("REDIS_URL", "redis://localhost:6379/1"),
    }
}

# Background jobs
RQ_QUEUES = {
    "default": {
        "URL": os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        "DEFAULT_TIMEOUT": 360,
    },
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
    "UNAUTHENTICATED_USER": None,
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Push delivery
PUSH_GATEWAY_URL = os.getenv("PUSH_GATEWAY_URL", "https://exp.host/--/api/v2/push/send")
PUSH_GATEWAY_ACCESS_TOKEN = os.getenv("PUSH_GATEWAY_ACCESS_TOKEN")

# Scheduling policy
DEFAULT_NOTIFICATION_TIMEZONE = os.getenv("DEFAULT_NOTIFICATION_TIMEZONE", "Asia/Kolkata")
NOTIFICATION_BATCH_WINDOW_SECONDS = int(
    os.getenv("NOTIFICATION_BATCH_WINDOW_SECONDS", "300")
)

# Smart nudges
NUDGE_ADAPTIVE_UNREAD_THRESHOLD = int(os.getenv("NUDGE_ADAPTIVE_UNREAD_THRESHOLD", "5"))
NUDGE_INACTIVITY_MINUTES = int(os.getenv("NUDGE_INACTIVITY_MINUTES", "1440"))
NUDGE_CHECK_INTERVAL_SECONDS = int(os.getenv("NUDGE_CHECK_INTERVAL_SECONDS", "900"))
# rq kills a check running longer than this; the tick lock outlives it
NUDGE_CHECK_TIMEOUT_SECONDS = int(os.getenv("NUDGE_CHECK_TIMEOUT_SECONDS", "600"))

TEST_MODE = False
