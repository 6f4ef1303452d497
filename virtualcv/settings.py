"""
Django settings for the Virtual CV API.

Configuration is read from environment variables so the same module
serves local development, tests and deployment.  The identity provider
settings default to Google's OAuth2 endpoints; ``GOOGLE_CLIENT_ID`` and
``ALLOWED_EMAILS`` must be provided for write access to work.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_list(name: str, default: str = "") -> list[str]:
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-virtualcv-development-key")

DEBUG = os.environ.get("DJANGO_DEBUG", "false").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1")

INSTALLED_APPS = [
    "cvnodes",
    "access",
]

# No CsrfViewMiddleware: the API authenticates with bearer tokens only,
# never cookies or sessions.
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "access.middleware.WriteAccessMiddleware",
]

ROOT_URLCONF = "virtualcv.urls"

WSGI_APPLICATION = "virtualcv.wsgi.application"

APPEND_SLASH = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("CV_DATABASE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# Identity provider used to verify bearer tokens on write requests.
AUTH_JWT_ISSUER = os.environ.get("AUTH_JWT_ISSUER", "https://accounts.google.com")
AUTH_JWT_AUDIENCE = os.environ.get("GOOGLE_CLIENT_ID", "")
AUTH_JWKS_URL = os.environ.get("AUTH_JWKS_URL", "https://www.googleapis.com/oauth2/v3/certs")
AUTH_JWT_ALGORITHMS = ["RS256"]
# Static verification key; when set it replaces the JWKS lookup.
AUTH_JWT_KEY = os.environ.get("AUTH_JWT_KEY") or None

# Verified email addresses allowed to modify the CV.
AUTH_ALLOWED_EMAILS = _env_list("ALLOWED_EMAILS")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "cvnodes": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "access": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
