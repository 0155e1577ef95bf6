"""
Development settings for Stablebook project.

These settings override the base settings for local development environments.
"""

from .base import *  # noqa: F401,F403
from .base import DATABASES, env

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", "django-insecure-development-key-not-for-production")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG", "True") == "True"

ALLOWED_HOSTS = ["*"]

DATABASES["default"]["HOST"] = env("POSTGRES_HOST", "localhost")
DATABASES["default"].setdefault("OPTIONS", {})["sslmode"] = env("POSTGRES_SSL_MODE", "disable")

# Local-memory cache unless a Redis URL is configured
if not env("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "stablebook-dev",
        }
    }
