"""
Base Django settings for DigitalLicenseService.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from pathlib import Path

from .logging import get_logging_config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-7n#k2v@q1z!x9r$e4t%w6y^u8i&o0p(a)s-d=f+g_h3j5l"
)

# Application definition
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "drf_spectacular",
    # Local apps
    "DigitalLicenseService.apps.DigitalLicenseServiceConfig",
    "core",
    "catalog",
    "licenses",
    "activations",
    "piracy",
    "api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "core.middleware.observability.ObservabilityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "DigitalLicenseService.urls"
ASGI_APPLICATION = "DigitalLicenseService.asgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

# Database
# https://docs.djangoproject.com/en/5.1/ref/settings/#databases
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("DB_NAME", "license_service"),
        "USER": os.environ.get("DB_USER", "postgres"),
        "PASSWORD": os.environ.get("DB_PASSWORD", "postgres"),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "5432"),
        "OPTIONS": {
            "connect_timeout": 10,
            # Server-side bound on every statement, in milliseconds
            "options": "-c statement_timeout=5000",
        },
    }
}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "api.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# drf-spectacular settings
SPECTACULAR_SETTINGS = {
    "TITLE": "Digital License Service API",
    "DESCRIPTION": (
        "License key issuance and validation for digital products. "
        "Generates collision-free keys, binds them to devices, enforces "
        "expiration and download/activation quotas, and flags key sharing."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api/v1",
    "TAGS": [
        {"name": "Licenses", "description": "License generation, validation and downloads"},
        {"name": "Health", "description": "Health check endpoints"},
    ],
}

# Redis Cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/1"),
        "OPTIONS": {
            "socket_connect_timeout": 5,
            "socket_timeout": 5,
        },
    }
}

# Licensing
LICENSING = {
    "KEY_PREFIX": os.environ.get("LICENSE_KEY_PREFIX", "DL"),
    "MAX_KEY_GENERATION_ATTEMPTS": 10,
    "PERSISTENCE_TIMEOUT_SECONDS": 5.0,
    "DEFAULT_MAX_DOWNLOADS": 5,
    "DEFAULT_MAX_ACTIVATIONS": 1,
    "UNLIMITED_MAX_ACTIVATIONS": 999,
    "PRODUCT_CACHE_TTL_SECONDS": 300,
    "MAX_DISTINCT_DOWNLOAD_IPS": 3,
}

# Observability
OBSERVABILITY_ENABLED = os.environ.get("OBSERVABILITY_ENABLED", "true").lower() == "true"

LOGGING = get_logging_config(ENVIRONMENT)
