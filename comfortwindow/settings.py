"""
Django settings for Comfort Window.
Recommends the most comfortable daylight window for an outdoor activity.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-comfortwindow-dev-only')

DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',')

# ── Installed apps ────────────────────────────────────────────────
INSTALLED_APPS = [
    'django.contrib.staticfiles',

    # Local apps
    'weather',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'comfortwindow.urls'

WSGI_APPLICATION = 'comfortwindow.wsgi.application'

# ── Database ──────────────────────────────────────────────────────
# The engine persists nothing
DATABASES = {}

# ── WeatherKit ────────────────────────────────────────────────────
WEATHERKIT_TEAM_ID = os.environ.get('WEATHERKIT_TEAM_ID', '')
WEATHERKIT_SERVICE_ID = os.environ.get('WEATHERKIT_SERVICE_ID', '')
WEATHERKIT_KEY_ID = os.environ.get('WEATHERKIT_KEY_ID', '')
WEATHERKIT_P8_BASE64 = os.environ.get('WEATHERKIT_P8_BASE64', '')
WEATHERKIT_TIMEOUT = float(os.environ.get('WEATHERKIT_TIMEOUT', '10'))
WEATHERKIT_RETRIES = int(os.environ.get('WEATHERKIT_RETRIES', '1'))

# ── Comfort engine ────────────────────────────────────────────────
COMFORT_STEP_MINUTES = int(os.environ.get('COMFORT_STEP_MINUTES', '1'))
COMFORT_SERIES_MINUTES = int(os.environ.get('COMFORT_SERIES_MINUTES', '5'))

# ── Celery (Redis as broker + result backend) ─────────────────────
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = 'UTC'

# ── Logging ───────────────────────────────────────────────────────
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'weather': {
            'handlers': ['console'],
            'level': os.environ.get('LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

# ── i18n / timezone ───────────────────────────────────────────────
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
