"""
Django settings for the drive journal.

All values are derived from the pydantic application config so that the
environment variables documented in ``drive_journal.config`` are the single
source of configuration.
"""
from pathlib import Path

from drive_journal.config import config

BASE_DIR = Path(__file__).resolve().parent

SECRET_KEY = config.service.secret_key
DEBUG = config.service.debug
ALLOWED_HOSTS = config.service.allowed_hosts

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'drive_journal.apps.journal',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'drive_journal.urls'


def _database_settings() -> dict:
    """Build the default database entry from the db config section."""
    db = config.db
    if db.engine == 'postgresql':
        return {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': db.name,
            'USER': db.user,
            'PASSWORD': db.password,
            'HOST': db.host,
            'PORT': db.port,
        }
    return {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': db.name,
    }


DATABASES = {
    'default': _database_settings(),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# TeslaMate stores timestamps in UTC; day buckets are UTC days.
USE_TZ = True
TIME_ZONE = 'UTC'
USE_I18N = False

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.FormParser',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
}

# Logging is configured by drive_journal.utils.logging.setup_logging
LOGGING_CONFIG = None
