"""Development settings."""
from .base import *  # noqa: F401, F403

DEBUG = True
SECRET_KEY = 'dev-secret-key-not-for-production'

ALLOWED_HOSTS = ['*']

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

LOGGING['loggers']['directory']['level'] = 'DEBUG'  # noqa: F405
LOGGING['loggers']['accounts']['level'] = 'DEBUG'  # noqa: F405
