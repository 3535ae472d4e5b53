"""Test settings."""
from .base import *  # noqa: F401, F403

SECRET_KEY = 'test-secret-key'

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Tests never open real directory connections.
AD_LOGIN_DIRECTORY_CLIENT = 'directory.services.directory_client.DirectoryClient'
AD_LOGIN_AUDIT_ENABLED = True
