from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class DirectoryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'directory'
    verbose_name = 'Directory Profiles'

    def ready(self):
        # Fail at startup, not per login, when the client library is missing.
        from directory.services.directory_client import get_directory_client_class

        try:
            get_directory_client_class()
        except ImportError as exc:
            raise ImproperlyConfigured(
                f"Directory client {settings.AD_LOGIN_DIRECTORY_CLIENT!r} "
                f"cannot be imported: {exc}"
            ) from exc
