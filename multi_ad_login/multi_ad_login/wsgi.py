"""WSGI config for Multi AD Login."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'multi_ad_login.settings.production')

application = get_wsgi_application()
