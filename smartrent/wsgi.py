"""
WSGI config for the SmartRent API.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'smartrent.settings')

application = get_wsgi_application()
