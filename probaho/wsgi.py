"""WSGI entrypoint for the Probaho demo."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "probaho.settings")

application = get_wsgi_application()
