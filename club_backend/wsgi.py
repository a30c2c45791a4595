"""
WSGI entry point for the club membership backend.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "club_backend.settings.dev")

application = get_wsgi_application()
