"""
WSGI config for the semiprop project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "semiprop.settings")

application = get_wsgi_application()
