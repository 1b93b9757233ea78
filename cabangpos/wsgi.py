"""
WSGI config for cabangpos.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "cabangpos.settings")

application = get_wsgi_application()
