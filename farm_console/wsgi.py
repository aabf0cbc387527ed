"""
WSGI config for farm_console project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'farm_console.settings')

application = get_wsgi_application()
