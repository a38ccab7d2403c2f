"""ASGI config for spa_project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "spa_project.settings")

application = get_asgi_application()
