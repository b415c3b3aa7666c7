# backend/asgi.py
"""
ASGI entrypoint for the back office API.

Production deployments must export DJANGO_SETTINGS_MODULE=backend.settings.prod;
anything else falls back to the dev settings.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
