"""Django project package for the CampGO booking backend.

Holds the settings package and the WSGI/ASGI entry points.
"""

# Import the Celery application as soon as Django starts so the shared
# task registry is populated.
from .celery import app as celery_app  # noqa: F401
