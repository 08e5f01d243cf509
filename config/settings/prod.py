"""Production settings for the CampGO backend.

Sensitive values must come from environment variables; the secret key
and the payment provider credentials are required.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)  # noqa: F405

ALLOWED_HOSTS = get_env('DJANGO_ALLOWED_HOSTS', required=True).split(',')  # noqa: F405

PAYOS_CLIENT_ID = get_env('PAYOS_CLIENT_ID', required=True)  # noqa: F405
PAYOS_API_KEY = get_env('PAYOS_API_KEY', required=True)  # noqa: F405
PAYOS_CHECKSUM_KEY = get_env('PAYOS_CHECKSUM_KEY', required=True)  # noqa: F405

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True

EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = get_env('EMAIL_HOST', 'localhost')  # noqa: F405
EMAIL_PORT = get_int_env('EMAIL_PORT', 25)  # noqa: F405
EMAIL_USE_TLS = get_env('EMAIL_USE_TLS', 'false').lower() == 'true'  # noqa: F405
