"""Users app package.

Defines the platform user with its marketplace role (guest, host, admin).
Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
