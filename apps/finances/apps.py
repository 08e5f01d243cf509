from __future__ import annotations

from django.apps import AppConfig  # type: ignore


class FinancesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.finances"
    label = "finances"

    def ready(self) -> None:
        from .handlers import register_handlers  # Local import to prevent circular dependency

        register_handlers()
