from django.apps import AppConfig


class CommissionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.commissions"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .events import CommissionConfigurationChanged
        from .handlers import log_commission_change

        message_bus.register_event_handler(CommissionConfigurationChanged, log_commission_change)
