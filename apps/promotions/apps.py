from django.apps import AppConfig


class PromotionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.promotions"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from . import handlers
        from .domain import PromotionCancelled, PromotionCreated, PromotionsReplaced

        message_bus.register_event_handler(PromotionCreated, handlers.log_promotion_created)
        message_bus.register_event_handler(PromotionsReplaced, handlers.log_promotions_replaced)
        message_bus.register_event_handler(PromotionCancelled, handlers.log_promotion_cancelled)
