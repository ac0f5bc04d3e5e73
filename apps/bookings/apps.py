from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from . import handlers
        from .events import BookingCancelled, BookingConfirmed

        message_bus.register_event_handler(BookingConfirmed, handlers.log_booking_confirmed)
        message_bus.register_event_handler(BookingCancelled, handlers.log_booking_cancelled)
