from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.analytics"
    label = "analytics"

    def ready(self) -> None:
        from modules.analytics.handlers import dashboard_cache_invalidator
        from modules.orders.events import (
            OrderCreated,
            OrderDeleted,
            OrderStatusChanged,
            OrderUpdated,
        )
        from shared.infrastructure.bus import event_bus

        for event_class in (OrderCreated, OrderUpdated, OrderStatusChanged, OrderDeleted):
            event_bus.subscribe(event_class, dashboard_cache_invalidator)
