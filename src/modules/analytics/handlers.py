"""Order-event handlers that keep the dashboard cache honest."""

from __future__ import annotations

import structlog
from django.core.cache import cache

from modules.analytics.services import all_cache_keys
from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class DashboardCacheInvalidator(IEventHandler[DomainEvent]):
    """Drops every cached organisation-wide stats entry on any order write."""

    def handle(self, event: DomainEvent) -> None:
        cache.delete_many(all_cache_keys())
        logger.debug(
            "dashboard.cache_invalidated",
            event_name=event.event_name,
            order_id=str(event.aggregate_id),
        )


dashboard_cache_invalidator = DashboardCacheInvalidator()
