"""Asynchronous tasks of the analytics module."""

import structlog
from celery import shared_task

from modules.analytics.services import DashboardService
from modules.core.periods import Period
from modules.orders.repositories.django_repository import OrderDjangoRepository

logger = structlog.get_logger(__name__)


@shared_task(name="analytics.refresh_dashboard_stats")
def refresh_dashboard_stats():
    """Recompute and cache organisation-wide stats for every period."""
    service = DashboardService(order_repository=OrderDjangoRepository())
    totals = {
        period.value: service.warm_cache(period).total_orders for period in Period
    }
    logger.info("dashboard.cache_refreshed", totals=totals)
    return totals
