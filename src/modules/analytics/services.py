"""Analytics Aggregator.

Stateless derivations over a point-in-time read of the Order Ledger:

- ``period_filter`` keeps the orders created inside a reporting window.
- ``compute_stats`` counts orders per status and averages the processing
  time (``updated_at - created_at``, fractional days) of delivered orders.
- ``recent_orders`` takes the head of an already newest-first sequence.

``DashboardService`` wires them to the ledger for ``GET /dashboard/stats``.
Callers with organisation-wide visibility read through the Django cache
(``dashboard:stats:all:<period>``), which order events invalidate and the
``analytics.refresh_dashboard_stats`` task re-warms; everyone else gets a
fresh computation over their own orders.  The ``today`` entry is keyed by
the local date and expires at local midnight; rolling windows are at most
``DASHBOARD_CACHE_TTL`` seconds behind.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

import structlog
from django.conf import settings
from django.core.cache import cache as default_cache
from django.utils import timezone

from modules.analytics.dtos import Dashboard, DashboardStats
from modules.core.periods import Period, in_period, seconds_until_next_day
from modules.identity.permissions import can_mutate_financials, can_view_all_orders
from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderListFilters

if TYPE_CHECKING:
    from django.core.cache.backends.base import BaseCache

    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

RECENT_ORDERS_LIMIT = 5
SECONDS_PER_DAY = 86400
CACHE_KEY_PREFIX = "dashboard:stats:all"


def cache_key(period: Period, now: Optional[datetime] = None) -> str:
    if period == Period.TODAY:
        day = timezone.localdate(now or timezone.now())
        return f"{CACHE_KEY_PREFIX}:{period.value}:{day.isoformat()}"
    return f"{CACHE_KEY_PREFIX}:{period.value}"


def all_cache_keys(now: Optional[datetime] = None) -> List[str]:
    return [cache_key(period, now) for period in Period]


def cache_timeout(period: Period, now: Optional[datetime] = None) -> int:
    """Seconds an entry for *period* may live; ``today`` never outlives its day."""
    if period == Period.TODAY:
        return min(settings.DASHBOARD_CACHE_TTL, seconds_until_next_day(now))
    return settings.DASHBOARD_CACHE_TTL


# ---------------------------------------------------------------------------
# Pure aggregation
# ---------------------------------------------------------------------------


def period_filter(
    orders: Iterable[Order],
    period: Period,
    now: Optional[datetime] = None,
) -> List[Order]:
    """Orders created inside *period*, input order preserved."""
    now = now or timezone.now()
    return [order for order in orders if in_period(order.created_at, period, now)]


def compute_stats(orders: Sequence[Order]) -> DashboardStats:
    """Totals, per-status counts and mean processing days of delivered orders.

    Every status is present in ``counts_by_status``; the average is ``0``
    when no delivered order is in *orders*.
    """
    counts = {status: 0 for status in OrderStatus.values}
    processing_days: List[float] = []
    for order in orders:
        counts[order.status] = counts.get(order.status, 0) + 1
        if order.status == OrderStatus.DELIVERED:
            elapsed = order.updated_at - order.created_at
            processing_days.append(elapsed.total_seconds() / SECONDS_PER_DAY)

    average = sum(processing_days) / len(processing_days) if processing_days else 0.0
    return DashboardStats(
        total_orders=len(orders),
        completed_orders=counts[OrderStatus.DELIVERED],
        average_processing_days=average,
        counts_by_status=counts,
    )


def recent_orders(orders: Sequence[Order], n: int = RECENT_ORDERS_LIMIT) -> List[Order]:
    return list(orders[:n])


# ---------------------------------------------------------------------------
# Dashboard use-case
# ---------------------------------------------------------------------------


class DashboardService:
    """Application service behind ``GET /dashboard/stats``."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        cache: Optional[BaseCache] = None,
    ) -> None:
        self._order_repo = order_repository
        self._cache = cache if cache is not None else default_cache

    def organisation_stats(
        self, period: Period, now: Optional[datetime] = None
    ) -> DashboardStats:
        """Fresh organisation-wide stats for *period* (no cache read)."""
        orders = self._order_repo.query(OrderListFilters())
        return compute_stats(period_filter(orders, period, now))

    def warm_cache(self, period: Period) -> DashboardStats:
        now = timezone.now()
        stats = self.organisation_stats(period, now)
        self._store(period, stats, now)
        return stats

    def _store(self, period: Period, stats: DashboardStats, now: datetime) -> None:
        self._cache.set(
            cache_key(period, now),
            stats.model_dump(mode="json"),
            timeout=cache_timeout(period, now),
        )

    def get_dashboard(
        self,
        period: Period,
        caller_role: str,
        caller_id: int,
    ) -> Dashboard:
        """Stats and recent orders for the caller's scope.

        Callers without organisation-wide visibility only see their own
        orders, mirroring ``ListOrders``.
        """
        sees_all = can_view_all_orders(caller_role)
        financials_visible = can_mutate_financials(caller_role)
        log = logger.bind(period=period.value, caller_id=caller_id, scope_all=sees_all)
        now = timezone.now()

        if sees_all:
            cached = self._cache.get(cache_key(period, now))
            if cached is not None:
                log.debug("dashboard.cache_hit")
                recent = self._order_repo.query(
                    OrderListFilters(date=period), limit=RECENT_ORDERS_LIMIT
                )
                return Dashboard(
                    period=period,
                    stats=DashboardStats.model_validate(cached),
                    recent_orders=recent,
                    financials_visible=financials_visible,
                    cached=True,
                )

        orders = self._order_repo.query(
            OrderListFilters(), created_by=None if sees_all else caller_id
        )
        filtered = period_filter(orders, period, now)
        stats = compute_stats(filtered)

        if sees_all:
            self._store(period, stats, now)

        log.info("dashboard.computed", total_orders=stats.total_orders)
        return Dashboard(
            period=period,
            stats=stats,
            recent_orders=recent_orders(filtered),
            financials_visible=financials_visible,
        )
