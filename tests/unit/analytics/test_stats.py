"""Unit tests for the dashboard aggregation functions."""

from __future__ import annotations

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from django.conf import settings
from django.utils import timezone

from modules.analytics.services import (
    cache_key,
    cache_timeout,
    compute_stats,
    period_filter,
    recent_orders,
)
from modules.core.periods import Period
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.unit

NOW = timezone.make_aware(datetime(2024, 5, 10, 12))


def _order(status, created_at=NOW, processing=timedelta(0)):
    return SimpleNamespace(
        status=status, created_at=created_at, updated_at=created_at + processing
    )


class TestComputeStats:
    def test_empty_set_yields_zeros(self):
        stats = compute_stats([])

        assert stats.total_orders == 0
        assert stats.completed_orders == 0
        assert stats.average_processing_days == 0.0
        assert set(stats.counts_by_status) == set(OrderStatus.values)
        assert all(count == 0 for count in stats.counts_by_status.values())

    def test_average_covers_delivered_orders_only(self):
        orders = [
            _order(OrderStatus.DELIVERED, processing=timedelta(days=2)),
            _order(OrderStatus.DELIVERED, processing=timedelta(days=4)),
            _order(OrderStatus.SHIPPED, processing=timedelta(days=30)),
        ]

        stats = compute_stats(orders)

        assert stats.total_orders == 3
        assert stats.completed_orders == 2
        assert stats.average_processing_days == pytest.approx(3.0)
        assert stats.counts_by_status[OrderStatus.SHIPPED] == 1

    def test_fractional_days(self):
        stats = compute_stats(
            [_order(OrderStatus.DELIVERED, processing=timedelta(hours=36))]
        )
        assert stats.average_processing_days == pytest.approx(1.5)

    def test_counts_add_up(self):
        orders = [_order(OrderStatus.CANCELLED), _order(OrderStatus.PENDING_PRICE)]
        stats = compute_stats(orders)
        assert sum(stats.counts_by_status.values()) == stats.total_orders


class TestPeriodFilter:
    def test_keeps_orders_inside_window_in_order(self):
        inside = _order(OrderStatus.READY, created_at=NOW - timedelta(days=3))
        outside = _order(OrderStatus.READY, created_at=NOW - timedelta(days=9))
        newest = _order(OrderStatus.READY, created_at=NOW)

        kept = period_filter([newest, outside, inside], Period.WEEK, now=NOW)

        assert kept == [newest, inside]

    def test_all_keeps_everything(self):
        old = _order(OrderStatus.READY, created_at=NOW - timedelta(days=4000))
        assert period_filter([old], Period.ALL, now=NOW) == [old]


class TestRecentOrders:
    def test_takes_head(self):
        assert recent_orders(list(range(8))) == [0, 1, 2, 3, 4]

    def test_shorter_input(self):
        assert recent_orders([1, 2], n=5) == [1, 2]


class TestCacheEntries:
    def test_today_key_carries_local_date(self):
        late = timezone.make_aware(datetime(2024, 5, 10, 23, 58))
        assert cache_key(Period.TODAY, late) == "dashboard:stats:all:today:2024-05-10"
        assert cache_key(Period.WEEK, late) == "dashboard:stats:all:week"

    def test_today_entry_expires_at_local_midnight(self):
        late = timezone.make_aware(datetime(2024, 5, 10, 23, 58))
        assert cache_timeout(Period.TODAY, late) == 120

    def test_today_entry_never_exceeds_configured_ttl(self):
        assert cache_timeout(Period.TODAY, NOW) == settings.DASHBOARD_CACHE_TTL

    def test_rolling_windows_use_configured_ttl(self):
        late = timezone.make_aware(datetime(2024, 5, 10, 23, 58))
        assert cache_timeout(Period.MONTH, late) == settings.DASHBOARD_CACHE_TTL
