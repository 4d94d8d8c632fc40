"""Integration tests for the Celery wiring and the dashboard refresh task."""

import pytest
from django.core.cache import cache

from modules.analytics.services import cache_key
from modules.core.periods import Period

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously in the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "order_lifecycle"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_refresh_is_scheduled(self, settings):
        schedule = settings.CELERY_BEAT_SCHEDULE["refresh-dashboard-stats"]
        assert schedule["task"] == "analytics.refresh_dashboard_stats"


class TestRefreshDashboardStats:
    def test_warms_every_period(self, make_order):
        from modules.analytics.tasks import refresh_dashboard_stats

        make_order()
        make_order()

        result = refresh_dashboard_stats.apply()

        assert result.successful()
        assert result.result == {period.value: 2 for period in Period}
        for period in Period:
            assert cache.get(cache_key(period))["total_orders"] == 2
