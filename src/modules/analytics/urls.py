"""Analytics URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.analytics.views import DashboardStatsView

urlpatterns = [
    path("dashboard/stats/", DashboardStatsView.as_view(), name="dashboard-stats"),
]
