"""Dashboard API view."""

from __future__ import annotations

from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.analytics.services import DashboardService
from modules.core.exceptions import ValidationFailed, error_response
from modules.core.periods import Period
from modules.identity.context import resolve_caller
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer

DEFAULT_PERIOD = Period.MONTH


class DashboardStatsView(APIView):
    """GET /api/v1/dashboard/stats/?period=today|week|month|3months|year|all

    Employees get figures over their own orders only.
    """

    throttle_scope = "order_listing"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DashboardService(order_repository=OrderDjangoRepository())

    def get(self, request: Request) -> Response:
        raw_period = request.query_params.get("period") or DEFAULT_PERIOD.value
        try:
            period = Period(raw_period)
        except ValueError:
            return error_response(
                ValidationFailed(f"Unknown period '{raw_period}'.", field="period")
            )

        caller = resolve_caller(request.user)
        dashboard = self._service.get_dashboard(
            period, caller_role=caller.role, caller_id=caller.user_id
        )
        recent = OrderListSerializer(
            dashboard.recent_orders,
            many=True,
            context={"financials_visible": dashboard.financials_visible},
        )
        return Response(
            {
                "period": dashboard.period.value,
                **dashboard.stats.model_dump(),
                "recent_orders": recent.data,
                "financials_visible": dashboard.financials_visible,
            }
        )
