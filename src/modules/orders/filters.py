"""Query-string filters for ``GET /orders``.

``OrderFilter`` parses and validates the query parameters; the resulting
``OrderListFilters`` DTO is handed to ``OrderService.list_orders`` so the
ownership scoping and the predicates are applied by the Order Ledger, not
by the transport layer.
"""

from __future__ import annotations

from typing import Any

import django_filters

from modules.core.exceptions import ValidationFailed
from modules.core.periods import Period
from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderListFilters
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__gte"
    )
    end_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__lte"
    )
    date = django_filters.ChoiceFilter(
        choices=[(period.value, period.value) for period in Period],
        method="filter_period",
    )
    min_price = django_filters.NumberFilter(
        field_name="total_price", lookup_expr="gte"
    )
    max_price = django_filters.NumberFilter(
        field_name="total_price", lookup_expr="lte"
    )
    advance_paid = django_filters.BooleanFilter()
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = [
            "status",
            "customer",
            "start_date",
            "end_date",
            "date",
            "min_price",
            "max_price",
            "advance_paid",
            "search",
        ]

    def filter_period(self, queryset, name, value):
        # Applied by the repository (``to_filters``).
        return queryset

    def filter_search(self, queryset, name, value):
        # Applied by the repository (``to_filters``).
        return queryset

    def to_filters(self) -> OrderListFilters:
        """Validated ``OrderListFilters``.

        Raises:
            ValidationFailed: a parameter could not be parsed; ``field`` is
                the first offending parameter.
        """
        if not self.is_valid():
            field, messages = next(iter(self.errors.items()))
            raise ValidationFailed(str(messages[0]), field=field)

        data: dict[str, Any] = {
            key: value
            for key, value in self.form.cleaned_data.items()
            if value not in (None, "")
        }
        if "customer" in data:
            data["customer_id"] = data.pop("customer")
        return OrderListFilters(**data)
