"""Analytics DTOs.

``DashboardStats`` is cached as JSON (``model_dump(mode="json")``) and
rebuilt with ``model_validate``; ``Dashboard`` adds the recent orders,
which are never cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List

from pydantic import BaseModel, ConfigDict

from modules.core.periods import Period

if TYPE_CHECKING:
    from modules.orders.models import Order


class DashboardStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_orders: int = 0
    completed_orders: int = 0
    average_processing_days: float = 0.0
    counts_by_status: Dict[str, int]


@dataclass(frozen=True)
class Dashboard:
    period: Period
    stats: DashboardStats
    recent_orders: List[Order]
    financials_visible: bool
    cached: bool = False
