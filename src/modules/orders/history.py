"""History Trail: the append-only status log of each order.

Entries are written only by the Order Ledger, inside the same transaction
as the status change they record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from modules.orders.models import OrderHistory
    from modules.orders.repositories.interfaces import IOrderRepository


class HistoryTrail:
    def __init__(self, repository: IOrderRepository) -> None:
        self._repo = repository

    def append(
        self,
        order_id: str,
        status: str,
        comment: Optional[str],
        caller_id: int,
    ) -> OrderHistory:
        return self._repo.add_history(order_id, status, comment, caller_id)

    def list_by_order(self, order_id: str) -> List[OrderHistory]:
        """Most recent first."""
        return self._repo.list_history(order_id)
