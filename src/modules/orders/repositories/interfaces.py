"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order Ledger and History
Trail need: creation with tracking-number assignment, row locking for
status updates, tracking-number look-up, filtered listing, bulk cascade
deletion and history append / listing.

The Service Layer depends exclusively on this contract (DIP).
Transaction boundaries belong to the Service Layer.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import OrderListFilters
    from modules.orders.models import Order, OrderHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes its ``OrderHistory`` entries; they are removed
    together with the order and never on their own.
    """

    @abstractmethod
    def create(
        self,
        order: Order,
        generate_tracking_number: Callable[[], str],
        max_attempts: int,
    ) -> Order:
        """Insert *order* with a freshly generated, unique tracking number.

        Regenerates on collision up to *max_attempts* times, then raises
        ``TrackingNumberConflict``.
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_tracking_number(self, tracking_number: str) -> Optional[Order]:
        """Exact (case-sensitive) tracking-number look-up."""

    @abstractmethod
    def query(
        self,
        filters: OrderListFilters,
        created_by: Optional[int] = None,
        search_creator: bool = False,
        limit: Optional[int] = None,
    ) -> List[Order]:
        """Orders matching *filters*, newest first.

        ``created_by`` restricts the result to one creator's orders;
        ``search_creator`` extends the free-text search to the creator's
        username and email; ``limit`` keeps only the first rows.
        """

    @abstractmethod
    def delete_by_customer(self, customer_id: str) -> List[UUID]:
        """Bulk-delete every order of a customer and their history.

        Returns the ids of the removed orders.
        """

    @abstractmethod
    def add_history(
        self,
        order_id: str,
        status: str,
        comment: Optional[str],
        created_by: int,
    ) -> OrderHistory:
        """Append an entry to the order's history trail."""

    @abstractmethod
    def list_history(self, order_id: str) -> List[OrderHistory]:
        """History entries of an order, most recent first."""
