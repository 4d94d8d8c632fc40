"""Order service layer (Use Cases).

Orchestrates the Order Ledger and its History Trail.  All write
operations are atomic: the service defines the unit-of-work boundary
(``atomic_unit``) and publishes domain events only once it commits.

Business rules enforced:
- The referenced customer must exist at creation time.
- New orders start as ``pending_price`` with ``advance_paid=False`` and a
  unique, immutable tracking number.
- ``total_price`` / ``advance_percentage`` / ``advance_paid`` may only be
  changed by callers for whom ``can_mutate_financials`` holds; a mixed
  update containing any of them is rejected as a whole.
- A status change and its history entry are written together or not at all.
- Any status may follow any other; repeating the current status still
  records a history entry.
- Deleting an order removes its history first; deleting a customer's
  orders is a single bulk operation.
- Non-admin callers only list their own orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional
from uuid import UUID

import structlog
from django.conf import settings

from modules.core.repositories.atomic import atomic_unit
from modules.identity.permissions import can_mutate_financials, can_view_all_orders
from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderListFilters, VisibleOrder, VisibleOrders
from modules.orders.events import (
    OrderCreated,
    OrderDeleted,
    OrderStatusChanged,
    OrderUpdated,
)
from modules.orders.exceptions import (
    CustomerNotFound,
    FinancialFieldsForbidden,
    InvalidOrderData,
    OrderNotFound,
)
from modules.orders.history import HistoryTrail
from modules.orders.models import Order
from modules.orders.tracking import generate_tracking_number
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.identity.context import CallerContext
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
    from modules.orders.models import OrderHistory
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).  The tracking
    number source, retry budget and event bus are injectable for tests.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        history_trail: Optional[HistoryTrail] = None,
        tracking_generator: Optional[Callable[[], str]] = None,
        max_attempts: Optional[int] = None,
        record_price_changes: Optional[bool] = None,
        bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._history = history_trail or HistoryTrail(order_repository)
        self._generate = tracking_generator or generate_tracking_number
        self._max_attempts = max_attempts or settings.TRACKING_NUMBER_MAX_RETRIES
        self._record_price_changes = (
            settings.ORDER_PRICE_HISTORY
            if record_price_changes is None
            else record_price_changes
        )
        self._bus = bus or event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO, caller_id: int) -> Order:
        """Create an order for an existing customer.

        No history entry is written: the trail starts at the first
        explicit status update.

        Raises:
            CustomerNotFound: the customer does not exist.
            TrackingNumberConflict: no unique tracking number within budget.
        """
        log = logger.bind(customer_id=str(dto.customer_id), created_by=caller_id)
        log.info("order.creation_started")

        with atomic_unit("order.create"):
            if not self._customer_repo.exists(str(dto.customer_id)):
                raise CustomerNotFound(
                    f"Customer {dto.customer_id} not found.", field="customer_id"
                )

            order = Order(
                customer_id=dto.customer_id,
                product_name=dto.product_name,
                quantity=dto.quantity,
                technical_details=dto.technical_details,
                comments=dto.comments,
                status=OrderStatus.PENDING_PRICE,
                advance_paid=False,
                created_by_id=caller_id,
            )
            order = self._order_repo.create(order, self._generate, self._max_attempts)
            self._bus.publish_on_commit(
                OrderCreated(aggregate_id=order.id, tracking_number=order.tracking_number)
            )

        log.info(
            "order.created",
            order_id=str(order.id),
            tracking_number=order.tracking_number,
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    def update_order(
        self,
        order_id: str,
        dto: UpdateOrderDTO,
        caller: CallerContext,
    ) -> Order:
        """Apply a partial update on behalf of *caller*.

        With ``ORDER_PRICE_HISTORY`` enabled, a change of ``total_price`` to
        a new value also records ``"Price updated: <amount>"`` in the history
        trail under the current status.

        Raises:
            FinancialFieldsForbidden: role-gated fields sent by a caller
                who may not change them (nothing is applied).
            OrderNotFound: the order does not exist.
        """
        log = logger.bind(order_id=str(order_id), caller_id=caller.user_id)

        gated = dto.financial_fields
        if gated and not can_mutate_financials(caller.role):
            log.warning("order.financial_update_forbidden", fields=sorted(gated))
            raise FinancialFieldsForbidden(gated)

        changes = dto.changes()
        with atomic_unit("order.update"):
            order = self._order_repo.get_for_update(str(order_id))
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            previous_price = order.total_price
            for field, value in changes.items():
                setattr(order, field, value)
            order = self._order_repo.save(order)

            new_price = changes.get("total_price")
            if (
                self._record_price_changes
                and new_price is not None
                and new_price != previous_price
            ):
                self._history.append(
                    str(order.id),
                    order.status,
                    f"Price updated: {new_price:.2f}",
                    caller.user_id,
                )

            self._bus.publish_on_commit(
                OrderUpdated(aggregate_id=order.id, fields=tuple(sorted(changes)))
            )

        log.info("order.updated", fields=sorted(changes))
        return self._order_repo.get_by_id(str(order_id)) or order

    def update_status(
        self,
        order_id: str,
        new_status: str,
        comment: Optional[str],
        caller_id: int,
    ) -> Order:
        """Set the order status and append the matching history entry.

        Acquires a row-level lock (``SELECT FOR UPDATE``) before writing;
        both writes share one transaction.

        Raises:
            InvalidOrderData: *new_status* is not a known status.
            OrderNotFound: the order does not exist.
        """
        if new_status not in OrderStatus.values:
            raise InvalidOrderData(f"Unknown status '{new_status}'.", field="status")

        with atomic_unit("order.status"):
            order = self._order_repo.get_for_update(str(order_id))
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            old_status = order.status
            order.status = new_status
            self._order_repo.save(order)
            self._history.append(str(order.id), new_status, comment, caller_id)

            self._bus.publish_on_commit(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    old_status=old_status,
                    new_status=new_status,
                )
            )

        logger.info(
            "order.status_updated",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
            caller_id=caller_id,
        )
        return self._order_repo.get_by_id(str(order_id)) or order

    def delete_order(self, order_id: str) -> None:
        """Delete an order and its history entries (irreversible).

        Raises:
            OrderNotFound: the order does not exist.
        """
        with atomic_unit("order.delete"):
            if not self._order_repo.delete(str(order_id)):
                raise OrderNotFound(f"Order {order_id} not found.")
            self._bus.publish_on_commit(OrderDeleted(aggregate_id=UUID(str(order_id))))

        logger.info("order.deleted", order_id=str(order_id))

    def delete_orders_by_customer(self, customer_id: str) -> int:
        """Bulk-delete a customer's orders and their history.

        Used by the customer cascade; joins the caller's transaction.
        Returns the number of orders removed.
        """
        with atomic_unit("order.delete_by_customer"):
            order_ids = self._order_repo.delete_by_customer(str(customer_id))
            for order_id in order_ids:
                self._bus.publish_on_commit(OrderDeleted(aggregate_id=order_id))
        return len(order_ids)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str, caller: CallerContext) -> VisibleOrder:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return VisibleOrder(order=order, financials_visible=caller.financials_visible)

    def get_by_tracking_number(
        self,
        tracking_number: str,
        caller: Optional[CallerContext] = None,
    ) -> VisibleOrder:
        """Public look-up; anonymous callers get financial fields hidden.

        Raises:
            OrderNotFound: unknown tracking number.
        """
        tracking_number = (tracking_number or "").strip()
        order = (
            self._order_repo.get_by_tracking_number(tracking_number)
            if tracking_number
            else None
        )
        if not order:
            logger.info("order.tracking_lookup_miss")
            raise OrderNotFound("No order matches this tracking number.")
        visible = caller.financials_visible if caller else False
        return VisibleOrder(order=order, financials_visible=visible)

    def list_orders(
        self,
        filters: Optional[OrderListFilters],
        caller_role: str,
        caller_id: int,
    ) -> VisibleOrders:
        """Orders visible to the caller, newest first.

        Callers without organisation-wide visibility are restricted to the
        orders they created.
        """
        sees_all = can_view_all_orders(caller_role)
        orders = self._order_repo.query(
            filters or OrderListFilters(),
            created_by=None if sees_all else caller_id,
            search_creator=sees_all,
        )
        return VisibleOrders(
            orders=orders,
            financials_visible=can_mutate_financials(caller_role),
        )

    def list_history(self, order_id: str) -> List[OrderHistory]:
        """History of an order, most recent first.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        if not self._order_repo.get_by_id(str(order_id)):
            raise OrderNotFound(f"Order {order_id} not found.")
        return self._history.list_by_order(str(order_id))
