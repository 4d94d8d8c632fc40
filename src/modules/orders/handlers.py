"""Event handlers for Order Ledger domain events (audit logging)."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCreated,
    OrderDeleted,
    OrderStatusChanged,
    OrderUpdated,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            tracking_number=event.tracking_number,
        )


class OrderUpdatedHandler(IEventHandler[OrderUpdated]):
    def handle(self, event: OrderUpdated) -> None:
        logger.info(
            "order.event.updated",
            order_id=str(event.aggregate_id),
            fields=list(event.fields),
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderDeletedHandler(IEventHandler[OrderDeleted]):
    def handle(self, event: OrderDeleted) -> None:
        logger.info("order.event.deleted", order_id=str(event.aggregate_id))


order_created_handler = OrderCreatedHandler()
order_updated_handler = OrderUpdatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_deleted_handler = OrderDeletedHandler()
