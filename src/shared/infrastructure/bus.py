"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List, Type

import structlog
from django.db import transaction

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Handlers run synchronously in subscription order.  When delivery is
    deferred to commit time, a failing handler is logged and skipped: the
    write it reports on has already been committed.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(type(event), []):
            handler.handle(event)

    def publish_on_commit(self, event: DomainEvent) -> None:
        """Defer ``publish`` until the surrounding transaction commits."""
        logger.debug(
            "event.scheduled",
            event_name=event.event_name,
            aggregate_id=str(event.aggregate_id),
        )
        transaction.on_commit(lambda: self.publish(event), robust=True)


# Global bus instance (singleton)

event_bus = InMemoryEventBus()
