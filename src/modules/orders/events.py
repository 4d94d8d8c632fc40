"""Domain events for the Order Ledger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    tracking_number: str = ""


@dataclass(frozen=True)
class OrderUpdated(DomainEvent):
    """Raised when order fields (other than status) change."""

    fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when a status update (and its history entry) is committed."""

    old_status: Optional[str] = None
    new_status: str = ""


@dataclass(frozen=True)
class OrderDeleted(DomainEvent):
    """Raised when an order and its history are removed."""
