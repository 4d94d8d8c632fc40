"""Customer service layer (Use Cases).

Orchestrates the Customer Registry, delegating persistence to the injected
``ICustomerRepository``.

Business rules enforced here:
- First and last name required (validated by the DTOs).
- Any authenticated caller may create or edit customers; ``created_by``
  is stamped from the explicit caller id.
- Deleting a customer cascades through the Order Ledger in dependency
  order (history -> orders -> customer) inside a single transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog

from modules.core.repositories.atomic import atomic_unit
from modules.customers.exceptions import CustomerNotFound
from modules.customers.models import Customer

if TYPE_CHECKING:
    from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` and the Order Ledger service via
    constructor injection (DIP); the ledger performs the order half of the
    cascading delete.
    """

    def __init__(
        self,
        repository: ICustomerRepository,
        order_service: OrderService,
    ) -> None:
        self._repo = repository
        self._orders = order_service

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @atomic_unit("customer.create")
    def create_customer(self, dto: CreateCustomerDTO, caller_id: int) -> Customer:
        """Register a new customer on behalf of *caller_id*."""
        customer = Customer(
            first_name=dto.first_name,
            last_name=dto.last_name,
            email=dto.email or "",
            phone=dto.phone,
            address=dto.address,
            created_by_id=caller_id,
        )
        customer = self._repo.save(customer)
        logger.info(
            "customer.created",
            customer_id=str(customer.id),
            created_by=caller_id,
        )
        return customer

    @atomic_unit("customer.update")
    def update_customer(self, id: str, dto: UpdateCustomerDTO) -> Customer:
        """Apply a partial update; only fields present in *dto* change.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")

        changes = dto.changes()
        for field, value in changes.items():
            setattr(customer, field, value)

        customer = self._repo.save(customer)
        logger.info(
            "customer.updated",
            customer_id=str(id),
            fields=sorted(changes),
        )
        return customer

    def delete_customer(self, id: str) -> None:
        """Delete a customer together with its orders and their history.

        One transaction: a failure at any step leaves everything in place.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        with atomic_unit("customer.delete"):
            if not self._repo.exists(id):
                raise CustomerNotFound(f"Customer {id} not found.")

            removed_orders = self._orders.delete_orders_by_customer(id)
            self._repo.delete(id)

        logger.info(
            "customer.deleted",
            customer_id=str(id),
            orders_removed=removed_orders,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_customers(self, search: Optional[str] = None) -> List[Customer]:
        """Customers newest first, optionally matching *search*
        (case-insensitive substring over name, email and phone)."""
        return self._repo.search(search)

    def get_customer(self, id: str) -> Customer:
        """Retrieve a single customer by ID.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer
