"""Customer repository interface.

Extends ``IRepository[Customer]`` with the free-text search used by the
customer list.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def search(self, term: Optional[str] = None) -> List[Customer]:
        """Case-insensitive substring match over name / email / phone,
        newest first."""

    @abstractmethod
    def exists(self, id: str) -> bool:
        """``True`` when a customer with this primary key exists."""
