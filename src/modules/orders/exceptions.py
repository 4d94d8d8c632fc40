"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
is a subclass of a shared error kind (``modules.core.exceptions``), which
fixes its HTTP mapping and retry semantics.
"""

from __future__ import annotations

from typing import Iterable

from modules.core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed


class OrderNotFound(NotFound):
    """The requested order does not exist (or is hidden from the caller)."""


class CustomerNotFound(NotFound):
    """The customer referenced by the order does not exist."""


class InvalidOrderData(ValidationFailed):
    """An order field is missing or outside its allowed range."""


class FinancialFieldsForbidden(Forbidden):
    """A non-admin caller tried to change pricing / advance fields."""

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = sorted(fields)
        super().__init__(
            "Only administrators may modify: " + ", ".join(self.fields) + ".",
            field=self.fields[0] if self.fields else None,
        )


class TrackingNumberConflict(Conflict):
    """No unique tracking number could be generated within the retry budget."""
