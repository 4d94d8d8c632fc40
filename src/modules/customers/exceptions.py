"""Customer domain exceptions.

Raised by the Service Layer; the API layer (Views) translates them
into HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import NotFound, ValidationFailed


class CustomerNotFound(NotFound):
    """The requested customer does not exist."""


class InvalidCustomerData(ValidationFailed):
    """A required customer field is missing or malformed."""
