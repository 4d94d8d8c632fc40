"""Order domain constants.

Statuses, the nominal lifecycle progression and the field groups used for
role-gated mutation.  The progression is informational (timelines,
dashboards): any status may be set from any other status.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING_PRICE = "pending_price", "En attente de prix"
    PENDING_ADVANCE = "pending_advance", "En attente d'acompte"
    ADVANCE_PAID = "advance_paid", "Acompte payé"
    IN_PRODUCTION = "in_production", "En production"
    READY = "ready", "Prêt"
    SHIPPED = "shipped", "Expédié"
    DELIVERED = "delivered", "Livré"
    CANCELLED = "cancelled", "Annulé"

    @classmethod
    def progression(cls) -> tuple["OrderStatus", ...]:
        """Expected order of the non-cancelled statuses."""
        return NOMINAL_PROGRESSION


NOMINAL_PROGRESSION: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING_PRICE,
    OrderStatus.PENDING_ADVANCE,
    OrderStatus.ADVANCE_PAID,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.READY,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

TERMINAL_STATES: frozenset[str] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

# Writable only by roles for which ``can_mutate_financials`` holds.
FINANCIAL_FIELDS: frozenset[str] = frozenset(
    {"total_price", "advance_percentage", "advance_paid"}
)

# Writable by any authenticated caller.
GENERAL_FIELDS: tuple[str, ...] = (
    "product_name",
    "quantity",
    "technical_details",
    "comments",
)

TRACKING_NUMBER_PREFIX = "LMI"
TRACKING_NUMBER_SUFFIX_LENGTH = 3
BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
