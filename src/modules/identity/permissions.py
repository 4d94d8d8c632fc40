"""Capability checks for role-gated behaviour.

``can_mutate_financials`` is the single source of truth for who may write
(and read) the pricing / advance fields of an order.  Both the transport
layer and the Order Ledger call it.  ``can_view_all_orders`` decides
whether listings and dashboards span the organisation or only the
caller's own orders.  ``can_manage_users`` guards account and role
administration.  Nothing else compares roles directly.
"""

from __future__ import annotations

from typing import Optional

from modules.identity.constants import Role

FINANCIAL_ROLES = frozenset({Role.ADMIN})
ORGANISATION_WIDE_ROLES = frozenset({Role.ADMIN})
USER_MANAGER_ROLES = frozenset({Role.ADMIN})


def can_mutate_financials(role: Optional[str]) -> bool:
    """``True`` when *role* may mutate ``total_price`` / advance fields."""
    return role in FINANCIAL_ROLES


def can_view_all_orders(role: Optional[str]) -> bool:
    """``True`` when *role* sees every order, not only its own."""
    return role in ORGANISATION_WIDE_ROLES


def can_manage_users(role: Optional[str]) -> bool:
    """``True`` when *role* may create users and assign roles."""
    return role in USER_MANAGER_ROLES
