"""
Role definitions and route allow-sets.

WHY: Roles are a closed set. Routes declare which roles may call them using
the frozensets below; the gate in decorators.require_role compares the acting
user's Role against that set before the route body runs.

DESIGN:
- admin: manages shops, catalog, salesmen, orders and payments
- salesman: browses catalog and places orders against shop stock
- Self-service signup always yields admin; salesmen are admin-provisioned
"""

from __future__ import annotations

import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    SALESMAN = "salesman"


# Route allow-sets
ADMIN_ONLY = frozenset({Role.ADMIN})
STAFF = frozenset({Role.ADMIN, Role.SALESMAN})
