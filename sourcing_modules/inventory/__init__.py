"""
Inventory Module (``sourcing_modules.inventory``).

Responsibility
--------------
Per-variant stock accounts credited by purchase-order receipts, with a
running weighted-average unit cost, and the writer for variant landed cost.

Architecture position
---------------------
**Modules layer** -- frozen DTOs, ORM and flush-only services.  Reservation,
issues and transfers are handled by the storefront and are out of scope.
"""

from sourcing_modules.inventory.models import StockAccount
from sourcing_modules.inventory.service import StockAccountService, VariantCostWriter

__all__ = ["StockAccount", "StockAccountService", "VariantCostWriter"]
