"""
Inventory Domain Models (``sourcing_modules.inventory.models``).

Responsibility
--------------
Frozen value objects for stock-on-hand.  These carry no database identity
beyond the row id and no I/O; the service returns them to callers.

Invariants
----------
- ``quantity >= 0`` and ``reserved_quantity >= 0``.
- ``available_quantity == quantity - reserved_quantity``.
- Money fields are ``Decimal``, never ``float``.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class StockAccount:
    """Stock on hand for one product variant."""
    id: UUID
    product_variant_id: UUID
    quantity: int = 0
    reserved_quantity: int = 0
    average_unit_cost: Decimal | None = None
    last_unit_cost: Decimal | None = None
    total_value: Decimal = Decimal("0")
    location: str | None = None
    last_stocked_at: datetime | None = None

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError(f"Stock quantity cannot be negative: {self.quantity}")
        if self.reserved_quantity < 0:
            raise ValueError(
                f"Reserved quantity cannot be negative: {self.reserved_quantity}"
            )

    @property
    def available_quantity(self) -> int:
        return self.quantity - self.reserved_quantity
