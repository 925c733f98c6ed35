"""
Catalog Domain Models.

Read-only views of the catalog entities purchase orders refer to.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class Supplier:
    id: UUID
    name: str
    contact_email: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Product:
    id: UUID
    name: str


@dataclass(frozen=True)
class ProductVariant:
    """A product variant.  ``landed_cost`` is None until first received."""
    id: UUID
    product_id: UUID
    sku: str
    name: str | None = None
    landed_cost: Decimal | None = None
