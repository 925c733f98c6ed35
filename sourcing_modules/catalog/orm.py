"""
Module: sourcing_modules.catalog.orm
Responsibility: Minimal persistence for the catalog entities the purchase-order
    engine depends on: suppliers, products and product variants.  Supplier and
    product management lives outside this system; these tables exist so that
    purchase orders can reference them and the receiving pass can write the
    variant landed cost.

Architecture position: Modules > Catalog > ORM.  Inherits from TrackedBase
    (sourcing_kernel.db.base).

Invariants enforced:
    - A variant belongs to exactly one product.
    - ``ProductVariantModel.landed_cost`` is the only catalog column written
      by this system (last-write-wins on every receipt).
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sourcing_kernel.db.base import TrackedBase


class SupplierModel(TrackedBase):
    """A supplier that purchase orders are raised against."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)

    def to_dto(self):
        from sourcing_modules.catalog.models import Supplier

        return Supplier(
            id=self.id,
            name=self.name,
            contact_email=self.contact_email,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<SupplierModel {self.name}>"


class ProductModel(TrackedBase):
    """A product; purchase-order lines are placed at product level."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    variants: Mapped[list["ProductVariantModel"]] = relationship(
        "ProductVariantModel",
        back_populates="product",
        lazy="selectin",
    )

    def to_dto(self):
        from sourcing_modules.catalog.models import Product

        return Product(id=self.id, name=self.name)

    def __repr__(self) -> str:
        return f"<ProductModel {self.name}>"


class ProductVariantModel(TrackedBase):
    """A sellable variant (size, colour...) of a product; the unit stock is kept in."""

    __tablename__ = "product_variants"

    __table_args__ = (
        UniqueConstraint("sku", name="uq_product_variant_sku"),
        Index("idx_product_variant_product", "product_id"),
    )

    product_id: Mapped[UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    landed_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    product: Mapped["ProductModel"] = relationship(
        "ProductModel",
        back_populates="variants",
    )

    def to_dto(self):
        from sourcing_modules.catalog.models import ProductVariant

        return ProductVariant(
            id=self.id,
            product_id=self.product_id,
            sku=self.sku,
            name=self.name,
            landed_cost=self.landed_cost,
        )

    def __repr__(self) -> str:
        return f"<ProductVariantModel {self.sku} landed_cost={self.landed_cost}>"
