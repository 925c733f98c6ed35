"""
Module: sourcing_modules.catalog.selector
Responsibility: Existence checks and lookups against the catalog tables.
    Raises the typed not-found errors so callers never test for None.
Architecture position: Modules > Catalog.  Extends the kernel BaseSelector;
    read-only.
"""

from uuid import UUID

from sqlalchemy import select

from sourcing_kernel.exceptions import (
    ProductNotFoundError,
    SupplierNotFoundError,
    VariantNotFoundError,
)
from sourcing_kernel.selectors.base import BaseSelector
from sourcing_modules.catalog.models import Product, ProductVariant, Supplier
from sourcing_modules.catalog.orm import ProductModel, ProductVariantModel, SupplierModel


class CatalogSelector(BaseSelector[ProductVariantModel]):
    """Lookups for suppliers, products and variants."""

    def get_supplier(self, supplier_id: UUID) -> Supplier:
        model = self.session.get(SupplierModel, supplier_id)
        if model is None:
            raise SupplierNotFoundError(str(supplier_id))
        return model.to_dto()

    def get_product(self, product_id: UUID) -> Product:
        model = self.session.get(ProductModel, product_id)
        if model is None:
            raise ProductNotFoundError(str(product_id))
        return model.to_dto()

    def get_variant(self, variant_id: UUID) -> ProductVariant:
        model = self.session.get(ProductVariantModel, variant_id)
        if model is None:
            raise VariantNotFoundError(str(variant_id))
        return model.to_dto()

    def variants_for_product(self, product_id: UUID) -> list[ProductVariant]:
        rows = self.session.execute(
            select(ProductVariantModel)
            .where(ProductVariantModel.product_id == product_id)
            .order_by(ProductVariantModel.sku)
        ).scalars().all()
        return [row.to_dto() for row in rows]
