"""
Catalog Module (``sourcing_modules.catalog``).

Minimal supplier, product and product-variant tables consumed by the
purchase-order engine.  Catalog management itself (names, media, pricing,
attributes) is owned elsewhere.
"""

from sourcing_modules.catalog.models import Product, ProductVariant, Supplier
from sourcing_modules.catalog.selector import CatalogSelector

__all__ = ["Supplier", "Product", "ProductVariant", "CatalogSelector"]
